"""Clause objects produced while compiling a templated SQL string."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from daogen.model import Status


@dataclass(kw_only=True)
class _Clause:
    var_name: str = ""
    type: Status = Status.UNKNOWN


@dataclass(kw_only=True)
class SQLClause(_Clause):
    """A run of literal SQL, variables and placeholders written to a builder."""

    value: list[str] = field(default_factory=list)

    def __str__(self) -> str:
        sql = "+".join(self.value)
        if sql.startswith('"'):
            sql = '"' + sql.lstrip('" ')
        if not sql.endswith(' "'):
            sql += '+" "'
        return sql.replace('"+"', "")

    def create(self) -> str:
        return f"{self.var_name}.WriteString({self})"

    def finish(self) -> str:
        return f"{self.var_name}.WriteString({self})"


@dataclass(kw_only=True)
class IfClause(_Clause):
    """A conditional block; ``segment`` holds the condition text as ``value``."""

    value: list[Any] = field(default_factory=list)
    segment: Any = None

    def __str__(self) -> str:
        return self.segment.value

    def create(self) -> str:
        return f"{self} {{"

    def finish(self) -> str:
        return "}"


@dataclass(kw_only=True)
class ElseClause(IfClause):
    """An else branch of a conditional block."""

    def create(self) -> str:
        return f"}} {self} {{"

    def finish(self) -> str:
        return ""


@dataclass(kw_only=True)
class WhereClause(_Clause):
    """A WHERE block collected into its own builder."""

    value: list[Any] = field(default_factory=list)

    def __str__(self) -> str:
        return f"helper.WhereTrim({self.var_name}.String())"

    def create(self) -> str:
        return f"var {self.var_name} strings.Builder"

    def finish(self, name: str) -> str:
        return f"helper.JoinWhereBuilder(&{name},{self.var_name})"


@dataclass(kw_only=True)
class SetClause(_Clause):
    """A SET block collected into its own builder."""

    value: list[Any] = field(default_factory=list)

    def __str__(self) -> str:
        return f"helper.SetTrim({self.var_name}.String())"

    def create(self) -> str:
        return f"var {self.var_name} strings.Builder"

    def finish(self, name: str) -> str:
        return f"helper.JoinSetBuilder(&{name},{self.var_name})"


@dataclass(kw_only=True)
class TrimClause(_Clause):
    """A block whose dangling connectors are trimmed."""

    value: list[Any] = field(default_factory=list)

    def __str__(self) -> str:
        return f"helper.TrimALL({self.var_name}.String())"

    def create(self) -> str:
        return f"var {self.var_name} strings.Builder"

    def finish(self, name: str) -> str:
        return f"helper.JoinTrimAllBuilder(&{name},{self.var_name})"


@dataclass(kw_only=True)
class ForClause(_Clause):
    """A loop block; ``segment`` holds the loop header text as ``value``."""

    value: list[Any] = field(default_factory=list)
    for_range: Any = None
    segment: Any = None

    def __str__(self) -> str:
        return self.segment.value + "{"

    def create(self) -> str:
        return str(self)

    def finish(self) -> str:
        return "}"