"""Splitting a templated SQL string into segments and compiling them into builder code."""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import Any, Protocol

from daogen.clauses import (
    ElseClause,
    ForClause,
    IfClause,
    SetClause,
    SQLClause,
    TrimClause,
    WhereClause,
)
from daogen.model import GEN_KEYWORDS, Status

_SQL_KINDS = frozenset([Status.SQL, Status.DATA, Status.VARIABLE])

_KEYWORD_STATUS = {
    "if": Status.IF,
    "else": Status.ELSE,
    "for": Status.FOR,
    "where": Status.WHERE,
    "set": Status.SET,
    "end": Status.END,
    "trim": Status.TRIM,
}

_TEMPLATE_SEPARATORS = re.compile(r"[:= ,]")

_ESCAPES = {
    "\a": "\\a",
    "\b": "\\b",
    "\f": "\\f",
    "\n": "\\n",
    "\r": "\\r",
    "\t": "\\t",
    "\v": "\\v",
    "\\": "\\\\",
    '"': '\\"',
}


def _quote(text: str) -> str:
    """Quote text as a double-quoted string literal with backslash escapes."""
    out = ['"']
    for ch in text:
        if ch in _ESCAPES:
            out.append(_ESCAPES[ch])
        elif ch.isprintable():
            out.append(ch)
        elif ord(ch) < 0x80:
            out.append(f"\\x{ord(ch):02x}")
        elif ord(ch) < 0x10000:
            out.append(f"\\u{ord(ch):04x}")
        else:
            out.append(f"\\U{ord(ch):08x}")
    out.append('"')
    return "".join(out)


class SQLTemplateError(ValueError):
    """Raised when a templated SQL string is malformed."""


class _MethodLike(Protocol):
    table: str
    s: str
    has_for_params: bool


@dataclass
class ForRange:
    """The header of a ``for index, value := range list`` template."""

    index: str = ""
    value: str = ""
    suffix: str = ""
    range_list: str = ""

    def __str__(self) -> str:
        return f"for {self.index}, {self.value} := range {self.range_list}"


@dataclass
class Segment:
    """One chunk of a split SQL template."""

    type: Status = Status.UNKNOWN
    value: str = ""
    for_range: ForRange = field(default_factory=ForRange)
    sql_slice: Section | None = field(default=None, repr=False, compare=False)
    split_list: list[str] = field(default_factory=list, repr=False)

    def __str__(self) -> str:
        if self.type is Status.FOR:
            return str(self.for_range)
        return self.value

    def is_end(self) -> bool:
        return self.type is Status.END

    def sql_param_name(self) -> str:
        """The value with dots removed, usable as a map key."""
        return self.value.replace(".", "")

    def _split_template(self) -> None:
        self.split_list = [p for p in _TEMPLATE_SEPARATORS.split(self.value.strip()) if p]

    def _set_type(self, word: str) -> None:
        status = _KEYWORD_STATUS.get(word)
        if status is None:
            raise SQLTemplateError(f"unknown syntax: {word}")
        self.type = status

    def _check(self) -> None:
        if not self.split_list:
            raise SQLTemplateError("template is null")
        if GEN_KEYWORDS.contain(self.value):
            raise SQLTemplateError("template can not use gen keywords")
        self._set_type(self.split_list[0])
        if self.type is Status.FOR:
            if len(self.split_list) != 5:
                raise SQLTemplateError(f"for range syntax error: {self.value}")
            if self.sql_slice is not None and self.sql_slice._has_same_name(self.split_list[2]):
                raise SQLTemplateError("cannot use the same value name in different for loops")
            self.for_range.index = self.split_list[1]
            self.for_range.value = self.split_list[2]
            self.for_range.range_list = self.split_list[4]


class Section:
    """A split SQL template and the builder code compiled from it."""

    def __init__(self) -> None:
        self.members: list[Segment] = []
        self.tmpls: list[str] = []
        self.current_index = 0
        self.clause_total: dict[Status, int] = {Status.WHERE: 0, Status.SET: 0}
        self.for_value: list[ForRange] = []

    def has_more(self) -> bool:
        return self.current_index < len(self.members) - 1

    def is_null(self) -> bool:
        return not self.members

    def sub_index(self) -> None:
        """Step the cursor one segment back."""
        self.current_index -= 1

    def _current(self) -> Segment:
        return self.members[self.current_index]

    def _next(self) -> Segment:
        if self.has_more():
            self.current_index += 1
            return self.members[self.current_index]
        return Segment(type=Status.END)

    def _append(self, line: str) -> None:
        self.tmpls.append(line)

    def _has_same_name(self, value: str) -> bool:
        return any(p.type is Status.FOR and p.for_range.value == value for p in self.members)

    def build_sql(self) -> list[Any]:
        """Compile the segments into clauses, appending builder code to ``tmpls``."""
        if self.is_null():
            raise SQLTemplateError("sql is null")
        name = "generateSQL"
        result: list[Any] = []
        while True:
            c = self._current()
            if c.type is Status.END:
                pass
            elif c.type is Status.ELSE or c.type is Status.UNKNOWN:
                raise SQLTemplateError(f"unknow clause:{c.value}")
            else:
                result.append(self._parse_child(c.type, name))
            if not self.has_more():
                break
            self._next()
        return result

    def _parse_child(self, kind: Status, name: str) -> Any:
        if kind in _SQL_KINDS:
            sql_clause = self._parse_sql(name)
            self._append(sql_clause.finish())
            return sql_clause
        if kind is Status.IF:
            if_clause = self._parse_if(name)
            self._append(if_clause.finish())
            return if_clause
        if kind is Status.WHERE:
            where = self._parse_where()
            self._append(where.finish(name))
            return where
        if kind is Status.SET:
            set_clause = self._parse_set()
            self._append(set_clause.finish(name))
            return set_clause
        if kind is Status.TRIM:
            trim = self._parse_trim()
            self._append(trim.finish(name))
            return trim
        if kind is Status.FOR:
            for_clause = self._parse_for(name)
            self._append(for_clause.finish())
            return for_clause
        if kind is Status.ELSE:
            return self._parse_else(name)
        raise SQLTemplateError(f"unknow clause : {kind}")

    def _collect(
        self, first: Segment, name: str, allowed: frozenset[Status], lenient: bool = False
    ) -> tuple[list[Any], bool]:
        """Parse children until an end marker; return (children, ended)."""
        children: list[Any] = []
        c = first
        while True:
            if c.type is Status.END and not lenient:
                return children, True
            if c.type not in allowed:
                if lenient:
                    self.sub_index()
                    return children, True
                raise SQLTemplateError(f"unknow clause : {c.value}")
            children.append(self._parse_child(c.type, name))
            if not self.has_more():
                return children, False
            c = self._next()

    _IF_CHILDREN = _SQL_KINDS | {Status.IF, Status.WHERE, Status.SET, Status.ELSE, Status.FOR, Status.TRIM}
    _WHERE_CHILDREN = _SQL_KINDS | {Status.IF, Status.FOR, Status.WHERE, Status.TRIM}
    _TRIM_CHILDREN = _SQL_KINDS | {Status.IF, Status.FOR, Status.WHERE}
    _FOR_CHILDREN = _SQL_KINDS | {Status.IF, Status.FOR, Status.TRIM}

    def _parse_if(self, name: str) -> IfClause:
        res = IfClause(segment=self._current())
        self._append(res.create())
        if not self.has_more():
            return res
        res.value, _ = self._collect(self._next(), name, self._IF_CHILDREN)
        return res

    def _parse_else(self, name: str) -> ElseClause:
        res = ElseClause(segment=self._current())
        self._append(res.create())
        if not self.has_more():
            return res
        res.value, _ = self._collect(self._next(), name, self._IF_CHILDREN, lenient=True)
        return res

    def _parse_where(self) -> WhereClause:
        c = self._current()
        res = WhereClause(var_name=self.get_name(c.type), type=c.type)
        self._append(res.create())
        if not self.has_more():
            return res
        res.value, ended = self._collect(self._next(), res.var_name, self._WHERE_CHILDREN)
        if not ended:
            raise SQLTemplateError("incomplete SQL,where not end")
        return res

    def _parse_set(self) -> SetClause:
        c = self._current()
        res = SetClause(var_name=self.get_name(c.type))
        self._append(res.create())
        if not self.has_more():
            return res
        c = self._next()
        res.type = c.type
        res.value, _ = self._collect(c, res.var_name, self._WHERE_CHILDREN)
        return res

    def _parse_trim(self) -> TrimClause:
        c = self._current()
        res = TrimClause(var_name=self.get_name(c.type))
        self._append(res.create())
        if not self.has_more():
            return res
        c = self._next()
        res.type = c.type
        res.value, _ = self._collect(c, res.var_name, self._TRIM_CHILDREN)
        return res

    def _parse_for(self, name: str) -> ForClause:
        c = self._current()
        res = ForClause(segment=c, for_range=c.for_range)
        self._append(res.create())
        self.for_value.append(c.for_range)
        if not self.has_more():
            return res
        res.value, ended = self._collect(self._next(), name, self._FOR_CHILDREN)
        if ended:
            self.for_value.pop()
        return res

    def _parse_sql(self, name: str) -> SQLClause:
        res = SQLClause(var_name=name, type=Status.SQL)
        while True:
            c = self._current()
            if c.type in (Status.SQL, Status.VARIABLE):
                res.value.append(c.value)
            elif c.type is Status.DATA:
                self._append(f"params = append(params,{c.value})")
                res.value.append('"?"')
            else:
                self.sub_index()
                return res
            if not self.has_more():
                return res
            self._next()

    def check_sql_var(self, param: str, status: Status, method: _MethodLike) -> Segment:
        """Turn an ``@name`` or ``@@name`` reference into a segment."""
        if status is Status.VARIABLE and param == "table":
            return Segment(type=Status.SQL, value=_quote(method.table))
        if status is Status.DATA:
            method.has_for_params = True
        if status is Status.VARIABLE:
            param = f"{method.s}.Quote({param})"
        return Segment(type=status, value=param)

    def get_name(self, status: Status) -> str:
        """Return the next builder variable name for a clause kind."""
        prefixes = {Status.WHERE: "whereSQL", Status.SET: "setSQL", Status.TRIM: "trimSQL"}
        prefix = prefixes.get(status)
        if prefix is None:
            return "generateSQL"
        count = self.clause_total.get(status, 0)
        self.clause_total[status] = count + 1
        return f"{prefix}{count}"

    def check_template(self, tmpl: str) -> Segment:
        """Parse a ``{{...}}`` template body into a segment, validating its syntax."""
        part = Segment(value=tmpl, sql_slice=self)
        part._split_template()
        part._check()
        return part