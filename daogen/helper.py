"""Runtime helpers for assembling dynamic SQL and validating model objects."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Iterable, Protocol, Sequence


@dataclass(frozen=True)
class Cond:
    """A piece of SQL that is used only when ``cond`` is true."""

    cond: bool
    result: str


def if_clause(conds: Iterable[Cond]) -> str:
    """Join the results of the true conditions, each trimmed of spaces."""
    parts = [(c.result if c.cond else "").strip(" ") for c in conds]
    return " " + " ".join(parts)


def _trim_left(text: str) -> str:
    text = text.strip()
    lower = text.lower()
    for prefix in ("and ", "or ", "xor ", ","):
        if lower.startswith(prefix):
            return text[len(prefix):]
    return text


def _trim_right(text: str) -> str:
    text = text.strip()
    lower = text.lower()
    for suffix, cut in ((" and", 3), (" or", 2), (" xor", 3), (",", 1)):
        if lower.endswith(suffix):
            return text[: len(text) - cut]
    return text


def trim_all(text: str) -> str:
    """Strip a leading and trailing AND/OR/XOR connector or comma."""
    return _trim_right(_trim_left(text))


def _where_value(value: str) -> str:
    value = value.strip(" ")
    lower = value.lower()
    if lower == "":
        return ""
    if lower.startswith(("and ", "or ", "xor ")):
        return value
    return "AND " + value


def _set_value(value: str) -> str:
    return value.strip(", ")


def _join_clause(
    conds: Sequence[str], keyword: str, deal: Callable[[str], str], sep: str
) -> str:
    sql = trim_all(sep.join(deal(c) for c in conds))
    if sql:
        sql = f" {keyword} {sql}"
    return sql


def where_clause(conds: Sequence[str]) -> str:
    """Build a WHERE clause from conditions, joining them with AND."""
    return _join_clause(conds, "WHERE", _where_value, " ")


def set_clause(conds: Sequence[str]) -> str:
    """Build a SET clause from assignments, joining them with commas."""
    return _join_clause(conds, "SET", _set_value, ",")


def join_where(value: str) -> str:
    """Render collected WHERE conditions, or an empty string if there are none."""
    value = trim_all(value)
    return f"WHERE {value} " if value else ""


def join_set(value: str) -> str:
    """Render collected SET assignments, or an empty string if there are none."""
    value = trim_all(value)
    return f"SET {value} " if value else ""


def join_trim_all(value: str) -> str:
    """Render collected text with dangling connectors removed."""
    return trim_all(value) + " "


class FieldSpec(Protocol):
    """A field of an object that describes a model."""

    name: str
    type: str


class ObjectSpec(Protocol):
    """An object that describes a model to generate."""

    struct_name: str
    fields: Sequence[FieldSpec]


def check_object(obj: ObjectSpec) -> None:
    """Raise ValueError if the object lacks a struct name or a field lacks name or type."""
    if obj.struct_name == "":
        raise ValueError("object's struct_name cannot be empty")
    for fld in obj.fields:
        if fld.name == "":
            raise ValueError(f"object {obj.struct_name}'s field name cannot be empty")
        if fld.type == "":
            raise ValueError(f"object {obj.struct_name}'s field type cannot be empty")