"""Helpers for deriving and validating generated identifiers."""

from __future__ import annotations

import re

_MODEL_NAME_RE = re.compile(r"\w+", re.ASCII)


def is_capitalize(s: str) -> bool:
    """Return True if the first character is an ASCII capital letter."""
    return bool(s) and "A" <= s[0] <= "Z"


def is_end(char: str) -> bool:
    """Return True if ``char`` cannot be part of a template variable name."""
    if "a" <= char <= "z" or "A" <= char <= "Z" or "0" <= char <= "9":
        return False
    return char not in ("-", "_", ".")


def del_pointer_sym(name: str) -> str:
    """Strip leading pointer markers."""
    return name.lstrip("*")


def get_package_name(full_name: str) -> str:
    """Return the package part of a qualified type name."""
    return del_pointer_sym(full_name).split(".")[0]


def get_pure_name(s: str) -> str:
    """Return the lower-cased first letter of a type name."""
    return del_pointer_sym(s).lower()[0]


def get_struct_name(t: str) -> str:
    """Return the last dotted component of a type name."""
    return t.split(".")[-1]


def uncapitalize(s: str) -> str:
    """Lower-case the first character."""
    return s[:1].lower() + s[1:]


def check_struct_name(name: str) -> None:
    """Validate a model struct name; raise ValueError if it is unusable."""
    if name == "":
        return
    if not _MODEL_NAME_RE.fullmatch(name):
        raise ValueError("model name cannot contains invalid character")
    if not is_capitalize(name):
        raise ValueError("model name must be initial capital")