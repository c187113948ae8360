"""Ordered import-path lists for generated files."""

from __future__ import annotations

from collections.abc import Iterable, Iterator
from dataclasses import dataclass


@dataclass(frozen=True)
class ImportList:
    """An immutable list of quoted import paths, with blank separators."""

    paths: tuple[str, ...] = ()

    def add(self, *args: str) -> ImportList:
        """Return a new list with the given paths appended.

        Paths are quoted if needed, paths already present are skipped, and
        a blank separator entry closes the appended group.
        """
        added: list[str] = []
        for raw in args:
            path = raw.strip()
            if path and not path.endswith('"'):
                path = f'"{path}"'
            if not path or path not in self.paths:
                added.append(path)
        added.append("")
        return ImportList(self.paths + tuple(added))


def _grouped(groups: Iterable[Iterable[str]]) -> Iterator[str]:
    """Flatten groups of paths, putting a blank entry between groups."""
    for position, group in enumerate(groups):
        if position:
            yield ""
        yield from group


_ORM = "gorm.io/gorm"
_GEN = "gorm.io/gen"

IMPORT_LIST = ImportList().add(
    *_grouped(
        [
            ("context", "database/sql", "strings"),
            (_ORM, f"{_ORM}/schema", f"{_ORM}/clause"),
            (_GEN, f"{_GEN}/field", f"{_GEN}/helper"),
            ("gorm.io/plugin/dbresolver",),
        ]
    )
)

UNIT_TEST_IMPORT_LIST = ImportList().add(
    *_grouped(
        [
            ("context", "fmt", "strconv", "testing"),
            ("gorm.io/driver/sqlite", _ORM),
        ]
    )
)