"""Core model types: SQL template states, keywords, fields, options and config."""

from __future__ import annotations

import enum
from dataclasses import dataclass, field
from typing import Any, Callable, Iterable

DEFAULT_MODEL_PKG = "model"


class Status(enum.IntEnum):
    """Kind of a chunk in a split SQL template."""

    UNKNOWN = 0
    SQL = 1
    DATA = 2
    VARIABLE = 3
    IF = 4
    ELSE = 5
    WHERE = 6
    SET = 7
    FOR = 8
    END = 9
    TRIM = 10


class SourceCode(enum.IntEnum):
    """Where a model definition came from."""

    STRUCT = 0
    TABLE = 1
    OBJECT = 2


class KeyWord:
    """A set of reserved words."""

    def __init__(self, words: Iterable[str]) -> None:
        self.words: tuple[str, ...] = tuple(words)

    def full_match(self, word: str) -> bool:
        """Return True if ``word`` equals one of the keywords."""
        return word in self.words

    def contain(self, text: str) -> bool:
        """Return True if any keyword occurs inside ``text``."""
        return any(item in text for item in self.words)


GORM_KEYWORDS = KeyWord(
    [
        "UnderlyingDB", "UseDB", "UseModel", "UseTable", "Quote", "Debug", "TableName", "WithContext",
        "As", "Not", "Or", "Build", "Columns", "Hints",
        "Distinct", "Omit",
        "Select", "Where", "Order", "Group", "Having", "Limit", "Offset",
        "Join", "LeftJoin", "RightJoin",
        "Save", "Create", "CreateInBatches",
        "Update", "Updates", "UpdateColumn", "UpdateColumns",
        "Find", "FindInBatches", "First", "Take", "Last", "Pluck", "Count",
        "Scan", "ScanRows", "Row", "Rows",
        "Delete", "Unscoped",
        "Scopes",
    ]
)

DO_KEYWORDS = KeyWord(["Alias", "TableName", "WithContext"])

GEN_KEYWORDS = KeyWord(["generateSQL", "whereClause", "setClause"])

DEFAULT_DATA_TYPE = "string"


def _tinyint(detail_type: str) -> str:
    if detail_type.strip().startswith("tinyint(1)"):
        return "bool"
    return "int32"


def _fixed(name: str) -> Callable[[str], str]:
    return lambda _detail: name


_DATA_TYPES: dict[str, Callable[[str], str]] = {
    "numeric": _fixed("int32"),
    "integer": _fixed("int32"),
    "int": _fixed("int32"),
    "smallint": _fixed("int32"),
    "mediumint": _fixed("int32"),
    "bigint": _fixed("int64"),
    "float": _fixed("float32"),
    "real": _fixed("float64"),
    "double": _fixed("float64"),
    "decimal": _fixed("float64"),
    "char": _fixed("string"),
    "varchar": _fixed("string"),
    "tinytext": _fixed("string"),
    "mediumtext": _fixed("string"),
    "longtext": _fixed("string"),
    "binary": _fixed("[]byte"),
    "varbinary": _fixed("[]byte"),
    "tinyblob": _fixed("[]byte"),
    "blob": _fixed("[]byte"),
    "mediumblob": _fixed("[]byte"),
    "longblob": _fixed("[]byte"),
    "text": _fixed("string"),
    "json": _fixed("string"),
    "enum": _fixed("string"),
    "time": _fixed("time.Time"),
    "date": _fixed("time.Time"),
    "datetime": _fixed("time.Time"),
    "timestamp": _fixed("time.Time"),
    "year": _fixed("int32"),
    "bit": _fixed("[]uint8"),
    "boolean": _fixed("bool"),
    "tinyint": _tinyint,
}


def get_data_type(data_type: str, detail_type: str) -> str:
    """Map a database column type to the generated field type."""
    convert = _DATA_TYPES.get(data_type.lower())
    if convert is None:
        return DEFAULT_DATA_TYPE
    return convert(detail_type)


_TITLED_TYPES = frozenset(
    [
        "string", "bytes",
        "int", "int8", "int16", "int32", "int64",
        "uint", "uint8", "uint16", "uint32", "uint64",
        "float64", "float32",
        "bool",
    ]
)


@dataclass
class Field:
    """A field of a generated model struct."""

    name: str = ""
    type: str = ""
    column_name: str = ""
    column_comment: str = ""
    multiline_comment: bool = False
    tag: dict[str, str] = field(default_factory=dict)
    gorm_tag: dict[str, list[str]] = field(default_factory=dict)
    custom_gen_type: str = ""
    relation: Any = None

    def is_relation(self) -> bool:
        return self.relation is not None

    def gen_type(self) -> str:
        """Name of the query-field type used for this field."""
        if self.is_relation():
            return self.type
        if self.custom_gen_type:
            return self.custom_gen_type
        typ = self.type.lstrip("*")
        if typ in _TITLED_TYPES:
            return typ[:1].upper() + typ[1:]
        if typ == "time.Time":
            return "Time"
        if typ in ("json.RawMessage", "[]byte"):
            return "Bytes"
        if typ == "serializer":
            return "Serializer"
        return "Field"

    def escape_keyword(self) -> Field:
        return self.escape_keyword_for(GORM_KEYWORDS)

    def escape_keyword_for(self, keywords: KeyWord) -> Field:
        """Append an underscore to the name if it clashes with a keyword."""
        if keywords.full_match(self.name):
            self.name += "_"
        return self


class SQLBuffer:
    """Accumulates SQL text, collapsing runs of whitespace to one space."""

    def __init__(self) -> None:
        self._chars: list[str] = []

    def __len__(self) -> int:
        return len(self._chars)

    def __str__(self) -> str:
        return "".join(self._chars)

    def write(self, text: str) -> None:
        """Append text verbatim."""
        self._chars.extend(text)

    def write_sql(self, char: str) -> None:
        """Append one character, folding whitespace into a single space."""
        if char in ("\n", "\t", " "):
            if not self._chars or self._chars[-1] != " ":
                self._chars.append(" ")
        else:
            self._chars.append(char)

    def dump(self) -> str:
        """Return the contents and empty the buffer."""
        text = "".join(self._chars)
        self._chars.clear()
        return text


FIELD_OPTION_TYPE = "field"
METHOD_OPTION_TYPE = "method"

FieldOperator = Callable[[Any], Any]


class ModifyFieldOpt:
    """Option that rewrites a generated field."""

    def __init__(self, func: FieldOperator) -> None:
        self._func = func

    def option_type(self) -> str:
        return FIELD_OPTION_TYPE

    def operator(self) -> FieldOperator:
        return self._func


class FilterFieldOpt(ModifyFieldOpt):
    """Option that drops a field when its operator returns None."""


class CreateFieldOpt(ModifyFieldOpt):
    """Option that adds a new field; its operator is called with None."""


class AddMethodOpt:
    """Option that contributes custom methods to a model."""

    def __init__(self, func: Callable[[], list[Any]]) -> None:
        self._func = func

    def option_type(self) -> str:
        return METHOD_OPTION_TYPE

    def methods(self) -> list[Any]:
        return list(self._func())


def sort_options(
    opts: Iterable[Any],
) -> tuple[list[ModifyFieldOpt], list[FilterFieldOpt], list[CreateFieldOpt], list[AddMethodOpt]]:
    """Split options into modify, filter, create and method lists, keeping order."""
    modify: list[ModifyFieldOpt] = []
    filters: list[FilterFieldOpt] = []
    creates: list[CreateFieldOpt] = []
    methods: list[AddMethodOpt] = []
    for opt in opts:
        if isinstance(opt, FilterFieldOpt):
            filters.append(opt)
        elif isinstance(opt, CreateFieldOpt):
            creates.append(opt)
        elif isinstance(opt, ModifyFieldOpt):
            modify.append(opt)
        elif isinstance(opt, AddMethodOpt):
            methods.append(opt)
    return modify, filters, creates, methods


def _base_name(path: str) -> str:
    if path == "":
        return "."
    stripped = path.rstrip("/")
    if stripped == "":
        return "/"
    return stripped.rsplit("/", 1)[-1]


NameFunc = Callable[[str], str]


@dataclass
class Config:
    """Configuration for generating one model."""

    model_pkg: str = ""
    table_prefix: str = ""
    table_name: str = ""
    model_name: str = ""
    import_pkg_paths: list[str] = field(default_factory=list)
    model_opts: list[Any] = field(default_factory=list)

    table_name_ns: NameFunc | None = None
    model_name_ns: NameFunc | None = None
    file_name_ns: NameFunc | None = None

    data_type_map: dict[str, Callable[[Any], str]] = field(default_factory=dict)
    field_nullable: bool = False
    field_coverable: bool = False
    field_signable: bool = False
    field_with_index_tag: bool = False
    field_with_type_tag: bool = False
    field_json_tag_ns: NameFunc | None = None

    modify_opts: list[ModifyFieldOpt] = field(default_factory=list)
    filter_opts: list[FilterFieldOpt] = field(default_factory=list)
    create_opts: list[CreateFieldOpt] = field(default_factory=list)
    method_opts: list[AddMethodOpt] = field(default_factory=list)

    def preprocess(self) -> Config:
        """Fill defaults and sort model options into their lists."""
        if not self.model_pkg:
            self.model_pkg = DEFAULT_MODEL_PKG
        self.model_pkg = _base_name(self.model_pkg)
        (
            self.modify_opts,
            self.filter_opts,
            self.create_opts,
            self.method_opts,
        ) = sort_options(self.model_opts)
        return self

    def get_names(self) -> tuple[str, str, str]:
        """Return (table name, struct name, file name)."""
        table_name, struct_name = self.table_name, self.model_name
        if self.model_name_ns is not None:
            struct_name = self.model_name_ns(table_name)
        if self.table_name_ns is not None:
            table_name = self.table_name_ns(table_name)
        if not table_name.startswith(self.table_prefix):
            table_name = self.table_prefix + table_name

        file_name = table_name.lower()
        if self.file_name_ns is not None:
            file_name = self.file_name_ns(self.table_name)
        return table_name, struct_name, file_name

    def get_model_methods(self) -> list[Any]:
        """Collect methods from all method options."""
        return [method for opt in self.method_opts for method in opt.methods()]