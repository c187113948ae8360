"""Methods declared on user interfaces whose bodies are generated from SQL comments."""

from __future__ import annotations

import dataclasses
import json
from dataclasses import dataclass, field
from typing import Any, Iterable, Sequence

from daogen.model import GORM_KEYWORDS, SQLBuffer, Status
from daogen.names import is_end
from daogen.parser import Param, param_list_to_string
from daogen.section import Section, Segment, SQLTemplateError

UNDEFINED_PACKAGE = "UNDEFINED"


class MethodCheckError(ValueError):
    """Raised when an interface method cannot be generated."""


def _incomplete(sql: str) -> SQLTemplateError:
    return SQLTemplateError(f"incomplete SQL:{sql}")


def _quote_name(name: str) -> str:
    return json.dumps(name, ensure_ascii=False)


@dataclass
class InterfaceMethod:
    """An interface method together with the SQL it is generated from."""

    doc: str = ""
    s: str = ""
    origin_struct: Param = field(default_factory=Param)
    target_struct: str = ""
    method_name: str = ""
    params: list[Param] = field(default_factory=list)
    result: list[Param] = field(default_factory=list)
    result_data: Param = field(default_factory=Param)
    section: Section | None = None
    sql_params: list[Param] = field(default_factory=list)
    sql_string: str = ""
    gorm_option: str = ""
    table: str = ""
    interface_name: str = ""
    package: str = ""
    has_for_params: bool = False

    def func_sign(self) -> str:
        """Signature in the form ``Name(params) (results)``."""
        return f"{self.method_name}({self.get_param_in_tmpl()}) ({self.get_result_param_in_tmpl()})"

    def has_sql_data(self) -> bool:
        """True if the generated body needs a params list."""
        return bool(self.sql_params) or self.has_for_params

    def has_got_point(self) -> bool:
        return not self.has_need_new_result()

    def has_need_new_result(self) -> bool:
        """True if the result must be allocated before scanning into it."""
        data = self.result_data
        return not data.is_array and ((data.is_null() and data.is_time()) or data.is_map())

    def gorm_run_method_name(self) -> str:
        return "Find" if self.result_data.is_array else "Take"

    def return_sql_result(self) -> bool:
        return any(res.is_sql_result() for res in self.result)

    def return_sql_row(self) -> bool:
        return any(res.is_sql_row() for res in self.result)

    def return_sql_rows(self) -> bool:
        return any(res.is_sql_rows() for res in self.result)

    def return_nothing(self) -> bool:
        """True if neither an error nor an affected-row count is returned."""
        return not any(res.is_error() or res.name == "rowsAffected" for res in self.result)

    def return_rows_affected(self) -> bool:
        return any(res.name == "rowsAffected" for res in self.result)

    def return_error(self) -> bool:
        return any(res.is_error() for res in self.result)

    def is_repeat_from_different_interface(self, new_method: InterfaceMethod) -> bool:
        return (
            self.method_name == new_method.method_name
            and self.interface_name != new_method.interface_name
            and self.target_struct == new_method.target_struct
        )

    def is_repeat_from_same_interface(self, new_method: InterfaceMethod) -> bool:
        return (
            self.method_name == new_method.method_name
            and self.interface_name == new_method.interface_name
            and self.target_struct == new_method.target_struct
        )

    def get_param_in_tmpl(self) -> str:
        return param_list_to_string(self.params)

    def get_result_param_in_tmpl(self) -> str:
        return param_list_to_string(self.result)

    def sql_param_name(self, param: str) -> str:
        """The param with dots removed, usable as a map key."""
        return param.replace(".", "")

    def doc_comment(self) -> str:
        """Doc text with a comment marker after every line break."""
        return self.doc.strip().replace("\n", "\n// ").replace("//  ", "// ")

    def check_method(self, methods: Iterable[InterfaceMethod], struct_meta: Any) -> None:
        """Reject keyword names and clashes with other methods or struct fields."""
        if GORM_KEYWORDS.full_match(self.method_name):
            raise MethodCheckError(f"can not use keyword as method name:{self.method_name}")
        for method in methods:
            if self.is_repeat_from_different_interface(method):
                raise MethodCheckError(
                    "can not generate method with the same name from different interface:"
                    f"[{self.interface_name}.{self.method_name}] and "
                    f"[{method.interface_name}.{method.method_name}]"
                )
        for fld in struct_meta.fields:
            if fld.name == self.method_name:
                raise MethodCheckError(
                    "can not generate method same name with struct field:"
                    f"[{self.interface_name}.{self.method_name}] and "
                    f"[{struct_meta.model_struct_name}.{fld.name}]"
                )

    def check_params(self, params: Sequence[Param]) -> None:
        """Validate input params and resolve placeholder types."""
        checked: list[Param] = []
        for original in params:
            param = dataclasses.replace(original)
            if param.package == UNDEFINED_PACKAGE:
                param.package = self.package
            elif param.is_error() or param.is_null():
                raise MethodCheckError(
                    f"type error on interface [{self.interface_name}] param: [{param.name}]"
                )
            elif param.is_gen_m():
                param.type = "map[string]interface{}"
                param.package = ""
            elif param.is_gen_t():
                param.type = self.origin_struct.type
                param.package = self.origin_struct.package
            checked.append(param)
        self.params = checked

    def check_result(self, result: Sequence[Param]) -> None:
        """Validate results, naming them and choosing how the SQL is run."""
        where = f"[{self.interface_name}.{self.method_name}]"
        checked: list[Param] = []
        has_error = False
        for original in result:
            param = dataclasses.replace(original)
            if param.package == UNDEFINED_PACKAGE:
                param.package = self.package
            if param.is_gen_m():
                param.type = "map[string]interface{}"
                param.package = ""

            if param.in_main_pkg():
                raise MethodCheckError(f"query method cannot return struct of main package in {where}")
            if param.is_error():
                if has_error:
                    raise MethodCheckError(f"query method cannot return more than 1 error value in {where}")
                param.name = "err"
                has_error = True
            elif param.eq(self.origin_struct) or param.is_gen_t():
                if not self.result_data.is_null():
                    raise MethodCheckError(f"query method cannot return more than 1 data value in {where}")
                param.name = "result"
                param.type = self.origin_struct.type
                param.package = self.origin_struct.package
                self.result_data = param
            elif param.is_interface():
                raise MethodCheckError(f"query method can not return interface in {where}")
            elif param.is_gen_rows_affected():
                param.type = "int64"
                param.package = ""
                param.name = "rowsAffected"
                self.gorm_option = "Exec"
            elif param.is_sql_result():
                param.type = "Result"
                param.package = "sql"
                param.name = "result"
                self.gorm_option = "Statement.ConnPool.ExecContext"
            elif param.is_sql_row():
                param.type = "Row"
                param.package = "sql"
                param.name = "row"
                self.gorm_option = "Raw"
                param.is_pointer = True
            elif param.is_sql_rows():
                param.type = "Rows"
                param.package = "sql"
                param.name = "rows"
                self.gorm_option = "Raw"
                param.is_pointer = True
            else:
                if not self.result_data.is_null():
                    raise MethodCheckError(f"query method cannot return more than 1 data value in {where}")
                if param.package == "" and not (param.is_base_type() or param.is_map() or param.is_time()):
                    param.package = self.package
                param.name = "result"
                self.result_data = param
            checked.append(param)
        self.result = checked

    def check_sql(self) -> None:
        """Extract the SQL from the doc comment and split it into segments."""
        self.sql_string = self._parse_doc_string()
        try:
            self.split_sql()
        except SQLTemplateError as err:
            raise SQLTemplateError(
                f"interface {self.interface_name} member method {self.method_name} check sql err:{err}"
            ) from err

    def _parse_doc_string(self) -> str:
        doc = self._get_sql_doc_string().strip()
        lower = doc.lower()
        if lower.startswith("where("):
            doc = doc[6:-1]
            self.gorm_option = "Where"
        else:
            if lower.startswith("sql("):
                doc = doc[4:-1]
            self.gorm_option = "Exec" if self.result_data.is_null() else "Raw"
        if len(doc) >= 2 and doc.startswith('"') and doc.endswith('"'):
            doc = doc[1:-1]
        return doc

    def _get_sql_doc_string(self) -> str:
        doc = self.doc.strip()
        index = doc.find("\n\n")
        if index != -1:
            doc = doc[:index] if self.method_name in doc[index + 2:] else doc[index + 2:]
        if doc.startswith(self.method_name):
            doc = doc[len(self.method_name):]
        return doc

    def split_sql(self) -> None:
        """Split ``sql_string`` into literal, variable and template segments."""
        sql = self.sql_string
        n = len(sql)
        section = Section()
        self.section = section
        buf = SQLBuffer()

        def flush_sql() -> None:
            text = buf.dump()
            if text.strip():
                section.members.append(
                    Segment(type=Status.SQL, value=_quote_name(text))
                )

        i = 0
        while i < n:
            b = sql[i]
            if b in ('"', "'"):
                buf.write(b)
                i += 1
                while True:
                    if i >= n:
                        raise _incomplete(sql)
                    buf.write(sql[i])
                    if sql[i] == b and sql[i - 1] != "\\":
                        break
                    i += 1
            elif b == "\\":
                if i + 1 < n and sql[i + 1] == "@":
                    i += 1
                    buf.write_sql(sql[i])
                else:
                    buf.write_sql(b)
            elif b in ("{", "@"):
                flush_sql()
                if i + 1 >= n:
                    raise _incomplete(sql)
                if b == "{" and sql[i + 1] == "{":
                    i = self._read_template(sql, i + 2, buf)
                if b == "@":
                    i = self._read_variable(sql, i + 1, buf)
            else:
                buf.write_sql(b)
            i += 1
        flush_sql()

    def _read_template(self, sql: str, i: int, buf: SQLBuffer) -> int:
        n = len(sql)
        assert self.section is not None
        while True:
            if i >= n:
                raise _incomplete(sql)
            if sql[i] == '"':
                buf.write(sql[i])
                i += 1
                while True:
                    if i >= n:
                        raise _incomplete(sql)
                    buf.write(sql[i])
                    if sql[i] == '"' and sql[i - 1] != "\\":
                        break
                    i += 1
                i += 1
            if i + 1 >= n:
                raise _incomplete(sql)
            if sql[i] == "}" and sql[i + 1] == "}":
                clause = buf.dump()
                try:
                    part = self.section.check_template(clause)
                except SQLTemplateError as err:
                    raise SQLTemplateError(
                        f"sql [{sql}] dynamic template {clause} err:{err}"
                    ) from err
                self.section.members.append(part)
                return i + 1
            buf.write_sql(sql[i])
            i += 1

    def _read_variable(self, sql: str, i: int, buf: SQLBuffer) -> int:
        n = len(sql)
        assert self.section is not None
        status = Status.DATA
        if i < n and sql[i] == "@":
            i += 1
            status = Status.VARIABLE
        while True:
            if i >= n or is_end(sql[i]):
                var = buf.dump()
                self.section.members.append(self.section.check_sql_var(var, status, self))
                return i - 1
            buf.write_sql(sql[i])
            i += 1

    def check_sql_var_by_params(self, param: str, status: Status) -> Segment:
        """Resolve a SQL variable against the method's params or the table name."""
        struct_name = param.split(".")[0]
        for p in self.params:
            if p.name != struct_name:
                continue
            if p.name != param:
                p = Param(name=param, type="string")
            if status is Status.DATA:
                if not self._is_param_exist(param):
                    self.sql_params.append(p)
            elif status is Status.VARIABLE:
                if p.type != "string" or p.is_array:
                    raise SQLTemplateError(
                        f"variable name must be string :{param} type is {p.type_name()}"
                    )
                param = f"{self.s}.Quote({param})"
            return Segment(type=status, value=param)
        if param == "table":
            return Section().check_sql_var("table", Status.VARIABLE, self)
        raise SQLTemplateError(f"unknow variable param:{param}")

    def _is_param_exist(self, name: str) -> bool:
        return any(p.name == name for p in self.sql_params)

    def get_test_param_in_tmpl(self) -> str:
        """Arguments for calling the method in a generated test."""
        args = []
        for i, param in enumerate(self.params):
            typ = param.type
            if param.package:
                typ = f"{param.package}.{typ}"
            if param.is_array:
                typ = "[]" + typ
            if param.is_pointer:
                typ = "*" + typ
            args.append(f"tt.Input.Args[{i}].({typ})")
        return ",".join(args)

    def get_test_result_param_in_tmpl(self) -> str:
        """Result variable names in a generated test."""
        return ",".join(f"res{i}" for i in range(1, len(self.result) + 1))

    def get_assert_in_tmpl(self) -> str:
        """Assertion lines for each result in a generated test."""
        name = _quote_name(self.method_name)
        return "\n".join(
            f"assert(t, {name}, res{i + 1}, tt.Expectation.Ret[{i}])"
            for i in range(len(self.result))
        )