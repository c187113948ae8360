from types import SimpleNamespace

import pytest

from daogen.interface import InterfaceMethod, MethodCheckError
from daogen.model import Field, Status
from daogen.parser import Param
from daogen.section import SQLTemplateError


def make_method():
    return InterfaceMethod(
        table="users",
        params=[
            Param(type="int", name="id"),
            Param(type="string", name="name"),
            Param(type="string", name="names", is_array=True),
        ],
    )


CLAUSE_CASES = [
    (
        "select * from @@table",
        ['"select * from "', '"users"'],
        ['generateSQL.WriteString("select * from users ")'],
    ),
    (
        "select * from @@table {{where}} id>@id{{end}}",
        ['"select * from "', '"users"', "where", '" id>"', "id", "end"],
        [
            'generateSQL.WriteString("select * from users ")',
            "var whereSQL0 strings.Builder",
            "params = append(params,id)",
            'whereSQL0.WriteString("id>? ")',
            "helper.JoinWhereBuilder(&generateSQL,whereSQL0)",
        ],
    ),
    (
        "select * from @@table {{where}}{{if id > 0}} id>@id{{end}}{{end}}",
        ['"select * from "', '"users"', "where", "if id > 0", '" id>"', "id", "end", "end"],
        [
            'generateSQL.WriteString("select * from users ")',
            "var whereSQL0 strings.Builder",
            "if id > 0 {",
            "params = append(params,id)",
            'whereSQL0.WriteString("id>? ")',
            "}",
            "helper.JoinWhereBuilder(&generateSQL,whereSQL0)",
        ],
    ),
    (
        'update @@table {{set}}{{if name != ""}}name=@name{{end}},{{if id>0}}id=@id{{end}}{{end}} where id=@id',
        [
            '"update "', '"users"', "set", 'if name != ""', '"name="', "name", "end",
            '","', "if id>0", '"id="', "id", "end", "end", '" where id="', "id",
        ],
        [
            'generateSQL.WriteString("update users ")',
            "var setSQL0 strings.Builder",
            'if name != "" {',
            "params = append(params,name)",
            'setSQL0.WriteString("name=? ")',
            "}",
            'setSQL0.WriteString(", ")',
            "if id>0 {",
            "params = append(params,id)",
            'setSQL0.WriteString("id=? ")',
            "}",
            "helper.JoinSetBuilder(&generateSQL,setSQL0)",
            "params = append(params,id)",
            'generateSQL.WriteString("where id=? ")',
        ],
    ),
    (
        "select * from @@table {{where}} {{for _, name := range names}}name=@name{{end}}{{end}}",
        ['"select * from "', '"users"', "where", "for _, name := range names", '"name="', "name", "end", "end"],
        [
            'generateSQL.WriteString("select * from users ")',
            "var whereSQL0 strings.Builder",
            "for _, name := range names{",
            "params = append(params,name)",
            'whereSQL0.WriteString("name=? ")',
            "}",
            "helper.JoinWhereBuilder(&generateSQL,whereSQL0)",
        ],
    ),
]


@pytest.mark.parametrize("sql,split_result,generate_result", CLAUSE_CASES)
def test_clause_split_and_build(sql, split_result, generate_result):
    method = make_method()
    method.sql_string = sql
    method.split_sql()
    assert [m.value for m in method.section.members] == split_result
    method.section.build_sql()
    assert method.section.tmpls == generate_result


def test_clause_cases_share_one_method():
    method = make_method()
    for sql, split_result, generate_result in CLAUSE_CASES:
        method.sql_string = sql
        method.split_sql()
        assert [m.value for m in method.section.members] == split_result
        method.section.build_sql()
        assert method.section.tmpls == generate_result


def test_split_marks_data_params():
    method = make_method()
    method.sql_string = "select * from t where id=@id"
    method.split_sql()
    assert method.has_for_params is True
    assert method.has_sql_data() is True


def test_escaped_at_sign():
    method = make_method()
    method.sql_string = "a\\@b"
    method.split_sql()
    assert [m.value for m in method.section.members] == ['"a@b"']


def test_variable_segment_quoted():
    method = make_method()
    method.s = "u"
    method.sql_string = "select @@name from t"
    method.split_sql()
    members = method.section.members
    assert members[1].type is Status.VARIABLE
    assert members[1].value == "u.Quote(name)"


@pytest.mark.parametrize(
    "sql",
    ["select 'abc", 'select "abc', "select * from {{where", "select @", "select {"],
)
def test_incomplete_sql(sql):
    method = make_method()
    method.sql_string = sql
    with pytest.raises(SQLTemplateError):
        method.split_sql()


def test_unknown_template_raises():
    method = make_method()
    method.sql_string = "select {{foo}} x"
    with pytest.raises(SQLTemplateError, match="unknown syntax: foo"):
        method.split_sql()


def test_check_sql_with_sql_prefix():
    method = make_method()
    method.method_name = "FindByID"
    method.doc = "FindByID\nsql(select * from @@table where id=@id)"
    method.check_sql()
    assert method.sql_string == "select * from @@table where id=@id"
    assert method.gorm_option == "Exec"
    assert [m.value for m in method.section.members] == [
        '"select * from "', '"users"', '" where id="', "id",
    ]


def test_check_sql_raw_when_result_present():
    method = make_method()
    method.method_name = "Get"
    method.result_data = Param(name="result", type="User")
    method.doc = "Get sql(select 1)"
    method.check_sql()
    assert method.gorm_option == "Raw"
    assert method.sql_string == "select 1"


def test_check_sql_with_where_prefix():
    method = make_method()
    method.method_name = "Filter"
    method.doc = "Filter where(id=@id)"
    method.check_sql()
    assert method.gorm_option == "Where"
    assert method.sql_string == "id=@id"


def test_check_sql_strips_quotes():
    method = make_method()
    method.method_name = "One"
    method.doc = '"select 1"'
    method.check_sql()
    assert method.sql_string == "select 1"


def test_check_sql_blank_line_separates_description():
    method = make_method()
    method.method_name = "GetUser"
    method.doc = "GetUser query a user\n\nselect * from @@table"
    method.check_sql()
    assert method.sql_string == "select * from @@table"


def test_check_sql_wraps_error():
    method = make_method()
    method.method_name = "Bad"
    method.interface_name = "Querier"
    method.doc = "select 'abc"
    with pytest.raises(SQLTemplateError, match="interface Querier member method Bad check sql err"):
        method.check_sql()


def test_func_sign():
    method = InterfaceMethod(
        method_name="FindByID",
        params=[Param(name="id", type="int")],
        result=[Param(name="result", package="model", type="User"), Param(name="err", type="error")],
    )
    assert method.func_sign() == "FindByID(id int) (result model.User,err error)"


def test_check_result_gen_t_and_error():
    method = InterfaceMethod(
        method_name="Get",
        origin_struct=Param(package="model", type="User"),
        package="query",
    )
    method.check_result([Param(package="gen", type="T"), Param(type="error")])
    assert method.result[0] == Param(package="model", type="User", name="result")
    assert method.result[1].name == "err"
    assert method.result_data.type == "User"
    assert method.return_error() is True
    assert method.gorm_run_method_name() == "Take"


def test_check_result_does_not_mutate_input():
    original = Param(type="error")
    method = InterfaceMethod()
    method.check_result([original])
    assert original.name == ""
    assert method.result[0].name == "err"


def test_check_result_array_uses_find():
    method = InterfaceMethod(origin_struct=Param(package="model", type="User"))
    method.check_result([Param(package="gen", type="T", is_array=True)])
    assert method.gorm_run_method_name() == "Find"


@pytest.mark.parametrize(
    "results,message",
    [
        ([Param(type="error"), Param(type="error")], "more than 1 error"),
        ([Param(package="main", type="X")], "main package"),
        ([Param(type="interface{}")], "can not return interface"),
        ([Param(type="int"), Param(type="string")], "more than 1 data"),
    ],
)
def test_check_result_errors(results, message):
    method = InterfaceMethod(method_name="M", interface_name="I")
    with pytest.raises(MethodCheckError, match=message):
        method.check_result(results)


def test_check_result_rows_affected():
    method = InterfaceMethod()
    method.check_result([Param(package="gen", type="RowsAffected")])
    assert method.result[0] == Param(type="int64", name="rowsAffected")
    assert method.gorm_option == "Exec"
    assert method.return_rows_affected() is True
    assert method.return_nothing() is False


def test_check_result_sql_types():
    method = InterfaceMethod()
    method.check_result([Param(package="sql", type="Result")])
    assert method.gorm_option == "Statement.ConnPool.ExecContext"
    assert method.return_sql_result() is True

    method = InterfaceMethod()
    method.check_result([Param(package="gen", type="SQLRow")])
    assert method.result[0] == Param(package="sql", type="Row", name="row", is_pointer=True)
    assert method.return_sql_row() is True

    method = InterfaceMethod()
    method.check_result([Param(package="sql", type="Rows")])
    assert method.result[0].name == "rows"
    assert method.gorm_option == "Raw"
    assert method.return_sql_rows() is True
    assert method.return_nothing() is True


def test_check_result_gen_m_needs_new_result():
    method = InterfaceMethod()
    method.check_result([Param(package="gen", type="M")])
    assert method.result_data.type == "map[string]interface{}"
    assert method.has_need_new_result() is True
    assert method.has_got_point() is False


def test_check_params():
    method = InterfaceMethod(origin_struct=Param(package="model", type="User"), package="query")
    method.check_params([
        Param(name="a", package="UNDEFINED", type="Foo"),
        Param(name="b", package="gen", type="M"),
        Param(name="c", package="gen", type="T"),
    ])
    assert method.params[0].package == "query"
    assert method.params[1].type == "map[string]interface{}"
    assert method.params[1].package == ""
    assert (method.params[2].package, method.params[2].type) == ("model", "User")


def test_check_params_rejects_error():
    method = InterfaceMethod(interface_name="I")
    with pytest.raises(MethodCheckError, match="type error"):
        method.check_params([Param(name="e", type="error")])


def test_check_method_keyword():
    method = InterfaceMethod(method_name="Where")
    meta = SimpleNamespace(fields=[], model_struct_name="User")
    with pytest.raises(MethodCheckError, match="keyword"):
        method.check_method([], meta)


def test_check_method_duplicates():
    meta = SimpleNamespace(fields=[], model_struct_name="User")
    method = InterfaceMethod(method_name="Get", interface_name="A", target_struct="user")
    other = InterfaceMethod(method_name="Get", interface_name="B", target_struct="user")
    assert method.is_repeat_from_different_interface(other) is True
    assert method.is_repeat_from_same_interface(other) is False
    with pytest.raises(MethodCheckError, match="different interface"):
        method.check_method([other], meta)


def test_check_method_field_clash():
    meta = SimpleNamespace(fields=[Field(name="Name")], model_struct_name="User")
    method = InterfaceMethod(method_name="Name", interface_name="I")
    with pytest.raises(MethodCheckError, match=r"\[User.Name\]"):
        method.check_method([], meta)


def test_check_sql_var_by_params():
    method = make_method()
    method.s = "u"
    seg = method.check_sql_var_by_params("id", Status.DATA)
    assert (seg.type, seg.value) == (Status.DATA, "id")
    method.check_sql_var_by_params("id", Status.DATA)
    assert [p.name for p in method.sql_params] == ["id"]

    seg = method.check_sql_var_by_params("name", Status.VARIABLE)
    assert seg.value == "u.Quote(name)"

    seg = method.check_sql_var_by_params("name.first", Status.DATA)
    assert method.sql_params[-1] == Param(name="name.first", type="string")

    seg = method.check_sql_var_by_params("table", Status.DATA)
    assert (seg.type, seg.value) == (Status.SQL, '"users"')


@pytest.mark.parametrize("name", ["id", "names"])
def test_check_sql_var_by_params_variable_must_be_string(name):
    method = make_method()
    with pytest.raises(SQLTemplateError, match="variable name must be string"):
        method.check_sql_var_by_params(name, Status.VARIABLE)


def test_check_sql_var_by_params_unknown():
    method = make_method()
    with pytest.raises(SQLTemplateError, match="unknow variable param:zzz"):
        method.check_sql_var_by_params("zzz", Status.DATA)


def test_doc_comment_and_param_name():
    method = InterfaceMethod(doc="  line1\n line2 ")
    assert method.doc_comment() == "line1\n// line2"
    assert method.sql_param_name("user.name") == "username"


def test_test_templates():
    method = InterfaceMethod(
        method_name="M",
        params=[
            Param(type="int", name="id"),
            Param(package="model", type="User", is_pointer=True),
            Param(type="string", is_array=True),
        ],
        result=[Param(type="int"), Param(type="error")],
    )
    assert method.get_test_param_in_tmpl() == (
        "tt.Input.Args[0].(int),tt.Input.Args[1].(*model.User),tt.Input.Args[2].([]string)"
    )
    assert method.get_test_result_param_in_tmpl() == "res1,res2"
    assert method.get_assert_in_tmpl() == (
        'assert(t, "M", res1, tt.Expectation.Ret[0])\n'
        'assert(t, "M", res2, tt.Expectation.Ret[1])'
    )