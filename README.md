# daogen

Building blocks for generating data-access code from annotated query
interfaces. It needs only the standard library.

## Modules

- **`daogen.interface`**: `InterfaceMethod` describes one method of a query
  interface. It can check the method (`check_method`, `check_params`,
  `check_result`, `check_sql`). It can also cut the method's SQL comment into
  segments with `split_sql()`. A segment is literal SQL, a `@param` data
  placeholder, a `@@name` quoted identifier, or one of the `{{if}}`,
  `{{else}}`, `{{where}}`, `{{set}}`, `{{trim}}`, `{{for}}` and `{{end}}`
  template blocks. The methods `func_sign()`, `get_test_param_in_tmpl()`,
  `get_assert_in_tmpl()` and the other methods whose names start with
  `return_` or `has_` give template writers the values they need. Checks that
  fail raise `MethodCheckError`.
- **`daogen.section`**: `Section` holds the segments. `Section.build_sql()`
  turns them into clause objects and adds the matching builder-code lines to
  `Section.tmpls`. Malformed templates raise `SQLTemplateError`. `Segment` and
  `ForRange` describe the individual segments.
- **`daogen.clauses`**: `SQLClause`, `IfClause`, `ElseClause`, `WhereClause`,
  `SetClause`, `TrimClause` and `ForClause`. Each one renders its opening line
  with `create()` and its closing line with `finish()`.
- **`daogen.helper`**: `where_clause`, `set_clause`, `if_clause` (with
  `Cond`), `trim_all`, `join_where`, `join_set` and `join_trim_all` put SQL
  fragments together. They strip a leading or trailing `AND`, `OR` or `XOR`
  and stray commas. `check_object` checks an object that has `struct_name` and
  `fields` attributes.
- **`daogen.model`**: `Field`, `Config`, the `Status` and `SourceCode` enums,
  and `KeyWord` with the keyword lists `GORM_KEYWORDS`, `DO_KEYWORDS` and
  `GEN_KEYWORDS`. It also holds `SQLBuffer`, the field and method options
  (`ModifyFieldOpt`, `FilterFieldOpt`, `CreateFieldOpt`, `AddMethodOpt`) with
  `sort_options`, and `get_data_type`, which maps database column types to
  field types.
- **`daogen.parser`**: `Param`, `Method` and `InterfaceInfo` describe
  signatures and render them for templates. The module also has
  `default_method_table_name`, `param_list_to_string` and
  `fix_param_package_path`.
- **`daogen.names`**: helpers for identifiers, such as `uncapitalize`,
  `get_struct_name`, `get_package_name` and `check_struct_name`.
  `check_struct_name` raises `ValueError` when a name is invalid.
- **`daogen.imports`**: `ImportList` is an immutable list of quoted import
  paths with no duplicates. `IMPORT_LIST` and `UNIT_TEST_IMPORT_LIST` are
  ready-made lists.
- **`daogen.pool`**: `Pool` hands out at most a fixed number of tokens. Take
  one with `wait()` and give it back with `done()`, or use the pool in a `with`
  block. `wait_all()` blocks until every token has come back.
  `async_wait_all()` returns a `threading.Event` that is set once that has
  happened.

## Example

```python
from daogen.interface import InterfaceMethod
from daogen.parser import Param

method = InterfaceMethod(
    method_name="FindByID",
    table="users",
    params=[Param(name="id", type="int")],
)
method.sql_string = "select * from @@table {{where}} id>@id{{end}}"
method.split_sql()
method.section.build_sql()
print("\n".join(method.section.tmpls))
```

This prints:

```
generateSQL.WriteString("select * from users ")
var whereSQL0 strings.Builder
params = append(params,id)
whereSQL0.WriteString("id>? ")
helper.JoinWhereBuilder(&generateSQL,whereSQL0)
```

## What it does not do

The package has no command-line tool. It does not connect to a database or
read table columns from one. It does not read source files to find interfaces
or methods. It does not render whole files or write generated code to disk.
It gives you the pieces that a generator needs, and the caller writes the
generator.

## Tests

```
pip install -e .[test]
pytest
```