import pytest
from sql_genius.schemas import ColumnDefinition, SqlDataType, TableDefinition
from sql_genius.sql_formatter import (
    NO_DATA_COMMENT,
    NO_TABLES_COMMENT,
    escape_sql_value,
    format_sample_data_for_ai,
    format_schema_for_ai,
)


def _users_table():
    return TableDefinition(
        id="t1",
        name="Users",
        columns=[
            ColumnDefinition(id="c1", name="id", type=SqlDataType.INTEGER, is_primary_key=True),
            ColumnDefinition(id="c2", name="name", type=SqlDataType.TEXT, is_not_null=True),
        ],
    )


def test_users_scenario():
    table = _users_table()
    assert format_schema_for_ai([table]) == (
        'CREATE TABLE "Users" (\n  "id" INTEGER PRIMARY KEY,\n  "name" TEXT NOT NULL\n);'
    )
    data = {"t1": [{"id": 1, "name": "Alice"}]}
    assert format_sample_data_for_ai([table], data) == (
        'INSERT INTO "Users" ("id", "name") VALUES (1, \'Alice\');'
    )


def test_empty_model_yields_comment():
    assert format_schema_for_ai([]) == NO_TABLES_COMMENT
    assert format_sample_data_for_ai([], {}) == NO_DATA_COMMENT


def test_table_without_columns_is_commented():
    out = format_schema_for_ai([TableDefinition(id="t", name="Empty", columns=[])])
    assert out == '-- Table "Empty" has no columns defined.'
    assert "CREATE TABLE" not in out


def test_primary_key_suppresses_not_null_and_unique():
    col = ColumnDefinition(
        id="c",
        name="id",
        type=SqlDataType.INTEGER,
        is_primary_key=True,
        is_not_null=True,
        is_unique=True,
        check_constraint="id > 0",
    )
    out = format_schema_for_ai([TableDefinition(id="t", name="T", columns=[col])])
    assert '"id" INTEGER PRIMARY KEY CHECK (id > 0)' in out
    assert "NOT NULL" not in out
    assert "UNIQUE" not in out


def test_constraint_order():
    col = ColumnDefinition(
        id="c",
        name="email",
        type=SqlDataType.VARCHAR,
        is_not_null=True,
        is_unique=True,
        check_constraint="length(email) > 3",
    )
    out = format_schema_for_ai([TableDefinition(id="t", name="T", columns=[col])])
    assert '"email" VARCHAR(255) NOT NULL UNIQUE CHECK (length(email) > 3)' in out


def test_tables_separated_by_blank_line():
    a = TableDefinition(id="a", name="A", columns=[ColumnDefinition(id="1", name="x")])
    b = TableDefinition(id="b", name="B", columns=[])
    out = format_schema_for_ai([a, b])
    assert out.split("\n\n")[1] == '-- Table "B" has no columns defined.'


@pytest.mark.parametrize("value", ["true", "TRUE", "1", True, 1])
def test_boolean_true_spellings(value):
    assert escape_sql_value(value, "BOOLEAN") == "TRUE"


@pytest.mark.parametrize("value", ["false", "False", "0", False, 0])
def test_boolean_false_spellings(value):
    assert escape_sql_value(value, "BOOLEAN") == "FALSE"


@pytest.mark.parametrize("value", ["yes", "maybe", "", 2, " true ", "0 "])
def test_boolean_other_values_are_null(value):
    assert escape_sql_value(value, "BOOLEAN") == "NULL"


def test_numeric_values():
    assert escape_sql_value(42, "INTEGER") == "42"
    assert escape_sql_value("42", "INTEGER") == "42"
    assert escape_sql_value("3.50", "DECIMAL") == "3.5"
    assert escape_sql_value(2.0, "REAL") == "2"
    assert escape_sql_value("abc", "NUMERIC") == "NULL"
    assert escape_sql_value("", "INTEGER") == "NULL"
    assert escape_sql_value(None, "INTEGER") == "NULL"


def test_quotes_are_doubled():
    assert escape_sql_value("O'Brien's", "TEXT") == "'O''Brien''s'"
    literal = escape_sql_value("'", "VARCHAR(255)")
    assert literal == "''''"
    # balanced: stripping the outer quotes leaves only doubled pairs
    assert literal[1:-1].replace("''", "") == ""


def test_missing_keys_render_null_and_tables_without_rows_skipped():
    table = _users_table()
    other = TableDefinition(id="t2", name="Other", columns=[ColumnDefinition(id="x", name="x")])
    out = format_sample_data_for_ai([table, other], {"t1": [{"id": 2}], "t2": []})
    assert out == 'INSERT INTO "Users" ("id", "name") VALUES (2, NULL);'


def test_embedded_double_quotes_in_identifiers_are_doubled():
    table = TableDefinition(
        id="t",
        name='My "Table"',
        columns=[ColumnDefinition(id="c", name='a"b', type=SqlDataType.INTEGER)],
    )
    assert format_schema_for_ai([table]) == 'CREATE TABLE "My ""Table""" (\n  "a""b" INTEGER\n);'
    out = format_sample_data_for_ai([table], {"t": [{'a"b': 7}]})
    assert out == 'INSERT INTO "My ""Table""" ("a""b") VALUES (7);'
