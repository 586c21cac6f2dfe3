"""Render a workspace schema and its sample rows as SQL text for prompts.

The output is fed to the model verbatim, so it must be deterministic:
identifiers are always double-quoted, constraints are emitted in a fixed
order and values are escaped according to the declared column type.
"""

import math
from typing import List, Optional

from .schemas import SampleData, Scalar, TableDefinition

NO_TABLES_COMMENT = (
    "-- No tables defined. Please define tables and columns in the Schema Editor."
)
NO_DATA_COMMENT = "-- No sample data provided for the defined tables."

_NUMERIC_TYPES = ("REAL", "NUMERIC", "DECIMAL")
_TRUE_STRINGS = ("true", "1")
_FALSE_STRINGS = ("false", "0")


def _quote_ident(name: str) -> str:
    escaped = name.replace('"', '""')
    return f'"{escaped}"'


def _is_numeric_type(upper_type: str) -> bool:
    return "INT" in upper_type or upper_type in _NUMERIC_TYPES


def _format_number(value: Scalar) -> Optional[str]:
    if isinstance(value, bool):
        return "1" if value else "0"
    try:
        num = float(value)
    except (TypeError, ValueError):
        return None
    if not math.isfinite(num):
        return None
    if isinstance(value, int):
        return str(value)
    if num.is_integer() and abs(num) < 1e16:
        return str(int(num))
    return repr(num)


def _format_boolean(value: Scalar) -> str:
    if isinstance(value, bool):
        return "TRUE" if value else "FALSE"
    lowered = str(value).lower()
    if lowered in _TRUE_STRINGS:
        return "TRUE"
    if lowered in _FALSE_STRINGS:
        return "FALSE"
    return "NULL"


def escape_sql_value(value: Scalar, sql_type: str) -> str:
    """Render one value as a SQL literal for a column of ``sql_type``."""
    if value is None:
        return "NULL"
    upper_type = str(getattr(sql_type, "value", sql_type)).upper()

    if _is_numeric_type(upper_type):
        if isinstance(value, str) and not value.strip():
            return "NULL"
        rendered = _format_number(value)
        return rendered if rendered is not None else "NULL"

    if upper_type == "BOOLEAN":
        return _format_boolean(value)

    text = str(value).replace("'", "''")
    return f"'{text}'"


def _column_clause(col) -> str:
    clause = f"  {_quote_ident(col.name)} {col.type.value}"
    if col.is_primary_key:
        clause += " PRIMARY KEY"
    # PRIMARY KEY already implies NOT NULL and UNIQUE
    if col.is_not_null and not col.is_primary_key:
        clause += " NOT NULL"
    if col.is_unique and not col.is_primary_key:
        clause += " UNIQUE"
    if col.check_constraint:
        clause += f" CHECK ({col.check_constraint})"
    return clause


def format_schema_for_ai(tables: List[TableDefinition]) -> str:
    if not tables:
        return NO_TABLES_COMMENT
    statements: List[str] = []
    for table in tables:
        if not table.columns:
            statements.append(f'-- Table "{table.name}" has no columns defined.')
            continue
        columns = ",\n".join(_column_clause(col) for col in table.columns)
        statements.append(f"CREATE TABLE {_quote_ident(table.name)} (\n{columns}\n);")
    return "\n\n".join(statements)


def format_sample_data_for_ai(
    tables: List[TableDefinition],
    sample_data: SampleData,
) -> str:
    inserts: List[str] = []
    for table in tables:
        rows = sample_data.get(table.id) or []
        if not rows or not table.columns:
            continue
        column_names = ", ".join(_quote_ident(col.name) for col in table.columns)
        for row in rows:
            values = ", ".join(
                escape_sql_value(row.get(col.name), col.type) for col in table.columns
            )
            inserts.append(
                f"INSERT INTO {_quote_ident(table.name)} ({column_names}) VALUES ({values});"
            )
    if not inserts:
        return NO_DATA_COMMENT
    return "\n".join(inserts)
