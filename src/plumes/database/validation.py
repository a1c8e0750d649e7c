"""Field set validation against the live table schema.

Each check raises before any statement reaches the store. The checks take
an optional, already introspected `TableSchema` so batch callers can
describe a table once and validate many field sets against it.
"""

from __future__ import annotations

import sqlite3
from collections.abc import Iterable, Mapping
from typing import Any

from .errors import MissingKeyError, NotNullViolationError, UnknownFieldError
from .schema import TableSchema, describe_table


def _resolve(conn: sqlite3.Connection, table: str, schema: TableSchema | None) -> TableSchema:
    return schema if schema is not None else describe_table(conn, table)


def check_fields_exist(
    conn: sqlite3.Connection,
    table: str,
    field_names: Iterable[str],
    *,
    schema: TableSchema | None = None,
) -> None:
    """Raise UnknownFieldError if any name is not a declared column of table."""
    schema = _resolve(conn, table, schema)
    unknown = set(field_names) - set(schema.column_names)
    if unknown:
        raise UnknownFieldError(table, unknown)


def check_fields_pkeys(
    conn: sqlite3.Connection,
    table: str,
    field_names: Iterable[str],
    *,
    schema: TableSchema | None = None,
) -> None:
    """Raise MissingKeyError unless every primary-key column is among field_names."""
    schema = _resolve(conn, table, schema)
    missing = schema.primary_keys - set(field_names)
    if missing:
        raise MissingKeyError(table, missing)


def check_fields_notnulls(
    conn: sqlite3.Connection,
    table: str,
    field_names: Iterable[str],
    *,
    schema: TableSchema | None = None,
) -> None:
    """Raise NotNullViolationError unless every NOT NULL column is among field_names.

    Only inserts need this: an update restates the keys and the changed
    columns, not the whole row.
    """
    schema = _resolve(conn, table, schema)
    missing = schema.not_null_columns - set(field_names)
    if missing:
        raise NotNullViolationError(table, missing)


def check_values_notnull(
    conn: sqlite3.Connection,
    table: str,
    fields: Mapping[str, Any],
    *,
    schema: TableSchema | None = None,
) -> None:
    """Raise NotNullViolationError if a NOT NULL column is given None."""
    schema = _resolve(conn, table, schema)
    nulls = {name for name, value in fields.items() if value is None} & schema.not_null_columns
    if nulls:
        raise NotNullViolationError(table, nulls)
