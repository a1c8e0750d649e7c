"""Generic CRUD helpers driven by the live table schema.

These functions operate on table names and dict-like field sets. Every
field set is validated against the table schema before a statement is
built, and only catalog-checked identifiers are interpolated into SQL;
values are always bound as parameters.

They do *not* open or close connections. Single-row operations leave
transaction boundaries to the caller; `bulk_insert` scopes its own
savepoint so a batch is applied entirely or not at all.
"""

from __future__ import annotations

import logging
import sqlite3
from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from typing import Any

from . import queries
from .connection import savepoint
from .errors import AmbiguousTargetError, SchemaError, from_sqlite_error
from .locator import TargetState, locate_target
from .schema import TableSchema, describe_table, quote_identifier
from .validation import (
    check_fields_exist,
    check_fields_notnulls,
    check_fields_pkeys,
    check_values_notnull,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class MutationResult:
    """Outcome of an update or delete addressed by primary key."""

    state: TargetState
    rowcount: int


def _validate_insert(conn: sqlite3.Connection, schema: TableSchema, fields: Mapping[str, Any]) -> None:
    """Run every insert check against an already described table.

    Args:
        conn: Database connection.
        schema: Described table the row is destined for.
        fields: Field set of the new row.

    Raises:
        UnknownFieldError, MissingKeyError, NotNullViolationError: On the
            first failing check, before any statement is built.
    """
    check_fields_exist(conn, schema.name, fields, schema=schema)
    check_fields_pkeys(conn, schema.name, fields, schema=schema)
    check_fields_notnulls(conn, schema.name, fields, schema=schema)
    check_values_notnull(conn, schema.name, fields, schema=schema)


def _execute_insert(conn: sqlite3.Connection, schema: TableSchema, fields: Mapping[str, Any]) -> None:
    """Build and run a parameterized INSERT for one validated field set.

    Args:
        conn: Database connection (caller manages transaction).
        schema: Described table to insert into.
        fields: Validated field set; keys are interpolated quoted, values bound.

    Raises:
        ConstraintViolationError: If SQLite rejects the row.
        DatabaseError: For any other SQLite failure.
    """
    columns = ", ".join(quote_identifier(col) for col in fields)
    placeholders = ", ".join("?" for _ in fields)
    sql = f"INSERT INTO {quote_identifier(schema.name)} ({columns}) VALUES ({placeholders})"  # noqa: S608

    try:
        queries.execute_update(conn, sql, tuple(fields.values()))
    except sqlite3.Error as exc:
        raise from_sqlite_error(exc) from exc


def _require_keys(schema: TableSchema) -> None:
    """Raise SchemaError if the table declares no primary key.

    Update and delete address a single row by its key, so a keyless table
    has no way to name one.
    """
    if not schema.primary_keys:
        msg = f"Table {schema.name!r} has no primary key; rows cannot be addressed"
        raise SchemaError(schema.name, msg)


def _where_keys(keys: Mapping[str, Any]) -> str:
    """Return a WHERE predicate matching every key column to a bound value.

    Uses `IS` rather than `=` so a NULL stored in a nullable key column
    still matches the row the locator found.

    Args:
        keys: Key column to value mapping; only the names are used here.

    Returns:
        Predicate text such as `"a" IS ? AND "b" IS ?`.
    """
    return " AND ".join(f"{quote_identifier(col)} IS ?" for col in keys)


def insert(
    conn: sqlite3.Connection,
    table: str,
    fields: Mapping[str, Any],
) -> dict[str, Any]:
    """Insert a single row into table and return the inserted field set.

    Args:
        conn: Database connection (caller manages transaction).
        table: Table name to insert into.
        fields: Column name to value mapping for the new row. Must include
            every primary-key column and every NOT NULL column.

    Returns:
        Dictionary of the inserted fields.

    Raises:
        SchemaError: If table does not exist.
        UnknownFieldError: If a field is not a declared column.
        MissingKeyError: If a primary-key column is missing.
        NotNullViolationError: If a NOT NULL column is missing or None.
        ConstraintViolationError: If SQLite rejects the row (duplicate key,
            foreign key, datatype).

    Logs:
        - DEBUG: "Inserted row into {table}" on success.
    """
    payload = dict(fields)
    schema = describe_table(conn, table)
    _validate_insert(conn, schema, payload)
    _execute_insert(conn, schema, payload)
    logger.debug("Inserted row into %s", table)
    return payload


def bulk_insert(
    conn: sqlite3.Connection,
    table: str,
    rows: Iterable[Mapping[str, Any]],
) -> int:
    """Insert many rows into table as one all-or-nothing batch.

    The table is described once and every row is validated before the
    first INSERT runs, so a malformed row anywhere in the batch aborts it
    without touching the store. The inserts then run inside a single
    savepoint: if SQLite rejects any of them, every row inserted so far is
    rolled back and the original error is re-raised.

    Args:
        conn: Database connection. If no transaction is open, the batch is
            committed when the savepoint is released.
        table: Table name to insert into.
        rows: Field sets to insert.

    Returns:
        Number of rows inserted.

    Raises:
        SchemaError, UnknownFieldError, MissingKeyError,
        NotNullViolationError: Before any row is inserted.
        ConstraintViolationError: After rolling back the batch.

    Logs:
        - INFO: "Bulk inserted {n} rows into {table}" on success.
        - ERROR: "Bulk insert into {table} failed at row {i}" on store failure.
    """
    batch = [dict(row) for row in rows]
    if not batch:
        logger.debug("Bulk insert into %s skipped: no rows", table)
        return 0

    schema = describe_table(conn, table)
    for index, payload in enumerate(batch):
        try:
            _validate_insert(conn, schema, payload)
        except Exception:
            logger.error("Bulk insert into %s rejected: row %d failed validation", table, index)
            raise

    with savepoint(conn, "bulk_insert"):
        for index, payload in enumerate(batch):
            try:
                _execute_insert(conn, schema, payload)
            except Exception:
                logger.error("Bulk insert into %s failed at row %d", table, index)
                raise

    logger.info("Bulk inserted %d rows into %s", len(batch), table)
    return len(batch)


def update(
    conn: sqlite3.Connection,
    table: str,
    fields: Mapping[str, Any],
) -> MutationResult:
    """Update the single row addressed by the primary-key fields.

    Primary-key fields select the row; every other field is assigned. The
    target is resolved first: more than one match is refused, exactly one
    match is updated, and no match runs the UPDATE as a zero-row no-op.

    Args:
        conn: Database connection (caller manages transaction).
        table: Table name to update.
        fields: Column name to value mapping including every primary-key
            column plus the columns to change.

    Returns:
        MutationResult with the target state and affected row count.

    Raises:
        SchemaError: If table does not exist or has no primary key.
        UnknownFieldError: If a field is not a declared column.
        MissingKeyError: If a primary-key column is missing.
        NotNullViolationError: If a NOT NULL column is set to None.
        AmbiguousTargetError: If the key values match more than one row.
        ConstraintViolationError: If SQLite rejects the new values.
    """
    payload = dict(fields)
    schema = describe_table(conn, table)
    check_fields_exist(conn, table, payload, schema=schema)
    _require_keys(schema)
    check_fields_pkeys(conn, table, payload, schema=schema)
    check_values_notnull(conn, table, payload, schema=schema)

    keys = {col: value for col, value in payload.items() if col in schema.primary_keys}
    values = {col: value for col, value in payload.items() if col not in schema.primary_keys}

    target = locate_target(conn, table, keys, schema=schema)
    if target.state is TargetState.MANY:
        raise AmbiguousTargetError(table, keys, len(target.rows))

    if not values:
        logger.debug("Nothing to update in %s for %s", table, keys)
        return MutationResult(state=target.state, rowcount=0)

    if target.state is TargetState.ONE:
        # bind the stored key values so a wildcard key still addresses the located row
        keys = {col: target.rows[0][col] for col in keys}

    set_clause = ", ".join(f"{quote_identifier(col)} = ?" for col in values)
    sql = f"UPDATE {quote_identifier(table)} SET {set_clause} WHERE {_where_keys(keys)}"  # noqa: S608
    params = (*values.values(), *keys.values())

    try:
        rowcount = queries.execute_update(conn, sql, params)
    except sqlite3.Error as exc:
        raise from_sqlite_error(exc) from exc

    logger.debug("Updated %d row(s) in %s", rowcount, table)
    return MutationResult(state=target.state, rowcount=rowcount)


def delete(
    conn: sqlite3.Connection,
    table: str,
    fields: Mapping[str, Any],
) -> MutationResult:
    """Delete the single row addressed by the primary-key fields.

    Non-key fields are validated but otherwise ignored.

    Args:
        conn: Database connection (caller manages transaction).
        table: Table name to delete from.
        fields: Column name to value mapping including every primary-key
            column.

    Returns:
        MutationResult with the target state and number of rows deleted
        (0 or 1).

    Raises:
        SchemaError: If table does not exist or has no primary key.
        UnknownFieldError: If a field is not a declared column.
        MissingKeyError: If a primary-key column is missing.
        AmbiguousTargetError: If the key values match more than one row.
        ConstraintViolationError: If a foreign key still references the row.
    """
    payload = dict(fields)
    schema = describe_table(conn, table)
    check_fields_exist(conn, table, payload, schema=schema)
    _require_keys(schema)
    check_fields_pkeys(conn, table, payload, schema=schema)

    keys = {col: value for col, value in payload.items() if col in schema.primary_keys}
    target = locate_target(conn, table, keys, schema=schema)
    if target.state is TargetState.MANY:
        raise AmbiguousTargetError(table, keys, len(target.rows))
    if target.state is TargetState.ONE:
        keys = {col: target.rows[0][col] for col in keys}

    sql = f"DELETE FROM {quote_identifier(table)} WHERE {_where_keys(keys)}"  # noqa: S608

    try:
        rowcount = queries.execute_update(conn, sql, tuple(keys.values()))
    except sqlite3.Error as exc:
        raise from_sqlite_error(exc) from exc

    logger.debug("Deleted %d row(s) from %s", rowcount, table)
    return MutationResult(state=target.state, rowcount=rowcount)
