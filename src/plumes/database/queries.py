"""Basic statement execution helpers.

Thin wrappers around `sqlite3.Connection.execute` with logging and the
row shapes (plain dicts) used by the table-access helpers.
"""

from __future__ import annotations

import logging
import sqlite3
from collections.abc import Iterator, Sequence
from typing import Any

logger = logging.getLogger(__name__)

Params = Sequence[Any] | dict[str, Any] | None


def _row_to_dict(cursor: sqlite3.Cursor, row: Any) -> dict[str, Any]:
    """Convert a fetched row into a column-name keyed dict.

    Works whether or not the connection uses `sqlite3.Row` as row factory.
    """
    if isinstance(row, sqlite3.Row):
        return dict(row)
    names = [desc[0] for desc in cursor.description]
    return dict(zip(names, row))


def execute_query(
    conn: sqlite3.Connection,
    sql: str,
    params: Params = None,
) -> sqlite3.Cursor:
    """Execute a SQL statement and return the cursor.

    Args:
        conn: Database connection.
        sql: SQL statement with `?` or `:name` placeholders.
        params: Bound parameters. Defaults to an empty tuple.

    Returns:
        SQLite cursor positioned on the results.

    Raises:
        sqlite3.Error: If execution fails.

    Logs:
        - DEBUG: "Executed query: {sql}" on success.
        - DEBUG: "Query failed: {exc}" on failure (callers decide how to report).
    """
    try:
        cursor = conn.execute(sql, params or ())
    except sqlite3.Error as exc:
        logger.debug("Query failed: %s (%s)", exc, " ".join(sql.split())[:120])
        raise
    logger.debug("Executed query: %s", " ".join(sql.split())[:120])
    return cursor


def fetch_all(
    conn: sqlite3.Connection,
    sql: str,
    params: Params = None,
) -> list[dict[str, Any]]:
    """Execute a query and return all rows as a list of dicts (empty if none)."""
    cursor = execute_query(conn, sql, params)
    return [_row_to_dict(cursor, row) for row in cursor.fetchall()]


def fetch_one(
    conn: sqlite3.Connection,
    sql: str,
    params: Params = None,
) -> dict[str, Any] | None:
    """Execute a query and return the first row as a dict, or None."""
    cursor = execute_query(conn, sql, params)
    row = cursor.fetchone()
    if row is None:
        return None
    return _row_to_dict(cursor, row)


def iter_rows(
    conn: sqlite3.Connection,
    sql: str,
    params: Params = None,
) -> Iterator[dict[str, Any]]:
    """Execute a query and yield rows one at a time as dicts.

    The statement runs when iteration starts, not when the generator is
    created.
    """
    cursor = execute_query(conn, sql, params)
    for row in cursor:
        yield _row_to_dict(cursor, row)


def execute_update(
    conn: sqlite3.Connection,
    sql: str,
    params: Params = None,
) -> int:
    """Execute INSERT/UPDATE/DELETE and return the number of affected rows.

    Logs:
        - DEBUG: "Statement affected {rowcount} rows" on success.
    """
    cursor = execute_query(conn, sql, params)
    rowcount = cursor.rowcount
    logger.debug("Statement affected %s rows", rowcount)
    return rowcount
