"""Live schema introspection.

Every helper queries the SQLite catalog (`sqlite_master` and
`PRAGMA table_info`) on each call; nothing is cached, so schema changes
made through the same connection are always visible.

Table names are looked up in the catalog with a bound parameter before they
are ever interpolated into SQL, which makes the catalog the allow-list for
identifiers used by the rest of the package.
"""

from __future__ import annotations

import logging
import sqlite3
from dataclasses import dataclass
from typing import Any

from . import queries
from .errors import SchemaError, from_sqlite_error

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Column:
    """A declared table column."""

    name: str
    type: str
    not_null: bool
    primary_key: bool
    default: Any = None


@dataclass(frozen=True)
class TableSchema:
    """Columns of one table in declared order."""

    name: str
    columns: tuple[Column, ...]

    @property
    def column_names(self) -> tuple[str, ...]:
        """Column names in declared order."""
        return tuple(col.name for col in self.columns)

    @property
    def primary_keys(self) -> frozenset[str]:
        """Columns that are part of the primary key (composite keys included)."""
        return frozenset(col.name for col in self.columns if col.primary_key)

    @property
    def not_null_columns(self) -> frozenset[str]:
        """Columns declared NOT NULL. Key columns appear only if declared so."""
        return frozenset(col.name for col in self.columns if col.not_null)


def quote_identifier(name: str) -> str:
    """Quote a SQL identifier that has already been checked against the catalog."""
    return '"' + name.replace('"', '""') + '"'


def list_tables(conn: sqlite3.Connection) -> list[str]:
    """Return user table names, sorted, excluding SQLite internal tables."""
    try:
        rows = queries.fetch_all(
            conn,
            "SELECT name FROM sqlite_master "
            "WHERE type = 'table' AND name NOT LIKE 'sqlite\\_%' ESCAPE '\\' "
            "ORDER BY name",
        )
    except sqlite3.Error as exc:
        raise from_sqlite_error(exc) from exc
    return [row["name"] for row in rows]


def table_exists(conn: sqlite3.Connection, table: str) -> bool:
    """Return True if table (or view) is present in the catalog."""
    try:
        row = queries.fetch_one(
            conn,
            "SELECT 1 AS present FROM sqlite_master WHERE type IN ('table', 'view') AND name = ?",
            (table,),
        )
    except sqlite3.Error as exc:
        raise from_sqlite_error(exc) from exc
    return row is not None


def ensure_table(conn: sqlite3.Connection, table: str) -> None:
    """Raise SchemaError unless table exists."""
    if not table_exists(conn, table):
        raise SchemaError(table)


def describe_table(conn: sqlite3.Connection, table: str) -> TableSchema:
    """Return the live column definitions of a table.

    Args:
        conn: Database connection.
        table: Table name.

    Returns:
        TableSchema with columns in declared order.

    Raises:
        SchemaError: If the table does not exist.
        DatabaseError: If the catalog query fails.
    """
    ensure_table(conn, table)
    try:
        info = queries.fetch_all(conn, f"PRAGMA table_info({quote_identifier(table)})")
    except sqlite3.Error as exc:
        raise from_sqlite_error(exc) from exc

    # pk is the 1-based position within the primary key, 0 for non-key columns
    columns = tuple(
        Column(
            name=row["name"],
            type=row["type"] or "",
            not_null=bool(row["notnull"]),
            primary_key=bool(row["pk"]),
            default=row["dflt_value"],
        )
        for row in info
    )
    logger.debug("Described table %s (%d columns)", table, len(columns))
    return TableSchema(name=table, columns=columns)


def columns(conn: sqlite3.Connection, table: str) -> tuple[str, ...]:
    """Return the column names of table in declared order."""
    return describe_table(conn, table).column_names


def primary_keys(conn: sqlite3.Connection, table: str) -> frozenset[str]:
    """Return the declared primary-key columns of table."""
    return describe_table(conn, table).primary_keys


def not_null_columns(conn: sqlite3.Connection, table: str) -> frozenset[str]:
    """Return the columns of table declared NOT NULL."""
    return describe_table(conn, table).not_null_columns
