"""Row lookup with wildcard filters and single-target resolution."""

from __future__ import annotations

import enum
import logging
import sqlite3
from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any

from . import queries
from .errors import from_sqlite_error
from .schema import TableSchema, describe_table, quote_identifier
from .validation import check_fields_exist

logger = logging.getLogger(__name__)


class TargetState(enum.Enum):
    """How many rows a primary-key lookup matched."""

    NONE = "none"
    ONE = "one"
    MANY = "many"


@dataclass(frozen=True)
class TargetMatch:
    """Tagged result of resolving the row targeted by a mutation."""

    state: TargetState
    rows: list[dict[str, Any]] = field(default_factory=list)

    @property
    def row(self) -> dict[str, Any] | None:
        """The single matched row, or None unless state is ONE."""
        return self.rows[0] if self.state is TargetState.ONE else None


def _search(
    conn: sqlite3.Connection,
    schema: TableSchema,
    filters: Mapping[str, Any],
) -> list[dict[str, Any]]:
    where_clauses: list[str] = []
    params: list[Any] = []
    for col, value in filters.items():
        if value is None:
            where_clauses.append(f"{quote_identifier(col)} IS NULL")
        else:
            where_clauses.append(f"{quote_identifier(col)} LIKE ?")
            params.append(value)

    sql = f"SELECT * FROM {quote_identifier(schema.name)}"  # noqa: S608
    if where_clauses:
        sql += " WHERE " + " AND ".join(where_clauses)

    try:
        return queries.fetch_all(conn, sql, tuple(params))
    except sqlite3.Error as exc:
        raise from_sqlite_error(exc) from exc


def search(
    conn: sqlite3.Connection,
    table: str,
    filters: Mapping[str, Any] | None = None,
    *,
    schema: TableSchema | None = None,
) -> list[dict[str, Any]]:
    """Return rows of table matching every filter.

    Each filter value is compared with SQL ``LIKE``, so ``%`` and ``_`` act
    as wildcards (and ASCII letters match case-insensitively). A None value
    matches NULL. Conditions are ANDed; no filters returns every row.

    Args:
        conn: Database connection.
        table: Table name to query.
        filters: Column name to value mapping.
        schema: Already introspected schema of table (optional).

    Returns:
        List of row dicts. Empty if nothing matches.

    Raises:
        SchemaError: If table does not exist.
        UnknownFieldError: If a filter names an undeclared column.
        DatabaseError: If the query fails.
    """
    schema = schema if schema is not None else describe_table(conn, table)
    filters = dict(filters or {})
    check_fields_exist(conn, table, filters, schema=schema)
    return _search(conn, schema, filters)


def locate_target(
    conn: sqlite3.Connection,
    table: str,
    key_values: Mapping[str, Any],
    *,
    schema: TableSchema | None = None,
) -> TargetMatch:
    """Resolve the row addressed by the primary-key subset of key_values.

    Non-key entries of key_values are ignored. Zero, one and many matches
    are all reported through the returned state; deciding which of them is
    an error is left to the caller.
    """
    schema = schema if schema is not None else describe_table(conn, table)
    keys = {col: value for col, value in key_values.items() if col in schema.primary_keys}
    rows = search(conn, table, keys, schema=schema)

    if not rows:
        state = TargetState.NONE
    elif len(rows) == 1:
        state = TargetState.ONE
    else:
        state = TargetState.MANY
    logger.debug("Located %d row(s) in %s for %s", len(rows), table, keys)
    return TargetMatch(state=state, rows=rows)
