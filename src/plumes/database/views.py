"""Read-only views over the PLUMES tables.

`get_table` materializes a whole table. `get_joined_view` returns a
`LazyView`: a query definition bound to a connection that only touches
the database when the caller asks for rows, a count or the column names.
"""

from __future__ import annotations

import logging
import sqlite3
from collections.abc import Iterator
from typing import Any

from . import queries
from .errors import from_sqlite_error
from .schema import ensure_table, quote_identifier

logger = logging.getLogger(__name__)

# (table, shared key column joining it to the tables before it)
JOIN_CHAIN: tuple[tuple[str, str | None], ...] = (
    ("lab_measurement", None),
    ("analyte", "id_analyte"),
    ("lab_sample", "id_lab_sample"),
    ("lab_field_sample", "id_lab_sample"),
    ("field_sample", "id_field_sample"),
    ("sites", "id_site"),
    ("species", "id_species"),
)


def _joined_sql() -> str:
    """Build the SELECT joining every table of JOIN_CHAIN in order.

    Each table after the first is attached with an inner `USING` join on
    its shared key, so the key appears once in the result columns.

    Returns:
        SQL text, one clause per line. Nothing is executed.
    """
    base, _ = JOIN_CHAIN[0]
    lines = [f"SELECT * FROM {quote_identifier(base)}"]
    for table, key in JOIN_CHAIN[1:]:
        lines.append(f"INNER JOIN {quote_identifier(table)} USING ({quote_identifier(key)})")
    return "\n".join(lines)


class LazyView:
    """A deferred SELECT bound to a connection.

    Constructing a view, or deriving one with `filter`, never runs a
    statement. `collect`, iteration, `head`, `count` and `columns` each
    run one.
    """

    def __init__(
        self,
        conn: sqlite3.Connection,
        sql: str,
        params: tuple[Any, ...] = (),
    ) -> None:
        self.conn = conn
        self.sql = sql
        self.params = params

    def __repr__(self) -> str:
        first_line = self.sql.splitlines()[0] if self.sql else ""
        return f"<LazyView {first_line!r} params={self.params!r}>"

    def _run(self, sql: str, params: tuple[Any, ...]) -> list[dict[str, Any]]:
        try:
            return queries.fetch_all(self.conn, sql, params)
        except sqlite3.Error as exc:
            raise from_sqlite_error(exc) from exc

    def collect(self) -> list[dict[str, Any]]:
        """Run the query and return every row."""
        rows = self._run(self.sql, self.params)
        logger.debug("Collected %d rows from lazy view", len(rows))
        return rows

    def __iter__(self) -> Iterator[dict[str, Any]]:
        try:
            yield from queries.iter_rows(self.conn, self.sql, self.params)
        except sqlite3.Error as exc:
            raise from_sqlite_error(exc) from exc

    def head(self, n: int = 5) -> list[dict[str, Any]]:
        """Return at most n rows."""
        return self._run(f"SELECT * FROM ({self.sql}) LIMIT ?", (*self.params, n))  # noqa: S608

    def count(self) -> int:
        """Return the number of rows the view would produce."""
        rows = self._run(f"SELECT COUNT(*) AS n FROM ({self.sql})", self.params)  # noqa: S608
        return int(rows[0]["n"])

    @property
    def columns(self) -> list[str]:
        """Column names of the view, read without fetching any row."""
        try:
            cursor = queries.execute_query(
                self.conn, f"SELECT * FROM ({self.sql}) LIMIT 0", self.params  # noqa: S608
            )
        except sqlite3.Error as exc:
            raise from_sqlite_error(exc) from exc
        return [desc[0] for desc in cursor.description]

    def filter(self, **equals: Any) -> LazyView:
        """Return a new view restricted to rows where each column equals its value.

        Column names are checked against `columns` before being used, which
        runs a zero-row query; the returned view itself stays unevaluated.

        Raises:
            ValueError: If a name is not a column of the view.
        """
        if not equals:
            return self
        available = set(self.columns)
        unknown = sorted(set(equals) - available)
        if unknown:
            msg = f"Unknown view column(s): {', '.join(unknown)}"
            raise ValueError(msg)
        where = " AND ".join(f"{quote_identifier(col)} = ?" for col in equals)
        sql = f"SELECT * FROM ({self.sql}) WHERE {where}"  # noqa: S608
        return LazyView(self.conn, sql, (*self.params, *equals.values()))


def get_table(conn: sqlite3.Connection, table: str) -> list[dict[str, Any]]:
    """Return every row of table.

    Raises:
        SchemaError: If the table does not exist.
        DatabaseError: If the query fails.
    """
    ensure_table(conn, table)
    try:
        return queries.fetch_all(conn, f"SELECT * FROM {quote_identifier(table)}")  # noqa: S608
    except sqlite3.Error as exc:
        raise from_sqlite_error(exc) from exc


def get_joined_view(conn: sqlite3.Connection) -> LazyView:
    """Return the lazily evaluated measurement view.

    Inner-joins lab_measurement, analyte, lab_sample, lab_field_sample,
    field_sample, sites and species on their shared id columns. A
    measurement without a match at every step of the chain is dropped.
    No query is executed until the view is collected.
    """
    return LazyView(conn, _joined_sql())
