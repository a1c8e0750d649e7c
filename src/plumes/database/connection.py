"""Database connection helpers.

This module provides a small, synchronous API for obtaining SQLite
connections to the PLUMES database and for scoping transactions on a
connection the caller already owns.
"""

from __future__ import annotations

import contextlib
import logging
import re
import sqlite3
from collections.abc import Iterator
from pathlib import Path

from .. import global_config as g

logger = logging.getLogger(__name__)

_SAVEPOINT_NAME = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*$")


def _configure_connection(conn: sqlite3.Connection) -> None:
    """Apply standard pragmas and row factory to a new connection.

    Configures the connection for use with the project by:
    - Setting row_factory to sqlite3.Row for dict-like access
    - Enabling foreign key constraints

    Args:
        conn: SQLite connection to configure.
    """
    conn.row_factory = sqlite3.Row
    conn.execute("PRAGMA foreign_keys = ON")


def resolve_db_path(db_path: Path | str | None = None) -> Path:
    """Return the database path to use, falling back to the configured default."""
    resolved = db_path or g.DEFAULT_DB_PATH
    if not isinstance(resolved, Path):
        resolved = Path(resolved)
    return resolved


def get_connection(
    db_path: Path | str | None = None,
    *,
    must_exist: bool = True,
) -> sqlite3.Connection:
    """Return a configured SQLite connection to the PLUMES database.

    By default the database file must already exist: connecting to a
    mistyped path would otherwise silently create an empty database.

    Args:
        db_path: Path to SQLite database file. Defaults to
            global_config.DEFAULT_DB_PATH.
        must_exist: If True, refuse to open a database file that does not
            exist. Bootstrap code passes False.

    Returns:
        Configured SQLite connection ready for use.

    Raises:
        FileNotFoundError: If must_exist is True and the file is missing.

    Logs:
        - DEBUG: "Opening SQLite database at {path}" when creating connection.
    """
    resolved = resolve_db_path(db_path)
    if must_exist and not resolved.exists():
        msg = f"Database file not found: {resolved}"
        raise FileNotFoundError(msg)

    resolved.parent.mkdir(parents=True, exist_ok=True)
    logger.debug("Opening SQLite database at %s", resolved)
    conn = sqlite3.connect(str(resolved))
    _configure_connection(conn)
    return conn


@contextlib.contextmanager
def transaction(
    db_path: Path | str | None = None,
    existing_connection: sqlite3.Connection | None = None,
) -> Iterator[sqlite3.Connection]:
    """Context manager for a transactional connection block.

    Commits on success and rolls back on error. If an existing connection
    is provided, it is reused and not closed. Otherwise, a new connection is
    opened and closed on exit.

    Args:
        db_path: Path to database file (only used if existing_connection
            is None). Defaults to global config.
        existing_connection: Existing connection to reuse.

    Yields:
        SQLite connection ready for database operations.

    Logs:
        - DEBUG: "Beginning transaction" at start
        - DEBUG: "Transaction committed" on success
        - ERROR: "Transaction rolled back due to error" on failure
    """
    owns_connection = existing_connection is None
    conn = existing_connection or get_connection(db_path=db_path)

    try:
        logger.debug("Beginning transaction")
        yield conn
        conn.commit()
        logger.debug("Transaction committed")
    except Exception:
        logger.exception("Transaction rolled back due to error")
        conn.rollback()
        raise
    finally:
        if owns_connection:
            conn.close()
            logger.debug("Connection closed")


@contextlib.contextmanager
def savepoint(conn: sqlite3.Connection, name: str) -> Iterator[sqlite3.Connection]:
    """Scope a named savepoint on a caller-owned connection.

    Every statement executed inside the block is either kept (RELEASE) or
    undone (ROLLBACK TO, then RELEASE) as a unit. When no outer transaction
    is open, the savepoint is the transaction and releasing it commits.
    The connection is never closed.

    Args:
        conn: Connection owned by the caller.
        name: Savepoint name (a plain SQL identifier).

    Yields:
        The same connection.

    Raises:
        ValueError: If name is not a plain identifier.

    Logs:
        - DEBUG: "Savepoint {name} opened/released".
        - ERROR: "Rolled back to savepoint {name}" with traceback on failure.
    """
    if not _SAVEPOINT_NAME.match(name):
        msg = f"Unsafe savepoint name: {name!r}"
        raise ValueError(msg)

    conn.execute(f"SAVEPOINT {name}")
    logger.debug("Savepoint %s opened", name)
    try:
        yield conn
    except BaseException:
        logger.exception("Rolled back to savepoint %s", name)
        conn.execute(f"ROLLBACK TO SAVEPOINT {name}")
        conn.execute(f"RELEASE SAVEPOINT {name}")
        raise
    conn.execute(f"RELEASE SAVEPOINT {name}")
    logger.debug("Savepoint %s released", name)


def execute_script(conn: sqlite3.Connection, sql: str, *, description: str) -> None:
    """Execute a multi-statement SQL script with logging.

    Primarily intended for schema initialization.

    Args:
        conn: Database connection to execute script on.
        sql: Multi-statement SQL script to execute.
        description: Human-readable description for logging purposes.

    Raises:
        sqlite3.Error: If script execution fails.

    Logs:
        - INFO: "Executing SQL script: {description}" before execution.
        - ERROR: "Failed while executing SQL script: {description}" on failure.
    """
    logger.info("Executing SQL script: %s", description)
    try:
        conn.executescript(sql)
    except sqlite3.Error:
        logger.exception("Failed while executing SQL script: %s", description)
        raise
