"""Database bootstrap from the packaged `sql/schema.sql`.

Creates a fresh PLUMES database (or re-applies the idempotent schema to an
existing one) and deletes database files safely.
"""

from __future__ import annotations

import errno
import logging
import sqlite3
from pathlib import Path

from .. import global_config as g
from .connection import execute_script, get_connection, resolve_db_path
from .errors import DatabaseError, from_sqlite_error

logger = logging.getLogger(__name__)


class DatabaseLockedError(DatabaseError):
    """Raised when database deletion fails because the database is in use."""


def _schema_path() -> Path:
    return g.SQL_DIR / "schema.sql"


def initialize_database(db_path: Path | str | None = None) -> Path:
    """Create the PLUMES tables in the database at db_path.

    Safe to re-run: every statement in schema.sql is `IF NOT EXISTS`.

    Args:
        db_path: Path to SQLite database file. Defaults to global config.

    Returns:
        Path of the initialized database.

    Raises:
        FileNotFoundError: If schema.sql is missing.
        DatabaseError: If SQL execution fails.

    Logs:
        - INFO: "Initializing database at {path}" at start.
        - INFO: "Database initialization complete" on success.
    """
    schema_file = _schema_path()
    if not schema_file.exists():
        msg = f"Schema file not found: {schema_file}"
        raise FileNotFoundError(msg)

    resolved = resolve_db_path(db_path)
    logger.info("Initializing database at %s", resolved)
    schema_sql = schema_file.read_text(encoding="utf-8")

    conn = get_connection(db_path=resolved, must_exist=False)
    try:
        execute_script(conn, schema_sql, description="schema.sql")
        conn.commit()
    except sqlite3.Error as exc:
        conn.rollback()
        raise from_sqlite_error(exc) from exc
    finally:
        conn.close()

    logger.info("Database initialization complete")
    return resolved


def delete_database(db_path: Path | str | None = None) -> bool:
    """Delete a SQLite database file and its journal/WAL/SHM companions.

    Args:
        db_path: Path to SQLite database file. Defaults to global config.

    Returns:
        True if a database file was removed, False if none existed.

    Raises:
        DatabaseLockedError: If a file is locked by another process.
        OSError: If deletion fails for other reasons.

    Logs:
        - INFO: "Deleting database at {path}" at start.
        - INFO: "Database does not exist (already deleted)" when absent.
    """
    resolved = resolve_db_path(db_path)
    logger.info("Deleting database at %s", resolved)

    if not resolved.exists():
        logger.info("Database does not exist (already deleted)")
        return False

    companions = [
        resolved,
        resolved.with_suffix(resolved.suffix + "-journal"),
        resolved.with_suffix(resolved.suffix + "-wal"),
        resolved.with_suffix(resolved.suffix + "-shm"),
    ]
    for file_path in companions:
        if not file_path.exists():
            continue
        try:
            file_path.unlink()
            logger.debug("Deleted %s", file_path)
        except OSError as exc:
            if exc.errno == errno.EBUSY or "locked" in str(exc).lower():
                msg = "Database is in use; close all processes using it and retry."
                raise DatabaseLockedError(msg) from exc
            raise

    return True
