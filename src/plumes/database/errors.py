"""Database-specific exception types for the project.

Validation errors (`FieldValidationError` and its subclasses) are raised
before any statement reaches the store. `ConstraintViolationError` and plain
`DatabaseError` wrap failures reported by SQLite itself.
"""

from __future__ import annotations

import sqlite3
from collections.abc import Iterable, Mapping
from typing import Any


class DatabaseError(Exception):
    """Base exception for database-related errors."""


class SchemaError(DatabaseError):
    """Raised when a table is absent from the catalog or cannot be addressed."""

    def __init__(self, table: str, message: str | None = None) -> None:
        self.table = table
        super().__init__(message or f"Table not found: {table!r}")


class FieldValidationError(DatabaseError):
    """Base class for field set checks performed against a table schema."""

    def __init__(self, table: str, fields: Iterable[str], message: str) -> None:
        self.table = table
        self.fields = sorted(fields)
        super().__init__(message)


class UnknownFieldError(FieldValidationError):
    """Raised when supplied field names are not declared columns."""

    def __init__(self, table: str, fields: Iterable[str]) -> None:
        fields = sorted(fields)
        super().__init__(table, fields, f"Unknown field(s) for table {table!r}: {', '.join(fields)}")


class MissingKeyError(FieldValidationError):
    """Raised when primary-key columns are missing from a field set."""

    def __init__(self, table: str, fields: Iterable[str]) -> None:
        fields = sorted(fields)
        super().__init__(
            table, fields, f"Missing primary key field(s) for table {table!r}: {', '.join(fields)}"
        )


class NotNullViolationError(FieldValidationError):
    """Raised when a NOT NULL column is omitted or given a null value."""

    def __init__(self, table: str, fields: Iterable[str]) -> None:
        fields = sorted(fields)
        super().__init__(
            table, fields, f"NOT NULL field(s) missing or null for table {table!r}: {', '.join(fields)}"
        )


class AmbiguousTargetError(DatabaseError):
    """Raised when an update/delete predicate matches more than one row."""

    def __init__(self, table: str, key_values: Mapping[str, Any], matches: int) -> None:
        self.table = table
        self.key_values = dict(key_values)
        self.matches = matches
        super().__init__(
            f"More than one row found in {table!r} with {self.key_values} ({matches} matches)"
        )


class ConstraintViolationError(DatabaseError):
    """Raised when the store rejects a statement (duplicate key, type, NOT NULL)."""


def from_sqlite_error(error: sqlite3.Error) -> DatabaseError:
    """Map a raw sqlite3 error to a project-level DatabaseError.

    IntegrityError (constraint failures, including STRICT-table datatype
    mismatches) is mapped to ConstraintViolationError, all others to
    DatabaseError. A value of an unsupported Python type fails while it is
    bound, before SQLite evaluates any constraint, and surfaces as
    ProgrammingError or InterfaceError; those stay plain DatabaseError.

    Args:
        error: SQLite exception to convert.

    Returns:
        DatabaseError or ConstraintViolationError instance with error message.
    """
    if isinstance(error, sqlite3.IntegrityError):
        return ConstraintViolationError(str(error))
    return DatabaseError(str(error))
