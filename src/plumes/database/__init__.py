"""Public interface for the database package.

This module exposes the primitives used by the import and curation
tooling: connection helpers, bootstrap entrypoints, schema introspection,
field validation, row lookup, generic CRUD and the read views.
"""

from .connection import get_connection, savepoint, transaction
from .crud import MutationResult, bulk_insert, delete, insert, update
from .errors import (
    AmbiguousTargetError,
    ConstraintViolationError,
    DatabaseError,
    FieldValidationError,
    MissingKeyError,
    NotNullViolationError,
    SchemaError,
    UnknownFieldError,
)
from .init import DatabaseLockedError, delete_database, initialize_database
from .locator import TargetMatch, TargetState, locate_target, search
from .schema import (
    Column,
    TableSchema,
    columns,
    describe_table,
    list_tables,
    not_null_columns,
    primary_keys,
    table_exists,
)
from .validation import (
    check_fields_exist,
    check_fields_notnulls,
    check_fields_pkeys,
    check_values_notnull,
)
from .views import LazyView, get_joined_view, get_table

__all__ = [
    # connection and bootstrap
    "get_connection",
    "transaction",
    "savepoint",
    "initialize_database",
    "delete_database",
    # schema
    "Column",
    "TableSchema",
    "describe_table",
    "list_tables",
    "table_exists",
    "columns",
    "primary_keys",
    "not_null_columns",
    # validation
    "check_fields_exist",
    "check_fields_pkeys",
    "check_fields_notnulls",
    "check_values_notnull",
    # lookup and mutation
    "search",
    "locate_target",
    "TargetMatch",
    "TargetState",
    "insert",
    "bulk_insert",
    "update",
    "delete",
    "MutationResult",
    # read views
    "get_table",
    "get_joined_view",
    "LazyView",
    # errors
    "DatabaseError",
    "SchemaError",
    "FieldValidationError",
    "UnknownFieldError",
    "MissingKeyError",
    "NotNullViolationError",
    "AmbiguousTargetError",
    "ConstraintViolationError",
    "DatabaseLockedError",
]
