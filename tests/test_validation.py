"""Tests for field set validation."""

from __future__ import annotations

import sqlite3

import pytest

from plumes.database import (
    FieldValidationError,
    MissingKeyError,
    NotNullViolationError,
    UnknownFieldError,
    check_fields_exist,
    check_fields_notnulls,
    check_fields_pkeys,
    check_values_notnull,
    describe_table,
)


def test_known_fields_pass(items_conn: sqlite3.Connection) -> None:
    check_fields_exist(items_conn, "items", ["id", "code"])


def test_unknown_field_reports_names(items_conn: sqlite3.Connection) -> None:
    with pytest.raises(UnknownFieldError) as excinfo:
        check_fields_exist(items_conn, "items", ["id", "colour", "size"])
    assert excinfo.value.table == "items"
    assert excinfo.value.fields == ["colour", "size"]
    assert isinstance(excinfo.value, FieldValidationError)


def test_missing_primary_key(plumes_conn: sqlite3.Connection) -> None:
    with pytest.raises(MissingKeyError) as excinfo:
        check_fields_pkeys(plumes_conn, "lab_measurement", ["id_lab_sample", "value"])
    assert excinfo.value.fields == ["id_analyte"]


def test_all_primary_keys_present(plumes_conn: sqlite3.Connection) -> None:
    check_fields_pkeys(plumes_conn, "lab_measurement", ["id_lab_sample", "id_analyte"])


def test_missing_not_null_column(items_conn: sqlite3.Connection) -> None:
    with pytest.raises(NotNullViolationError, match="code"):
        check_fields_notnulls(items_conn, "items", ["id", "note"])


def test_null_value_for_not_null_column(items_conn: sqlite3.Connection) -> None:
    with pytest.raises(NotNullViolationError, match="code"):
        check_values_notnull(items_conn, "items", {"id": 1, "code": None})


def test_null_value_for_nullable_column(items_conn: sqlite3.Connection) -> None:
    check_values_notnull(items_conn, "items", {"id": 1, "note": None})


def test_prefetched_schema_is_used(items_conn: sqlite3.Connection) -> None:
    """Checks run against the schema passed in, without re-reading the catalog."""
    schema = describe_table(items_conn, "items")
    items_conn.execute("DROP TABLE items")
    check_fields_exist(items_conn, "items", ["code"], schema=schema)
