from __future__ import annotations

import importlib
from pathlib import Path

import pytest

from plumes.database import get_connection, initialize_database, list_tables


@pytest.mark.unit
def test_import_package() -> None:
    importlib.import_module("plumes")


@pytest.mark.unit
def test_import_cli_main() -> None:
    importlib.import_module("plumes.cli.main")


@pytest.mark.integration
def test_initialize_creates_schema(sqlite_path: Path) -> None:
    assert initialize_database(sqlite_path) == sqlite_path
    conn = get_connection(sqlite_path)
    try:
        tables = list_tables(conn)
    finally:
        conn.close()
    assert len(tables) == 7
    assert {"sites", "species", "lab_measurement"} <= set(tables)
