from __future__ import annotations

import sqlite3
from collections.abc import Iterator
from pathlib import Path

import pytest

from plumes.database import get_connection, initialize_database


@pytest.fixture
def project_root(tmp_path: Path) -> Path:
    """
    A dedicated temp root directory for each test.
    All filesystem writes in tests should be under this root (or tmp_path directly).
    """
    root = tmp_path / "proj"
    (root / "data" / "in").mkdir(parents=True)
    (root / "data" / "out").mkdir(parents=True)
    return root


@pytest.fixture(autouse=True)
def chdir_to_project_root(project_root: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    """
    Automatically change working directory to project_root for all tests.
    """
    monkeypatch.chdir(project_root)


@pytest.fixture
def sqlite_path(project_root: Path) -> Path:
    """
    On-disk SQLite DB under the temp project root (more realistic than :memory:).
    """
    return project_root / "data" / "out" / "test.sqlite"


@pytest.fixture
def db_conn(sqlite_path: Path, project_root: Path) -> Iterator[sqlite3.Connection]:
    """
    A configured connection to an empty database, always closed after each test.

    The DB must be under project_root (prevents touching real DBs).
    """
    try:
        sqlite_path.resolve().relative_to(project_root.resolve())
    except ValueError:
        raise AssertionError(
            f"SQLite path {sqlite_path} is not under project_root {project_root}. "
            "This prevents accidental writes to real databases."
        )

    conn = get_connection(sqlite_path, must_exist=False)
    try:
        yield conn
    finally:
        conn.close()


@pytest.fixture
def items_conn(db_conn: sqlite3.Connection) -> sqlite3.Connection:
    """
    Connection with a small generic table:
    integer primary key, one NOT NULL column, one nullable column.
    """
    db_conn.execute(
        "CREATE TABLE items (id INTEGER PRIMARY KEY, code TEXT NOT NULL, note TEXT)"
    )
    db_conn.commit()
    return db_conn


@pytest.fixture
def nullable_key_conn(db_conn: sqlite3.Connection) -> sqlite3.Connection:
    """
    Connection with a TEXT primary key that allows NULL (SQLite permits this
    for non-INTEGER keys not declared NOT NULL); one row holds a NULL key.
    """
    db_conn.execute("CREATE TABLE tags (name TEXT PRIMARY KEY, label TEXT)")
    db_conn.execute("INSERT INTO tags VALUES ('red', 'warm')")
    db_conn.execute("INSERT INTO tags VALUES (NULL, 'unnamed')")
    db_conn.commit()
    return db_conn


@pytest.fixture
def plumes_conn(sqlite_path: Path) -> Iterator[sqlite3.Connection]:
    """
    Connection to a database initialized from the packaged PLUMES schema.
    """
    initialize_database(sqlite_path)
    conn = get_connection(sqlite_path)
    try:
        yield conn
    finally:
        conn.close()


@pytest.fixture
def seeded_conn(plumes_conn: sqlite3.Connection) -> sqlite3.Connection:
    """
    PLUMES database with one complete measurement chain and one orphan
    measurement whose lab sample has no field sample link.
    """
    statements = [
        "INSERT INTO sites VALUES ('S01', 'North Bay', 'Arctic', 69.1, -105.0)",
        "INSERT INTO species VALUES ('SP01', 'Salvelinus alpinus', 'Arctic char', 4.1)",
        "INSERT INTO field_sample VALUES ('F01', 'S01', 'SP01', '2023-08-14', 'muscle', NULL)",
        "INSERT INTO lab_sample VALUES ('L01', 'homogenate', '2023-09-01', NULL)",
        "INSERT INTO lab_sample VALUES ('L02', 'homogenate', '2023-09-02', NULL)",
        "INSERT INTO lab_field_sample VALUES ('L01', 'F01')",
        "INSERT INTO analyte VALUES ('PFOS', 'Perfluorooctanesulfonic acid', '1763-23-1', 'PFAS')",
        "INSERT INTO analyte VALUES ('PFOA', 'Perfluorooctanoic acid', '335-67-1', 'PFAS')",
        "INSERT INTO lab_measurement VALUES ('L01', 'PFOS', 12.5, 'ng/g', 0.1, 'LC-MS/MS')",
        "INSERT INTO lab_measurement VALUES ('L01', 'PFOA', 0.8, 'ng/g', 0.1, 'LC-MS/MS')",
        "INSERT INTO lab_measurement VALUES ('L02', 'PFOS', 3.2, 'ng/g', 0.1, 'LC-MS/MS')",
    ]
    for statement in statements:
        plumes_conn.execute(statement)
    plumes_conn.commit()
    return plumes_conn
