"""Tests for wildcard search and target resolution."""

from __future__ import annotations

import sqlite3

import pytest

from plumes.database import (
    SchemaError,
    TargetState,
    UnknownFieldError,
    locate_target,
    search,
)


@pytest.fixture
def sites_conn(plumes_conn: sqlite3.Connection) -> sqlite3.Connection:
    plumes_conn.executemany(
        "INSERT INTO sites (id_site, site_name, region) VALUES (?, ?, ?)",
        [
            ("S01", "North Bay", "Arctic"),
            ("S02", "North Cape", None),
            ("T01", "Tern Lake", "Boreal"),
        ],
    )
    plumes_conn.commit()
    return plumes_conn


class TestSearch:
    """Tests for search."""

    def test_exact_match(self, sites_conn: sqlite3.Connection) -> None:
        rows = search(sites_conn, "sites", {"id_site": "T01"})
        assert [row["site_name"] for row in rows] == ["Tern Lake"]

    def test_percent_wildcard(self, sites_conn: sqlite3.Connection) -> None:
        rows = search(sites_conn, "sites", {"site_name": "North%"})
        assert {row["id_site"] for row in rows} == {"S01", "S02"}

    def test_underscore_wildcard(self, sites_conn: sqlite3.Connection) -> None:
        rows = search(sites_conn, "sites", {"id_site": "S0_"})
        assert len(rows) == 2

    def test_filters_are_anded(self, sites_conn: sqlite3.Connection) -> None:
        rows = search(sites_conn, "sites", {"site_name": "North%", "region": "Arctic"})
        assert [row["id_site"] for row in rows] == ["S01"]

    def test_none_matches_null(self, sites_conn: sqlite3.Connection) -> None:
        rows = search(sites_conn, "sites", {"region": None})
        assert [row["id_site"] for row in rows] == ["S02"]

    def test_no_filters_returns_everything(self, sites_conn: sqlite3.Connection) -> None:
        assert len(search(sites_conn, "sites")) == 3

    def test_no_match_is_empty_not_error(self, sites_conn: sqlite3.Connection) -> None:
        assert search(sites_conn, "sites", {"id_site": "Z99"}) == []

    def test_numeric_column(self, items_conn: sqlite3.Connection) -> None:
        items_conn.execute("INSERT INTO items VALUES (7, 'A', NULL)")
        assert search(items_conn, "items", {"id": 7})[0]["code"] == "A"

    def test_unknown_filter_column(self, sites_conn: sqlite3.Connection) -> None:
        with pytest.raises(UnknownFieldError):
            search(sites_conn, "sites", {"altitude": 10})

    def test_unknown_table(self, db_conn: sqlite3.Connection) -> None:
        with pytest.raises(SchemaError):
            search(db_conn, "sites", {"id_site": "S01"})


class TestLocateTarget:
    """Tests for locate_target."""

    def test_one(self, sites_conn: sqlite3.Connection) -> None:
        match = locate_target(sites_conn, "sites", {"id_site": "S01", "site_name": "ignored"})
        assert match.state is TargetState.ONE
        assert match.row is not None
        assert match.row["site_name"] == "North Bay"

    def test_none(self, sites_conn: sqlite3.Connection) -> None:
        match = locate_target(sites_conn, "sites", {"id_site": "Z99"})
        assert match.state is TargetState.NONE
        assert match.row is None
        assert match.rows == []

    def test_many(self, sites_conn: sqlite3.Connection) -> None:
        match = locate_target(sites_conn, "sites", {"id_site": "S%"})
        assert match.state is TargetState.MANY
        assert match.row is None
        assert len(match.rows) == 2
