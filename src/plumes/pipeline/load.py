"""Load verb: spreadsheet exports into a PLUMES table.

A CSV file with a header row is read into field sets (blank cells become
NULL) and written with `bulk_insert`, so a file is loaded completely or
not at all.
"""

from __future__ import annotations

import csv
import logging
import sqlite3
from pathlib import Path
from typing import Any

from ..database import bulk_insert, check_fields_exist, describe_table

logger = logging.getLogger(__name__)


def read_csv_rows(csv_path: Path) -> list[dict[str, Any]]:
    """Read a CSV file into field sets keyed by header name.

    Header names and cell values are stripped; empty cells become None so
    they are stored as NULL.

    Raises:
        FileNotFoundError: If csv_path does not exist.
        ValueError: If the file has no header row.
    """
    if not csv_path.exists():
        msg = f"CSV file not found: {csv_path}"
        raise FileNotFoundError(msg)

    with csv_path.open(newline="", encoding="utf-8-sig") as f:
        reader = csv.DictReader(f)
        if reader.fieldnames is None:
            raise ValueError(f"CSV file {csv_path} has no header row")

        rows: list[dict[str, Any]] = []
        for raw in reader:
            row: dict[str, Any] = {}
            for key, value in raw.items():
                if key is None:
                    # extra cells beyond the header
                    continue
                cleaned = value.strip() if isinstance(value, str) else value
                row[key.strip()] = cleaned or None
            rows.append(row)
    return rows


def load_csv(
    conn: sqlite3.Connection,
    table: str,
    csv_path: Path,
    *,
    dry_run: bool = False,
) -> dict[str, Any]:
    """Load every row of csv_path into table as one batch.

    Args:
        conn: Database connection (committed when the batch savepoint is
            released, unless the caller holds an outer transaction).
        table: Destination table.
        csv_path: CSV file with a header row naming table columns.
        dry_run: If True, read and check the header without inserting.

    Returns:
        Result dictionary with:
        - success: bool
        - total: int (rows read)
        - succeeded: int (rows inserted)
        - message: str

    Raises:
        FileNotFoundError: If csv_path does not exist.
        SchemaError, UnknownFieldError, MissingKeyError,
        NotNullViolationError, ConstraintViolationError: From bulk_insert;
            nothing is written in these cases.
    """
    rows = read_csv_rows(csv_path)
    logger.info("Read %d rows from %s for table %s", len(rows), csv_path, table)

    if dry_run:
        schema = describe_table(conn, table)
        header = {name for row in rows for name in row}
        check_fields_exist(conn, table, header, schema=schema)
        return {
            "success": True,
            "total": len(rows),
            "succeeded": 0,
            "message": f"[DRY RUN] Would load {len(rows)} rows into {table}",
        }

    inserted = bulk_insert(conn, table, rows)
    return {
        "success": True,
        "total": len(rows),
        "succeeded": inserted,
        "message": f"Loaded {inserted} rows into {table}",
    }
