"""CLI commands for database management, inspection and CSV loading."""

from pathlib import Path
from typing import Annotated, Any

import typer
from rich.console import Console
from rich.table import Table

from ..base import BaseCLI
from ...database import (
    LazyView,
    delete_database,
    get_connection,
    get_joined_view,
    get_table,
    initialize_database,
    list_tables,
    transaction,
)
from ...database.schema import quote_identifier
from ...pipeline.load import load_csv

db_app = typer.Typer(help="Database management commands.")

DbPathOption = Annotated[
    Path | None,
    typer.Option(
        "--db-path",
        help="Path to SQLite database file (defaults to global config)",
    ),
]


def _render_rows(title: str, rows: list[dict[str, Any]]) -> None:
    """Print rows as a rich table; column headers come from the first row."""
    table = Table(title=title)
    columns = list(rows[0]) if rows else []
    for name in columns:
        table.add_column(name)
    for row in rows:
        table.add_row(*("" if row[name] is None else str(row[name]) for name in columns))
    Console().print(table)


class DatabaseCLI(BaseCLI):
    """CLI helpers for database management."""

    def __init__(self) -> None:
        super().__init__("db")

    def init_db(self, *, db_path: Path | None) -> dict[str, Any]:
        """Create the schema at db_path (or the configured default)."""
        return self.handle_cli_operation(
            operation="db init",
            op_callable=lambda: self._init_operation(db_path=db_path),
            pre_message="Initializing database...",
        )

    def delete_db(self, *, db_path: Path | None) -> dict[str, Any]:
        """Delete the database file and its companion files."""
        return self.handle_cli_operation(
            operation="db delete",
            op_callable=lambda: self._delete_operation(db_path=db_path),
            pre_message="Deleting database...",
        )

    def list_db_tables(self, *, db_path: Path | None) -> dict[str, Any]:
        """List every table with its current row count."""
        return self.handle_cli_operation(
            operation="db tables",
            op_callable=lambda: self._tables_operation(db_path=db_path),
        )

    def show_table(self, *, table: str, db_path: Path | None, limit: int) -> list[dict[str, Any]]:
        """Fetch a whole table and render its first `limit` rows.

        Args:
            table: Table to display.
            db_path: Database file, or None for the configured default.
            limit: Maximum rows to print; the title still reports the full count.

        Returns:
            Every row of the table.
        """
        rows = self.handle_cli_operation(
            operation=f"db show {table}",
            op_callable=lambda: self._show_operation(table=table, db_path=db_path),
            show_result=False,
        )
        _render_rows(f"{table} ({len(rows)} rows)", rows[:limit])
        return rows

    def show_view(self, *, db_path: Path | None, limit: int) -> list[dict[str, Any]]:
        """Render the first `limit` rows of the joined measurement view."""
        rows = self.handle_cli_operation(
            operation="db view",
            op_callable=lambda: self._view_operation(db_path=db_path, limit=limit),
            show_result=False,
        )
        _render_rows("measurements", rows)
        return rows

    def load(self, *, table: str, csv_path: Path, db_path: Path | None, dry_run: bool) -> dict[str, Any]:
        """Load a CSV file into table as one batch.

        Args:
            table: Destination table.
            csv_path: CSV file with a header row of column names.
            db_path: Database file, or None for the configured default.
            dry_run: Read and check the header without writing.

        Returns:
            Result dict from load_csv.

        Side Effects:
            Commits the batch on success; exits with code 1 on any error.
        """
        return self.handle_cli_operation(
            operation=f"db load {table}",
            op_callable=lambda: self._load_operation(
                table=table, csv_path=csv_path, db_path=db_path, dry_run=dry_run
            ),
            pre_message=f"Loading {csv_path} into {table}...",
        )

    def _init_operation(self, *, db_path: Path | None) -> dict[str, Any]:
        """Run initialize_database and wrap the resolved path in a result dict."""
        resolved = initialize_database(db_path=db_path)
        return {"success": True, "message": f"Database initialized at {resolved}"}

    def _delete_operation(self, *, db_path: Path | None) -> dict[str, Any]:
        """Run delete_database; a missing file still counts as success."""
        deleted = delete_database(db_path=db_path)
        message = "Database deleted successfully" if deleted else "Database does not exist"
        return {"success": True, "message": message}

    def _tables_operation(self, *, db_path: Path | None) -> dict[str, Any]:
        """Count the rows of each table through a LazyView."""
        conn = get_connection(db_path=db_path)
        try:
            items = []
            for name in list_tables(conn):
                n_rows = LazyView(conn, f"SELECT * FROM {quote_identifier(name)}").count()  # noqa: S608
                items.append(f"{name}: {n_rows} rows")
        finally:
            conn.close()
        return {"success": True, "total": len(items), "items": items}

    def _show_operation(self, *, table: str, db_path: Path | None) -> list[dict[str, Any]]:
        """Return every row of table; SchemaError if it is absent."""
        conn = get_connection(db_path=db_path)
        try:
            return get_table(conn, table)
        finally:
            conn.close()

    def _view_operation(self, *, db_path: Path | None, limit: int) -> list[dict[str, Any]]:
        """Return the first `limit` rows of the joined view."""
        conn = get_connection(db_path=db_path)
        try:
            return get_joined_view(conn).head(limit)
        finally:
            conn.close()

    def _load_operation(
        self,
        *,
        table: str,
        csv_path: Path,
        db_path: Path | None,
        dry_run: bool,
    ) -> dict[str, Any]:
        """Run load_csv inside a transaction that commits on success."""
        with transaction(db_path=db_path) as conn:
            return load_csv(conn, table, csv_path, dry_run=dry_run)


cli = DatabaseCLI()


@db_app.command("init")
def init_command(db_path: DbPathOption = None) -> None:
    """Create the PLUMES tables (idempotent)."""
    result = cli.init_db(db_path=db_path)
    if not result.get("success"):
        raise typer.Exit(1)


@db_app.command("delete")
def delete_command(db_path: DbPathOption = None) -> None:
    """Delete the database file and its journal/WAL/SHM files.

    Exits with code 1 if deletion fails (e.g., database is locked).
    """
    result = cli.delete_db(db_path=db_path)
    if not result.get("success"):
        raise typer.Exit(1)


@db_app.command("tables")
def tables_command(db_path: DbPathOption = None) -> None:
    """List tables with their row counts."""
    cli.list_db_tables(db_path=db_path)


@db_app.command("show")
def show_command(
    table: Annotated[str, typer.Argument(help="Table to display")],
    limit: Annotated[int, typer.Option("-n", "--limit", help="Rows to display")] = 20,
    db_path: DbPathOption = None,
) -> None:
    """Display the rows of a table."""
    cli.show_table(table=table, db_path=db_path, limit=limit)


@db_app.command("view")
def view_command(
    limit: Annotated[int, typer.Option("-n", "--limit", help="Rows to display")] = 20,
    db_path: DbPathOption = None,
) -> None:
    """Display the joined measurement view."""
    cli.show_view(db_path=db_path, limit=limit)


@db_app.command("load")
def load_command(
    table: Annotated[str, typer.Argument(help="Destination table")],
    csv_path: Annotated[Path, typer.Argument(help="CSV file with a header row")],
    dry_run: Annotated[
        bool,
        typer.Option("--dry-run", help="Read and check the file without writing"),
    ] = False,
    db_path: DbPathOption = None,
) -> None:
    """Load a CSV export into a table in a single all-or-nothing batch."""
    result = cli.load(table=table, csv_path=csv_path, db_path=db_path, dry_run=dry_run)
    if not result.get("success"):
        raise typer.Exit(1)


app = db_app
