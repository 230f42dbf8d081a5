"""
rowsnap CLI

Command-line interface for inspecting recorded query snapshots.
Provides commands for listing stored snapshots, showing their contents,
diffing two snapshots, and verifying that stored documents round-trip.

Commands:
    rowsnap list [test]                       List stored snapshots
    rowsnap show <test> <snapshot>            Show columns and rows
    rowsnap diff <test> <snap> <test> <snap>  Compare two stored snapshots
    rowsnap verify <test> <snapshot>          Check every result round-trips

Usage:
    $ rowsnap list
    $ rowsnap show test_checkout after_checkout --result orders
    $ rowsnap diff test_checkout initial test_checkout after_checkout
"""

import logging
from pathlib import Path
from typing import Any, Optional

import typer
from rich import box
from rich.console import Console
from rich.logging import RichHandler
from rich.markup import escape
from rich.panel import Panel
from rich.table import Table

from rowsnap import __version__
from rowsnap.codec import marshal, unmarshal
from rowsnap.compare import compare_result, compare_snapshot, default_comparators
from rowsnap.config import Settings
from rowsnap.errors import SnapshotError
from rowsnap.models import Query, Result, Snapshot
from rowsnap.storage import SnapshotStore

# Initialize Typer app and Rich console
app = typer.Typer(
    name="rowsnap",
    help="rowsnap: snapshot testing for relational query results",
    add_completion=False,
)
console = Console()


def _store(root: Optional[Path]) -> SnapshotStore:
    settings = Settings.from_env()
    return SnapshotStore(root if root is not None else settings.snapshot_root)


def _load(store: SnapshotStore, test: str, name: str) -> Snapshot:
    try:
        return store.load(test, name)
    except SnapshotError as e:
        console.print(f"[bold red]Error:[/bold red] {escape(str(e))}")
        raise typer.Exit(1)


ROOT_OPTION = typer.Option(
    None,
    "--root",
    "-r",
    help="Snapshot storage root (default: $ROWSNAP_SNAPSHOT_ROOT or testdata/snapshot)",
)


@app.command("list")
def list_snapshots(
    test: Optional[str] = typer.Argument(
        None,
        help="Only list snapshots of this test directory",
    ),
    root: Optional[Path] = ROOT_OPTION,
) -> None:
    """
    List stored snapshots.

    Shows each test directory, its snapshots and their results in
    recorded order.
    """
    store = _store(root)
    try:
        infos = store.list_snapshots(test)
    except SnapshotError as e:
        console.print(f"[bold red]Error:[/bold red] {escape(str(e))}")
        raise typer.Exit(1)

    if not infos:
        console.print(f"[yellow]No snapshots found under[/yellow] {store.root}")
        raise typer.Exit(0)

    table = Table(title="Stored Snapshots", box=box.ROUNDED)
    table.add_column("Test", style="cyan")
    table.add_column("Snapshot", style="bold")
    table.add_column("Results")
    table.add_column("Manifest", justify="center")

    for info in infos:
        table.add_row(
            info.test_dir,
            info.name,
            ", ".join(info.result_names) or "-",
            "✓" if info.has_manifest else "[yellow]-[/yellow]",
        )

    console.print(table)


@app.command()
def show(
    test: str = typer.Argument(..., help="Test directory"),
    name: str = typer.Argument(..., help="Snapshot name"),
    result_name: Optional[str] = typer.Option(
        None,
        "--result",
        "-n",
        help="Only show this result",
    ),
    limit: int = typer.Option(
        20,
        "--limit",
        "-l",
        help="Maximum rows to print per result (0 for all)",
    ),
    root: Optional[Path] = ROOT_OPTION,
) -> None:
    """
    Show the columns and rows of a stored snapshot.
    """
    snapshot = _load(_store(root), test, name)

    results = list(snapshot.results)
    if result_name is not None:
        results = [r for r in results if r.name == result_name]
        if not results:
            console.print(f"[red]Result '{result_name}' not found in {name}.[/red]")
            raise typer.Exit(1)

    for result in results:
        _print_result(result, limit)


@app.command()
def diff(
    test: str = typer.Argument(..., help="Test directory of the expected snapshot"),
    name: str = typer.Argument(..., help="Expected snapshot name"),
    other_test: str = typer.Argument(..., help="Test directory of the actual snapshot"),
    other_name: str = typer.Argument(..., help="Actual snapshot name"),
    root: Optional[Path] = ROOT_OPTION,
) -> None:
    """
    Compare two stored snapshots.

    Timestamp columns compare by instant and raw byte columns byte for
    byte. Exits with status 1 at the first divergence.
    """
    store = _store(root)
    expect = _load(store, test, name)
    actual = _load(store, other_test, other_name)

    diagnostic, same = compare_snapshot(_with_defaults(expect), actual)
    if not same:
        console.print(
            Panel(escape(diagnostic), title="[bold red]✗ Snapshots differ[/bold red]", border_style="red")
        )
        raise typer.Exit(1)

    console.print(f"[bold green]✓ Snapshots match[/bold green] ({len(expect)} results)")


@app.command()
def verify(
    test: str = typer.Argument(..., help="Test directory"),
    name: str = typer.Argument(..., help="Snapshot name"),
    root: Optional[Path] = ROOT_OPTION,
) -> None:
    """
    Check that every stored result survives a serialize/deserialize round-trip.
    """
    snapshot = _load(_store(root), test, name)

    failures = 0
    for result in snapshot.results:
        try:
            again = unmarshal(marshal(result))
            diagnostic, same = compare_result(result, again, default_comparators(result.result_type))
        except SnapshotError as e:
            diagnostic, same = str(e), False

        if same:
            console.print(f"   [green]✓[/green] {result.name} ({len(result)} rows)")
        else:
            failures += 1
            console.print(f"   [red]✗[/red] {result.name}: {escape(diagnostic)}")

    if failures:
        console.print(f"\n[bold red]{failures} result(s) failed to round-trip[/bold red]")
        raise typer.Exit(1)


# Helper functions for output formatting

def _with_defaults(snapshot: Snapshot) -> Snapshot:
    """Bind default comparators so stored snapshots can be compared directly."""
    queries = [
        Query(name=r.name, sql="", is_table=r.is_table, comparators=default_comparators(r.result_type))
        for r in snapshot.results
    ]
    return snapshot.bind_queries(queries)


def _print_result(result: Result, limit: int) -> None:
    """Print one result as a schema table followed by a data table."""
    kind = "table" if result.is_table else "query"
    console.print(f"\n[bold blue]{result.name}[/bold blue] [dim]({kind}, {len(result)} rows)[/dim]")

    schema = Table(box=box.SIMPLE, show_header=True)
    schema.add_column("Column", style="cyan")
    schema.add_column("Database type")
    schema.add_column("Scan type", style="bold")
    schema.add_column("Nullable", justify="center")
    for col in result.col_types:
        schema.add_row(
            col.name,
            col.full_database_type or col.database_type,
            col.scan_type.tag,
            "yes" if col.nullable else "no",
        )
    console.print(schema)

    data = Table(box=box.ROUNDED)
    for col in result.col_types:
        data.add_column(col.name)

    shown = result.rows if limit <= 0 else result.rows[:limit]
    for row in shown:
        data.add_row(*[_format_value(v) for v in row])
    console.print(data)

    if len(shown) < len(result):
        console.print(f"   [dim]... and {len(result) - len(shown)} more rows[/dim]")


def _format_value(value: Any) -> str:
    if value is None:
        return "[dim]NULL[/dim]"
    if isinstance(value, bytes):
        return value.hex() if len(value) <= 32 else value[:32].hex() + "…"
    if hasattr(value, "isoformat"):
        return value.isoformat()
    return escape(str(value))


# Version and logging options
@app.callback(invoke_without_command=True)
def main(
    ctx: typer.Context,
    version: bool = typer.Option(
        False,
        "--version",
        "-v",
        help="Show version and exit",
    ),
    verbose: bool = typer.Option(
        False,
        "--verbose",
        help="Log debug output",
    ),
) -> None:
    """
    rowsnap: snapshot testing for relational query results.
    """
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=console, show_path=False)],
    )

    if version:
        console.print(f"[bold]rowsnap[/bold] version {__version__}")
        raise typer.Exit()

    if ctx.invoked_subcommand is None:
        console.print(ctx.get_help())


if __name__ == "__main__":
    app()
