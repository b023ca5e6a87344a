"""MediaTrack operator CLI with Rich output.

Provides commands for:
- Graph store connectivity checks
- Schema initialization
- Node counts per label

Usage:
    mediatrack health          # Verify the store is reachable
    mediatrack init-schema     # Declare constraints and indexes
    mediatrack stats           # Count nodes per label
    mediatrack version         # Show version
"""

from typing import Optional

import typer
from rich import box
from rich.console import Console
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from mediatrack.config import Config
from mediatrack.errors import ConnectivityError, SchemaError

app = typer.Typer(
    name="mediatrack",
    help="MediaTrack - graph persistence for media tracking",
    rich_markup_mode="rich",
    no_args_is_help=True,
)
console = Console()


@app.callback()
def _main(
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Log at DEBUG level"),
):
    if verbose:
        from mediatrack.log_config import configure_logging

        configure_logging("DEBUG")


def print_banner():
    banner = Text()
    banner.append("MediaTrack", style="bold cyan")
    console.print(Panel(banner, border_style="cyan", box=box.ROUNDED))


def _connect(uri: Optional[str]):
    """Open a connection, exiting with status 1 when the store is unreachable."""
    from mediatrack.db import GraphConnection

    # --uri replaces NEO4J_URI outright
    try:
        config = Config(neo4j_uri=uri) if uri else Config()
    except ValueError as e:
        source = "--uri" if uri else "configuration"
        console.print(f"[red]Invalid {source}:[/red] {e}")
        raise typer.Exit(2)

    try:
        return GraphConnection.from_config(config)
    except ConnectivityError as e:
        console.print(f"[red]Cannot reach graph store at {config.neo4j_uri}:[/red] {e}")
        raise typer.Exit(1)


@app.command()
def health(
    uri: Optional[str] = typer.Option(None, "--uri", help="Override NEO4J_URI"),
):
    """Verify connectivity to the graph store."""
    print_banner()

    with _connect(uri) as conn:
        healthy = conn.health_check()

    if healthy:
        console.print(f"[green]✓ Graph store healthy:[/green] {conn.uri}")
    else:
        console.print(f"[red]✗ Graph store did not answer:[/red] {conn.uri}")
        raise typer.Exit(1)


@app.command("init-schema")
def init_schema(
    uri: Optional[str] = typer.Option(None, "--uri", help="Override NEO4J_URI"),
):
    """Declare every constraint and index (safe to re-run)."""
    from mediatrack.db import SchemaInitializer

    print_banner()

    with _connect(uri) as conn:
        try:
            report = SchemaInitializer(conn).ensure_schema()
        except SchemaError as e:
            console.print(f"[red]Schema initialization failed:[/red] {e}")
            console.print(f"[dim]{e.statement}[/dim]")
            raise typer.Exit(1)

    table = Table(title="Declared Schema", box=box.ROUNDED)
    table.add_column("Kind", style="cyan")
    table.add_column("Name")

    for name in report.constraints:
        table.add_row("constraint", name)
    for name in report.indexes:
        table.add_row("index", name)

    console.print(table)
    console.print(
        f"\n[green]✓ {len(report.constraints)} constraints, {len(report.indexes)} indexes[/green]"
    )


@app.command()
def stats(
    uri: Optional[str] = typer.Option(None, "--uri", help="Override NEO4J_URI"),
):
    """Show node counts per label."""
    from mediatrack.db import Repository

    print_banner()

    with _connect(uri) as conn:
        counts = Repository(conn).node_counts()

    table = Table(title="Node Counts", box=box.ROUNDED)
    table.add_column("Label", style="cyan")
    table.add_column("Nodes", justify="right")

    for label, count in counts.items():
        table.add_row(label, str(count))

    console.print(table)


@app.command()
def version():
    """Show MediaTrack version."""
    from mediatrack import __version__

    console.print(f"MediaTrack [cyan]{__version__}[/cyan]")


def main():
    """Entry point for CLI."""
    app()


if __name__ == "__main__":
    main()
