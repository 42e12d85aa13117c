"""
chronodx CLI - Main Entry Point.

Provides the `chronodx` command for inspecting partition assignment and
query reconstruction without a running store.
"""

import json
from pathlib import Path

import typer
from rich.console import Console
from rich.table import Table

from chronodx import __version__
from chronodx.core.errors import ChronodxError
from chronodx.core.logging import configure_logging

app = typer.Typer(
    name="chronodx",
    help="chronodx - bitemporal interval index",
    no_args_is_help=True,
)

console = Console()


def _build_mapper(field: str, pattern: str | None, now: str | None):
    from chronodx.core.config import get_settings
    from chronodx.index.schema import BitemporalMapperOptions

    options = BitemporalMapperOptions(
        vt_from="vt_from",
        vt_to="vt_to",
        tt_from="tt_from",
        tt_to="tt_to",
        pattern=pattern,
        now_value=_raw_value(now),
    )
    return options.build(field, get_settings())


def _raw_value(value: str | None) -> int | str | None:
    """Digit strings are epoch millis; anything else goes to the date parser."""
    if value is None:
        return None
    return int(value) if value.strip().isdigit() else value


# =============================================================================
# Commands
# =============================================================================


@app.command()
def assign(
    vt_from: str | None = typer.Option(None, "--vt-from", help="Valid time start"),
    vt_to: str | None = typer.Option(None, "--vt-to", help="Valid time end"),
    tt_from: str | None = typer.Option(None, "--tt-from", help="Transaction time start"),
    tt_to: str | None = typer.Option(None, "--tt-to", help="Transaction time end"),
    field: str = typer.Option("validity", "--field", "-f", help="Indexed field name"),
    pattern: str | None = typer.Option(None, "--pattern", "-p", help="Date pattern"),
    now: str | None = typer.Option(None, "--now", help="Value that stands for NOW"),
):
    """Show the partition and stored fields for one interval."""
    columns = {
        "vt_from": _raw_value(vt_from),
        "vt_to": _raw_value(vt_to),
        "tt_from": _raw_value(tt_from),
        "tt_to": _raw_value(tt_to),
    }
    try:
        mapper = _build_mapper(field, pattern, now)
        stored = mapper.add_fields(columns)
    except ChronodxError as e:
        console.print(f"[red]Error:[/red] {e}")
        raise typer.Exit(1)

    if stored is None:
        console.print("[yellow]No bitemporal data; nothing stored[/yellow]")
        return

    table = Table(title=f"Partition {stored.partition.value}")
    table.add_column("Field", style="cyan")
    table.add_column("Value")
    for name, value in stored.fields.items():
        table.add_row(name, str(value))
    console.print(table)


@app.command()
def explain(
    condition: str = typer.Argument(..., help="Condition JSON"),
    pattern: str | None = typer.Option(None, "--pattern", "-p", help="Date pattern"),
    now: str | None = typer.Option(None, "--now", help="Value that stands for NOW"),
):
    """Print the predicate tree a bitemporal condition is rebuilt into."""
    from chronodx.core.config import get_settings
    from chronodx.index.condition import condition_from_json
    from chronodx.index.schema import Schema

    try:
        parsed = condition_from_json(condition)
        schema = Schema([_build_mapper(parsed.field, pattern, now)])
        predicate = parsed.query(schema, get_settings().default_boost)
    except (ChronodxError, ValueError) as e:
        console.print(f"[red]Error:[/red] {e}")
        raise typer.Exit(1)

    console.print_json(json.dumps(predicate.to_dict()))


@app.command()
def version():
    """Show version information."""
    console.print(f"[bold]chronodx[/bold] v{__version__}")


@app.command()
def config(
    path: Path | None = typer.Option(None, "--path", "-p", help="Config file path"),
):
    """Show the effective configuration."""
    from chronodx.core.config import get_settings, load_settings_from_yaml

    try:
        settings = load_settings_from_yaml(path) if path else get_settings()
    except (FileNotFoundError, ValueError) as e:
        console.print(f"[red]Error:[/red] {e}")
        raise typer.Exit(1)

    table = Table(title="Current Configuration")
    table.add_column("Setting", style="cyan")
    table.add_column("Value")
    for name in type(settings).model_fields:
        table.add_row(name, str(getattr(settings, name)))
    console.print(table)


# =============================================================================
# Entry Point
# =============================================================================


def main():
    """Main entry point for the CLI."""
    from chronodx.core.config import get_settings

    configure_logging(get_settings().log_level)
    app()


if __name__ == "__main__":
    main()
