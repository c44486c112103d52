"""CLI command: userexporter dump — list the raw records of a utmp file."""

from __future__ import annotations

import sys

import click
from rich.console import Console
from rich.table import Table

from userexporter.cli.options import apply_overrides, utmp_path_option
from userexporter.errors import SourceUnavailable
from userexporter.sources.utmp_file import UtmpFileSource

console = Console()
err_console = Console(stderr=True)


@click.command()
@utmp_path_option
@click.option(
    "--all",
    "show_all",
    is_flag=True,
    help="Include structural entries (boot time, run level, ...).",
)
@click.pass_context
def dump(ctx: click.Context, utmp_path: str | None, show_all: bool) -> None:
    """Decode a utmp file and print its records."""
    config = apply_overrides(ctx.obj["config"], utmp_path=utmp_path)
    source = UtmpFileSource(config.utmp_path)

    try:
        records = list(source.records())
    except SourceUnavailable as exc:
        err_console.print(f"[red]Error:[/red] {exc}")
        sys.exit(1)

    table = Table(title=str(config.utmp_path))
    table.add_column("Type")
    table.add_column("PID", justify="right")
    table.add_column("Line")
    table.add_column("User", style="bold")
    table.add_column("Host")
    table.add_column("Time", style="dim")

    shown = 0
    for record in records:
        if not show_all and not record.kind.is_login:
            continue
        shown += 1
        table.add_row(
            record.kind.name,
            str(record.pid),
            record.line,
            record.user,
            record.host,
            record.login_time.strftime("%Y-%m-%d %H:%M:%S"),
        )

    console.print(table)
    console.print(f"[dim]{shown} of {len(records)} record(s)[/dim]")
