"""CLI command: userexporter show — print the current sessions once."""

from __future__ import annotations

import sys

import click
from rich.console import Console
from rich.table import Table

from userexporter.cli.options import apply_overrides, source_option, utmp_path_option
from userexporter.collector import SnapshotCollector
from userexporter.sessions.models import AggregateSnapshot
from userexporter.sources import build_source

console = Console()
err_console = Console(stderr=True)


@click.command()
@utmp_path_option
@source_option
@click.pass_context
def show(ctx: click.Context, utmp_path: str | None, source: str | None) -> None:
    """Run one collection pass and print who is logged in."""
    config = apply_overrides(ctx.obj["config"], utmp_path=utmp_path, source=source)
    collector = SnapshotCollector(build_source(config))

    snapshot = collector.collect_once()
    if snapshot is None:
        err_console.print(
            f"[red]No session data:[/red] source '{config.source}' is unavailable"
        )
        sys.exit(1)

    _print_snapshot(snapshot)


def _print_snapshot(snapshot: AggregateSnapshot) -> None:
    table = Table(title=f"Sessions ({snapshot.source})")
    table.add_column("User", style="bold")
    table.add_column("From")
    table.add_column("TTY")
    table.add_column("Login time", style="dim")
    for fact in snapshot.to_dict()["sessions"]:
        table.add_row(
            fact["user"], fact["origin"], fact["terminal"], fact["login_time"]
        )
    console.print(table)

    summary = Table(show_header=False, box=None, padding=(0, 2))
    summary.add_column(style="dim")
    summary.add_column()
    summary.add_row("Total sessions", str(snapshot.total_sessions))
    for user, count in sorted(snapshot.per_user_count.items()):
        summary.add_row(f"User {user}", str(count))
    for origin, count in sorted(snapshot.per_origin_count.items()):
        summary.add_row(f"From {origin}", str(count))
    console.print(summary)
