"""CLI command: userexporter serve — run the exporter."""

from __future__ import annotations

import click
import uvicorn
from rich.console import Console

from userexporter.cli.options import apply_overrides, source_option, utmp_path_option
from userexporter.collector import SnapshotCollector
from userexporter.sources import build_source
from userexporter.web.app import create_app

console = Console(stderr=True)


@click.command()
@click.option(
    "--web.listen-address",
    "listen_address",
    default=None,
    help="Address to listen on for web interface and telemetry (default: :32142).",
)
@click.option(
    "--web.telemetry-path",
    "telemetry_path",
    default=None,
    help="Path under which to expose metrics (default: /metrics).",
)
@utmp_path_option
@source_option
@click.pass_context
def serve(
    ctx: click.Context,
    listen_address: str | None,
    telemetry_path: str | None,
    utmp_path: str | None,
    source: str | None,
) -> None:
    """Collect sessions every 15 seconds and serve them as Prometheus metrics."""
    config = apply_overrides(ctx.obj["config"], utmp_path=utmp_path, source=source)
    try:
        if listen_address is not None:
            config.set_listen_address(listen_address)
    except ValueError as exc:
        raise click.BadParameter(str(exc), param_hint="--web.listen-address") from exc
    try:
        if telemetry_path is not None:
            config.set_metrics_path(telemetry_path)
    except ValueError as exc:
        raise click.BadParameter(str(exc), param_hint="--web.telemetry-path") from exc

    collector = SnapshotCollector(build_source(config))

    console.print(
        f"[bold]Unix User Exporter[/bold] reading [cyan]{config.utmp_path}[/cyan] "
        f"(source: {config.source})"
    )
    if config.debug:
        console.print("  [dim]Debug mode enabled[/dim]")

    # initial collection before the first scrape can arrive
    collector.collect_once()
    collector.start()

    console.print(
        f"  Metrics at [cyan]http://{config.listen_address}{config.metrics_path}[/cyan]\n"
    )

    app = create_app(collector, config)
    server_config = uvicorn.Config(
        app,
        host=config.listen_host,
        port=config.listen_port,
        log_level="debug" if config.debug else "info",
    )
    try:
        uvicorn.Server(server_config).run()
    finally:
        collector.stop()
