"""CLI entry point — Click group with global options."""

from __future__ import annotations

import logging

import click

from userexporter import __version__
from userexporter.config import ExporterConfig


@click.group()
@click.version_option(version=__version__, prog_name="userexporter")
@click.option(
    "--config",
    "-c",
    "config_path",
    type=click.Path(exists=True, dir_okay=False),
    help="Path to a YAML config file.",
)
@click.option("--debug", "-d", is_flag=True, help="Enable debug logging.")
@click.pass_context
def main(ctx: click.Context, config_path: str | None, debug: bool) -> None:
    """Unix User Exporter — Prometheus metrics for logged-in users."""
    ctx.ensure_object(dict)
    try:
        config = ExporterConfig.load(config_path)
    except ValueError as exc:
        raise click.ClickException(str(exc)) from exc
    if debug:
        config.debug = True
    ctx.obj["config"] = config

    level = logging.DEBUG if config.debug else logging.INFO
    logging.basicConfig(
        level=level,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%H:%M:%S",
    )


def _register_commands() -> None:
    from userexporter.cli.dump import dump  # noqa: F811
    from userexporter.cli.serve import serve  # noqa: F811
    from userexporter.cli.show import show  # noqa: F811

    main.add_command(serve)
    main.add_command(show)
    main.add_command(dump)


_register_commands()
