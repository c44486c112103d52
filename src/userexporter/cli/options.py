"""Options shared by several commands."""

from __future__ import annotations

from pathlib import Path

import click

from userexporter.config import SOURCE_NAMES, ExporterConfig

utmp_path_option = click.option(
    "--utmp-path",
    type=click.Path(dir_okay=False),
    default=None,
    help="Path to the utmp file (default: /var/run/utmp).",
)

source_option = click.option(
    "--source",
    type=click.Choice(SOURCE_NAMES),
    default=None,
    help="Where to read sessions from (default: utmp).",
)


def apply_overrides(
    config: ExporterConfig,
    utmp_path: str | None = None,
    source: str | None = None,
) -> ExporterConfig:
    """Layer command-line flags over the loaded config."""
    if utmp_path is not None:
        config.utmp_path = Path(utmp_path)
    if source is not None:
        config.set_source(source)
    return config
