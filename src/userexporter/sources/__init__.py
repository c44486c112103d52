"""Session sources and source selection."""

from __future__ import annotations

import logging
from collections.abc import Sequence
from datetime import datetime

from userexporter.config import SOURCE_NAMES, ExporterConfig
from userexporter.errors import SourceUnavailable
from userexporter.sessions.models import AggregateSnapshot
from userexporter.sources.base import SessionSource
from userexporter.sources.commands import CommandSource
from userexporter.sources.psutil_ import PsutilSource
from userexporter.sources.utmp_file import UtmpFileSource

logger = logging.getLogger(__name__)


class FallbackSource:
    """Tries each source in order; the first one that reads successfully wins."""

    name = "auto"

    def __init__(self, sources: Sequence[SessionSource]) -> None:
        self.sources = list(sources)

    def read(self, reference_time: datetime) -> AggregateSnapshot:
        errors: list[str] = []
        for source in self.sources:
            try:
                return source.read(reference_time)
            except SourceUnavailable as exc:
                logger.debug("Source '%s' unavailable: %s", source.name, exc)
                errors.append(f"{source.name}: {exc}")
        raise SourceUnavailable("; ".join(errors) or "no sources configured")


def build_source(config: ExporterConfig) -> SessionSource:
    """Return the source named by ``config.source``."""
    if config.source == "utmp":
        return UtmpFileSource(config.utmp_path)
    if config.source == "command":
        return CommandSource(config.utmp_path)
    if config.source == "psutil":
        return PsutilSource()
    if config.source == "auto":
        return FallbackSource(
            [
                UtmpFileSource(config.utmp_path),
                CommandSource(config.utmp_path),
                PsutilSource(),
            ]
        )
    raise ValueError(
        f"Unknown source {config.source!r}; expected one of {', '.join(SOURCE_NAMES)}"
    )


__all__ = [
    "CommandSource",
    "FallbackSource",
    "PsutilSource",
    "SessionSource",
    "UtmpFileSource",
    "SOURCE_NAMES",
    "build_source",
]
