"""Primary source: decode the binary utmp file directly."""

from __future__ import annotations

import logging
from collections.abc import Iterator
from datetime import datetime
from pathlib import Path

from userexporter.errors import SourceUnavailable
from userexporter.sessions.aggregator import aggregate
from userexporter.sessions.models import AggregateSnapshot
from userexporter.utmp.layout import DEFAULT_LAYOUT, RecordLayout
from userexporter.utmp.models import LoginRecord
from userexporter.utmp.scanner import scan

logger = logging.getLogger(__name__)

# utmp only holds current sessions; anything larger is not a utmp file
MAX_READ_BYTES = 16 * 1024 * 1024


class UtmpFileSource:
    """Reads the utmp file once per cycle and aggregates its records."""

    name = "utmp"

    def __init__(
        self,
        path: str | Path,
        layout: RecordLayout = DEFAULT_LAYOUT,
    ) -> None:
        self.path = Path(path)
        self.layout = layout

    def read_buffer(self) -> bytes:
        try:
            with self.path.open("rb") as fh:
                data = fh.read(MAX_READ_BYTES)
        except FileNotFoundError as exc:
            raise SourceUnavailable(f"utmp file {self.path} does not exist") from exc
        except OSError as exc:
            raise SourceUnavailable(f"cannot read utmp file {self.path}: {exc}") from exc

        if len(data) % self.layout.size:
            logger.debug(
                "%s is %d bytes, not a multiple of %d — scanning for shifted records",
                self.path,
                len(data),
                self.layout.size,
            )
        return data

    def records(self, now: datetime | None = None) -> Iterator[LoginRecord]:
        """Yield every decodable record in the file, any kind."""
        return scan(self.read_buffer(), self.layout, now=now)

    def read(self, reference_time: datetime) -> AggregateSnapshot:
        return aggregate(
            self.records(now=reference_time), reference_time, source=self.name
        )
