"""Snapshot collector — runs one collection pass per interval and publishes it."""

from __future__ import annotations

import logging
import threading
from collections.abc import Callable
from datetime import datetime, timezone

from userexporter.config import COLLECTION_INTERVAL
from userexporter.errors import SourceUnavailable
from userexporter.sessions.models import AggregateSnapshot
from userexporter.sources.base import SessionSource

logger = logging.getLogger(__name__)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class SnapshotCollector:
    """Owns the current snapshot and refreshes it from a session source.

    Publishing is a single reference assignment, so readers on other
    threads always see either the previous or the new snapshot in full.
    A failed cycle leaves the previous snapshot in place.
    """

    def __init__(
        self,
        source: SessionSource,
        interval: float = COLLECTION_INTERVAL,
        clock: Callable[[], datetime] = _utcnow,
    ) -> None:
        self._source = source
        self._interval = interval
        self._clock = clock
        self._snapshot: AggregateSnapshot | None = None
        self._stop_event = threading.Event()
        self._thread: threading.Thread | None = None
        self._failures = 0

    @property
    def snapshot(self) -> AggregateSnapshot | None:
        """The last fully published snapshot, or None before the first success."""
        return self._snapshot

    @property
    def source(self) -> SessionSource:
        return self._source

    @property
    def consecutive_failures(self) -> int:
        return self._failures

    @property
    def is_running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    def collect_once(self) -> AggregateSnapshot | None:
        """Run one read→scan→aggregate pass and publish the result.

        Returns the new snapshot, or None if the source was unavailable.
        """
        try:
            snapshot = self._source.read(self._clock())
        except SourceUnavailable as exc:
            self._failures += 1
            logger.warning("Skipping collection cycle: %s", exc)
            return None

        self._failures = 0
        self._snapshot = snapshot
        logger.debug(
            "Published snapshot: %d session(s) from %s",
            snapshot.total_sessions,
            snapshot.source,
        )
        return snapshot

    def run_forever(self) -> None:
        """Blocking collect→wait loop until stop()."""
        while not self._stop_event.is_set():
            try:
                self.collect_once()
            except Exception:
                logger.exception("Unexpected error during collection cycle")
            self._stop_event.wait(timeout=self._interval)

    def start(self) -> None:
        """Run the loop on a daemon thread."""
        if self.is_running:
            return
        self._stop_event.clear()
        self._thread = threading.Thread(
            target=self.run_forever, name="userexporter-collector", daemon=True
        )
        self._thread.start()
        logger.info(
            "Collecting from '%s' every %.0fs", self._source.name, self._interval
        )

    def stop(self, timeout: float | None = 5.0) -> None:
        """Signal the loop to stop and wait for the thread."""
        self._stop_event.set()
        if self._thread is not None:
            self._thread.join(timeout=timeout)
            self._thread = None
