"""Fallback source using psutil.users()."""

from __future__ import annotations

import logging
from datetime import datetime, timezone

import psutil

from userexporter.errors import SourceUnavailable
from userexporter.sessions.aggregator import aggregate
from userexporter.sessions.models import AggregateSnapshot
from userexporter.utmp.models import EntryKind, LoginRecord

logger = logging.getLogger(__name__)


class PsutilSource:
    """Asks psutil for the logged-in users and aggregates them like utmp records."""

    name = "psutil"

    def records(self) -> list[LoginRecord]:
        try:
            users = psutil.users()
        except (OSError, psutil.Error) as exc:
            raise SourceUnavailable(f"psutil.users() failed: {exc}") from exc

        records: list[LoginRecord] = []
        for entry in users:
            records.append(
                LoginRecord(
                    kind=EntryKind.USER_PROCESS,
                    pid=getattr(entry, "pid", None) or 0,
                    line=entry.terminal or "",
                    user=entry.name,
                    host=entry.host or "",
                    login_time=datetime.fromtimestamp(entry.started, tz=timezone.utc),
                )
            )
        return records

    def read(self, reference_time: datetime) -> AggregateSnapshot:
        return aggregate(self.records(), reference_time, source=self.name)
