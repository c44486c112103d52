"""SessionSource protocol — every collection source must satisfy this."""

from __future__ import annotations

from datetime import datetime
from typing import Protocol, runtime_checkable

from userexporter.sessions.models import AggregateSnapshot


@runtime_checkable
class SessionSource(Protocol):
    """Protocol for sources of logged-in user sessions."""

    name: str

    def read(self, reference_time: datetime) -> AggregateSnapshot:
        """Return a fresh snapshot, or raise SourceUnavailable."""
        ...
