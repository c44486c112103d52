"""Session data models — per-session facts and the per-cycle snapshot."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime


@dataclass(frozen=True)
class SessionFact:
    """One logged-in session as exported in ``unix_user_session_info``."""

    user: str
    origin: str
    terminal: str
    login_time: str

    def to_dict(self) -> dict[str, str]:
        return {
            "user": self.user,
            "origin": self.origin,
            "terminal": self.terminal,
            "login_time": self.login_time,
        }


@dataclass(frozen=True)
class AggregateSnapshot:
    """Result of one collection cycle.

    A new snapshot replaces the previous one wholesale; nothing carries over
    between cycles.
    """

    total_sessions: int
    sessions: frozenset[SessionFact]
    per_user_count: dict[str, int] = field(default_factory=dict)
    per_origin_count: dict[str, int] = field(default_factory=dict)
    collected_at: datetime | None = None
    source: str = ""

    def to_dict(self) -> dict:
        return {
            "total_sessions": self.total_sessions,
            "sessions": [
                fact.to_dict()
                for fact in sorted(
                    self.sessions,
                    key=lambda f: (f.user, f.terminal, f.origin, f.login_time),
                )
            ],
            "per_user_count": dict(sorted(self.per_user_count.items())),
            "per_origin_count": dict(sorted(self.per_origin_count.items())),
            "collected_at": (
                self.collected_at.isoformat() if self.collected_at else None
            ),
            "source": self.source,
        }
