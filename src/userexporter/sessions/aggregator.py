"""Collapse decoded login records into per-cycle session counts."""

from __future__ import annotations

import logging
from collections import Counter
from collections.abc import Iterable
from datetime import datetime, timedelta, timezone

from userexporter.sessions.models import AggregateSnapshot, SessionFact
from userexporter.utmp.models import EntryKind, LoginRecord

logger = logging.getLogger(__name__)

# DEAD_PROCESS entries are reported only this long after the login time
DEAD_PROCESS_WINDOW = timedelta(hours=1)

NO_ORIGIN = "-"
LOCAL_ORIGINS = frozenset({"", ":0", ":0.0", "console"})

LOGIN_TIME_FORMAT = "%Y-%m-%d %H:%M"


def format_login_time(value: datetime) -> str:
    if value.tzinfo is not None:
        value = value.astimezone(timezone.utc)
    return value.strftime(LOGIN_TIME_FORMAT)


def is_active(record: LoginRecord, reference_time: datetime) -> bool:
    """Whether a record counts as a logged-in session at ``reference_time``."""
    if record.kind not in (EntryKind.USER_PROCESS, EntryKind.DEAD_PROCESS):
        return False
    if not record.user:
        return False
    if record.kind is EntryKind.DEAD_PROCESS:
        return reference_time - record.login_time <= DEAD_PROCESS_WINDOW
    return True


def _count(
    entries: Iterable[tuple[SessionFact, str]],
    reference_time: datetime,
    source: str,
) -> AggregateSnapshot:
    """Count (fact, raw host) pairs; local raw hosts are not counted by origin."""
    total = 0
    sessions: set[SessionFact] = set()
    per_user: Counter[str] = Counter()
    per_origin: Counter[str] = Counter()

    for fact, host in entries:
        total += 1
        sessions.add(fact)
        per_user[fact.user] += 1
        if host not in LOCAL_ORIGINS:
            per_origin[fact.origin] += 1

    return AggregateSnapshot(
        total_sessions=total,
        sessions=frozenset(sessions),
        per_user_count=dict(per_user),
        per_origin_count=dict(per_origin),
        collected_at=reference_time,
        source=source,
    )


def summarize(
    facts: Iterable[SessionFact],
    reference_time: datetime,
    source: str = "",
) -> AggregateSnapshot:
    """Count already-filtered sessions into a snapshot.

    Command output prints ``-`` for a missing host, so that origin is
    treated as local here.
    """
    entries = (
        (fact, "" if fact.origin == NO_ORIGIN else fact.origin) for fact in facts
    )
    return _count(entries, reference_time, source)


def aggregate(
    records: Iterable[LoginRecord],
    reference_time: datetime,
    source: str = "utmp",
) -> AggregateSnapshot:
    """Build a snapshot from decoded records.

    Only USER_PROCESS entries and recent DEAD_PROCESS entries with a
    non-empty user survive. Local origins (console, X display) still count
    as sessions but not towards ``per_origin_count``.
    """

    def _entries() -> Iterable[tuple[SessionFact, str]]:
        for record in records:
            if not is_active(record, reference_time):
                continue
            fact = SessionFact(
                user=record.user,
                origin=record.host or NO_ORIGIN,
                terminal=record.line,
                login_time=format_login_time(record.login_time),
            )
            yield fact, record.host

    snapshot = _count(_entries(), reference_time, source)
    logger.debug(
        "Aggregated %d session(s) for %d user(s) from %s",
        snapshot.total_sessions,
        len(snapshot.per_user_count),
        source,
    )
    return snapshot
