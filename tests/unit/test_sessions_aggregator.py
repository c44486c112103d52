"""Tests for the session aggregator."""

from __future__ import annotations

from datetime import datetime, timedelta, timezone

import pytest

from userexporter.sessions.aggregator import (
    aggregate,
    format_login_time,
    is_active,
    summarize,
)
from userexporter.sessions.models import AggregateSnapshot, SessionFact
from userexporter.utmp.models import EntryKind, LoginRecord
from userexporter.utmp.scanner import scan


def _record(
    kind: EntryKind = EntryKind.USER_PROCESS,
    user: str = "alice",
    host: str = "",
    line: str = "pts/0",
    login_time: datetime | None = None,
) -> LoginRecord:
    return LoginRecord(
        kind=kind,
        pid=1000,
        line=line,
        user=user,
        host=host,
        login_time=login_time or datetime(2026, 10, 16, 9, 30, tzinfo=timezone.utc),
    )


def test_two_user_scenario(make_record, reference_time):
    buffer = make_record(user="alice", line="pts/0", host="10.0.0.5") + make_record(
        user="bob", line="pts/1", host=""
    )

    snapshot = aggregate(scan(buffer), reference_time)

    assert snapshot.total_sessions == 2
    assert snapshot.per_user_count == {"alice": 1, "bob": 1}
    assert snapshot.per_origin_count == {"10.0.0.5": 1}
    assert SessionFact("bob", "-", "pts/1", "2026-10-16 12:00") in snapshot.sessions
    assert SessionFact("alice", "10.0.0.5", "pts/0", "2026-10-16 12:00") in snapshot.sessions
    assert snapshot.source == "utmp"
    assert snapshot.collected_at == reference_time


@pytest.mark.parametrize(
    "kind",
    [k for k in EntryKind if k not in (EntryKind.USER_PROCESS, EntryKind.DEAD_PROCESS)],
)
def test_structural_kinds_are_ignored(kind: EntryKind, reference_time):
    snapshot = aggregate([_record(kind=kind), _record(user="bob")], reference_time)
    assert snapshot.total_sessions == 1
    assert snapshot.per_user_count == {"bob": 1}


def test_empty_user_is_ignored(reference_time):
    snapshot = aggregate([_record(user="")], reference_time)
    assert snapshot.total_sessions == 0
    assert snapshot.sessions == frozenset()


@pytest.mark.parametrize(
    ("age", "included"),
    [
        (timedelta(minutes=59), True),
        (timedelta(hours=1), True),
        (timedelta(hours=1, seconds=1), False),
        (timedelta(days=3), False),
        (-timedelta(minutes=5), True),
    ],
)
def test_dead_process_recency(age: timedelta, included: bool, reference_time):
    record = _record(kind=EntryKind.DEAD_PROCESS, login_time=reference_time - age)
    snapshot = aggregate([record], reference_time)
    assert snapshot.total_sessions == (1 if included else 0)
    assert is_active(record, reference_time) is included


def test_user_process_has_no_recency_limit(reference_time):
    record = _record(login_time=reference_time - timedelta(days=30))
    assert aggregate([record], reference_time).total_sessions == 1


@pytest.mark.parametrize("host", ["", ":0", ":0.0", "console"])
def test_local_origins_not_counted_by_origin(host: str, reference_time):
    snapshot = aggregate([_record(host=host)], reference_time)
    assert snapshot.total_sessions == 1
    assert snapshot.per_user_count == {"alice": 1}
    assert snapshot.per_origin_count == {}


def test_local_origin_kept_in_session_fact(reference_time):
    snapshot = aggregate([_record(host=":0", line="tty7")], reference_time)
    (fact,) = snapshot.sessions
    assert fact.origin == ":0"
    assert fact.terminal == "tty7"


def test_same_user_on_two_terminals_counts_twice(reference_time):
    records = [
        _record(line="pts/0", host="10.0.0.5"),
        _record(line="pts/1", host="10.0.0.5"),
    ]
    snapshot = aggregate(records, reference_time)
    assert snapshot.total_sessions == 2
    assert snapshot.per_user_count == {"alice": 2}
    assert snapshot.per_origin_count == {"10.0.0.5": 2}
    assert len(snapshot.sessions) == 2


def test_identical_sessions_collapse_in_set_but_count(reference_time):
    snapshot = aggregate([_record(), _record()], reference_time)
    assert snapshot.total_sessions == 2
    assert len(snapshot.sessions) == 1


def test_aggregate_is_idempotent(reference_time):
    records = [
        _record(user="alice", host="10.0.0.5"),
        _record(user="bob", line="pts/3"),
        _record(kind=EntryKind.DEAD_PROCESS, user="carol"),
        _record(kind=EntryKind.BOOT_TIME, user="reboot"),
    ]
    assert aggregate(records, reference_time) == aggregate(records, reference_time)


def test_new_snapshot_does_not_carry_old_sessions(reference_time):
    first = aggregate([_record(user="alice"), _record(user="bob")], reference_time)
    second = aggregate([_record(user="bob")], reference_time)
    assert "alice" in first.per_user_count
    assert "alice" not in second.per_user_count
    assert all(f.user == "bob" for f in second.sessions)


def test_aggregate_accepts_generator(reference_time):
    snapshot = aggregate((r for r in [_record()]), reference_time)
    assert snapshot.total_sessions == 1


def test_summarize_excludes_dash_origin(reference_time):
    facts = [
        SessionFact("alice", "-", "pts/0", "Oct 16"),
        SessionFact("bob", "192.168.1.4", "pts/1", "Oct 16"),
    ]
    snapshot = summarize(facts, reference_time, source="command")
    assert snapshot.total_sessions == 2
    assert snapshot.per_origin_count == {"192.168.1.4": 1}
    assert snapshot.source == "command"


def test_format_login_time_is_utc():
    cet = timezone(timedelta(hours=2))
    assert format_login_time(datetime(2026, 10, 16, 14, 5, tzinfo=cet)) == "2026-10-16 12:05"


def test_snapshot_to_dict_is_sorted(reference_time):
    snapshot = aggregate(
        [_record(user="zed", host="10.0.0.9"), _record(user="amy", host="10.0.0.1")],
        reference_time,
    )
    data = snapshot.to_dict()
    assert [s["user"] for s in data["sessions"]] == ["amy", "zed"]
    assert list(data["per_origin_count"]) == ["10.0.0.1", "10.0.0.9"]
    assert data["collected_at"] == reference_time.isoformat()


def test_empty_snapshot(reference_time):
    assert aggregate([], reference_time) == AggregateSnapshot(
        total_sessions=0,
        sessions=frozenset(),
        per_user_count={},
        per_origin_count={},
        collected_at=reference_time,
        source="utmp",
    )


def test_literal_dash_host_counts_as_origin(reference_time):
    snapshot = aggregate([_record(host="-"), _record(user="bob", host="")], reference_time)
    assert snapshot.per_origin_count == {"-": 1}
    assert snapshot.total_sessions == 2
