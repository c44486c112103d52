"""Shared test fixtures."""

from __future__ import annotations

from collections.abc import Callable
from datetime import datetime, timezone
from pathlib import Path

import pytest

from userexporter.utmp.layout import GLIBC_X86_64, FieldSpec, RecordLayout
from userexporter.utmp.models import EntryKind

REFERENCE_TIME = datetime(2026, 10, 16, 12, 0, tzinfo=timezone.utc)

RecordFactory = Callable[..., bytes]


def _put_int(buf: bytearray, spec: FieldSpec, value: int) -> None:
    buf[spec.offset : spec.end] = value.to_bytes(spec.width, "little", signed=True)


def _put_text(buf: bytearray, spec: FieldSpec, value: str) -> None:
    raw = value.encode("utf-8")[: spec.width]
    buf[spec.offset : spec.offset + len(raw)] = raw


def pack_record(
    kind: int = EntryKind.USER_PROCESS,
    pid: int = 1234,
    line: str = "pts/0",
    user: str = "alice",
    host: str = "",
    login_time: datetime = REFERENCE_TIME,
    microseconds: int = 0,
    seconds: int | None = None,
    layout: RecordLayout = GLIBC_X86_64,
) -> bytes:
    """Encode one utmp record the way glibc writes it."""
    buf = bytearray(layout.size)
    _put_int(buf, layout.kind, int(kind))
    _put_int(buf, layout.pid, pid)
    _put_text(buf, layout.line, line)
    _put_text(buf, layout.user, user)
    _put_text(buf, layout.host, host)
    if seconds is None:
        seconds = int(login_time.timestamp())
    _put_int(buf, layout.tv_sec, seconds)
    _put_int(buf, layout.tv_usec, microseconds)
    return bytes(buf)


@pytest.fixture
def make_record() -> RecordFactory:
    return pack_record


@pytest.fixture
def reference_time() -> datetime:
    return REFERENCE_TIME


@pytest.fixture
def utmp_file(tmp_path: Path) -> Path:
    """A utmp file with one remote and one local login plus a boot entry."""
    path = tmp_path / "utmp"
    path.write_bytes(
        pack_record(kind=EntryKind.BOOT_TIME, pid=0, line="~", user="reboot")
        + pack_record(user="alice", line="pts/0", host="10.0.0.5")
        + pack_record(user="bob", line="pts/1", host="")
    )
    return path


@pytest.fixture(autouse=True)
def _isolated_environment(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    """Keep the user's config file and USEREXPORTER_* vars out of tests."""
    monkeypatch.setenv("XDG_CONFIG_HOME", str(tmp_path / "xdg-config"))
    for name in (
        "USEREXPORTER_UTMP_PATH",
        "USEREXPORTER_LISTEN_ADDRESS",
        "USEREXPORTER_TELEMETRY_PATH",
        "USEREXPORTER_SOURCE",
        "USEREXPORTER_DEBUG",
    ):
        monkeypatch.delenv(name, raising=False)
