"""Decode one fixed-size utmp record from a raw byte window."""

from __future__ import annotations

import logging
from datetime import datetime, timedelta, timezone

from userexporter.errors import UnparsableRecord
from userexporter.utmp.layout import DEFAULT_LAYOUT, FieldSpec, RecordLayout
from userexporter.utmp.models import EntryKind, LoginRecord
from userexporter.utmp.recovery import recover_fields

logger = logging.getLogger(__name__)

_INT32_MAX = 2**31 - 1
_KIND_MIN = min(EntryKind)
_KIND_MAX = max(EntryKind)


def _read_int(window: bytes, spec: FieldSpec, layout: RecordLayout) -> int:
    return int.from_bytes(spec.slice(window), layout.byteorder, signed=True)


def _read_text(window: bytes, spec: FieldSpec) -> str:
    # C string: ends at the first NUL
    raw = spec.slice(window).split(b"\x00", 1)[0]
    return raw.decode("utf-8", errors="replace")


def peek_kind(
    buffer: bytes, offset: int = 0, layout: RecordLayout = DEFAULT_LAYOUT
) -> EntryKind | None:
    """Return the entry kind stored at ``offset``, or None if it is not one."""
    start = offset + layout.kind.offset
    raw = buffer[start : start + layout.kind.width]
    if len(raw) < layout.kind.width:
        return None
    value = int.from_bytes(raw, layout.byteorder, signed=True)
    if value < _KIND_MIN or value > _KIND_MAX:
        return None
    return EntryKind(value)


def decode_timestamp(
    seconds: int, microseconds: int, now: datetime | None = None
) -> datetime:
    """Build a UTC login time, falling back to ``now`` for impossible values."""
    if seconds <= 0 or seconds > _INT32_MAX:
        return now or datetime.now(timezone.utc)
    if not 0 <= microseconds < 1_000_000:
        microseconds = 0
    return datetime.fromtimestamp(seconds, tz=timezone.utc) + timedelta(
        microseconds=microseconds
    )


def decode(
    window: bytes,
    layout: RecordLayout = DEFAULT_LAYOUT,
    now: datetime | None = None,
) -> LoginRecord:
    """Decode a single record.

    Raises UnparsableRecord if the window is shorter than one record or the
    kind field is not a known entry kind. DEAD_PROCESS entries with a blank
    user go through the recovery chain in :mod:`userexporter.utmp.recovery`.
    """
    if len(window) < layout.size:
        raise UnparsableRecord(
            f"window of {len(window)} bytes is shorter than a {layout.size}-byte record"
        )

    kind = peek_kind(window, 0, layout)
    if kind is None:
        raise UnparsableRecord(
            f"kind value {_read_int(window, layout.kind, layout)} is out of range"
        )

    pid = _read_int(window, layout.pid, layout)
    line = _read_text(window, layout.line)
    user = _read_text(window, layout.user)
    host = _read_text(window, layout.host)
    login_time = decode_timestamp(
        _read_int(window, layout.tv_sec, layout),
        _read_int(window, layout.tv_usec, layout),
        now=now,
    )

    if kind is EntryKind.DEAD_PROCESS and not user:
        user, host = recover_fields(window, layout, user=user, host=host)

    logger.debug(
        "Decoded %s pid=%d line=%r user=%r host=%r time=%s",
        kind.name,
        pid,
        line,
        user,
        host,
        login_time.isoformat(),
    )

    return LoginRecord(
        kind=kind,
        pid=pid,
        line=line,
        user=user,
        host=host,
        login_time=login_time,
    )
