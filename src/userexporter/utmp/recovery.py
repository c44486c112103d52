"""Salvage user and host for DEAD_PROCESS entries with a blank user field.

Some writers leave ``ut_user`` empty on DEAD_PROCESS entries, or shift it
by a few bytes. The strategies below look for the lost values in the raw
window. Each one returns a string or None and is tried in order; the first
strategy that resolves a field wins and later strategies for the same field
are skipped.

These are heuristics. A probe can match unrelated bytes (``root`` inside
some other string, for instance) and an empty result is a valid outcome.
"""

from __future__ import annotations

import logging
from collections.abc import Callable

from userexporter.utmp.layout import RecordLayout

logger = logging.getLogger(__name__)

Strategy = Callable[[bytes, RecordLayout], "str | None"]

_USERNAME_PROBE_WIDTH = 8
_USERNAME_PROBE_SPAN = 56  # past the start of ut_user
_USERNAME_MAX = 32

_HOST_PROBE_WIDTH = 16
_HOST_PROBE_OVERRUN = 16  # past the end of the record
_HOST_MIN = 7

COMMON_USERNAMES: tuple[str, ...] = (
    "root",
    "admin",
    "ubuntu",
    "ec2-user",
    "centos",
    "debian",
)


def _token_at(window: bytes, start: int, limit: int) -> bytes:
    """Bytes from ``start`` up to the next NUL, at most ``limit`` long."""
    chunk = bytes(window[start : start + limit])
    return chunk.split(b"\x00", 1)[0]


def _is_printable(token: bytes) -> bool:
    return all(0x21 <= b <= 0x7E for b in token)


def is_plausible_username(token: bytes) -> bool:
    return 0 < len(token) < _USERNAME_MAX and _is_printable(token)


def probe_username(window: bytes, layout: RecordLayout) -> str | None:
    """First plausible NUL-delimited token near the user field."""
    start = layout.user.offset
    stop = min(start + _USERNAME_PROBE_SPAN, len(window))
    for offset in range(start, stop):
        probe = window[offset : offset + _USERNAME_PROBE_WIDTH]
        if not probe or probe[0] == 0:
            continue
        # only consider the start of a token, not its tail
        if offset > start and window[offset - 1] != 0:
            continue
        token = _token_at(window, offset, _USERNAME_MAX + 1)
        if is_plausible_username(token):
            return token.decode("ascii")
    return None


def probe_host(window: bytes, layout: RecordLayout) -> str | None:
    """First address-looking token (contains ``.`` or ``:``) past ut_host."""
    stop = min(layout.size + _HOST_PROBE_OVERRUN, len(window))
    for offset in range(layout.host.offset, stop, layout.stride):
        probe = bytes(window[offset : offset + _HOST_PROBE_WIDTH])
        lead = len(probe) - len(probe.lstrip(b"\x00"))
        if lead == len(probe):
            continue
        token = _token_at(window, offset + lead, layout.host.width)
        if len(token) < _HOST_MIN or not _is_printable(token):
            continue
        if b"." in token or b":" in token:
            return token.decode("ascii")
    return None


def search_common_usernames(window: bytes, layout: RecordLayout) -> str | None:
    """Last resort: any well-known account name anywhere in the window."""
    haystack = bytes(window[: layout.size])
    for name in COMMON_USERNAMES:
        if name.encode("ascii") in haystack:
            return name
    return None


RECOVERY_CHAIN: tuple[tuple[str, Strategy], ...] = (
    ("user", probe_username),
    ("host", probe_host),
    ("user", search_common_usernames),
)


def recover_fields(
    window: bytes,
    layout: RecordLayout,
    user: str = "",
    host: str = "",
) -> tuple[str, str]:
    """Run the recovery chain and return the (possibly still empty) user and host."""
    fields = {"user": user, "host": host}
    for name, strategy in RECOVERY_CHAIN:
        if fields[name]:
            continue
        value = strategy(window, layout)
        if value:
            logger.debug("Recovered %s=%r via %s", name, value, strategy.__name__)
            fields[name] = value
    return fields["user"], fields["host"]
