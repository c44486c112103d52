"""Walk a raw utmp buffer and yield every record that decodes.

Records are expected on ``layout.size`` boundaries, but a truncated or
partially rewritten file can leave login entries shifted. The scanner
therefore moves in small strides and also tries off-boundary offsets whose
kind field looks like a login (USER_PROCESS or DEAD_PROCESS).
"""

from __future__ import annotations

import logging
from collections.abc import Iterator
from datetime import datetime

from userexporter.errors import UnparsableRecord
from userexporter.utmp.decoder import decode, peek_kind
from userexporter.utmp.layout import DEFAULT_LAYOUT, RecordLayout
from userexporter.utmp.models import LOGIN_KINDS, EntryKind, LoginRecord

logger = logging.getLogger(__name__)


def scan(
    buffer: bytes,
    layout: RecordLayout = DEFAULT_LAYOUT,
    now: datetime | None = None,
) -> Iterator[LoginRecord]:
    """Yield decoded records in ascending offset order.

    Unparsable windows are skipped silently. Off-boundary offsets that fall
    inside a record already decoded are not tried, so a pid or tv_usec of 7
    or 8 never turns into a second login. After a successful decode at an
    off-boundary offset the cursor jumps to the next boundary.
    """
    view = memoryview(buffer)
    last_start = len(view) - layout.size
    offset = 0
    # end of the last decoded non-EMPTY record
    covered_until = 0

    while offset <= last_start:
        kind = peek_kind(view, offset, layout)
        if kind is None:
            offset += layout.stride
            continue

        on_boundary = layout.is_boundary(offset)
        if not on_boundary and (kind not in LOGIN_KINDS or offset < covered_until):
            offset += layout.stride
            continue

        try:
            record = decode(view[offset : offset + layout.size], layout, now=now)
        except UnparsableRecord:
            offset += layout.stride
            continue

        if record.kind is not EntryKind.EMPTY and offset >= covered_until:
            covered_until = offset + layout.size

        if not on_boundary:
            logger.debug(
                "Recovered misaligned %s record at offset %d", kind.name, offset
            )
        yield record

        if on_boundary:
            offset += layout.stride
        else:
            offset = layout.next_boundary(offset)
