"""Record-layout descriptors for the binary utmp store.

A layout names the byte range of every field in one fixed-size record.
The decoder never hardcodes offsets; alternate layouts are added here as
additional descriptors.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import NamedTuple


class FieldSpec(NamedTuple):
    offset: int
    width: int

    @property
    def end(self) -> int:
        return self.offset + self.width

    def slice(self, window: bytes) -> bytes:
        return bytes(window[self.offset : self.end])


@dataclass(frozen=True)
class RecordLayout:
    """Byte layout of one utmp record."""

    name: str
    size: int
    kind: FieldSpec
    pid: FieldSpec
    line: FieldSpec
    id: FieldSpec
    user: FieldSpec
    host: FieldSpec
    exit: FieldSpec
    session: FieldSpec
    tv_sec: FieldSpec
    tv_usec: FieldSpec
    addr_v6: FieldSpec
    byteorder: str = "little"
    stride: int = 4

    def is_boundary(self, offset: int) -> bool:
        return offset % self.size == 0

    def next_boundary(self, offset: int) -> int:
        """First record boundary strictly after ``offset``."""
        return (offset // self.size + 1) * self.size


# glibc on x86_64 (and other LP64 targets with __WORDSIZE_COMPAT32):
#   short ut_type (padded to 4), pid_t ut_pid, char ut_line[32], char ut_id[4],
#   char ut_user[32], char ut_host[256], struct exit_status ut_exit,
#   int32 ut_session, struct { int32 tv_sec, tv_usec } ut_tv,
#   int32 ut_addr_v6[4], char __unused[20]
GLIBC_X86_64 = RecordLayout(
    name="glibc-x86_64",
    size=384,
    kind=FieldSpec(0, 4),
    pid=FieldSpec(4, 4),
    line=FieldSpec(8, 32),
    id=FieldSpec(40, 4),
    user=FieldSpec(44, 32),
    host=FieldSpec(76, 256),
    exit=FieldSpec(332, 4),
    session=FieldSpec(336, 4),
    tv_sec=FieldSpec(340, 4),
    tv_usec=FieldSpec(344, 4),
    addr_v6=FieldSpec(348, 16),
)

DEFAULT_LAYOUT = GLIBC_X86_64
