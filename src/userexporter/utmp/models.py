"""utmp data models — entry kinds and decoded login records."""

from __future__ import annotations

import enum
from dataclasses import dataclass
from datetime import datetime


class EntryKind(enum.IntEnum):
    """Value of the ``ut_type`` field."""

    EMPTY = 0
    RUN_LVL = 1
    BOOT_TIME = 2
    NEW_TIME = 3
    OLD_TIME = 4
    INIT_PROCESS = 5
    LOGIN_PROCESS = 6
    USER_PROCESS = 7
    DEAD_PROCESS = 8
    ACCOUNTING = 9

    @property
    def is_login(self) -> bool:
        return self in LOGIN_KINDS


LOGIN_KINDS = frozenset({EntryKind.USER_PROCESS, EntryKind.DEAD_PROCESS})


@dataclass(frozen=True)
class LoginRecord:
    """One decoded utmp entry."""

    kind: EntryKind
    pid: int
    line: str
    user: str
    host: str
    login_time: datetime
