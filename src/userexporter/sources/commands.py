"""Fallback source: parse the text output of ``last``, ``who`` or ``w``."""

from __future__ import annotations

import logging
import subprocess
from datetime import datetime
from pathlib import Path

from userexporter.errors import SourceUnavailable
from userexporter.sessions.aggregator import NO_ORIGIN, summarize
from userexporter.sessions.models import AggregateSnapshot, SessionFact

logger = logging.getLogger(__name__)

STILL_LOGGED_IN = "still logged in"
_WTMP_BANNER = "wtmp begins"
_MIN_FIELDS = 5


def parse_session_lines(output: str) -> list[SessionFact]:
    """Extract sessions from ``last``-style output.

    Only lines marked "still logged in" are sessions. Fields after
    whitespace splitting: user, terminal, origin, then two login-time words.
    """
    facts: list[SessionFact] = []
    for line in output.splitlines():
        if not line or _WTMP_BANNER in line or STILL_LOGGED_IN not in line:
            continue

        fields = line.split()
        if len(fields) < _MIN_FIELDS:
            continue

        facts.append(
            SessionFact(
                user=fields[0],
                terminal=fields[1],
                origin=fields[2] or NO_ORIGIN,
                login_time=" ".join(fields[3:5]),
            )
        )
    return facts


class CommandSource:
    """Runs ``last -f <utmp> -R``, then ``who``, then ``w -h``."""

    name = "command"

    def __init__(self, utmp_path: str | Path, timeout: float = 5.0) -> None:
        self.utmp_path = Path(utmp_path)
        self.timeout = timeout

    def _run(self, argv: list[str]) -> str | None:
        try:
            result = subprocess.run(
                argv,
                capture_output=True,
                text=True,
                timeout=self.timeout,
            )
        except (subprocess.TimeoutExpired, FileNotFoundError, OSError) as exc:
            logger.debug("Error executing '%s': %s", " ".join(argv), exc)
            return None

        if result.returncode != 0:
            logger.debug(
                "'%s' exited with code %d: %s",
                " ".join(argv),
                result.returncode,
                result.stderr.strip(),
            )
            return None

        logger.debug("'%s' output: %s", " ".join(argv), result.stdout)
        return result.stdout

    def fetch_output(self) -> str:
        """Return the first usable command output, or raise SourceUnavailable."""
        if not self.utmp_path.exists():
            raise SourceUnavailable(f"utmp file {self.utmp_path} does not exist")

        output = self._run(["last", "-f", str(self.utmp_path), "-R"])
        ok = output is not None

        if not ok or STILL_LOGGED_IN not in output:
            who = self._run(["who"])
            ok = who is not None
            if ok:
                output = who

        if not ok or not output:
            output = self._run(["w", "-h"])
            if output is None:
                raise SourceUnavailable("last, who and w all failed")

        return output

    def read(self, reference_time: datetime) -> AggregateSnapshot:
        facts = parse_session_lines(self.fetch_output())
        return summarize(facts, reference_time, source=self.name)
