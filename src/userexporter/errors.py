"""Exception hierarchy for collection failures."""

from __future__ import annotations


class UserExporterError(Exception):
    """Base class for userexporter errors."""


class SourceUnavailable(UserExporterError):
    """A session source could not be read this cycle."""


class UnparsableRecord(UserExporterError, ValueError):
    """A candidate byte window is not a valid utmp record."""
