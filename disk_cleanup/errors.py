"""Exceptions raised by the cleanup engine."""

from __future__ import annotations

__all__ = [
    "DiskCleanupError",
    "RequestMalformed",
    "ResolutionError",
    "QueryError",
    "TeardownError",
]


class DiskCleanupError(RuntimeError):
    """Base class for every failure reported by disk-cleanup."""


class RequestMalformed(DiskCleanupError, ValueError):
    """The cleanup request is not valid JSON or lacks the device path."""


class ResolutionError(DiskCleanupError):
    """A device path could not be resolved to its canonical form."""


class QueryError(DiskCleanupError):
    """A listing command (``vgs``, ``pvs``, ``mdadm --detail``) failed."""


class TeardownError(DiskCleanupError):
    """A mutating command (remove, stop, zero, wipe) failed."""
