"""Installation disk cleanup package."""

from __future__ import annotations

from importlib.metadata import PackageNotFoundError, version as pkg_version

__all__ = ["cleanup", "config", "environment", "errors", "lvm", "raid", "wipe"]


def _discover_version() -> str:
    try:
        return pkg_version("disk-cleanup")
    except PackageNotFoundError:
        return "unknown"


__version__ = _discover_version()
