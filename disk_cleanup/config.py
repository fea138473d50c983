"""Runtime configuration for disk-cleanup."""

from __future__ import annotations

from dataclasses import dataclass

from .logging_utils import env_flag

DRY_RUN_ENV = "DISK_CLEANUP_DRY_RUN"


@dataclass(frozen=True)
class CleanupConfig:
    """Settings that change how a cleanup request is carried out."""

    dry_run: bool = False


def load_config(*, dry_run: bool | None = None) -> CleanupConfig:
    """Return the effective configuration.

    An explicit *dry_run* (from the command line) takes precedence over the
    ``DISK_CLEANUP_DRY_RUN`` environment variable.
    """

    if dry_run is None:
        dry_run = env_flag(DRY_RUN_ENV)
    return CleanupConfig(dry_run=dry_run)
