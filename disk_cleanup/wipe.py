"""Erase residual filesystem and partition-table signatures."""

from __future__ import annotations

from .environment import CleanupEnvironment, execute
from .errors import TeardownError
from .logging_utils import log_event


def wipe_signatures(env: CleanupEnvironment, device: str) -> None:
    """Run ``wipefs --all --force`` on *device*.

    Some ``wipefs`` builds reject ``--force``; a single retry without it is
    attempted before giving up with the retry's stderr.
    """

    result = execute(
        env, ["wipefs", "--all", "--force", device], action="wipe.force", device=device
    )
    if result.returncode != 0:
        result = execute(env, ["wipefs", "--all", device], action="wipe", device=device)
    if result.returncode != 0:
        raise TeardownError(result.stderr.strip() or f"wipefs failed on {device}")
    log_event("disk_cleanup.wipe.finished", device=device)
