"""Prepare an installation disk by removing LVM, RAID and signature metadata."""

from __future__ import annotations

from dataclasses import dataclass
import json
from typing import Tuple

from . import lvm, raid, wipe
from .config import CleanupConfig, load_config
from .environment import CleanupEnvironment, resolve_device
from .errors import DiskCleanupError, RequestMalformed
from .logging_utils import log_event

__all__ = [
    "FAILURE_EXIT_CODE",
    "CleanupRequest",
    "CleanupResponse",
    "parse_request",
    "cleanup_install_device",
    "cleanup_device",
]

FAILURE_EXIT_CODE = -1


@dataclass(frozen=True)
class CleanupRequest:
    """Ask for the metadata on ``path`` to be destroyed."""

    path: str


@dataclass(frozen=True)
class CleanupResponse:
    """Outcome reported back to the caller."""

    successful: bool
    path: str

    def to_json(self) -> str:
        return json.dumps({"successful": self.successful, "path": self.path}, sort_keys=True)


def parse_request(text: str) -> CleanupRequest:
    """Decode a JSON cleanup request of the form ``{"path": "/dev/sda"}``."""

    try:
        data = json.loads(text)
    except json.JSONDecodeError as exc:
        raise RequestMalformed(f"Failed to unmarshal DiskCleanupRequest: {exc}") from exc
    if not isinstance(data, dict):
        raise RequestMalformed(
            "Failed to unmarshal DiskCleanupRequest: expected a JSON object"
        )
    path = data.get("path")
    if not isinstance(path, str) or not path.strip():
        raise RequestMalformed("Missing path in DiskCleanupRequest")
    return CleanupRequest(path=path.strip())


def _clean_raid_member(env: CleanupEnvironment, device: str) -> None:
    # Member disks may carry LVM state of their own; it has to go before the
    # superblocks do.
    topology = raid.get_raid_topology(env, device=device)
    for array_name in raid.get_associated_arrays(env, device, topology=topology):
        lvm.clean_lvm(env, array_name)
        for member in topology.get(array_name, ()):
            lvm.clean_lvm(env, member)
    raid.clean_raid_membership(env, device)


def cleanup_install_device(
    device: str,
    *,
    config: CleanupConfig | None = None,
    env: CleanupEnvironment | None = None,
) -> None:
    """Remove every trace of LVM, RAID and filesystem metadata from *device*.

    The steps run strictly in order and the first failure raises a
    :class:`~disk_cleanup.errors.DiskCleanupError`; work already done is not
    rolled back. In dry-run mode nothing at all is executed.
    """

    config = config or load_config()
    if config.dry_run:
        log_event("disk_cleanup.cleanup.dry_run", device=device)
        return

    env = env or CleanupEnvironment()
    log_event("disk_cleanup.cleanup.start", device=device)
    try:
        resolved = resolve_device(env, device)
        lvm.clean_lvm(env, resolved)
        if raid.is_raid_member(env, resolved):
            log_event("disk_cleanup.raid.member", device=resolved)
            _clean_raid_member(env, resolved)
        wipe.wipe_signatures(env, resolved)
    except DiskCleanupError as exc:
        log_event("disk_cleanup.cleanup.failed", device=device, error=str(exc))
        raise
    log_event("disk_cleanup.cleanup.finished", device=device, resolved=resolved)


def cleanup_device(
    request_text: str,
    *,
    config: CleanupConfig | None = None,
    env: CleanupEnvironment | None = None,
) -> Tuple[str, str, int]:
    """Handle a serialised cleanup request.

    Returns ``(stdout, stderr, exit_code)``: the JSON response, a
    human-readable error and ``0`` or :data:`FAILURE_EXIT_CODE`.
    """

    try:
        request = parse_request(request_text)
    except RequestMalformed as exc:
        log_event("disk_cleanup.request.malformed", error=str(exc))
        return "", str(exc), FAILURE_EXIT_CODE

    try:
        cleanup_install_device(request.path, config=config, env=env)
    except DiskCleanupError as exc:
        message = f"Failed to run disk cleanup on device {request.path}: {exc}"
        response = CleanupResponse(successful=False, path=request.path)
        return response.to_json(), message, FAILURE_EXIT_CODE

    return CleanupResponse(successful=True, path=request.path).to_json(), "", 0
