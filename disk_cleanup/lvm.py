"""Discover and remove LVM volume groups and physical volumes on a device."""

from __future__ import annotations

from typing import Iterable, List

from .environment import CleanupEnvironment, execute
from .errors import QueryError, TeardownError
from .logging_utils import log_event

__all__ = [
    "get_volume_groups_by_disk",
    "get_disk_pvs",
    "remove_vg",
    "remove_pv",
    "remove_all_pvs_on_device",
    "clean_lvm",
]


def _unique(names: Iterable[str]) -> List[str]:
    return list(dict.fromkeys(names))


def get_volume_groups_by_disk(env: CleanupEnvironment, device: str) -> List[str]:
    """Return the VGs with a PV whose name contains *device*.

    Substring matching is intentional: querying ``/dev/sda`` must also catch
    VGs built on ``/dev/sda1``. It also catches PVs of a disk whose name
    merely extends *device*, such as ``/dev/sdab1``.
    """

    result = execute(
        env,
        ["vgs", "--noheadings", "-o", "vg_name,pv_name"],
        action="lvm.query_vgs",
        device=device,
    )
    if result.returncode != 0:
        raise QueryError(f"Failed to list VGs in the system: {result.stderr.strip()}")

    vgs = []
    for line in result.stdout.splitlines():
        fields = line.split()
        if len(fields) < 2:
            continue
        if device in fields[1]:
            vgs.append(fields[0])
    return _unique(vgs)


def get_disk_pvs(env: CleanupEnvironment, device: str) -> List[str]:
    """Return the PV names that contain *device*."""

    result = execute(
        env,
        ["pvs", "--noheadings", "-o", "pv_name"],
        action="lvm.query_pvs",
        device=device,
    )
    if result.returncode != 0:
        raise QueryError(f"Failed to list PVs in the system: {result.stderr.strip()}")

    pvs = []
    for line in result.stdout.splitlines():
        name = line.strip()
        if name and device in name:
            pvs.append(name)
    return _unique(pvs)


def remove_vg(env: CleanupEnvironment, vg_name: str, *, device: str) -> None:
    result = execute(env, ["vgremove", vg_name, "-y"], action="lvm.remove_vg", device=device)
    if result.returncode != 0:
        raise TeardownError(
            f"Failed to remove VG {vg_name}, output {result.stdout.strip()}, "
            f"error {result.stderr.strip()}"
        )
    log_event("disk_cleanup.lvm.vg_removed", device=device, vg_name=vg_name)


def remove_pv(env: CleanupEnvironment, pv_name: str, *, device: str) -> None:
    result = execute(
        env, ["pvremove", pv_name, "-y", "-ff"], action="lvm.remove_pv", device=device
    )
    if result.returncode != 0:
        raise TeardownError(
            f"Failed to remove PV {pv_name}, output {result.stdout.strip()}, "
            f"error {result.stderr.strip()}"
        )
    log_event("disk_cleanup.lvm.pv_removed", device=device, pv_name=pv_name)


def remove_all_pvs_on_device(env: CleanupEnvironment, device: str) -> None:
    for pv_name in get_disk_pvs(env, device):
        try:
            remove_pv(env, pv_name, device=device)
        except TeardownError as exc:
            raise TeardownError(
                f"Failed to remove pv {pv_name} from disk {device}: {exc}"
            ) from exc


def clean_lvm(env: CleanupEnvironment, device: str) -> None:
    """Remove every VG and then every PV found on *device*.

    The first failing removal aborts the teardown; names after it are left
    untouched.
    """

    for vg_name in get_volume_groups_by_disk(env, device):
        try:
            remove_vg(env, vg_name, device=device)
        except TeardownError as exc:
            raise TeardownError(
                f"Could not delete volume group ({vg_name}) due to error: {exc}"
            ) from exc

    remove_all_pvs_on_device(env, device)
