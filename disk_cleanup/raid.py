"""Discover and dismantle software RAID (mdadm) membership of a device."""

from __future__ import annotations

import re
from typing import Dict, List, Tuple

from .environment import CleanupEnvironment, execute, resolve_device
from .errors import DiskCleanupError, QueryError, ResolutionError, TeardownError
from .logging_utils import log_event

__all__ = [
    "RaidTopology",
    "member_pattern",
    "parse_raid_scan",
    "get_raid_topology",
    "is_raid_member",
    "get_associated_arrays",
    "clean_raid_membership",
]


RaidTopology = Dict[str, Tuple[str, ...]]

_SCAN_COMMAND = ("mdadm", "-v", "--query", "--detail", "--scan")
_ARRAY_HEADER = "ARRAY"
_MEMBERS_PREFIX = "devices="


def member_pattern(device: str) -> re.Pattern[str]:
    """Return a pattern matching *device* or one of its numbered partitions.

    The pattern is searched, not anchored, so it also hits any member path that
    merely starts with *device*: ``/dev/sda`` matches ``/dev/sdab1`` on another
    disk as well as ``/dev/nvme0n1`` matching ``/dev/nvme0n1p2``.
    """

    return re.compile(re.escape(device) + r"\d*")


def parse_raid_scan(env: CleanupEnvironment, output: str) -> RaidTopology:
    """Parse ``mdadm -v --detail --scan`` output into array -> members.

    The output is a sequence of two-line records::

        ARRAY /dev/md0 level=raid1 num-devices=2 metadata=1.2 name=0 UUID=...
           devices=/dev/vda2,/dev/vda3

    Array names are resolved to their canonical path. A header that cannot be
    resolved or is not followed by a ``devices=`` line invalidates the whole
    listing.
    """

    lines = output.splitlines()
    topology: RaidTopology = {}
    index = 0
    while index < len(lines):
        fields = lines[index].split()
        index += 1
        if not fields or fields[0] != _ARRAY_HEADER:
            continue
        if len(fields) < 2:
            raise QueryError(f"RAID array header without device name: {lines[index - 1]!r}")
        try:
            array_name = resolve_device(env, fields[1])
        except ResolutionError as exc:
            raise QueryError(f"Failed to get real file path of RAID device: {exc}") from exc

        if index >= len(lines):
            raise QueryError(f"RAID array {array_name} is missing its member list")
        members_line = lines[index].strip()
        if not members_line.startswith(_MEMBERS_PREFIX):
            raise QueryError(f"RAID array {array_name} is missing its member list")
        index += 1

        members = members_line[len(_MEMBERS_PREFIX):].split(",")
        topology[array_name] = tuple(member.strip() for member in members if member.strip())
    return topology


def get_raid_topology(env: CleanupEnvironment, *, device: str = "") -> RaidTopology:
    """Query every RAID array on the system and return its members."""

    result = execute(env, _SCAN_COMMAND, action="raid.query", device=device)
    if result.returncode != 0:
        raise QueryError(f"Error listing raid devices: {result.stderr.strip()}")
    return parse_raid_scan(env, result.stdout)


def _arrays_containing(topology: RaidTopology, device: str) -> List[str]:
    pattern = member_pattern(device)
    return [
        array_name
        for array_name, members in topology.items()
        if any(pattern.search(member) for member in members)
    ]


def is_raid_member(env: CleanupEnvironment, device: str) -> bool:
    """Return ``True`` when *device* or one of its partitions is in an array.

    A failing topology query counts as "not a member" so the cleanup falls
    back to a plain signature wipe.
    """

    try:
        topology = get_raid_topology(env, device=device)
    except DiskCleanupError as exc:
        log_event("disk_cleanup.raid.query_failed", device=device, error=str(exc))
        return False

    return bool(_arrays_containing(topology, device))


def get_associated_arrays(
    env: CleanupEnvironment,
    device: str,
    *,
    topology: RaidTopology | None = None,
) -> List[str]:
    """Return the arrays that *device* or one of its partitions belongs to.

    A *topology* already read by the caller is reused instead of scanning again.
    """

    if topology is None:
        topology = get_raid_topology(env, device=device)
    return _arrays_containing(topology, device)


def _remove_from_array(
    env: CleanupEnvironment,
    device: str,
    array_name: str,
    members: Tuple[str, ...],
) -> None:
    pattern = member_pattern(device)
    stopped = False
    for member in members:
        if not pattern.search(member):
            continue
        if not stopped:
            result = execute(
                env, ["mdadm", "--stop", array_name], action="raid.stop", device=device
            )
            if result.returncode != 0:
                raise TeardownError(
                    f"Error stopping raid device {array_name}: {result.stderr.strip()}"
                )
            log_event("disk_cleanup.raid.stopped", device=device, array=array_name)
            stopped = True

        result = execute(
            env,
            ["mdadm", "--zero-superblock", member],
            action="raid.zero_superblock",
            device=device,
        )
        if result.returncode != 0:
            raise TeardownError(
                f"Error cleaning raid member {member} superblock: {result.stderr.strip()}"
            )
        log_event(
            "disk_cleanup.raid.superblock_zeroed",
            device=device,
            array=array_name,
            member=member,
        )


def clean_raid_membership(env: CleanupEnvironment, device: str) -> None:
    """Stop each array containing *device* and zero its matching superblocks."""

    for array_name, members in get_raid_topology(env, device=device).items():
        _remove_from_array(env, device, array_name, members)
