"""Scripted command environments shared by the test modules."""

from __future__ import annotations

from typing import Callable, Dict, List, Mapping, Sequence, Tuple

from disk_cleanup.environment import CleanupEnvironment, CommandResult

CommandMap = Dict[Tuple[str, ...], CommandResult]

VGS = ("vgs", "--noheadings", "-o", "vg_name,pv_name")
PVS = ("pvs", "--noheadings", "-o", "pv_name")
MDADM_SCAN = ("mdadm", "-v", "--query", "--detail", "--scan")

EMPTY_LVM: CommandMap = {
    VGS: CommandResult(),
    PVS: CommandResult(),
}


class ScriptedRunner:
    """Return canned results per command and record every invocation."""

    def __init__(self, commands: Mapping[Tuple[str, ...], CommandResult]) -> None:
        self.commands = dict(commands)
        self.calls: List[Tuple[str, ...]] = []

    def __call__(self, cmd: Sequence[str]) -> CommandResult:
        key = tuple(cmd)
        self.calls.append(key)
        if key not in self.commands:
            raise AssertionError(f"unexpected command invocation: {cmd}")
        return self.commands[key]


def make_env(
    commands: Mapping[Tuple[str, ...], CommandResult],
    *,
    realpath: Callable[[str], str] | None = None,
) -> Tuple[CleanupEnvironment, ScriptedRunner]:
    runner = ScriptedRunner(commands)
    env = CleanupEnvironment(run=runner, realpath=realpath or (lambda path: path))
    return env, runner


def realpath_from(mapping: Mapping[str, str]) -> Callable[[str], str]:
    """Resolve paths through *mapping*; unknown paths do not exist."""

    def resolve(path: str) -> str:
        if path not in mapping:
            raise FileNotFoundError(2, "No such file or directory", path)
        return mapping[path]

    return resolve


def raid_scan(*records: Tuple[str, Sequence[str]]) -> str:
    lines = []
    for index, (array, members) in enumerate(records):
        lines.append(
            f"ARRAY {array} level=raid1 num-devices={len(members)} metadata=1.2 "
            f"name={index} UUID=77e1b6f2:56530ebd:38bd6808:17fd01c{index}"
        )
        lines.append(f"   devices={','.join(members)}")
    return "\n".join(lines) + "\n"
