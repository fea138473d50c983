"""External interactions used by the cleanup engine."""

from __future__ import annotations

from dataclasses import dataclass
import os
import shlex
import subprocess
from typing import Callable, Sequence

from .errors import ResolutionError
from .logging_utils import log_event

__all__ = [
    "COMMAND_NOT_FOUND",
    "CommandResult",
    "CleanupEnvironment",
    "command_to_str",
    "execute",
    "resolve_device",
]


COMMAND_NOT_FOUND = 127


@dataclass(frozen=True)
class CommandResult:
    """Captured output of a single external command."""

    stdout: str = ""
    stderr: str = ""
    returncode: int = 0


class CleanupEnvironment:
    """Encapsulate process execution and path resolution.

    Every component of the engine talks to the system exclusively through
    ``run`` and ``realpath`` so tests can substitute scripted behaviour.
    """

    def __init__(
        self,
        *,
        run: Callable[[Sequence[str]], CommandResult] | None = None,
        realpath: Callable[[str], str] | None = None,
    ) -> None:
        self.run = run or self._default_run
        self.realpath = realpath or self._default_realpath

    @staticmethod
    def _default_run(cmd: Sequence[str]) -> CommandResult:
        try:
            completed = subprocess.run(
                list(cmd),
                capture_output=True,
                text=True,
                check=False,
            )
        except OSError as exc:
            # Same status a shell reports for a program it cannot launch.
            return CommandResult(stderr=f"{cmd[0]}: {exc}", returncode=COMMAND_NOT_FOUND)
        return CommandResult(
            stdout=completed.stdout or "",
            stderr=completed.stderr or "",
            returncode=completed.returncode,
        )

    @staticmethod
    def _default_realpath(path: str) -> str:
        return os.path.realpath(path, strict=True)


def command_to_str(cmd: Sequence[str]) -> str:
    return " ".join(shlex.quote(part) for part in cmd)


def _output_fields(result: CommandResult) -> dict[str, str]:
    """Return a mapping of non-empty output streams for logging."""

    fields = {}
    stdout = result.stdout.strip()
    stderr = result.stderr.strip()
    if stdout:
        fields["stdout"] = stdout
    if stderr:
        fields["stderr"] = stderr
    return fields


def execute(
    env: CleanupEnvironment,
    cmd: Sequence[str],
    *,
    action: str,
    device: str,
) -> CommandResult:
    """Run *cmd* through *env* and log the invocation and its outcome.

    The result is returned whatever the exit status; callers decide whether
    a non-zero status is fatal.
    """

    cmd_str = command_to_str(cmd)
    log_event("disk_cleanup.command", action=action, device=device, command=cmd_str)
    result = env.run(cmd)
    if result.returncode != 0:
        log_event(
            "disk_cleanup.command.failed",
            action=action,
            device=device,
            command=cmd_str,
            returncode=result.returncode,
            **_output_fields(result),
        )
    return result


def resolve_device(env: CleanupEnvironment, path: str) -> str:
    """Return the canonical form of *path* with every symlink resolved."""

    try:
        resolved = env.realpath(path)
    except OSError as exc:
        raise ResolutionError(f"Failed to get real file path of {path}: {exc}") from exc
    if resolved != path:
        log_event("disk_cleanup.device.resolved", device=path, resolved=resolved)
    return resolved
