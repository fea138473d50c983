"""JSON event log for disk-cleanup.

Each event is one JSON object per line carrying ``timestamp`` (UTC, ISO-8601)
and ``event``. Events go to ``stderr`` and are appended to an action log so a
finished cleanup can be audited after the container is gone. Nothing is
emitted unless ``DISK_CLEANUP_LOG_EVENTS`` is set.
"""

from __future__ import annotations

import dataclasses
import datetime as _dt
import json
import os
import sys
from pathlib import Path
from typing import Any, Mapping

_DEFAULT_LOG_FILE = Path("/var/log/disk-cleanup/actions.log")

_EVENTS_ENV = "DISK_CLEANUP_LOG_EVENTS"
_LOG_FILE_ENV = "DISK_CLEANUP_LOG_FILE"
_FALSE_VALUES = {"", "0", "false", "no"}


def env_flag(name: str) -> bool:
    """Return ``True`` when environment variable *name* holds a truthy value."""

    value = os.environ.get(name)
    return value is not None and value.strip().lower() not in _FALSE_VALUES


def _to_json(value: Any) -> Any:
    """``json.dumps`` fallback for values the encoder does not know."""

    if isinstance(value, Path):
        return str(value)
    if dataclasses.is_dataclass(value) and not isinstance(value, type):
        return dataclasses.asdict(value)
    if isinstance(value, Mapping):
        return {str(key): item for key, item in value.items()}
    if isinstance(value, (set, frozenset)):
        return sorted(value, key=str)
    return repr(value)


def _log_file_path() -> Path:
    configured = os.environ.get(_LOG_FILE_ENV, "").strip()
    return Path(configured) if configured else _DEFAULT_LOG_FILE


def _write_line(stream, line: str) -> None:
    stream.write(line + "\n")
    stream.flush()


def log_event(event: str, **fields: Any) -> None:
    """Record *event* with *fields* when event logging is enabled."""

    if not env_flag(_EVENTS_ENV):
        return

    record: dict[str, Any] = {str(key): value for key, value in fields.items()}
    record["event"] = event
    record["timestamp"] = _dt.datetime.now(_dt.timezone.utc).isoformat()
    line = json.dumps(record, sort_keys=True, default=_to_json)

    _write_line(sys.stderr, line)

    log_file = _log_file_path()
    try:
        log_file.parent.mkdir(parents=True, exist_ok=True)
        with log_file.open("a", encoding="utf-8") as handle:
            _write_line(handle, line)
    except OSError as exc:
        _write_line(sys.stderr, f"disk-cleanup: failed to write log to {log_file}: {exc}")
