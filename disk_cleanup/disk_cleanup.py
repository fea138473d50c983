"""CLI entry point for disk-cleanup."""

from __future__ import annotations

import argparse
import sys
from typing import Optional, Sequence

from . import cleanup, config


def _read_request(value: str) -> str:
    if value == "-":
        return sys.stdin.read()
    return value


def main(argv: Optional[Sequence[str]] = None) -> int:
    """Run a single disk cleanup request and return the process exit status."""

    parser = argparse.ArgumentParser(
        description="Remove LVM, RAID and filesystem metadata from an installation disk"
    )
    parser.add_argument(
        "request",
        help='JSON cleanup request, e.g. \'{"path": "/dev/sda"}\'; "-" reads stdin',
    )
    parser.add_argument(
        "--dry-run",
        action="store_true",
        default=None,
        help="Report success without running any command",
    )
    args = parser.parse_args(argv)

    settings = config.load_config(dry_run=args.dry_run)
    stdout, stderr, exit_code = cleanup.cleanup_device(
        _read_request(args.request), config=settings
    )
    if stdout:
        sys.stdout.write(stdout)
        sys.stdout.flush()
    if stderr:
        sys.stderr.write(stderr)
        sys.stderr.flush()
    return exit_code


if __name__ == "__main__":  # pragma: no cover
    raise SystemExit(main())
