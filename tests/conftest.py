from pathlib import Path
import sys

import pytest

# Ensure repository root is importable
sys.path.insert(0, str(Path(__file__).resolve().parents[1]))


@pytest.fixture(autouse=True)
def isolate_environment(monkeypatch: pytest.MonkeyPatch) -> None:
    for name in ("DISK_CLEANUP_LOG_EVENTS", "DISK_CLEANUP_LOG_FILE", "DISK_CLEANUP_DRY_RUN"):
        monkeypatch.delenv(name, raising=False)
