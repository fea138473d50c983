from disk_cleanup.config import CleanupConfig, load_config


def test_defaults_to_live_mode() -> None:
    assert load_config() == CleanupConfig(dry_run=False)


def test_environment_enables_dry_run(monkeypatch) -> None:
    monkeypatch.setenv("DISK_CLEANUP_DRY_RUN", "1")

    assert load_config().dry_run is True


def test_explicit_flag_wins_over_environment(monkeypatch) -> None:
    monkeypatch.setenv("DISK_CLEANUP_DRY_RUN", "1")

    assert load_config(dry_run=False).dry_run is False
