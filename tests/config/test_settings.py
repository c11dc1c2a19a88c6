from __future__ import annotations

from pathlib import Path

from hrv_tracker.config import load_settings


def test_load_settings_reads_yaml(tmp_path: Path) -> None:
    config_dir = tmp_path / "config"
    config_dir.mkdir()
    settings_path = config_dir / "settings.yaml"
    settings_path.write_text(
        """
storage:
  dir: custom_store
statistics:
  trend_threshold_pct: 7.5
profile:
  age: 41
  gender: female
  target_percentile: 75
        """
    )
    settings = load_settings(settings_path)
    assert settings.storage_dir == Path("custom_store")
    assert settings.trend_threshold_pct == 7.5
    assert settings.rolling_window_days == 7
    assert settings.profile == {"age": 41, "gender": "female", "target_percentile": 75}


def test_defaults_without_file(tmp_path: Path) -> None:
    settings = load_settings(tmp_path / "missing.yaml")
    assert settings.storage_dir == Path("data/store")
    assert settings.trend_threshold_pct == 5.0
    assert settings.profile is None


def test_env_override(tmp_path: Path, monkeypatch) -> None:
    monkeypatch.setenv("HRV_STORAGE__DIR", "env_store")
    monkeypatch.setenv("HRV_STATISTICS__ROLLING_WINDOW_DAYS", "14")
    settings = load_settings(tmp_path / "missing.yaml")
    assert settings.storage_dir == Path("env_store")
    assert settings.rolling_window_days == 14
