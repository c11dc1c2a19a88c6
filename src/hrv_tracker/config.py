"""Configuration loader handling YAML settings with environment overrides."""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Optional

import yaml

SETTINGS_PATH = Path("config/settings.yaml")
ENV_PREFIX = "HRV_"


@dataclass
class Settings:
    raw: Dict[str, Any] = field(default_factory=dict)

    def get(self, *keys: str, default: Any = None) -> Any:
        cursor: Any = self.raw
        for key in keys:
            if isinstance(cursor, dict) and key in cursor:
                cursor = cursor[key]
            else:
                return default
        return cursor

    @property
    def storage_dir(self) -> Path:
        return Path(self.get("storage", "dir", default="data/store"))

    @property
    def telemetry_dir(self) -> Path:
        return Path(self.get("telemetry", "output_dir", default="analysis_output"))

    @property
    def charts_output_dir(self) -> Path:
        return Path(self.get("charts", "output_dir", default="analysis_output/charts"))

    @property
    def trend_threshold_pct(self) -> float:
        return float(self.get("statistics", "trend_threshold_pct", default=5.0))

    @property
    def rolling_window_days(self) -> int:
        return int(self.get("statistics", "rolling_window_days", default=7))

    @property
    def profile(self) -> Optional[Dict[str, Any]]:
        profile = self.get("profile", default=None)
        if not isinstance(profile, dict) or "age" not in profile or "gender" not in profile:
            return None
        return profile


def _read_yaml(path: Path) -> Dict[str, Any]:
    if not path.exists():
        return {}
    with path.open("r", encoding="utf-8") as handle:
        return yaml.safe_load(handle) or {}


def _apply_env_overrides(settings: Dict[str, Any]) -> Dict[str, Any]:
    overrides: Dict[str, Any] = {}
    for key, value in os.environ.items():
        if not key.startswith(ENV_PREFIX):
            continue
        path = key[len(ENV_PREFIX) :].lower().split("__")
        cursor = overrides
        for segment in path[:-1]:
            cursor = cursor.setdefault(segment, {})
        cursor[path[-1]] = value

    def merge(base: Dict[str, Any], patch: Dict[str, Any]) -> Dict[str, Any]:
        for key, value in patch.items():
            if isinstance(value, dict):
                existing = base.get(key)
                base[key] = merge(existing if isinstance(existing, dict) else {}, value)
            else:
                base[key] = _coerce(value)
        return base

    return merge(settings, overrides)


def _coerce(value: str) -> Any:
    lowered = value.lower()
    if lowered in {"true", "false"}:
        return lowered == "true"
    try:
        return int(value)
    except ValueError:
        pass
    try:
        return float(value)
    except ValueError:
        pass
    return value


def load_settings(path: Path | None = None) -> Settings:
    settings_path = path or SETTINGS_PATH
    raw = _read_yaml(settings_path)
    raw = _apply_env_overrides(raw)
    return Settings(raw=raw)
