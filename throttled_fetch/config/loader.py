"""Configuration loading helpers for throttled-fetch."""

from __future__ import annotations

import json
import os
from dataclasses import dataclass
from pathlib import Path

import yaml

from .models import FetchSettings

CONFIG_EXTENSIONS = (".yaml", ".yml", ".json")
SETTINGS_FILENAME = "settings.yaml"
HOME_ENV_VAR = "THROTTLED_FETCH_HOME"


def _read_file(path: Path) -> dict:
    text = path.read_text(encoding="utf-8")
    if path.suffix in (".yaml", ".yml"):
        data = yaml.safe_load(text) or {}
    else:
        data = json.loads(text)
    if not isinstance(data, dict):
        raise ValueError(f"Configuration file must contain a mapping: {path}")
    return data


def _write_file(path: Path, payload: dict) -> None:
    with path.open("w", encoding="utf-8") as stream:
        if path.suffix in (".yaml", ".yml"):
            yaml.safe_dump(payload, stream, allow_unicode=True, sort_keys=False)
        else:
            json.dump(payload, stream, indent=2, ensure_ascii=False)


@dataclass(slots=True)
class ConfigLocator:
    """Resolve important paths from project root."""

    project_root: Path | None = None
    data_dir: Path | None = None
    logs_dir: Path | None = None

    def __post_init__(self) -> None:
        env_root = os.environ.get(HOME_ENV_VAR)
        if env_root:
            root = Path(env_root).expanduser().resolve()
        else:
            root = (self.project_root or Path.cwd()).resolve()
        self.project_root = root
        self.data_dir = (root / "data").resolve()
        self.logs_dir = (root / "logs").resolve()
        self.ensure_directories()

    def ensure_directories(self) -> None:
        for directory in (self.data_dir, self.logs_dir):
            directory.mkdir(parents=True, exist_ok=True)

    def settings_path(self) -> Path:
        return self.data_dir / SETTINGS_FILENAME


class ConfigRepository:
    """Repository encapsulating settings IO and schema validation."""

    def __init__(self, locator: ConfigLocator | None = None) -> None:
        self.locator = locator or ConfigLocator()
        self._cache: FetchSettings | None = None

    def settings_path(self) -> Path:
        return self.locator.settings_path()

    def load_settings(self, path: Path | None = None) -> FetchSettings:
        """Load settings, writing the defaults first when no file exists yet.

        An explicit ``path`` bypasses the cache and never creates a file.
        """
        if path is not None:
            if path.suffix not in CONFIG_EXTENSIONS:
                raise ValueError(f"Unsupported configuration format: {path.suffix}")
            if not path.exists():
                raise FileNotFoundError(f"Settings file not found: {path}")
            return FetchSettings.model_validate(_read_file(path))
        if self._cache is not None:
            return self._cache
        default_path = self.settings_path()
        if default_path.exists():
            settings = FetchSettings.model_validate(_read_file(default_path))
        else:
            settings = FetchSettings()
            self.save_settings(settings)
        self._cache = settings
        return settings

    def save_settings(self, settings: FetchSettings) -> Path:
        path = self.settings_path()
        _write_file(path, settings.model_dump(mode="json"))
        self._cache = settings
        return path


__all__ = ["CONFIG_EXTENSIONS", "ConfigLocator", "ConfigRepository", "HOME_ENV_VAR"]
