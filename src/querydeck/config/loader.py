"""Config loader for querydeck settings.

Search order: ./querydeck.toml -> ./config.toml -> platform config
Uses stdlib tomllib (Python 3.11+).
"""

from __future__ import annotations

import os
import platform
import tomllib
from collections.abc import Mapping
from pathlib import Path
from typing import Any

from querydeck.config.settings import Settings


def get_platform_config_path() -> Path:
    """Return the platform-specific config.toml path."""
    system = platform.system().lower()
    if system == "darwin":
        return Path.home() / "Library" / "Application Support" / "querydeck" / "config.toml"
    if system == "windows":
        appdata = os.environ.get("APPDATA")
        if appdata:
            return Path(appdata) / "querydeck" / "config.toml"
        return Path.home() / "AppData" / "Roaming" / "querydeck" / "config.toml"

    xdg_config = os.environ.get("XDG_CONFIG_HOME")
    if xdg_config:
        return Path(xdg_config) / "querydeck" / "config.toml"
    return Path.home() / ".config" / "querydeck" / "config.toml"


def get_config_search_paths() -> list[Path]:
    """Return config search paths in priority order."""
    return [
        Path("./querydeck.toml"),
        Path("./config.toml"),
        get_platform_config_path(),
    ]


def _find_config_file() -> Path | None:
    for path in get_config_search_paths():
        if path.exists():
            return path
    return None


def _parse_toml(path: Path) -> dict[str, Any]:
    with path.open("rb") as f:
        return tomllib.load(f)


def resolve_config_path(config_path: Path | None = None) -> Path:
    """Resolve the config path used for display or creation."""
    if config_path:
        return config_path
    return _find_config_file() or get_platform_config_path()


def merge_cli_overrides(settings: Settings, overrides: Mapping[str, Any]) -> Settings:
    """Apply CLI overrides to loaded settings. ``None`` values are ignored."""
    connection_update = {
        key: str(overrides[key])
        for key in ("project_id", "instance_id", "database_id")
        if overrides.get(key) is not None
    }
    if connection_update:
        settings.connection = settings.connection.model_copy(update=connection_update)

    if overrides.get("multiline_layout") is not None:
        settings.formatting.multiline_layout = bool(overrides["multiline_layout"])

    if overrides.get("confirm_before_execute") is not None:
        settings.execution.confirm_before_execute = bool(overrides["confirm_before_execute"])

    return settings


def load_settings(
    config_path: Path | None = None, *, cli_overrides: Mapping[str, Any] | None = None
) -> Settings:
    """Load application settings from a TOML file.

    Args:
        config_path: Explicit path to config file. If None, searches default locations.
        cli_overrides: Optional CLI overrides to apply after loading.

    Returns:
        Settings with loaded or default values.

    Raises:
        FileNotFoundError: If an explicit config_path is provided but does not exist.
        RuntimeError: If the config file cannot be parsed.
    """
    if config_path:
        if not config_path.exists():
            raise FileNotFoundError(
                f"Configuration file not found at explicitly provided path: {config_path}. "
                "Ensure the file exists or omit the argument to use default search paths."
            )
        path: Path | None = config_path
    else:
        path = _find_config_file()

    if path is None:
        settings = Settings()
    else:
        try:
            data = _parse_toml(path)
        except Exception as e:
            raise RuntimeError(f"Failed to parse configuration file at {path}: {e}") from e

        settings_data: dict[str, Any] = {}
        for section in ("formatting", "execution", "connection", "gateway"):
            if section in data:
                settings_data[section] = dict(data[section])
        if "cors_allow_origins" in data:
            settings_data["cors_allow_origins"] = data["cors_allow_origins"]

        settings = Settings(**settings_data)

    if cli_overrides:
        settings = merge_cli_overrides(settings, cli_overrides)
    return settings
