from __future__ import annotations

import os
from pathlib import Path
from typing import Any, Mapping

import yaml
from dotenv import load_dotenv

from .errors import ConfigError


load_dotenv(override=False)

DEFAULT_PROFILES_FILE = "profiles.yaml"


def _project_root() -> Path:
    env = os.getenv("TICKETFLOW_ROOT")
    if env:
        return Path(env)
    # In source layout, this file is under <root>/ticketflow/core
    return Path(__file__).resolve().parents[2]


def _config_dir() -> Path:
    return _project_root() / "ticketflow" / "config"


def _work_dir() -> Path:
    env = os.getenv("TICKETFLOW_WORK_DIR")
    if env:
        return Path(env)
    return _project_root() / "ticketflow" / "work"


def resolve_config_path(path: str | Path) -> Path:
    p = Path(path)
    if p.is_absolute():
        return p
    # Support paths with or without leading 'ticketflow/'
    parts = p.parts
    if parts and parts[0] == "ticketflow":
        return _project_root() / p
    return _config_dir() / p


def expand_env(value: Any) -> Any:
    """Expand ``$VAR``/``${VAR}`` placeholders, failing on unset variables."""

    if isinstance(value, str):
        expanded = os.path.expandvars(value)
        if "${" in value and "}" in value and expanded == value:
            raise ConfigError(f"Environment variable not set for value: {value}")
        return expanded
    return value


def read_env(key: str) -> str | None:
    value = os.getenv(key)
    if value is None:
        return None
    return value.strip()


def read_env_int(key: str) -> int | None:
    value = read_env(key)
    if value is None or value == "":
        return None
    try:
        return int(value)
    except ValueError as exc:  # noqa: BLE001 - configuration validation
        raise ConfigError(f"Environment variable {key} must be an integer") from exc


def read_env_float(key: str) -> float | None:
    value = read_env(key)
    if value is None or value == "":
        return None
    try:
        return float(value)
    except ValueError as exc:  # noqa: BLE001 - configuration validation
        raise ConfigError(f"Environment variable {key} must be a number") from exc


def load_profile_section(section: str, *, path: str | Path | None = None) -> dict[str, Mapping[str, Any]]:
    """Return the named profiles defined under ``section`` in profiles.yaml."""

    cfg_path = resolve_config_path(path or DEFAULT_PROFILES_FILE)
    if not cfg_path.exists():
        raise ConfigError(f"profiles.yaml not found at {cfg_path}")
    with cfg_path.open("r", encoding="utf-8") as handle:
        data = yaml.safe_load(handle) or {}
    if not isinstance(data, Mapping):
        raise ConfigError("profiles.yaml must contain a mapping")
    raw_section = data.get(section)
    if not isinstance(raw_section, Mapping):
        raise ConfigError(f"profiles.yaml missing '{section}' section")
    profiles: dict[str, Mapping[str, Any]] = {}
    for key, value in raw_section.items():
        if not isinstance(value, Mapping):
            continue
        profiles[str(key)] = value
    if not profiles:
        raise ConfigError(f"No {section} profiles defined in profiles.yaml")
    return profiles


def load_profile(section: str, name: str, *, path: str | Path | None = None) -> Mapping[str, Any]:
    """Return a single profile mapping, raising ``ConfigError`` if absent."""

    raw = load_profile_section(section, path=path).get(name)
    if raw is None:
        raise ConfigError(f"{section} profile '{name}' not found in profiles.yaml")
    return raw


def ensure_mapping(value: Any) -> Mapping[str, Any] | None:
    if isinstance(value, Mapping):
        return value
    return None


__all__ = [
    "DEFAULT_PROFILES_FILE",
    "resolve_config_path",
    "expand_env",
    "read_env",
    "read_env_int",
    "read_env_float",
    "load_profile_section",
    "load_profile",
    "ensure_mapping",
]
