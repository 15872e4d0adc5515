"""Configuration loader for the Google Drive client."""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Mapping

from ticketflow.core.errors import ConfigError
from ticketflow.core.http import RetryConfig
from ticketflow.core.profiles import (
    ensure_mapping,
    expand_env,
    load_profile,
    read_env,
    read_env_float,
    read_env_int,
)

DEFAULT_BASE_URL = "https://www.googleapis.com/drive/v3"
DEFAULT_LINK_BASE = "https://drive.google.com/drive/folders/"
DEFAULT_TIMEOUT = 10.0
DRIVE_SCOPES = ("https://www.googleapis.com/auth/drive",)

CREDENTIALS_ENV = "GOOGLE_SERVICE_ACCOUNT_CREDS"
PARENT_FOLDER_ENV = "GOOGLE_DRIVE_PARENT_FOLDER_ID"
TIMEOUT_ENV = "GDRIVE_TIMEOUT_SEC"
RETRY_ATTEMPTS_ENV = "GDRIVE_RETRY_ATTEMPTS"
RETRY_BACKOFF_MS_ENV = "GDRIVE_RETRY_BACKOFF_MS"
RETRY_MAX_BACKOFF_MS_ENV = "GDRIVE_RETRY_MAX_BACKOFF_MS"


@dataclass(slots=True)
class GoogleDriveConfig:
    """Resolved configuration for Google Drive operations."""

    credentials: Mapping[str, Any]
    parent_folder_id: str
    timeout_sec: float = DEFAULT_TIMEOUT
    retries: RetryConfig = field(default_factory=RetryConfig)
    base_url: str = DEFAULT_BASE_URL
    link_base: str = DEFAULT_LINK_BASE
    scopes: tuple[str, ...] = DRIVE_SCOPES

    @classmethod
    def from_profile(cls, profile_name: str, *, config_path: str | Path | None = None) -> "GoogleDriveConfig":
        """Create a configuration instance from the ``gdrive`` section of profiles.yaml.

        Args:
            profile_name: Logical profile name under the ``gdrive`` section.
            config_path: Optional override for the config file path.

        Raises:
            ConfigError: If the profile cannot be loaded or is invalid.
        """

        return cls.from_mapping(load_profile("gdrive", profile_name, path=config_path))

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> "GoogleDriveConfig":
        """Create a configuration instance from a mapping."""

        def _require(key: str) -> Any:
            value = data.get(key)
            if value is None or (isinstance(value, str) and not value.strip()):
                raise ConfigError(f"Missing required Google Drive config value: {key}")
            return expand_env(value)

        scopes = data.get("scopes")
        return cls(
            credentials=load_service_account_info(_require("credentials")),
            parent_folder_id=str(_require("parent_folder_id")).strip(),
            timeout_sec=float(data.get("timeout_sec", DEFAULT_TIMEOUT)),
            retries=RetryConfig.from_mapping(ensure_mapping(data.get("retries"))),
            base_url=expand_env(data.get("base_url", DEFAULT_BASE_URL)),
            link_base=expand_env(data.get("link_base", DEFAULT_LINK_BASE)),
            scopes=tuple(scopes) if scopes else DRIVE_SCOPES,
        )


def load_service_account_info(value: Any) -> Mapping[str, Any]:
    """Accept inline JSON, a path to a key file, or an already parsed mapping."""

    if isinstance(value, Mapping):
        return dict(value)
    if not isinstance(value, str) or not value.strip():
        raise ConfigError("Google service account credentials not configured")
    text = value.strip()
    if not text.startswith("{"):
        key_path = Path(text).expanduser()
        if not key_path.exists():
            raise ConfigError(f"Google service account key file not found: {key_path}")
        text = key_path.read_text(encoding="utf-8")
    try:
        info = json.loads(text)
    except ValueError as exc:
        raise ConfigError("Google service account credentials are not valid JSON") from exc
    if not isinstance(info, dict):
        raise ConfigError("Google service account credentials must be a JSON object")
    return info


def load_retry_config(config: GoogleDriveConfig | None = None) -> RetryConfig:
    """Return retry configuration applying environment overrides."""

    base = config.retries if config else RetryConfig()
    attempts = read_env_int(RETRY_ATTEMPTS_ENV)
    backoff = read_env_int(RETRY_BACKOFF_MS_ENV)
    max_backoff = read_env_int(RETRY_MAX_BACKOFF_MS_ENV)
    return RetryConfig(
        max_attempts=attempts or base.max_attempts,
        backoff_ms=backoff or base.backoff_ms,
        max_backoff_ms=max_backoff or base.max_backoff_ms,
    )


def resolve_config(profile: str | None = None) -> GoogleDriveConfig:
    """Resolve configuration from a profile or environment variables with overrides."""

    if profile:
        base = GoogleDriveConfig.from_profile(profile)
        credentials = read_env(CREDENTIALS_ENV)
        parent = read_env(PARENT_FOLDER_ENV) or base.parent_folder_id
        info = load_service_account_info(credentials) if credentials else base.credentials
    else:
        credentials = read_env(CREDENTIALS_ENV)
        parent = read_env(PARENT_FOLDER_ENV)
        if not credentials:
            raise ConfigError(f"{CREDENTIALS_ENV} is not set")
        if not parent:
            raise ConfigError(f"{PARENT_FOLDER_ENV} is not set")
        info = load_service_account_info(credentials)
        base = GoogleDriveConfig(credentials=info, parent_folder_id=parent)
    timeout = read_env_float(TIMEOUT_ENV)
    return GoogleDriveConfig(
        credentials=info,
        parent_folder_id=parent,
        timeout_sec=timeout if timeout is not None else base.timeout_sec,
        retries=load_retry_config(base),
        base_url=base.base_url,
        link_base=base.link_base,
        scopes=base.scopes,
    )


__all__ = [
    "GoogleDriveConfig",
    "CREDENTIALS_ENV",
    "PARENT_FOLDER_ENV",
    "TIMEOUT_ENV",
    "RETRY_ATTEMPTS_ENV",
    "RETRY_BACKOFF_MS_ENV",
    "RETRY_MAX_BACKOFF_MS_ENV",
    "DRIVE_SCOPES",
    "load_service_account_info",
    "load_retry_config",
    "resolve_config",
]
