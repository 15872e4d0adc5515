"""Configuration loader for the Notion record store."""

from __future__ import annotations

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

DEFAULT_BASE_URL = "https://api.notion.com/v1"
DEFAULT_NOTION_VERSION = "2022-06-28"
DEFAULT_TIMEOUT = 10.0

API_KEY_ENV = "NOTION_API_KEY"
VERSION_ENV = "NOTION_VERSION"
TIMEOUT_ENV = "NOTION_TIMEOUT_SEC"
RETRY_ATTEMPTS_ENV = "NOTION_RETRY_ATTEMPTS"

DEFAULT_PROPERTIES = {
    "status": "Status",
    "request_type": "Request Type",
    "due_date": "Due Date",
    "title": "Ticket ID",
}


@dataclass(slots=True)
class TicketProperties:
    """Names of the database properties that make up a ticket."""

    status: str = DEFAULT_PROPERTIES["status"]
    request_type: str = DEFAULT_PROPERTIES["request_type"]
    due_date: str = DEFAULT_PROPERTIES["due_date"]
    title: str = DEFAULT_PROPERTIES["title"]

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any] | None) -> "TicketProperties":
        if not data:
            return cls()
        return cls(**{key: str(data.get(key, default)) for key, default in DEFAULT_PROPERTIES.items()})


@dataclass(slots=True)
class NotionConfig:
    """Resolved configuration for Notion operations."""

    api_key: str
    notion_version: str = DEFAULT_NOTION_VERSION
    base_url: str = DEFAULT_BASE_URL
    timeout_sec: float = DEFAULT_TIMEOUT
    retries: RetryConfig = field(default_factory=RetryConfig)
    properties: TicketProperties = field(default_factory=TicketProperties)
    link_fields: frozenset[str] = frozenset()

    @classmethod
    def from_profile(cls, profile_name: str, *, config_path: str | Path | None = None) -> "NotionConfig":
        """Create a configuration instance from the ``notion`` section of profiles.yaml."""

        return cls.from_mapping(load_profile("notion", profile_name, path=config_path))

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> "NotionConfig":
        api_key = expand_env(data.get("api_key"))
        if not api_key or not str(api_key).strip():
            raise ConfigError("Missing required Notion config value: api_key")
        return cls(
            api_key=str(api_key).strip(),
            notion_version=str(data.get("notion_version", DEFAULT_NOTION_VERSION)),
            base_url=expand_env(data.get("base_url", DEFAULT_BASE_URL)),
            timeout_sec=float(data.get("timeout_sec", DEFAULT_TIMEOUT)),
            retries=RetryConfig.from_mapping(ensure_mapping(data.get("retries"))),
            properties=TicketProperties.from_mapping(ensure_mapping(data.get("properties"))),
            link_fields=frozenset(str(item) for item in data.get("link_fields") or ()),
        )


def resolve_config(profile: str | None = None) -> NotionConfig:
    """Resolve configuration from a profile or environment variables with overrides."""

    if profile:
        base = NotionConfig.from_profile(profile)
    else:
        api_key = read_env(API_KEY_ENV)
        if not api_key:
            raise ConfigError(f"{API_KEY_ENV} is not set")
        base = NotionConfig(api_key=api_key)
    timeout = read_env_float(TIMEOUT_ENV)
    attempts = read_env_int(RETRY_ATTEMPTS_ENV)
    return NotionConfig(
        api_key=read_env(API_KEY_ENV) or base.api_key,
        notion_version=read_env(VERSION_ENV) or base.notion_version,
        base_url=base.base_url,
        timeout_sec=timeout if timeout is not None else base.timeout_sec,
        retries=RetryConfig(
            max_attempts=attempts or base.retries.max_attempts,
            backoff_ms=base.retries.backoff_ms,
            max_backoff_ms=base.retries.max_backoff_ms,
        ),
        properties=base.properties,
        link_fields=base.link_fields,
    )


__all__ = [
    "NotionConfig",
    "TicketProperties",
    "API_KEY_ENV",
    "VERSION_ENV",
    "TIMEOUT_ENV",
    "RETRY_ATTEMPTS_ENV",
    "resolve_config",
]
