"""Thin Notion pages API client."""

from __future__ import annotations

import logging
from typing import Any, Mapping, Protocol

from ticketflow.core.errors import ServiceRequestError
from ticketflow.core.http import HttpClient, StaticTokenAuth
from ticketflow.core.logger import get_logger

from .config import NotionConfig

LOGGER = get_logger()


class RecordStore(Protocol):
    """Record operations the reader and writer rely on."""

    def retrieve(self, page_id: str) -> dict[str, Any]:
        """Return the raw page object including its ``properties`` bag."""

    def update(self, page_id: str, property_name: str, value: Mapping[str, Any]) -> None:
        """Replace a single property value on the page."""


class NotionClient(RecordStore):
    """Read and patch pages through the Notion REST API."""

    def __init__(
        self,
        config: NotionConfig,
        *,
        http_client: HttpClient | None = None,
        logger: logging.Logger | None = None,
    ) -> None:
        self._config = config
        self._logger = logger or LOGGER
        self._http = http_client or HttpClient(
            config.base_url,
            StaticTokenAuth(config.api_key),
            service="notion",
            retries=config.retries,
            timeout=config.timeout_sec,
            default_headers={"Notion-Version": config.notion_version},
            logger=self._logger,
        )

    @classmethod
    def from_profile(cls, profile_name: str) -> "NotionClient":
        return cls(NotionConfig.from_profile(profile_name))

    def retrieve(self, page_id: str) -> dict[str, Any]:
        response = self._http.request("GET", f"/pages/{page_id}")
        payload = response.json()
        if not isinstance(payload, dict):
            raise ServiceRequestError("Invalid page response", payload={"body": payload})
        return payload

    def update(self, page_id: str, property_name: str, value: Mapping[str, Any]) -> None:
        self._http.request(
            "PATCH",
            f"/pages/{page_id}",
            json_body={"properties": {property_name: dict(value)}},
        )
        self._logger.info("notion.client updated_property page=%s property=%s", page_id, property_name)

    def close(self) -> None:
        self._http.close()


__all__ = ["NotionClient", "RecordStore"]
