"""Primary client implementation for Google Drive folders."""

from __future__ import annotations

import logging
from typing import Any, Protocol

from ticketflow.core.errors import ServiceRequestError
from ticketflow.core.http import HttpClient, TokenProvider
from ticketflow.core.logger import get_logger

from .config import GoogleDriveConfig, load_retry_config
from .paths import FOLDER_MIME_TYPE, build_folder_query, normalize_item_name

LOGGER = get_logger()

SHARED_DRIVE_PARAMS = {"supportsAllDrives": "true"}
PAGE_SIZE = 100


class StorageBackend(Protocol):
    """Folder capabilities the provisioner needs from a storage service."""

    def search(
        self,
        parent_id: str,
        *,
        name: str | None = None,
        name_contains: str | None = None,
    ) -> list[dict[str, str]]:
        """Return non-trashed child folders as ``{"id", "name"}`` dicts."""

    def create(self, name: str, parent_id: str) -> str:
        """Create a folder and return its identifier."""

    def set_permission(self, folder_id: str, role: str, principal: str) -> None:
        """Grant ``role`` on the folder to ``principal``."""


class GoogleDriveClient(StorageBackend):
    """Google Drive v3 adapter implementing the folder capabilities."""

    def __init__(
        self,
        config: GoogleDriveConfig,
        *,
        http_client: HttpClient | None = None,
        auth: TokenProvider | None = None,
        logger: logging.Logger | None = None,
    ) -> None:
        self._config = config
        self._logger = logger or LOGGER
        if http_client is None:
            if auth is None:
                from .auth import ServiceAccountAuth

                auth = ServiceAccountAuth(config)
            http_client = HttpClient(
                config.base_url,
                auth,
                service="gdrive",
                retries=load_retry_config(config),
                timeout=config.timeout_sec,
                logger=self._logger,
            )
        self._http = http_client

    @classmethod
    def from_profile(cls, profile_name: str) -> "GoogleDriveClient":
        """Instantiate a client from ``profiles.yaml`` configuration."""

        return cls(GoogleDriveConfig.from_profile(profile_name))

    @property
    def config(self) -> GoogleDriveConfig:
        return self._config

    def search(
        self,
        parent_id: str,
        *,
        name: str | None = None,
        name_contains: str | None = None,
    ) -> list[dict[str, str]]:
        query = build_folder_query(parent_id, name=name, name_contains=name_contains)
        params: dict[str, str] = {
            "q": query,
            "fields": "nextPageToken, files(id, name)",
            "pageSize": str(PAGE_SIZE),
            "includeItemsFromAllDrives": "true",
            **SHARED_DRIVE_PARAMS,
        }
        folders: list[dict[str, str]] = []
        while True:
            response = self._http.request("GET", "/files", params=params)
            data = response.json() if response.content else {}
            for item in data.get("files") or []:
                if isinstance(item, dict) and item.get("id"):
                    folders.append({"id": str(item["id"]), "name": str(item.get("name", ""))})
            token = data.get("nextPageToken")
            if not token:
                break
            params = {**params, "pageToken": str(token)}
        return folders

    def create(self, name: str, parent_id: str) -> str:
        folder_name = normalize_item_name(name)
        # Not retried: a lost response would otherwise create a second folder.
        response = self._http.request(
            "POST",
            "/files",
            params={"fields": "id", **SHARED_DRIVE_PARAMS},
            json_body={"name": folder_name, "mimeType": FOLDER_MIME_TYPE, "parents": [parent_id]},
            expected_status=(200, 201),
            allow_retry=False,
        )
        payload = response.json()
        folder_id = payload.get("id") if isinstance(payload, dict) else None
        if not folder_id:
            raise ServiceRequestError("Folder creation response missing id", payload={"body": payload})
        self._logger.info(
            "gdrive.client created_folder parent=%s name=%s folder_id=%s",
            parent_id,
            folder_name,
            folder_id,
        )
        return str(folder_id)

    def set_permission(self, folder_id: str, role: str, principal: str) -> None:
        params = dict(SHARED_DRIVE_PARAMS)
        if principal == "anyone":
            body: dict[str, Any] = {"role": role, "type": "anyone"}
        else:
            body = {"role": role, "type": "user", "emailAddress": principal}
            params["sendNotificationEmail"] = "false"
        self._http.request(
            "POST",
            f"/files/{folder_id}/permissions",
            params=params,
            json_body=body,
            expected_status=(200, 201),
        )
        self._logger.info(
            "gdrive.client set_permission folder_id=%s role=%s principal=%s",
            folder_id,
            role,
            principal,
        )

    def list_children(self, parent_id: str) -> list[dict[str, str]]:
        """List the folders directly under ``parent_id``."""

        return self.search(parent_id)

    def close(self) -> None:
        """Release the underlying HTTP session."""

        self._http.close()


__all__ = ["GoogleDriveClient", "StorageBackend"]
