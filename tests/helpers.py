"""Test doubles shared across the suite."""

from __future__ import annotations

import json
from dataclasses import dataclass
from typing import Any

from ticketflow.core.errors import ServiceError, ServiceRequestError


@dataclass
class MockResponse:
    status_code: int = 200
    json_data: Any = None
    text_data: str | None = None

    def json(self) -> Any:
        if self.json_data is None:
            raise ValueError("JSON body not set")
        return self.json_data

    @property
    def content(self) -> bytes:
        if self.json_data is not None:
            return json.dumps(self.json_data).encode("utf-8")
        if self.text_data is not None:
            return self.text_data.encode("utf-8")
        return b""

    @property
    def text(self) -> str:
        if self.text_data is not None:
            return self.text_data
        if self.json_data is not None:
            return json.dumps(self.json_data)
        return ""


class FakeSession:
    def __init__(self, responses: list[MockResponse | Exception]) -> None:
        self._responses = responses
        self.headers: dict[str, str] = {}
        self.calls: list[tuple[str, str]] = []
        self.call_kwargs: list[dict[str, Any]] = []
        self.closed = False

    def request(self, method: str, url: str, **kwargs: Any) -> MockResponse:
        if not self._responses:
            raise AssertionError("No more responses queued")
        self.calls.append((method, url))
        self.call_kwargs.append(kwargs)
        response = self._responses.pop(0)
        if isinstance(response, Exception):
            raise response
        return response

    def close(self) -> None:
        self.closed = True


class CountingAuth:
    def __init__(self, tokens: list[str] | None = None) -> None:
        self._tokens = tokens or ["token"]
        self.refreshes = 0
        self.invalidations = 0

    def get_token(self, *, force_refresh: bool = False) -> str:
        if force_refresh:
            self.refreshes += 1
        return self._tokens[min(self.refreshes, len(self._tokens) - 1)]

    def invalidate(self) -> None:
        self.invalidations += 1


class FakeDriveBackend:
    """In-memory folder store that deduplicates nothing on its own.

    ``search`` returns folders in creation order, mirroring how the
    provisioner must treat the first match as canonical.
    """

    def __init__(self) -> None:
        self.folders: dict[str, dict[str, str]] = {}
        self.permissions: list[tuple[str, str, str]] = []
        self.search_calls = 0
        self.create_calls = 0
        self.fail_create: dict[str, ServiceError] = {}
        self.fail_permission: ServiceError | None = None
        self._counter = 0

    def search(
        self,
        parent_id: str,
        *,
        name: str | None = None,
        name_contains: str | None = None,
    ) -> list[dict[str, str]]:
        self.search_calls += 1
        matches = []
        for folder in self.folders.values():
            if folder["parent"] != parent_id:
                continue
            if name is not None and folder["name"] != name:
                continue
            if name_contains is not None and name_contains not in folder["name"]:
                continue
            matches.append({"id": folder["id"], "name": folder["name"]})
        return matches

    def create(self, name: str, parent_id: str) -> str:
        self.create_calls += 1
        if name in self.fail_create:
            raise self.fail_create[name]
        self._counter += 1
        folder_id = f"fld{self._counter}"
        self.folders[folder_id] = {"id": folder_id, "name": name, "parent": parent_id}
        return folder_id

    def set_permission(self, folder_id: str, role: str, principal: str) -> None:
        if self.fail_permission is not None:
            raise self.fail_permission
        self.permissions.append((folder_id, role, principal))

    def add(self, name: str, parent_id: str) -> str:
        """Seed a folder without counting it as a provisioner create."""

        self._counter += 1
        folder_id = f"seed{self._counter}"
        self.folders[folder_id] = {"id": folder_id, "name": name, "parent": parent_id}
        return folder_id

    def children(self, parent_id: str) -> list[str]:
        return [f["name"] for f in self.folders.values() if f["parent"] == parent_id]

    def find(self, name: str, parent_id: str) -> str:
        for folder in self.folders.values():
            if folder["name"] == name and folder["parent"] == parent_id:
                return folder["id"]
        raise KeyError(name)


def backend_failure(message: str = "boom") -> ServiceRequestError:
    return ServiceRequestError(message, status_code=500)
