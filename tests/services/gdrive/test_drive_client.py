from __future__ import annotations

import pytest

from ticketflow.core.errors import ServiceAuthError, ServiceRequestError, ServiceRetryableError
from ticketflow.core.http import HttpClient, RetryConfig
from ticketflow.services.gdrive.client import GoogleDriveClient
from ticketflow.services.gdrive.config import GoogleDriveConfig

from tests.helpers import CountingAuth, FakeSession, MockResponse

FILES_URL = "https://www.googleapis.com/drive/v3/files"


def _build_client(responses: list) -> tuple[GoogleDriveClient, FakeSession]:
    config = GoogleDriveConfig(
        credentials={"type": "service_account"},
        parent_folder_id="root-folder",
        timeout_sec=1.0,
        retries=RetryConfig(max_attempts=3, backoff_ms=1, max_backoff_ms=1),
    )
    session = FakeSession(responses)
    http_client = HttpClient(
        config.base_url,
        CountingAuth(),
        service="gdrive",
        retries=config.retries,
        timeout=config.timeout_sec,
        session=session,
    )
    return GoogleDriveClient(config, http_client=http_client), session


@pytest.fixture(autouse=True)
def _no_sleep(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr("ticketflow.core.http.time.sleep", lambda *_: None)


def test_search_builds_escaped_folder_query() -> None:
    client, session = _build_client(
        [MockResponse(json_data={"files": [{"id": "a1", "name": "Client's \\ Brief"}]})]
    )

    items = client.search("parent-1", name="Client's \\ Brief")

    assert items == [{"id": "a1", "name": "Client's \\ Brief"}]
    assert session.calls == [("GET", FILES_URL)]
    params = session.call_kwargs[0]["params"]
    assert params["q"] == (
        "'parent-1' in parents and mimeType='application/vnd.google-apps.folder' "
        "and trashed=false and name='Client\\'s \\\\ Brief'"
    )
    assert params["supportsAllDrives"] == "true"
    assert session.call_kwargs[0]["headers"]["Authorization"] == "Bearer token"


def test_search_follows_pagination() -> None:
    client, session = _build_client(
        [
            MockResponse(json_data={"files": [{"id": "a", "name": "01_A"}], "nextPageToken": "p2"}),
            MockResponse(json_data={"files": [{"id": "b", "name": "02_B"}]}),
        ]
    )

    items = client.search("q3", name_contains="_")

    assert [item["id"] for item in items] == ["a", "b"]
    assert session.call_kwargs[1]["params"]["pageToken"] == "p2"
    assert "name contains '_'" in session.call_kwargs[0]["params"]["q"]


def test_create_posts_folder_metadata() -> None:
    client, session = _build_client([MockResponse(json_data={"id": "new-id"})])

    folder_id = client.create(" 07_Delivery ", "parent-1")

    assert folder_id == "new-id"
    assert session.calls == [("POST", FILES_URL)]
    assert session.call_kwargs[0]["json"] == {
        "name": "07_Delivery",
        "mimeType": "application/vnd.google-apps.folder",
        "parents": ["parent-1"],
    }


def test_create_is_not_retried() -> None:
    client, session = _build_client([MockResponse(status_code=503, text_data="unavailable")])

    with pytest.raises(ServiceRequestError):
        client.create("2024", "root-folder")
    assert len(session.calls) == 1


def test_create_without_id_fails() -> None:
    client, _ = _build_client([MockResponse(json_data={"kind": "drive#file"})])

    with pytest.raises(ServiceRequestError):
        client.create("2024", "root-folder")


def test_set_permission_for_anyone() -> None:
    client, session = _build_client([MockResponse(json_data={"id": "perm"})])

    client.set_permission("fld-7", "reader", "anyone")

    assert session.calls == [("POST", f"{FILES_URL}/fld-7/permissions")]
    assert session.call_kwargs[0]["json"] == {"role": "reader", "type": "anyone"}


def test_set_permission_for_user() -> None:
    client, session = _build_client([MockResponse(json_data={"id": "perm"})])

    client.set_permission("fld-7", "writer", "editor@example.com")

    assert session.call_kwargs[0]["json"] == {
        "role": "writer",
        "type": "user",
        "emailAddress": "editor@example.com",
    }
    assert session.call_kwargs[0]["params"]["sendNotificationEmail"] == "false"


def test_search_retries_server_errors() -> None:
    client, session = _build_client(
        [
            MockResponse(status_code=500, text_data="server error"),
            MockResponse(json_data={"files": []}),
        ]
    )

    assert client.search("root-folder") == []
    assert len(session.calls) == 2


def test_search_gives_up_after_max_attempts() -> None:
    client, session = _build_client([MockResponse(status_code=503, text_data="x") for _ in range(3)])

    with pytest.raises(ServiceRetryableError):
        client.search("root-folder")
    assert len(session.calls) == 3


def test_forbidden_is_auth_error() -> None:
    client, _ = _build_client(
        [MockResponse(status_code=403, json_data={"error": {"code": 403, "status": "PERMISSION_DENIED"}})]
    )

    with pytest.raises(ServiceAuthError):
        client.set_permission("fld", "reader", "anyone")
