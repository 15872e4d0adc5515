from __future__ import annotations

import pytest
from requests.exceptions import ConnectionError, Timeout

from ticketflow.core.errors import ServiceAuthError, ServiceNotFound, ServiceRetryableError
from ticketflow.core.http import HttpClient, RetryConfig

from tests.helpers import CountingAuth, FakeSession, MockResponse


def _client(responses: list, *, auth: CountingAuth | None = None, attempts: int = 3) -> tuple[HttpClient, FakeSession, CountingAuth]:
    session = FakeSession(responses)
    auth = auth or CountingAuth()
    client = HttpClient(
        "https://api.example.test/v1/",
        auth,
        service="test",
        retries=RetryConfig(max_attempts=attempts, backoff_ms=1, max_backoff_ms=1),
        session=session,
        default_headers={"X-Version": "7"},
    )
    return client, session, auth


@pytest.fixture(autouse=True)
def _no_sleep(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr("ticketflow.core.http.time.sleep", lambda *_: None)


def test_composes_url_and_headers() -> None:
    client, session, _ = _client([MockResponse(json_data={"ok": True})])

    response = client.request("GET", "items/1")

    assert response.json() == {"ok": True}
    assert session.calls == [("GET", "https://api.example.test/v1/items/1")]
    headers = session.call_kwargs[0]["headers"]
    assert headers["X-Version"] == "7"
    assert headers["Authorization"] == "Bearer token"
    assert session.headers["User-Agent"].startswith("TicketFlow/")


def test_unauthorized_refreshes_token_once() -> None:
    auth = CountingAuth(tokens=["stale", "fresh"])
    client, session, _ = _client(
        [MockResponse(status_code=401, json_data={"code": "unauthorized"}), MockResponse(json_data={})],
        auth=auth,
    )

    client.request("GET", "/pages/1")

    assert auth.invalidations == 1
    assert auth.refreshes == 1
    assert session.call_kwargs[1]["headers"]["Authorization"] == "Bearer fresh"


def test_unauthorized_without_retry_raises() -> None:
    client, _, _ = _client([MockResponse(status_code=401, json_data={})], attempts=1)

    with pytest.raises(ServiceAuthError):
        client.request("GET", "/pages/1")


def test_not_found_is_not_retried() -> None:
    client, session, _ = _client([MockResponse(status_code=404, json_data={"code": "object_not_found"})])

    with pytest.raises(ServiceNotFound) as excinfo:
        client.request("GET", "/pages/missing")

    assert excinfo.value.status_code == 404
    assert excinfo.value.payload == {"code": "object_not_found"}
    assert len(session.calls) == 1


def test_network_errors_are_retried() -> None:
    client, session, _ = _client([Timeout("slow"), ConnectionError("reset"), MockResponse(json_data={})])

    client.request("GET", "/pages/1")

    assert len(session.calls) == 3


def test_network_errors_exhaust_retries() -> None:
    client, _, _ = _client([Timeout("slow"), Timeout("slow")], attempts=2)

    with pytest.raises(ServiceRetryableError):
        client.request("GET", "/pages/1")


def test_rate_limit_is_retryable() -> None:
    client, session, _ = _client([MockResponse(status_code=429, text_data="slow down"), MockResponse(json_data={})])

    client.request("PATCH", "/pages/1", json_body={"properties": {}})

    assert [call[0] for call in session.calls] == ["PATCH", "PATCH"]
