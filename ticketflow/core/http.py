"""HTTP utilities shared by the Notion and Google Drive integrations."""

from __future__ import annotations

import logging
import random
import time
from dataclasses import dataclass
from typing import Any, Iterable, Mapping, MutableMapping, Protocol

import requests
from requests import Response
from requests.exceptions import ConnectionError, RequestException, Timeout

from .errors import ServiceAuthError, ServiceNotFound, ServiceRequestError, ServiceRetryableError
from .logger import get_logger

LOGGER = get_logger()

USER_AGENT = "TicketFlow/1.0"
RETRYABLE_STATUS = {429, 500, 502, 503, 504}
DEFAULT_MAX_ATTEMPTS = 3
DEFAULT_BACKOFF_MS = 200
DEFAULT_MAX_BACKOFF_MS = 2000


class TokenProvider(Protocol):
    """Source of bearer tokens for authenticated requests."""

    def get_token(self, *, force_refresh: bool = False) -> str:
        """Return a valid access token."""

    def invalidate(self) -> None:
        """Drop any cached token."""


class StaticTokenAuth:
    """Token provider for long-lived secrets such as integration keys."""

    def __init__(self, token: str) -> None:
        self._token = token

    def get_token(self, *, force_refresh: bool = False) -> str:
        return self._token

    def invalidate(self) -> None:
        pass


@dataclass(slots=True)
class RetryConfig:
    """Retry parameters for HTTP requests."""

    max_attempts: int = DEFAULT_MAX_ATTEMPTS
    backoff_ms: int = DEFAULT_BACKOFF_MS
    max_backoff_ms: int = DEFAULT_MAX_BACKOFF_MS

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any] | None) -> "RetryConfig":
        if not data:
            return cls()
        return cls(
            max_attempts=int(data.get("max_attempts", DEFAULT_MAX_ATTEMPTS)),
            backoff_ms=int(data.get("backoff_ms", DEFAULT_BACKOFF_MS)),
            max_backoff_ms=int(data.get("max_backoff_ms", DEFAULT_MAX_BACKOFF_MS)),
        )


@dataclass(slots=True)
class RequestDiagnostics:
    """Captured diagnostics for troubleshooting."""

    method: str
    url: str
    status: int | None


class HttpClient:
    """Request helper wrapping retries, auth, and diagnostics."""

    def __init__(
        self,
        base_url: str,
        auth: TokenProvider,
        *,
        service: str,
        retries: RetryConfig | None = None,
        timeout: float = 10.0,
        session: requests.Session | None = None,
        default_headers: Mapping[str, str] | None = None,
        logger: logging.Logger | None = None,
    ) -> None:
        self._base_url = base_url
        self._auth = auth
        self._service = service
        self._retry_config = retries or RetryConfig()
        self._timeout = timeout
        self._session = session or requests.Session()
        self._session.headers.setdefault("User-Agent", USER_AGENT)
        self._default_headers = dict(default_headers or {})
        self._logger = logger or LOGGER

    @property
    def session(self) -> requests.Session:
        """Expose the reusable session."""

        return self._session

    def request(
        self,
        method: str,
        path: str,
        *,
        params: Mapping[str, str] | None = None,
        json_body: Mapping[str, object] | None = None,
        expected_status: Iterable[int] = (200,),
        allow_retry: bool = True,
    ) -> Response:
        """Perform an authenticated request, retrying transient failures."""

        url = self._compose_url(path)
        attempts = max(1, self._retry_config.max_attempts) if allow_retry else 1
        base_backoff = max(0.05, self._retry_config.backoff_ms / 1000.0)
        max_backoff = max(base_backoff, self._retry_config.max_backoff_ms / 1000.0)
        expected = tuple(expected_status)
        refresh_token_next = False
        last_error: ServiceRetryableError | ServiceAuthError | None = None

        for attempt in range(1, attempts + 1):
            last_error = None
            request_headers: MutableMapping[str, str] = dict(self._default_headers)
            token = self._auth.get_token(force_refresh=refresh_token_next)
            request_headers["Authorization"] = f"Bearer {token}"
            refresh_token_next = False
            diagnostics = RequestDiagnostics(method=method, url=self._redact_url(url), status=None)

            try:
                response = self._session.request(
                    method,
                    url,
                    headers=request_headers,
                    params=dict(params or {}),
                    json=json_body,
                    timeout=self._timeout,
                )
            except Timeout as exc:
                last_error = ServiceRetryableError("Request timed out", payload={"url": diagnostics.url})
                self._logger.warning(
                    "%s.http timeout method=%s url=%s attempt=%d",
                    self._service,
                    diagnostics.method,
                    diagnostics.url,
                    attempt,
                    exc_info=exc,
                )
            except (ConnectionError, RequestException) as exc:
                last_error = ServiceRetryableError("Request failed", payload={"url": diagnostics.url})
                self._logger.warning(
                    "%s.http connection_error method=%s url=%s attempt=%d error=%s",
                    self._service,
                    diagnostics.method,
                    diagnostics.url,
                    attempt,
                    type(exc).__name__,
                )
            else:
                status = response.status_code
                diagnostics.status = status
                if status in expected:
                    return response

                payload = self._safe_json(response)
                if status == 401:
                    self._auth.invalidate()
                    self._logger.info(
                        "%s.http unauthorized method=%s url=%s -- refreshing token",
                        self._service,
                        diagnostics.method,
                        diagnostics.url,
                    )
                    last_error = ServiceAuthError("Unauthorized", status_code=status, payload=payload)
                    refresh_token_next = True
                elif status == 404:
                    raise ServiceNotFound("Resource not found", status_code=status, payload=payload)
                elif status == 403:
                    self._logger.error(
                        "%s.http forbidden method=%s url=%s payload_code=%s",
                        self._service,
                        diagnostics.method,
                        diagnostics.url,
                        self._error_code(payload),
                    )
                    raise ServiceAuthError("Forbidden", status_code=status, payload=payload)
                elif allow_retry and status in RETRYABLE_STATUS:
                    self._logger.warning(
                        "%s.http retryable_status method=%s url=%s status=%d attempt=%d",
                        self._service,
                        diagnostics.method,
                        diagnostics.url,
                        status,
                        attempt,
                    )
                    last_error = ServiceRetryableError("Retryable response", status_code=status, payload=payload)
                else:
                    raise ServiceRequestError(f"Unexpected status {status}", status_code=status, payload=payload)

            if attempt < attempts:
                if not refresh_token_next:
                    self._sleep_with_backoff(base_backoff, max_backoff, attempt)
                continue

        if last_error is not None:
            raise last_error
        raise ServiceRetryableError("Exhausted retries", payload={"url": self._redact_url(url)})

    def close(self) -> None:
        self._session.close()

    # Internal helpers -------------------------------------------------

    def _compose_url(self, path: str) -> str:
        if path.startswith("http://") or path.startswith("https://"):
            return path
        base = self._base_url.rstrip("/")
        if not path.startswith("/"):
            path = f"/{path}"
        return f"{base}{path}"

    def _redact_url(self, url: str) -> str:
        if "?" in url:
            return url.split("?")[0]
        return url

    def _sleep_with_backoff(self, base: float, maximum: float, attempt: int) -> None:
        delay = min(maximum, base * (2 ** (attempt - 1)))
        jitter = random.uniform(0, delay / 2)
        time.sleep(delay + jitter)

    def _error_code(self, payload: Mapping[str, object]) -> object:
        error = payload.get("error")
        if isinstance(error, Mapping):
            return error.get("status") or error.get("code")
        return payload.get("code") or error

    def _safe_json(self, response: Response) -> dict[str, object]:
        try:
            data = response.json()
        except ValueError:
            text = response.text
            if len(text) > 200:
                text = text[:200] + "..."
            return {"body": text}
        if isinstance(data, dict):
            return data
        return {"body": data}


__all__ = ["HttpClient", "RetryConfig", "StaticTokenAuth", "TokenProvider", "RETRYABLE_STATUS"]
