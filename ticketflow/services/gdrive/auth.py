"""Service account authentication for Google Drive."""

from __future__ import annotations

import threading
from datetime import datetime, timedelta, timezone
from typing import Optional

import requests
from google.auth.exceptions import GoogleAuthError
from google.auth.transport.requests import Request
from google.oauth2 import service_account

from ticketflow.core.errors import ConfigError, ServiceAuthError
from ticketflow.core.logger import get_logger

from .config import GoogleDriveConfig

LOGGER = get_logger()

REFRESH_MARGIN = timedelta(seconds=60)


class ServiceAccountAuth:
    """Fetch and cache Google access tokens with thread safety."""

    def __init__(
        self,
        config: GoogleDriveConfig,
        *,
        session: Optional[requests.Session] = None,
    ) -> None:
        try:
            self._credentials = service_account.Credentials.from_service_account_info(
                dict(config.credentials),
                scopes=list(config.scopes),
            )
        except (ValueError, KeyError) as exc:
            raise ConfigError(f"Invalid Google service account credentials: {exc}") from exc
        self._request = Request(session=session)
        self._lock = threading.RLock()

    def get_token(self, *, force_refresh: bool = False) -> str:
        """Return a cached access token, refreshing when necessary."""

        with self._lock:
            if force_refresh or not self._is_fresh():
                self._refresh_locked()
            return str(self._credentials.token)

    def invalidate(self) -> None:
        """Invalidate the cached token forcing a refresh on next access."""

        with self._lock:
            self._credentials.token = None

    # Internal helpers -------------------------------------------------

    def _is_fresh(self) -> bool:
        if not self._credentials.token:
            return False
        expiry = self._credentials.expiry
        if expiry is None:
            return True
        # google-auth stores expiry as naive UTC
        now = datetime.now(timezone.utc).replace(tzinfo=None)
        return expiry - now > REFRESH_MARGIN

    def _refresh_locked(self) -> None:
        try:
            self._credentials.refresh(self._request)
        except GoogleAuthError as exc:
            LOGGER.warning("gdrive.auth token_refresh_failed error=%s", type(exc).__name__)
            raise ServiceAuthError(f"Unable to obtain Google access token: {exc}") from exc
        LOGGER.info("gdrive.auth token_refreshed expiry=%s", self._credentials.expiry)


__all__ = ["ServiceAccountAuth", "REFRESH_MARGIN"]
