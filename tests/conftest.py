from __future__ import annotations

import sys
from pathlib import Path

import pytest

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from tests.helpers import FakeDriveBackend  # noqa: E402

CONFIG_ENV_VARS = (
    "NOTION_API_KEY",
    "NOTION_VERSION",
    "NOTION_TIMEOUT_SEC",
    "NOTION_RETRY_ATTEMPTS",
    "GOOGLE_SERVICE_ACCOUNT_CREDS",
    "GOOGLE_DRIVE_PARENT_FOLDER_ID",
    "GDRIVE_TIMEOUT_SEC",
    "GDRIVE_RETRY_ATTEMPTS",
    "GDRIVE_RETRY_BACKOFF_MS",
    "GDRIVE_RETRY_MAX_BACKOFF_MS",
)


@pytest.fixture(autouse=True)
def _isolate_config_env(monkeypatch: pytest.MonkeyPatch) -> None:
    """Keep developer .env values from leaking into configuration tests."""

    for key in CONFIG_ENV_VARS:
        monkeypatch.delenv(key, raising=False)


@pytest.fixture
def drive_backend() -> FakeDriveBackend:
    return FakeDriveBackend()
