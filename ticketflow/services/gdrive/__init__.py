"""Google Drive service integration."""

from .cli import app as gdrive_app
from .client import GoogleDriveClient, StorageBackend
from .provisioner import FolderProvisioner, FolderResult, TicketFolderRequest
from .templates import DEFAULT_TEMPLATE, FolderTemplate, classify, quarter_of

__all__ = [
    "GoogleDriveClient",
    "StorageBackend",
    "FolderProvisioner",
    "FolderResult",
    "TicketFolderRequest",
    "FolderTemplate",
    "DEFAULT_TEMPLATE",
    "classify",
    "quarter_of",
    "gdrive_app",
]
