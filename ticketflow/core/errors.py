"""Custom exceptions used across TicketFlow."""

from __future__ import annotations

from typing import Any


class TicketFlowError(Exception):
    """Base error for the application."""


class ConfigError(TicketFlowError):
    """Configuration related error."""


class ServiceError(TicketFlowError):
    """Base error raised by the HTTP layer talking to a remote service."""

    def __init__(self, message: str, *, status_code: int | None = None, payload: dict[str, Any] | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code
        self.payload = payload or {}


class ServiceAuthError(ServiceError):
    """Raised when authentication with a remote service fails."""


class ServiceNotFound(ServiceError):
    """Raised when the requested remote resource cannot be located."""


class ServiceRetryableError(ServiceError):
    """Raised for retryable I/O issues (network/server errors)."""


class ServiceRequestError(ServiceError):
    """Raised for non-retryable HTTP or protocol errors."""


class ValidationError(TicketFlowError):
    """Ticket data is missing fields required for provisioning."""


class RemoteFetchError(TicketFlowError):
    """Reading a ticket from the record store failed."""


class RemoteUpdateError(TicketFlowError):
    """Writing a ticket field back to the record store failed."""


class FolderCreationError(TicketFlowError):
    """Building the folder tree in the storage backend failed."""


class DrivePermissionError(FolderCreationError):
    """Changing the sharing permissions of a folder failed."""
