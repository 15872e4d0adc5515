"""Idempotent ticket folder tree provisioning.

Tree layout under the configured root folder::

    <year>/Q<n>/<ticket folder>/<category>/<subfolders...>

Every level is resolved with find-or-create: the backend is searched for a
non-trashed folder with the same name and parent and the first match is
reused, so re-running a partially failed provisioning completes the tree
instead of duplicating it. Two concurrent runs for the same ticket can still
race between search and create; no lock is taken.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field
from typing import Any

from ticketflow.core.errors import (
    DrivePermissionError,
    FolderCreationError,
    ServiceError,
    ValidationError,
)
from ticketflow.core.logger import get_logger

from .client import StorageBackend
from .config import DEFAULT_LINK_BASE
from .paths import folder_link, join_drive_path, normalize_item_name
from .templates import DEFAULT_TEMPLATE, FolderTemplate, parse_ticket_date, quarter_of

LOGGER = get_logger()

NAMING_ID = "id"
NAMING_TITLE = "title"
NAMING_NUMBERED = "numbered"
TICKET_FOLDER_NAMING = (NAMING_ID, NAMING_TITLE, NAMING_NUMBERED)

_NUMBER_PREFIX = re.compile(r"^(\d+)_")


@dataclass(slots=True)
class TicketFolderRequest:
    """Ticket attributes that determine where its folder tree lives."""

    ticket_id: str
    request_type: str
    date: str
    title: str | None = None


@dataclass(slots=True)
class FolderResult:
    """Identifiers of the provisioned tree."""

    year_folder_id: str
    quarter_folder_id: str
    ticket_id_folder_id: str
    type_folder_id: str
    folder_path: str
    ticket_folder_name: str
    delivery_folder_id: str | None = None
    delivery_folder_link: str | None = None
    subfolder_ids: dict[str, str] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        return {
            "yearFolderId": self.year_folder_id,
            "quarterFolderId": self.quarter_folder_id,
            "ticketIdFolderId": self.ticket_id_folder_id,
            "ticketFolderName": self.ticket_folder_name,
            "typeFolderId": self.type_folder_id,
            "folderPath": self.folder_path,
            "deliveryFolderId": self.delivery_folder_id,
            "deliveryFolderLink": self.delivery_folder_link,
            "subfolderIds": dict(self.subfolder_ids),
        }


class FolderProvisioner:
    """Materialize the per-ticket folder hierarchy in a storage backend."""

    def __init__(
        self,
        backend: StorageBackend,
        root_folder_id: str,
        *,
        template: FolderTemplate = DEFAULT_TEMPLATE,
        ticket_folder_naming: str = NAMING_ID,
        link_base: str = DEFAULT_LINK_BASE,
        permission_errors_fatal: bool = True,
        logger: logging.Logger | None = None,
    ) -> None:
        if ticket_folder_naming not in TICKET_FOLDER_NAMING:
            raise ValueError(f"Unsupported ticket folder naming: {ticket_folder_naming}")
        self._backend = backend
        self._root_folder_id = root_folder_id
        self._template = template
        self._naming = ticket_folder_naming
        self._link_base = link_base
        self._permission_errors_fatal = permission_errors_fatal
        self._logger = logger or LOGGER

    @property
    def template(self) -> FolderTemplate:
        return self._template

    def find_or_create_folder(self, name: str, parent_id: str) -> str:
        """Return the first existing folder named ``name`` under ``parent_id``, creating it if absent.

        The name is trimmed before both the lookup and the create so a rerun
        finds what the backend stored.
        """

        try:
            folder_name = normalize_item_name(name)
            matches = self._backend.search(parent_id, name=folder_name)
            if matches:
                return matches[0]["id"]
            return self._backend.create(folder_name, parent_id)
        except (ServiceError, ValueError) as exc:
            self._logger.error(
                "gdrive.provisioner find_or_create_failed parent=%s name=%s error=%s",
                parent_id,
                name,
                exc,
            )
            raise FolderCreationError(f"Failed to find or create folder '{name}': {exc}") from exc

    def set_permissions(self, folder_id: str, role: str = "reader", principal: str = "anyone") -> None:
        try:
            self._backend.set_permission(folder_id, role, principal)
        except ServiceError as exc:
            raise DrivePermissionError(f"Failed to share folder {folder_id} with {principal}: {exc}") from exc

    def provision(self, request: TicketFolderRequest) -> FolderResult:
        """Build ``year/quarter/ticket/category/subfolders`` and share the delivery folder.

        Raises:
            ValidationError: If the request lacks what the naming scheme needs.
            FolderCreationError: On the first backend failure. Folders created
                before the failure are left in place.
        """

        ticket_id = (request.ticket_id or "").strip()
        if not ticket_id:
            raise ValidationError("ticketId is required for folder structure")
        ticket_date = parse_ticket_date(request.date)
        title = (request.title or "").strip()
        if self._naming == NAMING_TITLE and not title:
            raise ValidationError("Ticket title is required when folders are named by title")

        year = str(ticket_date.year)
        quarter = f"Q{quarter_of(ticket_date)}"
        category = self._template.classify(request.request_type).strip()
        self._logger.info(
            "gdrive.provisioner start ticket=%s year=%s quarter=%s category=%s",
            ticket_id,
            year,
            quarter,
            category,
        )

        year_folder_id = self.find_or_create_folder(year, self._root_folder_id)
        quarter_folder_id = self.find_or_create_folder(quarter, year_folder_id)
        ticket_folder_name, ticket_folder_id = self._resolve_ticket_folder(ticket_id, title, quarter_folder_id)
        type_folder_id = self.find_or_create_folder(category, ticket_folder_id)

        result = FolderResult(
            year_folder_id=year_folder_id,
            quarter_folder_id=quarter_folder_id,
            ticket_id_folder_id=ticket_folder_id,
            type_folder_id=type_folder_id,
            folder_path=join_drive_path(year, quarter, ticket_folder_name, category),
            ticket_folder_name=ticket_folder_name,
        )
        delivery_folder = self._template.delivery_folder.strip()
        for raw_name in self._template.subfolders_for(category):
            folder_name = raw_name.strip()
            sub_id = self.find_or_create_folder(folder_name, type_folder_id)
            result.subfolder_ids[folder_name] = sub_id
            if folder_name == delivery_folder:
                self._share_delivery_folder(sub_id)
                result.delivery_folder_id = sub_id
                result.delivery_folder_link = folder_link(self._link_base, sub_id)

        self._logger.info(
            "gdrive.provisioner done ticket=%s path=%s delivery_folder_id=%s",
            ticket_id,
            result.folder_path,
            result.delivery_folder_id,
        )
        return result

    # Internal helpers -------------------------------------------------

    def _share_delivery_folder(self, folder_id: str) -> None:
        try:
            self.set_permissions(folder_id, role="reader", principal="anyone")
        except DrivePermissionError as exc:
            if self._permission_errors_fatal:
                raise
            self._logger.warning("gdrive.provisioner share_failed folder_id=%s error=%s", folder_id, exc)

    def _resolve_ticket_folder(self, ticket_id: str, title: str, quarter_folder_id: str) -> tuple[str, str]:
        if self._naming == NAMING_NUMBERED:
            return self._numbered_ticket_folder(ticket_id, quarter_folder_id)
        name = title if self._naming == NAMING_TITLE else ticket_id
        return name, self.find_or_create_folder(name, quarter_folder_id)

    def _numbered_ticket_folder(self, ticket_id: str, quarter_folder_id: str) -> tuple[str, str]:
        """Reuse ``NN_<ticket_id>`` if present, else allocate the next free number in the quarter.

        Both checks run over one full listing of the quarter folder.
        """

        own = re.compile(rf"^\d+_{re.escape(ticket_id)}$")
        try:
            children = self._backend.search(quarter_folder_id)
        except ServiceError as exc:
            raise FolderCreationError(f"Failed to number ticket folder for {ticket_id}: {exc}") from exc
        highest = 0
        for item in children:
            if own.match(item["name"]):
                return item["name"], item["id"]
            match = _NUMBER_PREFIX.match(item["name"])
            if match:
                highest = max(highest, int(match.group(1)))
        name = f"{highest + 1:02d}_{ticket_id}"
        return name, self.find_or_create_folder(name, quarter_folder_id)


__all__ = [
    "FolderProvisioner",
    "FolderResult",
    "TicketFolderRequest",
    "TICKET_FOLDER_NAMING",
    "NAMING_ID",
    "NAMING_TITLE",
    "NAMING_NUMBERED",
]
