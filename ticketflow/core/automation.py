from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Mapping

from .errors import ConfigError, TicketFlowError, ValidationError
from .logger import get_logger
from .profiles import ensure_mapping, load_profile
from ticketflow.services.gdrive.provisioner import (
    NAMING_ID,
    TICKET_FOLDER_NAMING,
    FolderProvisioner,
    FolderResult,
    TicketFolderRequest,
)
from ticketflow.services.gdrive.templates import DEFAULT_TEMPLATE, FolderTemplate
from ticketflow.services.notion.reader import RecordReader, TicketData
from ticketflow.services.notion.webhook import extract_trigger
from ticketflow.services.notion.writer import RecordWriter


NO_ACTION_MESSAGE = "Status change does not trigger automation"
WEBHOOK_NO_ACTION_MESSAGE = "Webhook processed but no action taken"
SUCCESS_MESSAGE = "Ticket automation completed successfully"


@dataclass
class AutomationConfig:
    """Workflow settings from the ``automation`` section of profiles.yaml.

    Attributes:
        trigger_status: Status value that starts provisioning (case-sensitive).
        delivery_field: Ticket property receiving the delivery folder link.
        status_property: Property carrying the status in webhook payloads.
        ticket_folder_naming: ``id``, ``title`` or ``numbered``.
        permission_errors_fatal: Whether a failed share of the delivery folder fails the run.
        template: Category/subfolder table.
    """

    trigger_status: str = "Active"
    delivery_field: str = "Drive Delivery Folder"
    status_property: str = "Status"
    ticket_folder_naming: str = NAMING_ID
    permission_errors_fatal: bool = True
    template: FolderTemplate = DEFAULT_TEMPLATE

    @classmethod
    def from_profile(cls, profile_name: str, *, config_path: str | Path | None = None) -> "AutomationConfig":
        return cls.from_mapping(load_profile("automation", profile_name, path=config_path))

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> "AutomationConfig":
        naming = str(data.get("ticket_folder_naming", NAMING_ID))
        if naming not in TICKET_FOLDER_NAMING:
            raise ConfigError(f"ticket_folder_naming must be one of {', '.join(TICKET_FOLDER_NAMING)}")
        return cls(
            trigger_status=str(data.get("trigger_status", cls.trigger_status)),
            delivery_field=str(data.get("delivery_field", cls.delivery_field)),
            status_property=str(data.get("status_property", cls.status_property)),
            ticket_folder_naming=naming,
            permission_errors_fatal=bool(data.get("permission_errors_fatal", True)),
            template=FolderTemplate.from_mapping(ensure_mapping(data.get("folder_template"))),
        )


@dataclass
class AutomationResult:
    success: bool
    message: str
    data: dict[str, Any] | None = None
    error: BaseException | None = None
    warnings: list[str] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        payload: dict[str, Any] = {"success": self.success, "message": self.message}
        if self.data is not None:
            payload["data"] = {
                "ticketData": self.data["ticket_data"].to_dict(),
                "folderResult": self.data["folder_result"].to_dict(),
            }
        if self.error is not None:
            payload["error"] = {"type": type(self.error).__name__, "message": str(self.error)}
        if self.warnings:
            payload["warnings"] = list(self.warnings)
        return payload


class TicketAutomation:
    """Coordinates Read -> Provision -> Write-back for a ticket status change."""

    def __init__(
        self,
        reader: RecordReader,
        provisioner: FolderProvisioner,
        writer: RecordWriter,
        config: AutomationConfig | None = None,
        logger: logging.Logger | None = None,
    ) -> None:
        self.reader = reader
        self.provisioner = provisioner
        self.writer = writer
        self.config = config or AutomationConfig()
        self.logger = logger or get_logger()

    def process_status_change(self, ticket_id: str, status: str | None) -> AutomationResult:
        """Provision folders when ``status`` equals the trigger value.

        Never raises: failures of the read or provisioning steps are returned
        as ``success=False``. A failed link write-back only adds a warning.
        """

        self.logger.info("automation.status_change ticket=%s status=%s", ticket_id, status)
        if status != self.config.trigger_status:
            return AutomationResult(success=True, message=NO_ACTION_MESSAGE)

        try:
            ticket = self.reader.get_ticket(ticket_id)
            self._validate(ticket)
            folder_result = self.provisioner.provision(
                TicketFolderRequest(
                    ticket_id=ticket.id,
                    request_type=ticket.request_type or "",
                    date=ticket.date,
                    title=ticket.title,
                )
            )
        except TicketFlowError as exc:
            self.logger.error("automation.failed ticket=%s error=%s", ticket_id, exc, exc_info=True)
            return AutomationResult(success=False, message=str(exc), error=exc)
        except Exception as exc:  # noqa: BLE001 - nothing escapes the workflow boundary
            self.logger.error("automation.unexpected_error ticket=%s", ticket_id, exc_info=True)
            return AutomationResult(success=False, message=f"Unexpected error: {exc}", error=exc)

        result = AutomationResult(
            success=True,
            message=SUCCESS_MESSAGE,
            data={"ticket_data": ticket, "folder_result": folder_result},
        )
        warning = self._write_back(ticket_id, folder_result)
        if warning:
            result.warnings.append(warning)
        return result

    def process_webhook(self, payload: Mapping[str, Any]) -> AutomationResult:
        """Handle a raw record-store webhook body."""

        trigger = extract_trigger(payload, self.config.status_property)
        if trigger is None:
            self.logger.info("automation.webhook no_trigger keys=%s", ",".join(sorted(payload)))
            return AutomationResult(success=True, message=WEBHOOK_NO_ACTION_MESSAGE)
        ticket_id, status = trigger
        return self.process_status_change(ticket_id, status)

    def _validate(self, ticket: TicketData) -> None:
        if not ticket.request_type:
            raise ValidationError("Request Type is required")
        if not ticket.id:
            raise ValidationError("Ticket ID is required")

    def _write_back(self, ticket_id: str, folder_result: FolderResult) -> str | None:
        link = folder_result.delivery_folder_link
        field_name = self.config.delivery_field
        if not link:
            message = "No delivery folder link to write back"
            self.logger.warning("automation.write_back skipped ticket=%s reason=no_link", ticket_id)
            return message
        try:
            self.writer.set_ticket_field(ticket_id, field_name, link)
        except Exception as exc:  # noqa: BLE001 - write-back is best effort
            self.logger.warning(
                "automation.write_back failed ticket=%s field=%s error=%s", ticket_id, field_name, exc
            )
            return f"Could not update ticket with delivery folder link: {exc}"
        return None


def build_automation(profile: str | None = None, *, logger: logging.Logger | None = None) -> TicketAutomation:
    """Wire Notion and Google Drive clients from profiles.yaml and environment."""

    from ticketflow.services.gdrive.client import GoogleDriveClient
    from ticketflow.services.gdrive.config import resolve_config as resolve_drive_config
    from ticketflow.services.notion.client import NotionClient
    from ticketflow.services.notion.config import resolve_config as resolve_notion_config

    logger = logger or get_logger()
    config = AutomationConfig.from_profile(profile) if profile else AutomationConfig()
    notion_config = resolve_notion_config(profile)
    drive_config = resolve_drive_config(profile)

    store = NotionClient(notion_config, logger=logger)
    backend = GoogleDriveClient(drive_config, logger=logger)
    provisioner = FolderProvisioner(
        backend,
        drive_config.parent_folder_id,
        template=config.template,
        ticket_folder_naming=config.ticket_folder_naming,
        link_base=drive_config.link_base,
        permission_errors_fatal=config.permission_errors_fatal,
        logger=logger,
    )
    return TicketAutomation(
        reader=RecordReader(store, properties=notion_config.properties, logger=logger),
        provisioner=provisioner,
        writer=RecordWriter(store, link_fields=notion_config.link_fields, logger=logger),
        config=config,
        logger=logger,
    )


__all__ = ["TicketAutomation", "AutomationConfig", "AutomationResult", "build_automation"]
