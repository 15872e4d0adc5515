"""Typer based command line entry points for TicketFlow."""

from __future__ import annotations

import json
import logging
from datetime import date as calendar_date
from pathlib import Path
from typing import Any, Optional

import typer

from ticketflow.core.automation import AutomationConfig, AutomationResult, build_automation
from ticketflow.core.errors import TicketFlowError
from ticketflow.core.logger import get_logger
from ticketflow.services.gdrive import gdrive_app
from ticketflow.services.gdrive.client import GoogleDriveClient
from ticketflow.services.gdrive.config import resolve_config as resolve_drive_config
from ticketflow.services.gdrive.provisioner import FolderProvisioner, TicketFolderRequest

app = typer.Typer(help="Provision ticket folders in Google Drive from Notion status changes.")
app.add_typer(gdrive_app, name="gdrive")


@app.callback()
def main_callback(
    log_level: str = typer.Option(
        "INFO",
        "--log-level",
        help="Set global logging level (e.g. DEBUG/INFO/WARNING).",
    ),
) -> None:
    """Configure global CLI behaviour before executing commands."""

    level_value = getattr(logging, log_level.upper(), None)
    if not isinstance(level_value, int):
        raise typer.BadParameter(f"Unknown log level: {log_level}")
    get_logger().setLevel(level_value)


def _echo_json(payload: dict[str, Any]) -> None:
    typer.echo(json.dumps(payload, ensure_ascii=False, indent=2))


def _finish(result: AutomationResult) -> None:
    _echo_json(result.to_dict())
    if not result.success:
        raise typer.Exit(code=1)


def _build_provisioner(profile: Optional[str]) -> FolderProvisioner:
    config = AutomationConfig.from_profile(profile) if profile else AutomationConfig()
    drive_config = resolve_drive_config(profile)
    return FolderProvisioner(
        GoogleDriveClient(drive_config),
        drive_config.parent_folder_id,
        template=config.template,
        ticket_folder_naming=config.ticket_folder_naming,
        link_base=drive_config.link_base,
        permission_errors_fatal=config.permission_errors_fatal,
    )


def _load_automation(profile: Optional[str]):
    try:
        return build_automation(profile)
    except TicketFlowError as exc:
        get_logger().error("cli config_error: %s", exc, exc_info=True)
        typer.secho(f"Unable to load configuration: {exc}", fg=typer.colors.RED, err=True)
        raise typer.Exit(code=2) from exc


@app.command("process")
def cmd_process(
    ticket_id: str = typer.Option(..., "--ticket-id", help="Record store page id"),
    status: str = typer.Option(..., "--status", help="New status value of the ticket"),
    profile: Optional[str] = typer.Option(None, "--profile", help="Profile name from profiles.yaml"),
) -> None:
    """Run the automation for a single status change."""

    automation = _load_automation(profile)
    _finish(automation.process_status_change(ticket_id, status))


@app.command("webhook")
def cmd_webhook(
    payload_file: Path = typer.Argument(..., exists=True, dir_okay=False, help="JSON webhook body"),
    profile: Optional[str] = typer.Option(None, "--profile", help="Profile name from profiles.yaml"),
) -> None:
    """Run the automation for a saved webhook payload."""

    try:
        payload = json.loads(payload_file.read_text(encoding="utf-8"))
    except ValueError as exc:
        typer.secho(f"Invalid JSON payload: {exc}", fg=typer.colors.RED, err=True)
        raise typer.Exit(code=2) from exc
    if not isinstance(payload, dict):
        typer.secho("Webhook payload must be a JSON object", fg=typer.colors.RED, err=True)
        raise typer.Exit(code=2)
    automation = _load_automation(profile)
    _finish(automation.process_webhook(payload))


@app.command("provision")
def cmd_provision(
    ticket_id: str = typer.Option(..., "--ticket-id", help="Ticket identifier used for the ticket folder"),
    request_type: str = typer.Option(..., "--request-type", help="Request type driving the category"),
    date: Optional[str] = typer.Option(None, "--date", help="ISO-8601 due date (defaults to today)"),
    title: Optional[str] = typer.Option(None, "--title", help="Display title, used with title naming"),
    profile: Optional[str] = typer.Option(None, "--profile", help="Profile name from profiles.yaml"),
) -> None:
    """Build the folder tree without touching the record store."""

    logger = get_logger()
    if date is None:
        date = calendar_date.today().isoformat()
    try:
        provisioner = _build_provisioner(profile)
        result = provisioner.provision(
            TicketFolderRequest(ticket_id=ticket_id, request_type=request_type, date=date, title=title)
        )
    except TicketFlowError as exc:
        logger.error("cli provision_failed ticket=%s", ticket_id, exc_info=True)
        typer.secho(f"Provisioning failed: {exc}", fg=typer.colors.RED, err=True)
        raise typer.Exit(code=1) from exc
    _echo_json(result.to_dict())


def main() -> None:
    app()


if __name__ == "__main__":
    main()
