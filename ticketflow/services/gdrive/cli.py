"""Typer CLI entry points for Google Drive folders."""

from __future__ import annotations

from typing import Optional

import typer

from ticketflow.core.logger import get_logger

from .client import GoogleDriveClient
from .config import resolve_config
from .paths import normalize_item_name

LOGGER = get_logger()

app = typer.Typer(name="gdrive", help="Inspect and create Google Drive folders.")


def _resolve_client(profile: Optional[str]) -> GoogleDriveClient:
    return GoogleDriveClient(resolve_config(profile))


def _handle_error(exc: Exception) -> None:
    LOGGER.error("gdrive operation failed: %s", exc, exc_info=True)
    typer.secho(f"Error: {exc}", fg=typer.colors.RED)
    raise typer.Exit(code=1)


@app.command("ls")
def cmd_list(
    parent: Optional[str] = typer.Option(None, "--parent", help="Parent folder id (defaults to the configured root)"),
    profile: Optional[str] = typer.Option(None, "--profile", help="Profile name from profiles.yaml"),
) -> None:
    """List folders under a parent folder."""

    client: GoogleDriveClient | None = None
    try:
        client = _resolve_client(profile)
        items = client.list_children(parent or client.config.parent_folder_id)
    except Exception as exc:  # noqa: BLE001 - user feedback path
        _handle_error(exc)
    else:
        if not items:
            typer.echo("<empty>")
        for item in items:
            typer.echo(f"{item['name']:40} {item['id']}")
    finally:
        if client is not None:
            client.close()


@app.command("mkdir")
def cmd_mkdir(
    name: str = typer.Option(..., "--name", help="Folder name"),
    parent: Optional[str] = typer.Option(None, "--parent", help="Parent folder id (defaults to the configured root)"),
    profile: Optional[str] = typer.Option(None, "--profile", help="Profile name from profiles.yaml"),
) -> None:
    """Find or create a folder and print its id."""

    client: GoogleDriveClient | None = None
    try:
        client = _resolve_client(profile)
        parent_id = parent or client.config.parent_folder_id
        folder_name = normalize_item_name(name)
        matches = client.search(parent_id, name=folder_name)
        folder_id = matches[0]["id"] if matches else client.create(folder_name, parent_id)
        typer.echo(folder_id)
    except Exception as exc:  # noqa: BLE001 - user feedback path
        _handle_error(exc)
    finally:
        if client is not None:
            client.close()


__all__ = ["app"]
