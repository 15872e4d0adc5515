"""Helpers for Google Drive names, queries and links."""

from __future__ import annotations

from pathlib import PurePosixPath

FOLDER_MIME_TYPE = "application/vnd.google-apps.folder"


def normalize_item_name(name: str) -> str:
    """Sanitize drive item names by trimming whitespace."""

    normalized = str(name).strip()
    if not normalized:
        raise ValueError("Drive item name must not be empty")
    return normalized


def escape_query_value(value: str) -> str:
    """Escape a literal for use inside a single-quoted Drive query string."""

    return value.replace("\\", "\\\\").replace("'", "\\'")


def build_folder_query(parent_id: str, *, name: str | None = None, name_contains: str | None = None) -> str:
    """Compose the Drive ``q`` expression for non-trashed child folders."""

    clauses = [
        f"'{escape_query_value(parent_id)}' in parents",
        f"mimeType='{FOLDER_MIME_TYPE}'",
        "trashed=false",
    ]
    if name is not None:
        clauses.append(f"name='{escape_query_value(name)}'")
    if name_contains is not None:
        clauses.append(f"name contains '{escape_query_value(name_contains)}'")
    return " and ".join(clauses)


def folder_link(link_base: str, folder_id: str) -> str:
    """Return the browser URL for a folder."""

    return f"{link_base.rstrip('/')}/{folder_id}"


def join_drive_path(*parts: str) -> str:
    """Join fragments using POSIX separators for display."""

    return str(PurePosixPath(*[p.strip("/") for p in parts if p]))


__all__ = [
    "FOLDER_MIME_TYPE",
    "normalize_item_name",
    "escape_query_value",
    "build_folder_query",
    "folder_link",
    "join_drive_path",
]
