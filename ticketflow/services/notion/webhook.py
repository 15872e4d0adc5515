"""Extract ``(page id, status)`` triggers from Notion webhook payloads."""

from __future__ import annotations

from typing import Any, Mapping

from .properties import property_value

STATUS_KINDS = ("select", "status")


def _mapping(value: Any) -> Mapping[str, Any]:
    return value if isinstance(value, Mapping) else {}


def extract_page_id(payload: Mapping[str, Any]) -> str | None:
    for key in ("data", "page", "entity"):
        page_id = _mapping(payload.get(key)).get("id")
        if page_id:
            return str(page_id)
    return None


def extract_status(payload: Mapping[str, Any], status_property: str) -> str | None:
    candidates = (
        _mapping(_mapping(payload.get("data")).get("properties")),
        _mapping(_mapping(payload.get("page")).get("properties")),
        _mapping(payload.get("properties")),
    )
    for properties in candidates:
        prop = properties.get(status_property)
        if isinstance(prop, Mapping) and prop.get("type") in STATUS_KINDS:
            value = property_value(prop)
            if value:
                return str(value)
    return None


def extract_trigger(payload: Mapping[str, Any], status_property: str = "Status") -> tuple[str, str] | None:
    """Return ``(page_id, status)`` or ``None`` when the payload carries no status change."""

    page_id = extract_page_id(payload)
    status = extract_status(payload, status_property)
    if not page_id or not status:
        return None
    return page_id, status


__all__ = ["extract_trigger", "extract_page_id", "extract_status"]
