"""Push computed values back onto ticket fields."""

from __future__ import annotations

import logging
from typing import Any, Iterable

from ticketflow.core.errors import RemoteUpdateError, ServiceError
from ticketflow.core.logger import get_logger

from .client import RecordStore

LOGGER = get_logger()


class RecordWriter:
    """Write a single value to a named ticket property."""

    def __init__(
        self,
        store: RecordStore,
        *,
        link_fields: Iterable[str] = (),
        logger: logging.Logger | None = None,
    ) -> None:
        self._store = store
        self._link_fields = frozenset(link_fields)
        self._logger = logger or LOGGER

    def property_payload(self, field_name: str, value: str) -> dict[str, Any]:
        if field_name in self._link_fields:
            return {"url": value}
        return {"rich_text": [{"type": "text", "text": {"content": value}}]}

    def set_ticket_field(self, ticket_id: str, field_name: str, value: str) -> None:
        payload = self.property_payload(field_name, value)
        try:
            self._store.update(ticket_id, field_name, payload)
        except ServiceError as exc:
            raise RemoteUpdateError(f"Could not update {field_name} on ticket {ticket_id}: {exc}") from exc
        self._logger.info("notion.writer field_updated page=%s field=%s", ticket_id, field_name)


__all__ = ["RecordWriter"]
