"""Fetch tickets from the record store as flat ``TicketData``."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Callable

from ticketflow.core.errors import RemoteFetchError, ServiceError
from ticketflow.core.logger import get_logger

from .client import RecordStore
from .config import TicketProperties
from .properties import text_value

LOGGER = get_logger()

Clock = Callable[[], datetime]


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass(slots=True)
class TicketData:
    """Normalized ticket fields; ``date`` is always populated."""

    id: str
    status: str | None
    request_type: str | None
    date: str
    title: str | None

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "status": self.status,
            "requestType": self.request_type,
            "date": self.date,
            "title": self.title,
        }


class RecordReader:
    """Read ticket pages and normalize their properties."""

    def __init__(
        self,
        store: RecordStore,
        *,
        properties: TicketProperties | None = None,
        clock: Clock = _utcnow,
        logger: logging.Logger | None = None,
    ) -> None:
        self._store = store
        self._properties = properties or TicketProperties()
        self._clock = clock
        self._logger = logger or LOGGER

    def get_ticket(self, ticket_id: str) -> TicketData:
        try:
            page = self._store.retrieve(ticket_id)
        except (ServiceError, ValueError) as exc:
            raise RemoteFetchError(f"Could not fetch ticket {ticket_id}: {exc}") from exc
        return self.extract_ticket_data(page)

    def extract_ticket_data(self, page: dict[str, Any]) -> TicketData:
        props = page.get("properties") or {}
        names = self._properties
        due_date = text_value(props.get(names.due_date))
        if not due_date:
            due_date = self._clock().isoformat()
            self._logger.info("notion.reader due_date_missing page=%s substituted=%s", page.get("id"), due_date)
        return TicketData(
            id=str(page.get("id") or ""),
            status=text_value(props.get(names.status)),
            request_type=text_value(props.get(names.request_type)),
            date=due_date,
            title=text_value(props.get(names.title)),
        )


__all__ = ["RecordReader", "TicketData"]
