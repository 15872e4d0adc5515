"""Notion record store integration."""

from .client import NotionClient, RecordStore
from .reader import RecordReader, TicketData
from .webhook import extract_trigger
from .writer import RecordWriter

__all__ = [
    "NotionClient",
    "RecordStore",
    "RecordReader",
    "TicketData",
    "RecordWriter",
    "extract_trigger",
]
