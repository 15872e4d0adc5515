"""Folder template table and date helpers for ticket folder trees.

The category table is static configuration: a request type is classified by
membership in a category's ``request_types`` set, and anything unmatched falls
to the default category. New categories are added to the table (or to the
``automation`` profile), never as code branches.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from datetime import date, datetime
from types import MappingProxyType
from typing import Any, Mapping

from ticketflow.core.errors import ConfigError, ValidationError

DELIVERY_FOLDER = "07_Delivery"
DEFAULT_CATEGORY = "Graphic"


@dataclass(frozen=True, slots=True)
class CategorySpec:
    """Request types belonging to a category and the subfolders it gets."""

    request_types: frozenset[str]
    subfolders: tuple[str, ...]


@dataclass(frozen=True, slots=True)
class FolderTemplate:
    """Immutable ``category -> CategorySpec`` table plus the delivery sentinel."""

    categories: Mapping[str, CategorySpec]
    default_category: str = DEFAULT_CATEGORY
    delivery_folder: str = DELIVERY_FOLDER

    def __post_init__(self) -> None:
        if self.default_category not in self.categories:
            raise ConfigError(f"Default category '{self.default_category}' missing from folder template")
        for name, spec in self.categories.items():
            if not spec.subfolders:
                raise ConfigError(f"Category '{name}' defines no subfolders")
        object.__setattr__(self, "categories", MappingProxyType(dict(self.categories)))

    def classify(self, request_type: str | None) -> str:
        """Return the category name for ``request_type``."""

        for name, spec in self.categories.items():
            if request_type in spec.request_types:
                return name
        return self.default_category

    def subfolders_for(self, category: str) -> tuple[str, ...]:
        return self.categories[category].subfolders

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any] | None) -> "FolderTemplate":
        """Build a template from the ``folder_template`` profile block."""

        if not data:
            return DEFAULT_TEMPLATE
        raw_categories = data.get("categories")
        if not isinstance(raw_categories, Mapping) or not raw_categories:
            raise ConfigError("folder_template.categories must be a non-empty mapping")
        categories: dict[str, CategorySpec] = {}
        for name, raw in raw_categories.items():
            if not isinstance(raw, Mapping):
                raise ConfigError(f"folder_template category '{name}' must be a mapping")
            categories[str(name)] = CategorySpec(
                request_types=frozenset(str(item) for item in raw.get("request_types") or ()),
                subfolders=tuple(str(item) for item in raw.get("subfolders") or ()),
            )
        return cls(
            categories=categories,
            default_category=str(data.get("default_category", DEFAULT_CATEGORY)),
            delivery_folder=str(data.get("delivery_folder", DELIVERY_FOLDER)),
        )


DEFAULT_TEMPLATE = FolderTemplate(
    categories={
        "Video": CategorySpec(
            request_types=frozenset({"Green", "Blue"}),
            subfolders=(
                "00_Pre Production",
                "01_Assets",
                "02_Audio",
                "03_Footage",
                "04_Project Files",
                "05_Output Files",
                DELIVERY_FOLDER,
            ),
        ),
        "Graphic": CategorySpec(
            request_types=frozenset(),
            subfolders=(
                "00_Pre Production",
                "01_Assets",
                "03_Project Files",
                "06_Output Files",
                DELIVERY_FOLDER,
            ),
        ),
    },
)


def classify(request_type: str | None, template: FolderTemplate = DEFAULT_TEMPLATE) -> str:
    """Return ``"Video"``/``"Graphic"`` (or a configured category) for a request type."""

    return template.classify(request_type)


def quarter_of(value: date) -> int:
    return math.ceil(value.month / 3)


def parse_ticket_date(value: str) -> date:
    """Parse an ISO-8601 date or datetime string into its calendar date."""

    text = (value or "").strip()
    if not text:
        raise ValidationError("Ticket date is empty")
    try:
        return datetime.fromisoformat(text.replace("Z", "+00:00")).date()
    except ValueError:
        pass
    try:
        return date.fromisoformat(text[:10])
    except ValueError as exc:
        raise ValidationError(f"Ticket date is not ISO-8601: {value!r}") from exc


__all__ = [
    "CategorySpec",
    "FolderTemplate",
    "DEFAULT_TEMPLATE",
    "DELIVERY_FOLDER",
    "DEFAULT_CATEGORY",
    "classify",
    "quarter_of",
    "parse_ticket_date",
]
