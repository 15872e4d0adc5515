from __future__ import annotations

from datetime import date

import pytest

from ticketflow.core.errors import ConfigError, ValidationError
from ticketflow.services.gdrive.templates import (
    DEFAULT_TEMPLATE,
    FolderTemplate,
    classify,
    parse_ticket_date,
    quarter_of,
)


@pytest.mark.parametrize(
    ("month", "expected"),
    [(1, 1), (2, 1), (3, 1), (4, 2), (5, 2), (6, 2), (7, 3), (8, 3), (9, 3), (10, 4), (11, 4), (12, 4)],
)
def test_quarter_of_every_month(month: int, expected: int) -> None:
    assert quarter_of(date(2024, month, 15)) == expected


@pytest.mark.parametrize("request_type", ["Green", "Blue"])
def test_video_request_types(request_type: str) -> None:
    assert classify(request_type) == "Video"


@pytest.mark.parametrize("request_type", ["Red", "blue", "GREEN", "", "Video", None, "Blue "])
def test_everything_else_is_graphic(request_type: str | None) -> None:
    assert classify(request_type) == "Graphic"


def test_default_template_subfolders_end_with_delivery() -> None:
    for category in DEFAULT_TEMPLATE.categories:
        assert DEFAULT_TEMPLATE.subfolders_for(category)[-1] == DEFAULT_TEMPLATE.delivery_folder


def test_template_is_read_only() -> None:
    with pytest.raises(TypeError):
        DEFAULT_TEMPLATE.categories["Audio"] = DEFAULT_TEMPLATE.categories["Video"]  # type: ignore[index]


def test_template_from_mapping_adds_category() -> None:
    template = FolderTemplate.from_mapping(
        {
            "default_category": "Graphic",
            "categories": {
                "Video": {"request_types": ["Blue"], "subfolders": ["01_Assets", "07_Delivery"]},
                "Audio": {"request_types": ["Purple"], "subfolders": ["01_Stems", "07_Delivery"]},
                "Graphic": {"request_types": [], "subfolders": ["01_Assets", "07_Delivery"]},
            },
        }
    )

    assert template.classify("Purple") == "Audio"
    assert template.classify("Green") == "Graphic"
    assert template.subfolders_for("Audio") == ("01_Stems", "07_Delivery")


def test_template_from_empty_mapping_is_default() -> None:
    assert FolderTemplate.from_mapping(None) is DEFAULT_TEMPLATE


def test_template_requires_default_category() -> None:
    with pytest.raises(ConfigError):
        FolderTemplate.from_mapping(
            {"default_category": "Other", "categories": {"Video": {"subfolders": ["a"]}}}
        )


@pytest.mark.parametrize(
    ("value", "expected"),
    [
        ("2024-07-15", date(2024, 7, 15)),
        ("2024-03-31T23:30:00.000Z", date(2024, 3, 31)),
        ("2024-04-01T09:00:00+02:00", date(2024, 4, 1)),
    ],
)
def test_parse_ticket_date(value: str, expected: date) -> None:
    assert parse_ticket_date(value) == expected


@pytest.mark.parametrize("value", ["", "   ", "15/07/2024", "soon"])
def test_parse_ticket_date_rejects_garbage(value: str) -> None:
    with pytest.raises(ValidationError):
        parse_ticket_date(value)
