"""Normalize typed Notion property values into plain scalars."""

from __future__ import annotations

from typing import Any, Callable, Mapping

Scalar = str | int | float | bool | None
Extractor = Callable[[Mapping[str, Any]], Scalar]


def _plain_text(parts: Any) -> str | None:
    if not isinstance(parts, list):
        return None
    text = "".join(str(part.get("plain_text", "")) for part in parts if isinstance(part, Mapping))
    return text or None


def _option_name(option: Any) -> str | None:
    if isinstance(option, Mapping):
        return option.get("name") or None
    return None


def _multi_select(prop: Mapping[str, Any]) -> str | None:
    names = [_option_name(item) for item in prop.get("multi_select") or []]
    joined = ", ".join(name for name in names if name)
    return joined or None


def _date_start(value: Any) -> str | None:
    if isinstance(value, Mapping):
        return value.get("start") or None
    return None


def _formula(prop: Mapping[str, Any]) -> Scalar:
    formula = prop.get("formula")
    if not isinstance(formula, Mapping):
        return None
    kind = formula.get("type")
    if kind == "date":
        return _date_start(formula.get("date"))
    if kind in ("string", "number", "boolean"):
        return formula.get(kind)
    return None


def _unique_id(prop: Mapping[str, Any]) -> str | None:
    value = prop.get("unique_id")
    if not isinstance(value, Mapping) or value.get("number") is None:
        return None
    prefix = value.get("prefix")
    return f"{prefix}-{value['number']}" if prefix else str(value["number"])


EXTRACTORS: dict[str, Extractor] = {
    "title": lambda prop: _plain_text(prop.get("title")),
    "rich_text": lambda prop: _plain_text(prop.get("rich_text")),
    "select": lambda prop: _option_name(prop.get("select")),
    "status": lambda prop: _option_name(prop.get("status")),
    "multi_select": _multi_select,
    "date": lambda prop: _date_start(prop.get("date")),
    "number": lambda prop: prop.get("number"),
    "checkbox": lambda prop: prop.get("checkbox"),
    "url": lambda prop: prop.get("url"),
    "email": lambda prop: prop.get("email"),
    "phone_number": lambda prop: prop.get("phone_number"),
    "formula": _formula,
    "unique_id": _unique_id,
    "created_time": lambda prop: prop.get("created_time"),
    "last_edited_time": lambda prop: prop.get("last_edited_time"),
}


def property_value(prop: Mapping[str, Any] | None) -> Scalar:
    """Return the scalar value of a property; unknown kinds yield ``None``."""

    if not isinstance(prop, Mapping):
        return None
    extractor = EXTRACTORS.get(str(prop.get("type")))
    if extractor is None:
        return None
    return extractor(prop)


def text_value(prop: Mapping[str, Any] | None) -> str | None:
    value = property_value(prop)
    if value is None:
        return None
    return str(value)


__all__ = ["EXTRACTORS", "property_value", "text_value"]
