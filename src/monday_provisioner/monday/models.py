"""Data models for monday.com items and their column values."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

# monday.com GraphQL field names
FIELD_DATA = "data"
FIELD_ITEMS = "items"
FIELD_ASSETS = "assets"
FIELD_ID = "id"
FIELD_NAME = "name"
FIELD_COLUMN_VALUES = "column_values"
FIELD_COLUMN = "column"
FIELD_TITLE = "title"
FIELD_SETTINGS_STR = "settings_str"
FIELD_VALUE = "value"
FIELD_TEXT = "text"
FIELD_PUBLIC_URL = "public_url"

# Keys inside settings_str / value JSON payloads
SETTINGS_LABELS = "labels"
VALUE_INDEX = "index"
VALUE_DATE = "date"
VALUE_FILES = "files"
VALUE_ASSET_ID = "assetId"


@dataclass
class ColumnValue:
    """A single column value on a monday.com item.

    Attributes:
        title: Column title as shown on the board (e.g. "Function").
        value: Raw JSON value payload, or None when the cell is empty.
        text: Display text rendered by monday.com.
        settings_str: Raw JSON settings payload of the column, if any.
    """

    title: str
    value: str | None = None
    text: str | None = None
    settings_str: str | None = None


@dataclass
class Item:
    """A monday.com item (pulse) with its column values."""

    id: str
    name: str
    column_values: list[ColumnValue] = field(default_factory=list)


@dataclass
class ResolvedFields:
    """Columns of interest translated into usable values.

    Any field left as None was absent, empty, or failed to parse.
    """

    status: str | None = None
    function: str | None = None
    business_unit: str | None = None
    start_date: str | None = None
    attachment_ids: list[int] | None = None


def _parse_column_value(raw: dict[str, Any]) -> ColumnValue:
    column = raw.get(FIELD_COLUMN) or {}
    return ColumnValue(
        title=column.get(FIELD_TITLE, ""),
        value=raw.get(FIELD_VALUE),
        text=raw.get(FIELD_TEXT),
        settings_str=column.get(FIELD_SETTINGS_STR),
    )


def items_from_response(body: dict[str, Any] | None) -> list[Item]:
    """Map an items query response to Item dataclasses.

    Args:
        body: Parsed response body from MondayClient.fetch_item, or None.

    Returns:
        List of items in response order; empty if the payload is missing.
    """
    if not body:
        return []
    data = body.get(FIELD_DATA) or {}
    return [
        Item(
            id=str(raw.get(FIELD_ID, "")),
            name=raw.get(FIELD_NAME, ""),
            column_values=[_parse_column_value(cv) for cv in raw.get(FIELD_COLUMN_VALUES) or []],
        )
        for raw in data.get(FIELD_ITEMS) or []
    ]
