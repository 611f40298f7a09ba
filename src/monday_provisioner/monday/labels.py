"""Resolve monday.com column values into labels, dates and attachment IDs."""

from __future__ import annotations

import json
import logging
from typing import Any

from monday_provisioner.monday.models import (
    SETTINGS_LABELS,
    VALUE_ASSET_ID,
    VALUE_DATE,
    VALUE_FILES,
    VALUE_INDEX,
    ColumnValue,
    Item,
    ResolvedFields,
)

logger = logging.getLogger(__name__)

STATUS_COLUMN = "Status"
FUNCTION_COLUMN = "Function"
BUSINESS_UNIT_COLUMN = "Business Unit"
START_DATE_COLUMN = "Start Date"
ATTACHMENTS_COLUMN = "Attachments"

# Columns whose value is an index into the column's label settings
ENUMERATED_COLUMNS = (STATUS_COLUMN, FUNCTION_COLUMN, BUSINESS_UNIT_COLUMN)
COLUMNS_OF_INTEREST = (*ENUMERATED_COLUMNS, START_DATE_COLUMN, ATTACHMENTS_COLUMN)

_FIELD_BY_COLUMN = {
    STATUS_COLUMN: "status",
    FUNCTION_COLUMN: "function",
    BUSINESS_UNIT_COLUMN: "business_unit",
    START_DATE_COLUMN: "start_date",
    ATTACHMENTS_COLUMN: "attachment_ids",
}

LabelMap = dict[int, str]


def label_not_found(index: int) -> str:
    """Placeholder used when a selected index has no label."""
    return f"Index {index} (Label Not Found)"


def parse_label_settings(settings_str: str | None) -> LabelMap:
    """Build an index-to-label map from a column's settings payload.

    Labels with empty text are skipped.

    Raises:
        ValueError: If the payload is not valid JSON or a label key is not an integer.
    """
    settings = json.loads(settings_str or "{}")
    labels = settings.get(SETTINGS_LABELS) or {}
    return {int(index): text for index, text in labels.items() if text != ""}


def build_label_maps(column_values: list[ColumnValue]) -> dict[str, LabelMap]:
    """Build label maps for every enumerated column present on an item.

    Args:
        column_values: Column values of the item whose settings describe the board.

    Returns:
        Mapping of column title to LabelMap. Columns whose settings fail to
        parse are logged and left out.
    """
    label_maps: dict[str, LabelMap] = {}
    for column_value in column_values:
        if column_value.title not in ENUMERATED_COLUMNS:
            continue
        try:
            label_maps[column_value.title] = parse_label_settings(column_value.settings_str)
        except (ValueError, TypeError, AttributeError):
            logger.error(
                "[build_label_maps] failed to parse settings; column:%s",
                column_value.title,
                exc_info=True,
            )
    return label_maps


def _resolve_enumerated(parsed: dict[str, Any], label_map: LabelMap | None) -> str | None:
    if parsed.get(VALUE_INDEX) is None:
        return None
    index = int(parsed[VALUE_INDEX])
    if label_map is not None and index in label_map:
        return label_map[index]
    return label_not_found(index)


def _resolve_date(parsed: dict[str, Any]) -> str | None:
    return parsed.get(VALUE_DATE) or None


def _resolve_attachments(parsed: dict[str, Any]) -> list[int] | None:
    files = parsed.get(VALUE_FILES) or []
    if not files:
        return None
    return [f[VALUE_ASSET_ID] for f in files]


def resolve_fields(
    column_values: list[ColumnValue], label_maps: dict[str, LabelMap]
) -> ResolvedFields:
    """Translate the columns of interest into a ResolvedFields record.

    Empty cells are ignored. A cell that fails to parse is logged and its
    field stays None; it never aborts resolution of the other columns.

    Args:
        column_values: Column values of the item.
        label_maps: Label maps from build_label_maps().

    Returns:
        ResolvedFields for the item.
    """
    fields = ResolvedFields()
    for column_value in column_values:
        title = column_value.title
        if title not in COLUMNS_OF_INTEREST or not column_value.value:
            continue
        try:
            parsed = json.loads(column_value.value)
            if not isinstance(parsed, dict):
                continue
            resolved: Any
            if title in ENUMERATED_COLUMNS:
                resolved = _resolve_enumerated(parsed, label_maps.get(title))
            elif title == START_DATE_COLUMN:
                resolved = _resolve_date(parsed)
            else:
                resolved = _resolve_attachments(parsed)
        except (ValueError, TypeError, KeyError):
            logger.error(
                "[resolve_fields] failed to parse value; column:%s", title, exc_info=True
            )
            continue
        setattr(fields, _FIELD_BY_COLUMN[title], resolved)

    logger.info(
        "[resolve_fields] resolved item fields; function:%s;business_unit:%s;start_date:%s;"
        "attachment_count:%d",
        fields.function,
        fields.business_unit,
        fields.start_date,
        len(fields.attachment_ids or []),
    )
    return fields


def resolve_item(item: Item) -> ResolvedFields:
    """Resolve an item's columns using the label settings carried by that item."""
    return resolve_fields(item.column_values, build_label_maps(item.column_values))
