"""Destination naming and sequence allocation for provisioned folders."""

from __future__ import annotations

import logging
import os
import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from monday_provisioner.monday.models import ResolvedFields

logger = logging.getLogger(__name__)

UNKNOWN_FUNCTION = "UnknownFunction"
UNKNOWN_BUSINESS_UNIT = "UnknownBusinessUnit"
# Base-name segments for absent fields are rendered literally, not replaced
MISSING_SEGMENT = "undefined"

SEQUENCE_WIDTH = 4
SEQUENCE_PATTERN = re.compile(r"^(\d{4})_")


@dataclass
class Destination:
    """A computed destination folder for an item.

    Attributes:
        relative_path: Path relative to the destination root
            (``<Function>/<BusinessUnit>/<NNNN>_<Function>_<StartDate>_<ItemName>``).
        attachment_ids: Asset IDs to download into the new folder.
    """

    relative_path: Path
    attachment_ids: list[int] = field(default_factory=list)

    @property
    def sequence(self) -> int:
        """Sequence number encoded in the folder name."""
        return int(self.relative_path.name[:SEQUENCE_WIDTH])


def folder_segments(fields: ResolvedFields) -> tuple[str, str]:
    """Return the (function, business unit) parent folder names."""
    return fields.function or UNKNOWN_FUNCTION, fields.business_unit or UNKNOWN_BUSINESS_UNIT


def base_name(fields: ResolvedFields, item_name: str) -> str:
    """Join function, start date and item name into the folder base name."""
    return "_".join(
        [fields.function or MISSING_SEGMENT, fields.start_date or MISSING_SEGMENT, item_name]
    )


def format_sequence(number: int) -> str:
    """Render a sequence number as a zero-padded 4-digit prefix."""
    return str(number).zfill(SEQUENCE_WIDTH)


def next_sequence_number(parent_dir: Path) -> int:
    """Return one more than the highest 4-digit prefix among subdirectories.

    Only immediate subdirectories named ``NNNN_...`` are considered. A missing
    or empty parent directory yields 1.
    """
    if not parent_dir.is_dir():
        return 1
    numbers = [
        int(match.group(1))
        for entry in parent_dir.iterdir()
        if entry.is_dir() and (match := SEQUENCE_PATTERN.match(entry.name))
    ]
    return max(numbers, default=0) + 1


def compute_destination(
    fields: ResolvedFields, item_name: str, parent_root: str | Path
) -> Destination:
    """Compute the next destination path for an item without creating it.

    Args:
        fields: Resolved item fields.
        item_name: Sanitized item name.
        parent_root: Root directory under which destination trees are created.

    Returns:
        Destination with a path relative to parent_root.
    """
    function_folder, business_folder = folder_segments(fields)
    relative_parent = Path(function_folder, business_folder)
    number = next_sequence_number(Path(parent_root) / relative_parent)
    relative_path = relative_parent / f"{format_sequence(number)}_{base_name(fields, item_name)}"
    logger.info("[compute_destination] computed destination; path:%s", relative_path)
    return Destination(relative_path=relative_path, attachment_ids=fields.attachment_ids or [])


def claim_destination(
    fields: ResolvedFields, item_name: str, parent_root: str | Path
) -> Destination:
    """Compute and atomically create the next destination folder.

    The folder is created with an exclusive mkdir. If another request has
    taken the computed number in the meantime, the following number is tried,
    so concurrent requests for the same parent never share a sequence number.

    Args:
        fields: Resolved item fields.
        item_name: Sanitized item name.
        parent_root: Root directory under which destination trees are created.

    Returns:
        Destination whose directory now exists (empty) under parent_root.
    """
    function_folder, business_folder = folder_segments(fields)
    relative_parent = Path(function_folder, business_folder)
    parent_dir = Path(parent_root) / relative_parent
    parent_dir.mkdir(parents=True, exist_ok=True)

    name = base_name(fields, item_name)
    number = next_sequence_number(parent_dir)
    while True:
        folder_name = f"{format_sequence(number)}_{name}"
        try:
            os.mkdir(parent_dir / folder_name)
        except FileExistsError:
            logger.warning(
                "[claim_destination] sequence already taken; parent:%s;sequence:%d",
                relative_parent,
                number,
            )
            number = max(number + 1, next_sequence_number(parent_dir))
            continue
        break

    relative_path = relative_parent / folder_name
    logger.info("[claim_destination] claimed destination; path:%s", relative_path)
    return Destination(relative_path=relative_path, attachment_ids=fields.attachment_ids or [])
