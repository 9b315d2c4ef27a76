"""
Page selection and extension validation.

Decides which page images of a batch go to the OCR engine. Both steps are
fail-fast: an empty selection or a single page with a disallowed extension
aborts the whole run before anything is dispatched.
"""

from __future__ import annotations

from typing import Iterable, Sequence

from hocrbatch.batch.models import Batch
from hocrbatch.config import EXTENSION_DELIMITER
from hocrbatch.errors import (
    InvalidExtensionError,
    NoPagesFoundError,
    NoValidExtensionsConfiguredError,
)


def find_all_pages(batch: Batch, color_mode: bool) -> list[str]:
    """
    Collect processable page image names from the batch.

    Picks the OCR input file name in color mode and the plain file name
    otherwise, skipping pages where that value is empty. Order is document
    order then page order; duplicates are kept.

    Parameters:
        batch: Batch document tree
        color_mode: True when the color switch is on

    Returns:
        List of page image file names

    Raises:
        NoPagesFoundError: If no page has a usable file name

    Example:
        >>> find_all_pages(batch, color_mode=False)
        ['BI1_0.tif', 'BI1_1.tif']
    """
    pages = [
        name
        for name in (page.image_file_name(color_mode) for page in batch.pages())
        if name
    ]
    if not pages:
        raise NoPagesFoundError(batch.batch_instance_identifier)
    return pages


def parse_valid_extensions(raw: str | None) -> list[str]:
    """Split the ';'-delimited extension property, dropping blank entries."""
    if not raw:
        return []
    return [ext.strip() for ext in raw.split(EXTENSION_DELIMITER) if ext.strip()]


def extension_of(file_name: str) -> str:
    """
    Return everything after the first '.' of the name.

    Multi-dot names keep the first-dot split: "scan.part1.tif" gives
    "part1.tif". A name without a dot is returned whole.
    """
    return file_name[file_name.find(".") + 1:]


def validate_extension(file_name: str, valid_extensions: Sequence[str]) -> str:
    """
    Check one page name against the allow-list.

    Returns:
        The stripped file name

    Raises:
        NoValidExtensionsConfiguredError: If the allow-list is empty
        InvalidExtensionError: If the extension matches no entry
    """
    if not valid_extensions:
        raise NoValidExtensionsConfiguredError()

    name = file_name.strip()
    candidate = extension_of(name).lower()
    for ext in valid_extensions:
        if candidate == ext.lower():
            return name
    raise InvalidExtensionError(name)


def validate_pages(pages: Iterable[str], valid_extensions: Sequence[str]) -> list[str]:
    """Validate every selected page; the first failure aborts."""
    return [validate_extension(page, valid_extensions) for page in pages]
