"""
hOCR output naming and merge-back.

Resolves where the OCR engine writes each page's hOCR file and records the
produced file names on the batch document tree.
"""

from __future__ import annotations

from pathlib import Path
import re
from typing import Iterable

from hocrbatch.batch.models import Batch

HOCR_EXTENSION = ".hocr"
# Tesseract releases before 3.02 write hOCR with an .html suffix.
LEGACY_HOCR_EXTENSION = ".html"
_LEGACY_BEFORE = (3, 2)

_VERSION = re.compile(r"\s*v?(\d+)(?:\.(\d+))?")


def hocr_extension(version: str | None) -> str:
    """
    Output suffix written by the given engine version.

    Example:
        >>> hocr_extension("3.01")
        '.html'
        >>> hocr_extension("4.1.1")
        '.hocr'
    """
    m = _VERSION.match(version or "")
    if m is None:
        return HOCR_EXTENSION
    parsed = (int(m.group(1)), int(m.group(2) or 0))
    return LEGACY_HOCR_EXTENSION if parsed < _LEGACY_BEFORE else HOCR_EXTENSION


def hocr_output_path(file_name: str, working_dir: Path, version: str | None = None) -> Path:
    """
    Deterministic hOCR path for a page image.

    The page's base name gets the recognized-output suffix and is placed in
    the working directory.

    Example:
        >>> hocr_output_path("BI1_0.tif", Path("/data/local/BI1"))
        PosixPath('/data/local/BI1/BI1_0.hocr')
    """
    return working_dir / f"{Path(file_name).stem}{hocr_extension(version)}"


def update_batch(batch: Batch, file_name: str, hocr_file_name: str, color_mode: bool) -> int:
    """
    Record one page's hOCR file name on every matching page.

    Pages are matched on the same file name used at selection time,
    compared case-insensitively. No match is not an error.

    Returns:
        Number of pages updated
    """
    wanted = file_name.strip().lower()
    updated = 0
    for page in batch.pages():
        image_name = page.image_file_name(color_mode)
        if image_name is not None and image_name.strip().lower() == wanted:
            page.hocr_file_name = hocr_file_name
            updated += 1
    return updated


def merge_results(
    batch: Batch,
    results: Iterable[tuple[str, str]],
    color_mode: bool,
) -> int:
    """
    Apply update_batch for every (file_name, hocr_file_name) pair.

    Running it twice with the same results leaves the tree unchanged.

    Returns:
        Total number of page updates
    """
    return sum(
        update_batch(batch, file_name, hocr_file_name, color_mode)
        for file_name, hocr_file_name in results
    )
