"""Removal of intermediate rasters left behind by OCR conversion."""

from __future__ import annotations

from pathlib import Path
import logging

logger = logging.getLogger(__name__)


def clean_intermediate_files(
    folder: Path,
    source_marker: str = ".tif",
    intermediate_marker: str = ".png",
) -> list[Path]:
    """
    Delete intermediate files from the folder (non-recursive).

    A file is intermediate when its lower-cased name contains both markers
    anywhere, e.g. "page.tif.png". This is a substring test, not a suffix
    test. A missing or empty folder is a no-op.

    Returns:
        Paths that were removed

    Example:
        >>> clean_intermediate_files(Path("/data/local/BI1"))
        [PosixPath('/data/local/BI1/BI1_0.tif.png')]
    """
    if not folder.is_dir():
        return []

    src = source_marker.lower()
    mid = intermediate_marker.lower()
    removed: list[Path] = []
    for entry in folder.iterdir():
        name = entry.name.lower()
        if src in name and mid in name and entry.is_file():
            entry.unlink()
            removed.append(entry)

    if removed:
        logger.info(
            "intermediate_files_removed",
            extra={"folder": str(folder), "count": len(removed)},
        )
    return removed
