"""
Thread pool lock marker.

A marker file signals to external monitors that a plugin is running OCR for
a batch. It is advisory: nothing here prevents a second run from starting.
"""

from __future__ import annotations

import json
import logging
import os
from contextlib import contextmanager
from datetime import datetime, timezone
from pathlib import Path
from typing import Iterator

from hocrbatch.errors import LockCreationError, LockReleaseError

LOCK_SUFFIX = ".lock"

logger = logging.getLogger(__name__)


def lock_file_path(
    local_folder: Path,
    batch_instance_id: str,
    lock_folder_name: str,
    plugin_name: str,
) -> Path:
    """
    Path of the lock marker for one (batch, plugin) pair.

    Example:
        >>> lock_file_path(Path("/data/local"), "BI1", "thread-pool-lock", "TESSERACT_HOCR")
        PosixPath('/data/local/BI1/thread-pool-lock/TESSERACT_HOCR.lock')
    """
    return Path(local_folder) / batch_instance_id / lock_folder_name / f"{plugin_name}{LOCK_SUFFIX}"


def create_lock_file(path: Path, *, batch_instance_id: str, plugin_name: str) -> Path:
    """
    Create the lock marker, including missing parent folders.

    Raises:
        LockCreationError: On any filesystem error
    """
    if path.exists():
        logger.warning(
            "lock_already_present",
            extra={"lock_path": str(path), "batch_instance_id": batch_instance_id},
        )
    payload = {
        "batch_instance_id": batch_instance_id,
        "plugin_name": plugin_name,
        "pid": os.getpid(),
        "created_at": datetime.now(timezone.utc).isoformat(),
    }
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(json.dumps(payload), encoding="utf-8")
    except OSError as e:
        raise LockCreationError(f"Error in creating thread pool lock file {path}: {e}") from e
    return path


def delete_lock_file(path: Path) -> None:
    """
    Remove the lock marker. A marker that is already gone is not an error.

    Raises:
        LockReleaseError: On any other filesystem error
    """
    try:
        path.unlink(missing_ok=True)
    except OSError as e:
        raise LockReleaseError(f"Error in deleting thread pool lock file {path}: {e}") from e


@contextmanager
def thread_pool_lock(
    local_folder: Path,
    batch_instance_id: str,
    lock_folder_name: str,
    plugin_name: str,
) -> Iterator[Path]:
    """
    Hold the lock marker for the duration of the block.

    The marker is created before the block runs and removed on every exit
    path. A removal failure is logged and never replaces the block's own
    outcome.

    Raises:
        LockCreationError: If the marker cannot be created (block not run)

    Example:
        >>> with thread_pool_lock(root, "BI1", "thread-pool-lock", "TESSERACT_HOCR"):
        ...     results = run_tasks(tasks, worker, max_workers=4)
    """
    path = lock_file_path(local_folder, batch_instance_id, lock_folder_name, plugin_name)
    create_lock_file(path, batch_instance_id=batch_instance_id, plugin_name=plugin_name)
    logger.info("lock_created", extra={"lock_path": str(path)})
    try:
        yield path
    finally:
        try:
            delete_lock_file(path)
        except LockReleaseError:
            logger.error("lock_release_failed", exc_info=True, extra={"lock_path": str(path)})
        else:
            logger.info("lock_deleted", extra={"lock_path": str(path)})
