"""
hOCR generation for one batch instance.

Coordinates page selection, extension validation, the thread pool lock, the
parallel OCR dispatch and the merge-back of hOCR file names into the batch.
"""

from __future__ import annotations

from dataclasses import dataclass
from functools import partial
from pathlib import Path
import logging
import time

from hocrbatch.batch.store import BatchStore
from hocrbatch.config import (
    HocrProperties,
    PropertyService,
    ReaderSettings,
    is_windows,
)
from hocrbatch.errors import ConfigurationError, OCRDispatchError
from hocrbatch.ocr import OCRBackend, TesseractBackend

from .cleanup import clean_intermediate_files
from .executor import run_tasks
from .lock import thread_pool_lock
from .output import merge_results
from .selection import find_all_pages, parse_valid_extensions, validate_pages
from .worker import OCRTask, process_task

LOGGER = logging.getLogger("hocrbatch")


@dataclass
class ReadResult:
    """
    Summary of one reader run.

    Attributes:
        batch_instance_id: Batch that was processed
        pages_selected: Number of page images dispatched to the engine
        pages_processed: Number of batch pages that received an hOCR file name
        intermediate_files_removed: Number of intermediate rasters deleted
        elapsed_seconds: Total run time
        skipped: True when the plugin switch was off
    """

    batch_instance_id: str
    pages_selected: int = 0
    pages_processed: int = 0
    intermediate_files_removed: int = 0
    elapsed_seconds: float = 0.0
    skipped: bool = False


class HocrReader:
    """
    Generates hOCR files for every page of a batch and records them.

    Collaborators are injected: a BatchStore to load and save the document
    tree, a PropertyService for per-batch plugin properties, and optionally
    an OCR backend (a TesseractBackend for the host platform by default).

    Example:
        >>> reader = HocrReader(
        ...     store=JsonBatchStore(Path("/data/local")),
        ...     properties=load_properties("properties.json"),
        ...     settings=ReaderSettings(local_folder=Path("/data/local"), max_workers=4),
        ... )
        >>> result = reader.run("BI1", "TESSERACT_HOCR")
    """

    def __init__(
        self,
        store: BatchStore,
        properties: PropertyService,
        settings: ReaderSettings,
        *,
        backend: OCRBackend | None = None,
        windows: bool | None = None,
    ) -> None:
        self.store = store
        self.properties = properties
        self.settings = settings
        self.windows = is_windows() if windows is None else windows
        self.commands = settings.commands.for_platform(self.windows)
        self.backend = backend or TesseractBackend(windows=self.windows, logger=LOGGER)

    def working_dir(self, batch_instance_id: str) -> Path:
        return self.settings.local_folder / batch_instance_id

    def run(self, batch_instance_id: str, plugin_name: str) -> ReadResult:
        """
        Generate hOCR files for a batch and save the updated batch.

        Parameters:
            batch_instance_id: Batch to process
            plugin_name: Plugin the lock marker is created for

        Returns:
            ReadResult (skipped=True when the switch property is off)

        Raises:
            ConfigurationError: Missing properties, commands or extensions
            NoPagesFoundError: If the batch has no processable page
            InvalidExtensionError: If any page has a disallowed extension
            LockCreationError: If the lock marker cannot be created
            TaskError: If any page fails; the batch is saved without hOCR names
        """
        start_time = time.perf_counter()
        props = HocrProperties.resolve(
            self.properties, batch_instance_id, self.settings.property_scope
        )
        if not props.enabled:
            LOGGER.info(
                "plugin_skipped",
                extra={"batch_instance_id": batch_instance_id, "reason": "switch off"},
            )
            return ReadResult(batch_instance_id=batch_instance_id, skipped=True)

        LOGGER.info("run_started", extra={"batch_instance_id": batch_instance_id})
        if not self.commands:
            raise ConfigurationError("No OCR command templates configured for this platform.")
        valid_extensions = parse_valid_extensions(props.valid_extensions)
        color_mode = props.color_mode
        working_dir = self.working_dir(batch_instance_id)
        LOGGER.info(
            "properties_initialized",
            extra={
                "batch_instance_id": batch_instance_id,
                "language": props.language,
                "version": props.version,
                "color_mode": color_mode,
            },
        )

        batch = self.store.load(batch_instance_id)
        pages = validate_pages(find_all_pages(batch, color_mode), valid_extensions)
        LOGGER.info(
            "pages_selected",
            extra={"batch_instance_id": batch_instance_id, "count": len(pages)},
        )

        with thread_pool_lock(
            self.settings.local_folder,
            batch_instance_id,
            self.settings.lock_folder_name,
            plugin_name,
        ):
            tasks = [
                OCRTask.build(
                    page,
                    working_dir=working_dir,
                    commands=self.commands,
                    language=props.language or "",
                    version=props.version or "",
                    color_mode=color_mode,
                )
                for page in pages
            ]
            LOGGER.info("dispatch_started", extra={"tasks": len(tasks)})
            try:
                results = run_tasks(
                    tasks,
                    partial(process_task, backend=self.backend),
                    max_workers=self.settings.max_workers,
                )
            except OCRDispatchError:
                # Dispatch failures persist the batch unmerged, once.
                self.store.save(batch)
                raise
            LOGGER.info("dispatch_finished", extra={"tasks": len(tasks)})

        updated = merge_results(batch, results, color_mode)
        removed = clean_intermediate_files(
            working_dir,
            self.settings.source_marker,
            self.settings.intermediate_marker,
        )
        self.store.save(batch)

        elapsed = time.perf_counter() - start_time
        LOGGER.info(
            "run_finished",
            extra={
                "batch_instance_id": batch_instance_id,
                "pages_processed": updated,
                "elapsed_seconds": round(elapsed, 3),
            },
        )
        return ReadResult(
            batch_instance_id=batch_instance_id,
            pages_selected=len(pages),
            pages_processed=updated,
            intermediate_files_removed=len(removed),
            elapsed_seconds=elapsed,
        )
