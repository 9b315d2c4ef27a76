"""
Single page OCR task.

An OCRTask carries everything a worker thread needs to turn one page image
into an hOCR file. Tasks only read their own page data and return a
TaskResult; the batch tree is never touched from a worker.
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import NamedTuple, Sequence
import logging
import time

from hocrbatch.errors import HocrBatchError, OCREngineError, TaskConstructionError
from hocrbatch.ocr import OCRBackend

from .output import hocr_output_path

COLOR_ON = "ON"
COLOR_OFF = "OFF"

logger = logging.getLogger(__name__)


class TaskResult(NamedTuple):
    """
    Outcome of a successful task.

    Attributes:
        file_name: Page image file name the task was built from
        hocr_file_name: Name of the produced hOCR file
    """

    file_name: str
    hocr_file_name: str


@dataclass(frozen=True)
class OCRTask:
    """
    One page's OCR work item.

    Attributes:
        file_name: Page image file name as selected from the batch
        source_path: Absolute path of the page image
        target_path: Path the hOCR file is expected at
        commands: Command templates, run in order
        language: OCR language parameter
        version: OCR engine version
        color_mode: Whether the color switch is on
        working_dir: Batch working directory (process cwd)
    """

    file_name: str
    source_path: Path
    target_path: Path
    commands: tuple[str, ...]
    language: str
    version: str
    color_mode: bool
    working_dir: Path

    @classmethod
    def build(
        cls,
        file_name: str,
        *,
        working_dir: Path,
        commands: Sequence[str],
        language: str,
        version: str,
        color_mode: bool,
    ) -> OCRTask:
        """
        Build a task for one page.

        Raises:
            TaskConstructionError: If the page name is blank or its image is
                missing from the working directory
        """
        name = file_name.strip()
        if not name:
            raise TaskConstructionError("Page has a blank image file name.")

        source_path = working_dir / name
        if not source_path.is_file():
            raise TaskConstructionError(f"Image file not found for page {name}: {source_path}")

        return cls(
            file_name=name,
            source_path=source_path,
            target_path=hocr_output_path(name, working_dir, version),
            commands=tuple(commands),
            language=language,
            version=version,
            color_mode=color_mode,
            working_dir=working_dir,
        )

    @property
    def target_base(self) -> Path:
        """Target path without suffix; Tesseract appends its own."""
        return self.target_path.with_suffix("")

    def placeholders(self) -> dict[str, str]:
        return {
            "source": str(self.source_path),
            "target": str(self.target_path),
            "target_base": str(self.target_base),
            "language": self.language,
            "version": self.version,
            "color": COLOR_ON if self.color_mode else COLOR_OFF,
            "workdir": str(self.working_dir),
        }


def process_task(task: OCRTask, backend: OCRBackend) -> TaskResult:
    """
    Run the OCR engine for one task.

    Raises:
        OCREngineError: If the engine fails or cannot be run
    """
    t0 = time.perf_counter()
    logger.info("task_started", extra={"file_name": task.file_name, "engine": backend.name})
    try:
        out_path = backend.ocr_image(task)
    except HocrBatchError:
        raise
    except OSError as e:
        raise OCREngineError(f"I/O error while processing {task.file_name}: {e}") from e

    logger.info(
        "task_finished",
        extra={
            "file_name": task.file_name,
            "hocr_file_name": out_path.name,
            "elapsed_ms": int((time.perf_counter() - t0) * 1000),
        },
    )
    return TaskResult(task.file_name, out_path.name)
