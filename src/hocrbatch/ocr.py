from __future__ import annotations

import logging
import re
import shlex
import subprocess
import time
from dataclasses import dataclass, field
from pathlib import Path
from typing import TYPE_CHECKING, Mapping, Protocol

from hocrbatch.config import is_windows
from hocrbatch.errors import OCREngineError

if TYPE_CHECKING:
    from hocrbatch.pipeline.worker import OCRTask

_PLACEHOLDER = re.compile(r"\{(\w+)\}")


class OCRBackend(Protocol):
    """Minimal interface for an OCR backend."""

    name: str

    def ocr_image(self, task: OCRTask) -> Path:
        ...


def substitute(token: str, values: Mapping[str, str]) -> str:
    """
    Replace {name} placeholders in one command token.

    Unknown names and other braces are left untouched, so tokens such as
    inline scripts survive substitution.

    Example:
        >>> substitute("{source}.png", {"source": "/b/p1.tif"})
        '/b/p1.tif.png'
    """
    return _PLACEHOLDER.sub(lambda m: values.get(m.group(1), m.group(0)), token)


def _unquote(token: str) -> str:
    if len(token) >= 2 and token[0] == token[-1] and token[0] in "\"'":
        return token[1:-1]
    return token


@dataclass
class TesseractBackend:
    """Tesseract-backed hOCR generation driven by command templates.

    Every template of the task is split into arguments first and then has
    its placeholders substituted, so paths containing spaces stay single
    arguments. Supported placeholders:

        {source} {target} {target_base} {language} {version} {color} {workdir}

    With the default Unix templates a page runs as:
        convert <page> <page>.png
        tesseract <page>.png <target_base> -l <language> hocr
    """

    name: str = "tesseract"
    windows: bool = field(default_factory=is_windows)
    logger: logging.Logger | None = None

    def split_template(self, template: str) -> list[str]:
        if self.windows:
            return [_unquote(tok) for tok in shlex.split(template, posix=False)]
        return shlex.split(template)

    def resolve_commands(self, task: OCRTask) -> list[list[str]]:
        """Resolve the task's templates into argument lists, in order."""
        values = task.placeholders()
        return [
            [substitute(tok, values) for tok in self.split_template(template)]
            for template in task.commands
        ]

    def ocr_image(self, task: OCRTask) -> Path:
        """Run all commands for one page and return the produced hOCR path."""
        for argv in self.resolve_commands(task):
            t0 = time.perf_counter()
            try:
                subprocess.run(
                    argv,
                    cwd=task.working_dir,
                    capture_output=True,
                    text=True,
                    check=True,
                )
            except FileNotFoundError as e:
                raise OCREngineError(
                    f"OCR command not found: {argv[0]}. Ensure it is installed and on your PATH."
                ) from e
            except subprocess.CalledProcessError as e:
                raise OCREngineError(
                    f"OCR command failed for {task.file_name} (exit {e.returncode}):\n"
                    f"{e.stderr or e.stdout}"
                ) from e
            except OSError as e:
                raise OCREngineError(f"OCR command could not run for {task.file_name}: {e}") from e

            if self.logger:
                self.logger.debug(
                    "ocr_command_finished",
                    extra={
                        "file_name": task.file_name,
                        "command": argv[0],
                        "elapsed_ms": int((time.perf_counter() - t0) * 1000),
                    },
                )

        if not task.target_path.exists():
            raise OCREngineError(
                f"OCR engine produced no output for {task.file_name}: expected {task.target_path}"
            )
        return task.target_path
