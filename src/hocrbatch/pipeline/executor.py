"""
Bounded parallel execution of OCR tasks.

Runs one callable per task on a fixed-size thread pool and waits for every
task to finish. Failures do not cancel siblings; once all tasks are done, a
single OCRDispatchError is raised if any of them failed.
"""

from __future__ import annotations

import logging
from concurrent.futures import ThreadPoolExecutor, as_completed
from typing import Callable, Sequence, TypeVar

from hocrbatch.errors import OCRDispatchError

T = TypeVar("T")
R = TypeVar("R")

logger = logging.getLogger(__name__)


def run_tasks(
    tasks: Sequence[T],
    fn: Callable[[T], R],
    *,
    max_workers: int,
) -> list[R]:
    """
    Run fn over all tasks with at most max_workers in flight.

    Parameters:
        tasks: Tasks to run; scheduling order is unspecified
        fn: Callable run once per task on a worker thread
        max_workers: Concurrency bound (>= 1)

    Returns:
        Results of all tasks, in submission order

    Raises:
        ValueError: If max_workers is below 1
        OCRDispatchError: If any task raised; chained from the first error
    """
    if max_workers < 1:
        raise ValueError(f"max_workers must be >= 1, got {max_workers}")
    if not tasks:
        return []

    failures = 0
    first_error: Exception | None = None

    with ThreadPoolExecutor(
        max_workers=min(max_workers, len(tasks)),
        thread_name_prefix="hocr-worker",
    ) as executor:
        futures = [executor.submit(fn, task) for task in tasks]
        for future in as_completed(futures):
            error = future.exception()
            if error is None:
                continue
            failures += 1
            if first_error is None:
                first_error = error
            logger.warning("task_failed", extra={"error": str(error)})

    if first_error is not None:
        logger.error(
            "dispatch_failed",
            extra={"failures": failures, "total": len(tasks)},
        )
        raise OCRDispatchError(failures, len(tasks), first_error) from first_error

    return [future.result() for future in futures]
