"""
Failure kinds raised by the hOCR batch reader.

Every abort condition surfaces to the caller as a subclass of HocrBatchError
carrying a human-readable message. The caller is expected to mark the
enclosing batch as errored; nothing in this package retries.
"""

from __future__ import annotations


class HocrBatchError(Exception):
    """Base exception for hocrbatch."""


class ConfigurationError(HocrBatchError):
    """Plugin configuration is missing or unusable."""


class MissingPropertyError(ConfigurationError):
    """A required plugin property is absent or blank."""

    def __init__(self, key: str, scope: str) -> None:
        super().__init__(f"Required property {key!r} is not configured for {scope}.")
        self.key = key
        self.scope = scope


class NoValidExtensionsConfiguredError(ConfigurationError):
    """The valid-extension allow-list is empty."""

    def __init__(self) -> None:
        super().__init__("No valid extensions are specified in resources.")


class SelectionError(HocrBatchError):
    """Page selection produced nothing to process."""


class NoPagesFoundError(SelectionError):
    def __init__(self, batch_instance_id: str | None = None) -> None:
        msg = "No pages found in batch."
        if batch_instance_id:
            msg = f"No pages found in batch {batch_instance_id}."
        super().__init__(msg)
        self.batch_instance_id = batch_instance_id


class ValidationError(HocrBatchError):
    """A selected page cannot be admitted to processing."""


class InvalidExtensionError(ValidationError):
    def __init__(self, file_name: str) -> None:
        super().__init__(f"File {file_name} has invalid extension.")
        self.file_name = file_name


class TaskError(HocrBatchError):
    """A single page could not be turned into an hOCR artifact."""


class TaskConstructionError(TaskError):
    """Per-page task could not be built (e.g. source image missing)."""


class OCREngineError(TaskError):
    """The external OCR engine failed for one page."""


class OCRDispatchError(TaskError):
    """
    Aggregate failure of the parallel dispatch.

    Attributes:
        failures: Number of tasks that failed
        total: Number of tasks dispatched
        first_error: The first failure observed
    """

    def __init__(self, failures: int, total: int, first_error: BaseException) -> None:
        super().__init__(
            f"{failures} of {total} OCR task(s) failed; first error: {first_error}"
        )
        self.failures = failures
        self.total = total
        self.first_error = first_error


class LockError(HocrBatchError):
    """Thread pool lock marker could not be managed."""


class LockCreationError(LockError):
    pass


class LockReleaseError(LockError):
    pass
