"""
Batch document tree models, loaders and storage.

Basic usage:
    >>> from hocrbatch.batch import JsonBatchStore
    >>>
    >>> store = JsonBatchStore(Path("/data/local"))
    >>> batch = store.load("BI1")
    >>> for page in batch.pages():
    ...     print(page.new_file_name, page.hocr_file_name)
"""

from .models import (
    Batch,
    Document,
    Page,
)
from .loaders import (
    is_url,
    fetch_json,
    load_json,
    parse_batch,
    load_batch,
)
from .store import (
    BatchStore,
    JsonBatchStore,
)

__all__ = [
    # Models
    "Batch",
    "Document",
    "Page",
    # Loaders
    "is_url",
    "fetch_json",
    "load_json",
    "parse_batch",
    "load_batch",
    # Storage
    "BatchStore",
    "JsonBatchStore",
]
