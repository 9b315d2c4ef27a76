"""
Batch persistence.

The reader only needs two capabilities from the metadata store: load a batch
by instance id and save it back. JsonBatchStore is a filesystem reference
implementation keeping one JSON document per batch instance.
"""

from __future__ import annotations

import os
import tempfile
from dataclasses import dataclass
from pathlib import Path
from typing import Protocol

from .loaders import load_batch
from .models import Batch

BATCH_FILE_NAME = "batch.json"


class BatchStore(Protocol):
    """Minimal interface for a batch metadata store."""

    def load(self, batch_instance_id: str) -> Batch:
        ...

    def save(self, batch: Batch) -> None:
        ...


@dataclass
class JsonBatchStore:
    """
    Stores batches as <root>/<batch_instance_id>/batch.json.

    Saves go through a temporary file in the same directory followed by an
    atomic replace, so readers never see a half-written document.
    """

    root: Path

    def batch_path(self, batch_instance_id: str) -> Path:
        return self.root / batch_instance_id / BATCH_FILE_NAME

    def load(self, batch_instance_id: str) -> Batch:
        return load_batch(self.batch_path(batch_instance_id))

    def save(self, batch: Batch) -> None:
        path = self.batch_path(batch.batch_instance_identifier)
        path.parent.mkdir(parents=True, exist_ok=True)
        payload = batch.model_dump_json(by_alias=True, exclude_none=True, indent=2)
        fd, tmp_name = tempfile.mkstemp(prefix=".batch-", suffix=".json", dir=path.parent)
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                f.write(payload)
            os.replace(tmp_name, path)
        except BaseException:
            Path(tmp_name).unlink(missing_ok=True)
            raise
