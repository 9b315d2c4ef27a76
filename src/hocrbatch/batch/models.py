"""
Pydantic models for the batch document tree.

A batch is an ordered list of documents, each an ordered list of pages. The
models implement the subset of the batch document needed for hOCR
generation; unknown keys are kept so a load/save cycle does not drop data
owned by other plugins.
"""

from __future__ import annotations

from typing import Iterator

from pydantic import BaseModel, ConfigDict, Field


class Page(BaseModel):
    """
    One scanned page image.

    `new_file_name` is the plain image name and `ocr_input_file_name` the
    color-mode OCR input. Which one is authoritative is decided once per run
    by the color mode flag (see `image_file_name`). `hocr_file_name` is
    filled in after a successful run.
    """

    model_config = ConfigDict(populate_by_name=True, extra="allow")

    identifier: str | None = None
    new_file_name: str | None = Field(default=None, alias="newFileName")
    ocr_input_file_name: str | None = Field(default=None, alias="OCRInputFileName")
    hocr_file_name: str | None = Field(default=None, alias="hocrFileName")

    def image_file_name(self, color_mode: bool) -> str | None:
        """
        Get the file name used for selection and merge-back.

        Parameters:
            color_mode: True when the color switch is on

        Returns:
            OCR input file name in color mode, plain file name otherwise
        """
        if color_mode:
            return self.ocr_input_file_name
        return self.new_file_name


class Document(BaseModel):
    """A logical document: an ordered list of pages."""

    model_config = ConfigDict(populate_by_name=True, extra="allow")

    identifier: str | None = None
    pages: list[Page] = Field(default_factory=list)


class Batch(BaseModel):
    """
    One batch instance's document tree.

    Owned by the caller for the duration of a run and mutated in place only
    by the result merger.
    """

    model_config = ConfigDict(populate_by_name=True, extra="allow")

    batch_instance_identifier: str = Field(alias="batchInstanceIdentifier")
    documents: list[Document] = Field(default_factory=list)

    def pages(self) -> Iterator[Page]:
        """
        Iterate all pages in document order, then page order.

        Example:
            >>> for page in batch.pages():
            ...     print(page.new_file_name)
        """
        for document in self.documents:
            yield from document.pages
