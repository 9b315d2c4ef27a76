"""Parallel Tesseract hOCR generation for scanned page batches."""

__version__ = "0.1.0"
