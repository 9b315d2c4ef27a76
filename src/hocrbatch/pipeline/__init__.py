"""
Pipeline module for hOCR batch processing.

Provides page selection, the thread pool lock, bounded parallel dispatch,
merge-back of hOCR file names and cleanup of intermediate files, plus the
HocrReader that ties them together for one batch instance.
"""
