"""
Snapshot Ingest Adapters
"""

from .upload_formats import (
    UploadFormat,
    RawKeywordRow,
    detect_upload_format,
    normalize_upload,
    row_from_result,
    dedupe_rows,
)

__all__ = [
    "UploadFormat",
    "RawKeywordRow",
    "detect_upload_format",
    "normalize_upload",
    "row_from_result",
    "dedupe_rows",
]
