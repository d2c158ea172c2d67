"""Pydantic models for upload results and run records."""

from .run_record import BatchRunRecord, MetadataFileEntry, SingleRunRecord
from .upload_result import UploadResult

__all__ = [
    "UploadResult",
    "BatchRunRecord",
    "SingleRunRecord",
    "MetadataFileEntry",
]
