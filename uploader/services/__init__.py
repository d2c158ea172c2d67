"""Service layer for uploads, workflows and pinning integrations."""

from .pinning_provider import PinningProvider
from .pinata_provider import PinataProvider
from .mock_pinning_provider import MockPinningProvider
from .provider_factory import get_pinning_provider, reset_provider
from .upload_client import UploadClient
from .retry_orchestrator import (
    RetryPolicy,
    run_with_retry,
    upload_directory_with_retry,
    upload_file_with_retry,
)
from .result_recorder import ResultRecorder
from .batch_workflow import BatchWorkflow
from .single_workflow import SingleWorkflow

__all__ = [
    "PinningProvider",
    "PinataProvider",
    "MockPinningProvider",
    "get_pinning_provider",
    "reset_provider",
    "UploadClient",
    "RetryPolicy",
    "run_with_retry",
    "upload_directory_with_retry",
    "upload_file_with_retry",
    "ResultRecorder",
    "BatchWorkflow",
    "SingleWorkflow",
]
