"""
Error taxonomy for the upload pipeline.

Every failure that reaches the CLI boundary is either one of these
exceptions, a metadata_engine exception, or a plain OSError.
"""

from typing import Any

from metadata_engine.exceptions import MetadataGenerationError

EXIT_FAILURE = 1
EXIT_VALIDATION = 2
EXIT_REMOTE = 3


class UploaderError(Exception):
    """Base exception for upload pipeline errors."""

    def __init__(self, message: str, exit_code: int = EXIT_FAILURE, details: Any = None):
        self.message = message
        self.exit_code = exit_code
        self.details = details
        super().__init__(message)


class ValidationError(UploaderError):
    """Raised when input is unusable: missing directory, no images, bad names."""

    def __init__(self, message: str, details: Any = None):
        super().__init__(message=message, exit_code=EXIT_VALIDATION, details=details)


class RemoteError(UploaderError):
    """Raised when the pinning service reports a failure. Retryable."""

    def __init__(self, message: str, status_code: int | None = None, details: Any = None):
        self.status_code = status_code
        super().__init__(message=message, exit_code=EXIT_REMOTE, details=details)


class UploadTimeoutError(RemoteError):
    """Raised when a single upload attempt exceeds its timeout."""

    def __init__(self, label: str, timeout_seconds: float):
        super().__init__(
            message=f"{label} timed out after {timeout_seconds:g} seconds",
            details={"label": label, "timeout_seconds": timeout_seconds},
        )


class RetriesExhaustedError(UploaderError):
    """Raised when every upload attempt failed."""

    def __init__(self, label: str, attempts: int, last_error: BaseException | None):
        self.attempts = attempts
        self.last_error = last_error
        super().__init__(
            message=f"{label} failed after {attempts} attempts: {last_error}",
            exit_code=EXIT_REMOTE,
            details={"label": label, "attempts": attempts, "last_error": str(last_error)},
        )


def exit_code_for(exc: BaseException) -> int:
    """Map an exception reaching the CLI boundary to a process exit code."""
    if isinstance(exc, UploaderError):
        return exc.exit_code
    if isinstance(exc, MetadataGenerationError) and not isinstance(exc, OSError):
        return EXIT_VALIDATION
    return EXIT_FAILURE


def format_error_report(exc: BaseException) -> dict:
    """
    Format a consistent error report for logging.

    Args:
        exc: Exception that aborted the run

    Returns:
        dict: Category, message and optional details
    """
    if isinstance(exc, (RemoteError, RetriesExhaustedError)):
        category = "remote"
    elif exit_code_for(exc) == EXIT_VALIDATION:
        category = "validation"
    elif isinstance(exc, OSError):
        category = "filesystem"
    else:
        category = "unexpected"

    report = {
        "error": True,
        "category": category,
        "exit_code": exit_code_for(exc),
        "message": getattr(exc, "message", None) or str(exc),
    }
    details = getattr(exc, "details", None)
    if details:
        report["details"] = details
    return report
