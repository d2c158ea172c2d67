"""
Retry/Timeout Orchestrator

Wraps a no-argument upload coroutine factory with bounded retries,
exponential backoff with jitter and a hard per-attempt timeout.
"""

import asyncio
import logging
import time
from dataclasses import dataclass
from pathlib import Path
from typing import Awaitable, Callable, Optional

from tenacity import (
    AsyncRetrying,
    RetryCallState,
    RetryError,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
    wait_random,
)

from uploader.errors import RemoteError, RetriesExhaustedError, UploadTimeoutError
from uploader.models import UploadResult
from .upload_client import UploadClient

logger = logging.getLogger(__name__)

MAX_RETRIES = 3
RETRY_DELAY_MS = 5000
RETRY_JITTER_MS = 1000
UPLOAD_TIMEOUT_SECONDS = 300
MAX_BACKOFF_SECONDS = 60


@dataclass(frozen=True)
class RetryPolicy:
    """
    Retry budget for one upload.

    Attributes:
        max_attempts: Total attempts, including the first one
        initial_delay_ms: Backoff before the second attempt; doubles afterwards
        max_jitter_ms: Upper bound of the random delay added to each backoff
        timeout_seconds: Hard limit for a single attempt
        max_backoff_seconds: Cap on the exponential part of the delay
    """

    max_attempts: int = MAX_RETRIES
    initial_delay_ms: int = RETRY_DELAY_MS
    max_jitter_ms: int = RETRY_JITTER_MS
    timeout_seconds: float = UPLOAD_TIMEOUT_SECONDS
    max_backoff_seconds: float = MAX_BACKOFF_SECONDS

    @classmethod
    def from_settings(cls, settings) -> "RetryPolicy":
        return cls(
            max_attempts=settings.MAX_RETRIES,
            initial_delay_ms=settings.RETRY_DELAY_MS,
            max_jitter_ms=settings.RETRY_JITTER_MS,
            timeout_seconds=settings.UPLOAD_TIMEOUT_SECONDS,
        )

    def wait_strategy(self):
        """Exponential backoff plus uniform jitter, as a tenacity wait."""
        return wait_exponential(
            multiplier=self.initial_delay_ms / 1000,
            exp_base=2,
            max=self.max_backoff_seconds,
        ) + wait_random(0, self.max_jitter_ms / 1000)


def _log_before_sleep(label: str):
    def log(retry_state: RetryCallState) -> None:
        exception = retry_state.outcome.exception() if retry_state.outcome else None
        delay = retry_state.next_action.sleep if retry_state.next_action else 0
        logger.warning(
            f"{label}: attempt {retry_state.attempt_number} failed ({exception}); "
            f"retrying in {delay:.1f}s"
        )

    return log


async def _attempt_with_timeout(
    operation: Callable[[], Awaitable[str]], timeout_seconds: float, label: str
) -> str:
    try:
        return await asyncio.wait_for(operation(), timeout=timeout_seconds)
    except asyncio.TimeoutError as e:
        raise UploadTimeoutError(label, timeout_seconds) from e


async def run_with_retry(
    operation: Callable[[], Awaitable[str]],
    policy: Optional[RetryPolicy] = None,
    label: str = "Upload",
    sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
) -> UploadResult:
    """
    Run an upload with retries and return its CID.

    Each attempt calls operation() afresh, so the full payload is resent.
    Only RemoteError (including per-attempt timeouts) is retried; any other
    exception propagates immediately.

    Args:
        operation: Zero-argument callable returning a coroutine that yields a CID
        policy: Retry budget (default: RetryPolicy())
        label: Name used in log lines and errors
        sleep: Awaitable sleep used between attempts

    Returns:
        UploadResult: CID, total elapsed seconds and attempts used

    Raises:
        RetriesExhaustedError: If all attempts failed; carries the last error
    """
    policy = policy or RetryPolicy()
    start_time = time.monotonic()
    attempts = 0

    logger.info(
        f"{label}: starting upload with retry mechanism "
        f"(max {policy.max_attempts} attempts)"
    )

    retrying = AsyncRetrying(
        stop=stop_after_attempt(policy.max_attempts),
        wait=policy.wait_strategy(),
        retry=retry_if_exception_type(RemoteError),
        before_sleep=_log_before_sleep(label),
        sleep=sleep,
        reraise=False,
    )

    try:
        async for attempt in retrying:
            with attempt:
                attempts = attempt.retry_state.attempt_number
                cid = await _attempt_with_timeout(operation, policy.timeout_seconds, label)
    except RetryError as e:
        last_error = e.last_attempt.exception()
        logger.error(f"{label} failed after {attempts} attempts: {last_error}")
        raise RetriesExhaustedError(label, attempts, last_error) from last_error

    elapsed = time.monotonic() - start_time
    if attempts > 1:
        logger.info(f"{label} completed successfully after {attempts} attempts")
    return UploadResult(cid=cid, elapsed=elapsed, attempts=attempts)


async def upload_directory_with_retry(
    client: UploadClient,
    dir_path: Path,
    policy: Optional[RetryPolicy] = None,
    sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
) -> UploadResult:
    """Upload a folder through run_with_retry."""
    return await run_with_retry(
        lambda: client.upload_directory(dir_path),
        policy,
        label=f"Folder upload {Path(dir_path).name}",
        sleep=sleep,
    )


async def upload_file_with_retry(
    client: UploadClient,
    file_path: Path,
    policy: Optional[RetryPolicy] = None,
    name: Optional[str] = None,
    sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
) -> UploadResult:
    """Upload a single file through run_with_retry."""
    return await run_with_retry(
        lambda: client.upload_file(file_path, name),
        policy,
        label=f"File upload {Path(file_path).name}",
        sleep=sleep,
    )
