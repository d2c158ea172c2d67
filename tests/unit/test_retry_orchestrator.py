"""
Unit tests for the retry/timeout orchestrator.

Delays are zeroed through RetryPolicy and an injected sleep, so no test
waits for real backoff.
"""

import asyncio
from unittest.mock import AsyncMock

import pytest

from uploader.errors import RemoteError, RetriesExhaustedError, UploadTimeoutError
from uploader.services.retry_orchestrator import (
    MAX_RETRIES,
    RETRY_DELAY_MS,
    UPLOAD_TIMEOUT_SECONDS,
    RetryPolicy,
    run_with_retry,
    upload_directory_with_retry,
    upload_file_with_retry,
)
from uploader.services.upload_client import UploadClient


def flaky(failures: int, cid: str = "bafyok"):
    """Operation that raises RemoteError `failures` times, then returns cid."""
    calls = {"count": 0}

    async def operation():
        calls["count"] += 1
        if calls["count"] <= failures:
            raise RemoteError(f"transient failure {calls['count']}")
        return cid

    return operation, calls


class TestRunWithRetry:
    """Tests for run_with_retry."""

    @pytest.mark.asyncio
    async def test_success_on_first_attempt(self, fast_policy):
        operation, calls = flaky(0)

        result = await run_with_retry(operation, fast_policy)

        assert result.cid == "bafyok"
        assert result.attempts == 1
        assert calls["count"] == 1

    @pytest.mark.asyncio
    async def test_fail_twice_then_succeed_uses_three_attempts(self, fast_policy):
        operation, calls = flaky(2)

        result = await run_with_retry(operation, fast_policy)

        assert result.cid == "bafyok"
        assert result.attempts == 3
        assert calls["count"] == 3

    @pytest.mark.asyncio
    async def test_always_failing_makes_exactly_max_attempts(self, fast_policy):
        operation, calls = flaky(100)

        with pytest.raises(RetriesExhaustedError) as exc_info:
            await run_with_retry(operation, fast_policy, label="Folder upload images")

        assert calls["count"] == fast_policy.max_attempts
        assert exc_info.value.attempts == fast_policy.max_attempts
        assert isinstance(exc_info.value.last_error, RemoteError)
        assert "transient failure 3" in str(exc_info.value)
        assert "Folder upload images" in str(exc_info.value)

    @pytest.mark.asyncio
    async def test_timeout_consumes_an_attempt(self):
        policy = RetryPolicy(max_attempts=2, initial_delay_ms=0, max_jitter_ms=0, timeout_seconds=0.01)
        calls = {"count": 0}

        async def operation():
            calls["count"] += 1
            if calls["count"] == 1:
                await asyncio.sleep(1)
            return "bafyslow"

        result = await run_with_retry(operation, policy)

        assert result.cid == "bafyslow"
        assert result.attempts == 2

    @pytest.mark.asyncio
    async def test_timeout_on_every_attempt_reports_timeout(self):
        policy = RetryPolicy(max_attempts=2, initial_delay_ms=0, max_jitter_ms=0, timeout_seconds=0.01)

        async def operation():
            await asyncio.sleep(1)
            return "never"

        with pytest.raises(RetriesExhaustedError) as exc_info:
            await run_with_retry(operation, policy)

        assert isinstance(exc_info.value.last_error, UploadTimeoutError)

    @pytest.mark.asyncio
    async def test_non_remote_errors_are_not_retried(self, fast_policy):
        operation = AsyncMock(side_effect=FileNotFoundError("gone"))

        with pytest.raises(FileNotFoundError):
            await run_with_retry(operation, fast_policy)

        assert operation.await_count == 1

    @pytest.mark.asyncio
    async def test_backoff_delays_grow_exponentially(self):
        policy = RetryPolicy(max_attempts=3, initial_delay_ms=100, max_jitter_ms=0, timeout_seconds=5)
        operation, _ = flaky(2)
        sleep = AsyncMock()

        await run_with_retry(operation, policy, sleep=sleep)

        delays = [call.args[0] for call in sleep.await_args_list]
        assert delays == pytest.approx([0.1, 0.2])

    @pytest.mark.asyncio
    async def test_jitter_stays_within_bound(self):
        policy = RetryPolicy(max_attempts=2, initial_delay_ms=100, max_jitter_ms=50, timeout_seconds=5)
        operation, _ = flaky(1)
        sleep = AsyncMock()

        await run_with_retry(operation, policy, sleep=sleep)

        delay = sleep.await_args_list[0].args[0]
        assert 0.1 <= delay <= 0.15


class TestRetryPolicy:
    """Tests for RetryPolicy defaults and settings mapping."""

    def test_defaults(self):
        policy = RetryPolicy()
        assert policy.max_attempts == MAX_RETRIES == 3
        assert policy.initial_delay_ms == RETRY_DELAY_MS == 5000
        assert policy.timeout_seconds == UPLOAD_TIMEOUT_SECONDS == 300

    def test_from_settings(self, test_settings):
        policy = RetryPolicy.from_settings(test_settings)
        assert policy.max_attempts == test_settings.MAX_RETRIES
        assert policy.initial_delay_ms == 0
        assert policy.timeout_seconds == test_settings.UPLOAD_TIMEOUT_SECONDS


class TestUploadHelpers:
    """Tests for the file and directory convenience wrappers."""

    @pytest.mark.asyncio
    async def test_upload_directory_with_retry_resends_each_attempt(self, tmp_path, fast_policy):
        provider = AsyncMock()
        provider.provider_name = "fake"
        provider.pin_directory.side_effect = [RemoteError("503"), "bafydir"]

        result = await upload_directory_with_retry(UploadClient(provider), tmp_path, fast_policy)

        assert result.cid == "bafydir"
        assert provider.pin_directory.await_count == 2

    @pytest.mark.asyncio
    async def test_upload_file_with_retry_passes_name(self, tmp_path, fast_policy):
        file_path = tmp_path / "1.json"
        file_path.write_text("{}")
        provider = AsyncMock()
        provider.provider_name = "fake"
        provider.pin_file.return_value = "bafyfile"

        result = await upload_file_with_retry(
            UploadClient(provider), file_path, fast_policy, name="token-1"
        )

        assert result.cid == "bafyfile"
        provider.pin_file.assert_awaited_once_with(file_path, "token-1")
