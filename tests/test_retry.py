"""Tests for bounded retry with backoff."""

from unittest.mock import AsyncMock, patch

import pytest

from skyledger.services.retry import RetryPolicy, retry_async


class TestRetryPolicy:
    def test_exponential_delays(self) -> None:
        policy = RetryPolicy(attempts=4, initial_delay=1.0, backoff_factor=2.0)

        assert [policy.delay_for(i) for i in range(3)] == [1.0, 2.0, 4.0]

    def test_fixed_delays(self) -> None:
        """A backoff factor of one gives a fixed delay."""
        policy = RetryPolicy(initial_delay=0.5, backoff_factor=1.0)

        assert policy.delay_for(2) == 0.5


class TestRetryAsync:
    async def test_returns_first_success(self, fast_retry: RetryPolicy) -> None:
        operation = AsyncMock(return_value="ok")

        result = await retry_async(operation, fast_retry, description="op")

        assert result == "ok"
        assert operation.await_count == 1

    async def test_retries_until_success(self, fast_retry: RetryPolicy) -> None:
        """Transient failures are retried within the budget."""
        operation = AsyncMock(side_effect=[ConnectionError("a"), ConnectionError("b"), "ok"])

        result = await retry_async(operation, fast_retry, description="op")

        assert result == "ok"
        assert operation.await_count == 3

    async def test_raises_after_budget(self, fast_retry: RetryPolicy) -> None:
        """The last error propagates once every attempt failed."""
        operation = AsyncMock(side_effect=ConnectionError("down"))

        with pytest.raises(ConnectionError, match="down"):
            await retry_async(operation, fast_retry, description="op")

        assert operation.await_count == 3

    async def test_non_retryable_propagates_immediately(self, fast_retry: RetryPolicy) -> None:
        operation = AsyncMock(side_effect=KeyError("bad"))

        with pytest.raises(KeyError):
            await retry_async(operation, fast_retry, description="op", retry_on=(ConnectionError,))

        assert operation.await_count == 1

    async def test_sleeps_with_backoff(self) -> None:
        """Sleeps follow the backoff schedule, with none after the last attempt."""
        policy = RetryPolicy(attempts=3, initial_delay=1.0, backoff_factor=2.0)
        operation = AsyncMock(side_effect=ConnectionError("down"))

        with (
            patch("skyledger.services.retry.asyncio.sleep", new_callable=AsyncMock) as sleep,
            pytest.raises(ConnectionError),
        ):
            await retry_async(operation, policy, description="op")

        assert [call.args[0] for call in sleep.await_args_list] == [1.0, 2.0]

    async def test_logs_each_failure(
        self, fast_retry: RetryPolicy, caplog: pytest.LogCaptureFixture
    ) -> None:
        operation = AsyncMock(side_effect=[ConnectionError("down"), "ok"])

        await retry_async(operation, fast_retry, description="Profile fetch")

        assert "Profile fetch failed (attempt 1/3)" in caplog.text

    async def test_rejects_empty_budget(self) -> None:
        with pytest.raises(ValueError, match="at least one attempt"):
            await retry_async(AsyncMock(), RetryPolicy(attempts=0), description="op")
