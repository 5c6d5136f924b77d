"""
Tests for retry utility with exponential or fixed backoff.

Tests cover:
- RetryConfig defaults
- Delay calculation (exponential, fixed, capped, jittered)
- Retryable error filtering and give_up_on
- on_retry callbacks and injected sleep
- Decorator pattern
"""

from typing import List, Tuple
from unittest.mock import AsyncMock, patch

import pytest

from relaycore.utils.retry import (
    PermanentError,
    RetryConfig,
    TransientError,
    calculate_delay,
    retry_async,
    with_retry,
)


# =============================================================================
# RetryConfig Tests
# =============================================================================


class TestRetryConfig:
    """Tests for RetryConfig dataclass."""

    def test_default_values(self) -> None:
        config = RetryConfig()

        assert config.max_attempts == 3
        assert config.base_delay_ms == 1000
        assert config.max_delay_ms == 30000
        assert config.jitter is True
        assert config.exponential_base == 2.0
        assert config.retryable_errors == (Exception,)
        assert config.give_up_on is None


# =============================================================================
# Delay Calculation Tests
# =============================================================================


class TestDelayCalculation:
    """Tests for calculate_delay function."""

    def test_exponential_growth(self) -> None:
        config = RetryConfig(base_delay_ms=1000, jitter=False, exponential_base=2.0)

        delays = [calculate_delay(i, config) for i in range(4)]

        assert delays == [1.0, 2.0, 4.0, 8.0]

    def test_fixed_delay(self) -> None:
        """An exponential base of 1 without jitter is a fixed delay."""
        config = RetryConfig(base_delay_ms=300, exponential_base=1.0, jitter=False)

        assert {calculate_delay(i, config) for i in range(50)} == {0.3}

    def test_max_delay_cap(self) -> None:
        config = RetryConfig(base_delay_ms=1000, max_delay_ms=5000, jitter=False)

        assert calculate_delay(10, config) == 5.0

    def test_jitter_stays_within_bounds(self) -> None:
        config = RetryConfig(base_delay_ms=1000, jitter=True)

        delays = [calculate_delay(0, config) for _ in range(100)]

        assert min(delays) != max(delays)
        assert all(0 <= d <= 1.0 for d in delays)


# =============================================================================
# Async Retry Tests
# =============================================================================


class TestRetryAsync:
    """Tests for retry_async function."""

    @pytest.mark.asyncio
    async def test_success_on_first_attempt(self) -> None:
        fn = AsyncMock(return_value="success")

        assert await retry_async(fn) == "success"
        assert fn.await_count == 1

    @pytest.mark.asyncio
    async def test_retry_on_failure(self) -> None:
        fn = AsyncMock(side_effect=[ValueError("transient"), ValueError("transient"), "success"])
        sleep = AsyncMock()

        config = RetryConfig(max_attempts=5, base_delay_ms=10, jitter=False)
        result = await retry_async(fn, config, sleep=sleep)

        assert result == "success"
        assert fn.await_count == 3
        assert [c.args[0] for c in sleep.await_args_list] == [0.01, 0.02]

    @pytest.mark.asyncio
    async def test_max_attempts_exceeded(self) -> None:
        fn = AsyncMock(side_effect=ValueError("persistent"))
        sleep = AsyncMock()

        with pytest.raises(ValueError, match="persistent"):
            await retry_async(fn, RetryConfig(max_attempts=3), sleep=sleep)

        assert fn.await_count == 3
        # no delay after the last attempt
        assert sleep.await_count == 2

    @pytest.mark.asyncio
    async def test_non_retryable_error(self) -> None:
        fn = AsyncMock(side_effect=TypeError("not retryable"))

        config = RetryConfig(max_attempts=5, retryable_errors=(ValueError,), base_delay_ms=1)
        with pytest.raises(TypeError):
            await retry_async(fn, config)

        assert fn.await_count == 1

    @pytest.mark.asyncio
    async def test_transient_errors_only(self) -> None:
        fn = AsyncMock(side_effect=[TransientError("timeout"), PermanentError("bad input")])

        config = RetryConfig(max_attempts=5, retryable_errors=(TransientError,), base_delay_ms=1)
        with pytest.raises(PermanentError):
            await retry_async(fn, config, sleep=AsyncMock())

        assert fn.await_count == 2

    @pytest.mark.asyncio
    async def test_give_up_on_propagates_immediately(self) -> None:
        fn = AsyncMock(side_effect=RuntimeError("query returned more than 10000 results"))
        on_retry = []

        config = RetryConfig(max_attempts=100, give_up_on=lambda e: "more than" in str(e))
        with pytest.raises(RuntimeError, match="more than"):
            await retry_async(fn, config, on_retry=lambda a, e: on_retry.append(a))

        assert fn.await_count == 1
        assert on_retry == []

    @pytest.mark.asyncio
    async def test_on_retry_receives_attempt_and_error(self) -> None:
        errors = [ValueError("first"), ValueError("second")]
        fn = AsyncMock(side_effect=errors + ["ok"])
        seen: List[Tuple[int, Exception]] = []

        await retry_async(
            fn,
            RetryConfig(max_attempts=3),
            on_retry=lambda attempt, error: seen.append((attempt, error)),
            sleep=AsyncMock(),
        )

        assert seen == [(1, errors[0]), (2, errors[1])]

    @pytest.mark.asyncio
    async def test_default_sleep_is_asyncio_sleep(self) -> None:
        fn = AsyncMock(side_effect=[Exception("first attempt fails"), "success"])

        with patch("relaycore.utils.retry.asyncio.sleep", new_callable=AsyncMock) as sleep:
            result = await retry_async(fn)

        assert result == "success"
        assert sleep.await_count == 1


# =============================================================================
# Decorator Tests
# =============================================================================


class TestWithRetryDecorator:
    """Tests for with_retry decorator."""

    @pytest.mark.asyncio
    async def test_decorator_with_retry(self) -> None:
        call_count = 0

        @with_retry(RetryConfig(max_attempts=5, base_delay_ms=1, jitter=False))
        async def decorated_fail_once():
            nonlocal call_count
            call_count += 1
            if call_count < 2:
                raise ValueError("transient")
            return "success"

        assert await decorated_fail_once() == "success"
        assert call_count == 2

    @pytest.mark.asyncio
    async def test_decorator_with_arguments(self) -> None:
        @with_retry(RetryConfig(max_attempts=3, base_delay_ms=1))
        async def add(a: int, b: int = 0) -> int:
            return a + b

        assert await add(2, b=3) == 5

    def test_decorator_preserves_function_name(self) -> None:
        @with_retry(RetryConfig(max_attempts=3))
        async def read_head():
            """Read the head block."""
            return 1

        assert read_head.__name__ == "read_head"
        assert read_head.__doc__ == "Read the head block."
