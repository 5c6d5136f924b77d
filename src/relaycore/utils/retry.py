"""
Retry Utilities for relaycore.

Provides bounded retries with exponential (or fixed) backoff for transient
failures. A fixed delay is an exponential base of 1 without jitter.
"""

from __future__ import annotations

import asyncio
import random
from dataclasses import dataclass, field
from functools import wraps
from typing import (
    Awaitable,
    Callable,
    Optional,
    Tuple,
    Type,
    TypeVar,
)

T = TypeVar("T")


@dataclass
class RetryConfig:
    """
    Configuration for retry behavior.

    Example:
        ```python
        config = RetryConfig(
            max_attempts=100,
            base_delay_ms=300,
            exponential_base=1.0,
            jitter=False,
            give_up_on=is_capacity_error,
        )
        ```
    """

    max_attempts: int = 3
    """Maximum number of attempts (including the first one)."""

    base_delay_ms: int = 1000
    """Base delay in milliseconds for exponential backoff."""

    max_delay_ms: int = 30000
    """Maximum delay in milliseconds (cap for exponential growth)."""

    jitter: bool = True
    """Whether to add random jitter to delays."""

    exponential_base: float = 2.0
    """Base for exponential backoff calculation."""

    retryable_errors: Tuple[Type[Exception], ...] = field(
        default_factory=lambda: (Exception,)
    )
    """Tuple of exception types that should trigger a retry."""

    give_up_on: Optional[Callable[[Exception], bool]] = None
    """Predicate for retryable-typed errors that must still propagate immediately."""


RetryCallback = Callable[[int, Exception], None]


def calculate_delay(attempt: int, config: RetryConfig) -> float:
    """
    Calculate delay with exponential backoff and optional jitter.

    Args:
        attempt: Zero-based attempt number (0 = first retry)
        config: Retry configuration

    Returns:
        Delay in seconds
    """
    delay_ms = config.base_delay_ms * (config.exponential_base ** attempt)
    delay_ms = min(delay_ms, config.max_delay_ms)

    if config.jitter:
        # Full jitter
        delay_ms = random.uniform(0, delay_ms)

    return delay_ms / 1000


async def retry_async(
    fn: Callable[[], Awaitable[T]],
    config: Optional[RetryConfig] = None,
    *,
    on_retry: Optional[RetryCallback] = None,
    sleep: Optional[Callable[[float], Awaitable[object]]] = None,
) -> T:
    """
    Execute async function with retry logic.

    Args:
        fn: Async function to execute (no arguments)
        config: Retry configuration (uses defaults if None)
        on_retry: Called with (attempt number, error) after each failed attempt
        sleep: Awaitable sleep used between attempts (default: asyncio.sleep)

    Returns:
        Result of the function

    Raises:
        Last exception if all retries fail, or the first error matching
        ``config.give_up_on``
    """
    config = config or RetryConfig()
    sleep = sleep or asyncio.sleep
    last_error: Optional[Exception] = None

    for attempt in range(config.max_attempts):
        try:
            return await fn()
        except config.retryable_errors as e:
            if config.give_up_on is not None and config.give_up_on(e):
                raise
            last_error = e
            if on_retry is not None:
                on_retry(attempt + 1, e)

            # Don't delay after last attempt
            if attempt < config.max_attempts - 1:
                await sleep(calculate_delay(attempt, config))

    if last_error is not None:
        raise last_error

    raise RuntimeError("Retry exhausted without error")


def with_retry(
    config: Optional[RetryConfig] = None,
) -> Callable[[Callable[..., Awaitable[T]]], Callable[..., Awaitable[T]]]:
    """
    Decorator for adding retry logic to async functions.

    Example:
        ```python
        @with_retry(RetryConfig(max_attempts=5, retryable_errors=(TransientError,)))
        async def read_head(chain) -> int:
            return await chain.get_block_number()
        ```
    """
    def decorator(
        fn: Callable[..., Awaitable[T]],
    ) -> Callable[..., Awaitable[T]]:
        @wraps(fn)
        async def wrapper(*args: object, **kwargs: object) -> T:
            return await retry_async(
                lambda: fn(*args, **kwargs),
                config,
            )
        return wrapper
    return decorator


class RetryableError(Exception):
    """Base class for errors that should be retried."""


class TransientError(RetryableError):
    """
    Transient error that may succeed on retry.

    Examples: network timeouts, rate limits, temporary node unavailability.
    """


class PermanentError(Exception):
    """Permanent error that should NOT be retried."""
