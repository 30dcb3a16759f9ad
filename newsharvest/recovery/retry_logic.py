"""
NewsHarvest Retry Logic
======================

Bounded retry with pluggable backoff for network operations.

The policy is explicit data (:class:`RetryConfig`) and the sleep function is
injectable, so callers can run the same code path with zero delay in tests.
"""

import asyncio
import inspect
from dataclasses import dataclass
from enum import Enum
from typing import Any, Awaitable, Callable, Optional, Tuple, TypeVar

from ..utils.logging import get_logger_for_component


T = TypeVar('T')

SleepFunc = Callable[[float], Awaitable[Any]]


class RetryStrategy(Enum):
    """Delay growth between attempts."""
    FIXED_DELAY = "fixed_delay"              # Same delay before every retry
    LINEAR_BACKOFF = "linear"               # base, 2*base, 3*base, ...
    EXPONENTIAL_BACKOFF = "exponential"     # base, base*k, base*k^2, ...


@dataclass(frozen=True)
class RetryConfig:
    """Configuration for retry behavior."""
    max_attempts: int = 3
    strategy: RetryStrategy = RetryStrategy.LINEAR_BACKOFF
    base_delay: float = 1.0                # Seconds
    max_delay: float = 60.0                # Seconds
    exponential_base: float = 2.0

    # Every failure is retried unless narrowed here
    retry_on_exceptions: Tuple[type, ...] = (Exception,)

    def __post_init__(self):
        if self.max_attempts < 1:
            raise ValueError("max_attempts must be at least 1")
        if self.base_delay < 0:
            raise ValueError("base_delay cannot be negative")

    def delay_before(self, attempt: int) -> float:
        """Seconds to wait before ``attempt`` (1-based); zero for the first."""
        if attempt <= 1:
            return 0.0

        failed_attempts = attempt - 1
        if self.strategy == RetryStrategy.FIXED_DELAY:
            delay = self.base_delay
        elif self.strategy == RetryStrategy.EXPONENTIAL_BACKOFF:
            delay = self.base_delay * (self.exponential_base ** (failed_attempts - 1))
        else:
            delay = self.base_delay * failed_attempts

        return min(delay, self.max_delay)


class RetryExhaustedError(Exception):
    """Every attempt failed; ``last_error`` is the final attempt's exception."""

    def __init__(self, operation: str, attempts: int, last_error: BaseException):
        super().__init__(
            f"{operation} failed after {attempts} attempt(s): {last_error}"
        )
        self.operation = operation
        self.attempts = attempts
        self.last_error = last_error


class RetryManager:
    """Runs an async operation under a :class:`RetryConfig`.

    Attempts are strictly sequential: the next one starts only after the
    previous one failed and the backoff delay elapsed.
    """

    def __init__(self, config: Optional[RetryConfig] = None, sleep: Optional[SleepFunc] = None):
        self.config = config or RetryConfig()
        self.sleep = sleep or asyncio.sleep
        self.logger = get_logger_for_component('retry_manager')

    async def retry_async(self,
                          func: Callable[..., Any],
                          *args,
                          operation: Optional[str] = None,
                          **kwargs) -> Any:
        """
        Call ``func`` until it succeeds or the attempt budget is spent.

        Args:
            func: Async (or plain) callable to run
            *args: Positional arguments for ``func``
            operation: Label used in log messages (defaults to the function name)
            **kwargs: Keyword arguments for ``func``

        Returns:
            The first successful result

        Raises:
            RetryExhaustedError: After ``max_attempts`` retryable failures
            Exception: Immediately, for failures outside ``retry_on_exceptions``
        """
        config = self.config
        label = operation or getattr(func, '__name__', 'operation')
        last_error: Optional[BaseException] = None

        for attempt in range(1, config.max_attempts + 1):
            delay = config.delay_before(attempt)
            if attempt > 1:
                self.logger.info(
                    f"Retry {attempt}/{config.max_attempts} for {label} in {delay:.2f}s"
                )
                if delay > 0:
                    await self.sleep(delay)

            try:
                result = func(*args, **kwargs)
                if inspect.isawaitable(result):
                    result = await result
            except config.retry_on_exceptions as e:
                last_error = e
                self.logger.warning(
                    f"Attempt {attempt}/{config.max_attempts} failed for {label}: {e}"
                )
                continue

            if attempt > 1:
                self.logger.info(f"Retry successful for {label} on attempt {attempt}")
            return result

        self.logger.error(f"All {config.max_attempts} attempts failed for {label}")
        raise RetryExhaustedError(label, config.max_attempts, last_error)
