"""
Retry helpers for rate-limited API calls.

Delays grow Fibonacci-style from a base unit by default. Only errors the
policy classifies as retryable (rate limits, unless told otherwise) are
retried; anything else propagates on the first failure.
"""

import functools
import logging
import time
from dataclasses import dataclass
from typing import Callable, Iterator, Optional, Tuple, Type, TypeVar

from github import RateLimitExceededException

from connectors.exceptions import RateLimitException

logger = logging.getLogger(__name__)

T = TypeVar("T")

FIBONACCI = "fibonacci"
EXPONENTIAL = "exponential"


def is_rate_limit_error(exc: BaseException) -> bool:
    """Default retry predicate: True for rate-limit signals only."""
    return isinstance(exc, (RateLimitException, RateLimitExceededException))


def fibonacci_backoff(
    base: float, max_delay: Optional[float] = None
) -> Iterator[float]:
    """
    Yield an endless Fibonacci delay schedule: base, base, 2*base, 3*base, ...

    :param base: Base delay in seconds.
    :param max_delay: Optional cap applied to every yielded delay.
    """
    prev, cur = 0.0, base
    while True:
        yield cur if max_delay is None else min(cur, max_delay)
        prev, cur = cur, prev + cur


def exponential_backoff(
    base: float, factor: float = 2.0, max_delay: Optional[float] = None
) -> Iterator[float]:
    """Yield an endless exponential delay schedule: base, base*f, base*f^2, ..."""
    delay = base
    while True:
        yield delay if max_delay is None else min(delay, max_delay)
        delay *= factor


@dataclass(frozen=True)
class RetryPolicy:
    """
    Retry configuration for a single call site.

    ``max_attempts`` counts total tries, including the first one.
    """

    base_delay: float = 0.1
    max_attempts: int = 10
    max_delay: Optional[float] = None
    backoff: str = FIBONACCI
    should_retry: Callable[[BaseException], bool] = is_rate_limit_error

    def __post_init__(self):
        if self.max_attempts < 1:
            raise ValueError("max_attempts must be at least 1")
        if self.base_delay < 0:
            raise ValueError("base_delay must be non-negative")
        if self.backoff not in (FIBONACCI, EXPONENTIAL):
            raise ValueError(f"Unknown backoff shape: {self.backoff}")

    def delays(self) -> Iterator[float]:
        """Return a fresh delay schedule."""
        if self.backoff == EXPONENTIAL:
            return exponential_backoff(self.base_delay, max_delay=self.max_delay)
        return fibonacci_backoff(self.base_delay, max_delay=self.max_delay)


DEFAULT_POLICY = RetryPolicy()


def retry_call(
    func: Callable[[], T],
    policy: RetryPolicy = DEFAULT_POLICY,
    sleep: Callable[[float], None] = time.sleep,
    is_cancelled: Optional[Callable[[], bool]] = None,
) -> T:
    """
    Call ``func`` and retry it while it fails with a retryable error.

    :param func: Zero-argument callable performing the remote call.
    :param policy: Retry policy to apply.
    :param sleep: Sleep function (injectable for tests).
    :param is_cancelled: Optional callable polled before each backoff wait.
    :return: Whatever ``func`` returns, including empty results.
    :raises: The last error once attempts are exhausted, or any
             non-retryable error immediately.
    """
    delays = policy.delays()
    attempt = 0
    while True:
        attempt += 1
        try:
            return func()
        except Exception as e:
            if not policy.should_retry(e):
                raise
            if attempt >= policy.max_attempts:
                logger.error(f"Giving up after {attempt} attempts: {e}")
                raise
            if is_cancelled is not None and is_cancelled():
                logger.debug("Cancelled while backing off, not retrying")
                raise

            delay = next(delays)
            logger.warning(
                f"Attempt {attempt}/{policy.max_attempts} rate limited: {e}. "
                f"Retrying in {delay:.2f}s"
            )
            sleep(delay)


def retry_with_backoff(
    max_retries: int = 10,
    initial_delay: float = 0.1,
    max_delay: Optional[float] = None,
    exceptions: Tuple[Type[BaseException], ...] = (
        RateLimitException,
        RateLimitExceededException,
    ),
    backoff: str = FIBONACCI,
):
    """
    Decorator form of :func:`retry_call`.

    :param max_retries: Total number of attempts.
    :param initial_delay: Base delay in seconds.
    :param max_delay: Optional cap on a single delay.
    :param exceptions: Exception types that are retried.
    :param backoff: Either ``"fibonacci"`` or ``"exponential"``.
    """
    policy = RetryPolicy(
        base_delay=initial_delay,
        max_attempts=max_retries,
        max_delay=max_delay,
        backoff=backoff,
        should_retry=lambda e: isinstance(e, exceptions),
    )

    def decorator(func):
        @functools.wraps(func)
        def wrapper(*args, **kwargs):
            return retry_call(lambda: func(*args, **kwargs), policy)

        return wrapper

    return decorator
