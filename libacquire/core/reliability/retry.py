"""
Bounded retry — exponential backoff with jitter and an overall deadline.

Every network call of an acquisition run goes through ``retry_call``
with its own attempt budget.  A shared ``Deadline`` caps the total
time spent on the network across all of them.
"""

from __future__ import annotations

import logging
import random
import time
from collections.abc import Callable
from dataclasses import dataclass, field
from typing import TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")


class RetryExhaustedError(Exception):
    """Raised when every attempt of a retried call has failed."""

    def __init__(self, label: str, attempts: int, last_error: BaseException | None):
        self.label = label
        self.attempts = attempts
        self.last_error = last_error
        detail = f": {last_error}" if last_error is not None else ""
        super().__init__(f"{label} failed after {attempts} attempt(s){detail}")


class DeadlineExceededError(RetryExhaustedError):
    """Raised when the overall network deadline expires before success."""

    def __init__(self, label: str, attempts: int, last_error: BaseException | None):
        super().__init__(label, attempts, last_error)
        self.args = (f"{label} abandoned: network deadline exceeded after {attempts} attempt(s)",)


@dataclass
class Deadline:
    """Wall-clock budget shared by all network calls of one run.

    ``seconds=None`` means unbounded.
    """

    seconds: float | None = None
    started_at: float = field(default_factory=time.monotonic)

    def remaining(self) -> float | None:
        if self.seconds is None:
            return None
        return max(0.0, self.seconds - (time.monotonic() - self.started_at))

    @property
    def expired(self) -> bool:
        remaining = self.remaining()
        return remaining is not None and remaining <= 0.0


@dataclass
class RetryPolicy:
    """Attempt budget and backoff shape for a single call."""

    max_attempts: int = 3
    base_delay: float = 1.0
    max_delay: float = 10.0
    jitter: float = 0.3

    def delay_for(self, attempt: int) -> float:
        """Backoff before attempt ``attempt + 1``: exponential + jitter."""
        delay = min(self.base_delay * (2 ** (attempt - 1)), self.max_delay)
        return delay + random.uniform(0, delay * self.jitter)


def retry_call(
    fn: Callable[[], T],
    *,
    policy: RetryPolicy,
    label: str,
    retry_on: tuple[type[BaseException], ...] = (Exception,),
    is_retryable: Callable[[BaseException], bool] | None = None,
    deadline: Deadline | None = None,
    sleep: Callable[[float], None] = time.sleep,
) -> T:
    """Call ``fn`` until it succeeds or the attempt budget is spent.

    Args:
        fn: Zero-argument callable performing one attempt.
        policy: Attempt budget and backoff.
        label: Human-readable name used in log lines and errors.
        retry_on: Exception types that count as a failed attempt.
            Anything else propagates immediately.
        is_retryable: Optional predicate; when it returns False for a
            caught exception the call gives up without further attempts.
        deadline: Optional shared deadline.  No attempt starts after it
            expires and backoff sleeps are clipped to what remains.
        sleep: Injected for tests.

    Raises:
        RetryExhaustedError: Every attempt failed (or a failure was
            not retryable).  ``last_error`` holds the final cause.
        DeadlineExceededError: The deadline expired first.
    """
    last_error: BaseException | None = None
    attempts = 0

    for attempt in range(1, policy.max_attempts + 1):
        if deadline is not None and deadline.expired:
            raise DeadlineExceededError(label, attempts, last_error) from last_error

        attempts = attempt
        try:
            return fn()
        except retry_on as exc:
            last_error = exc
            if is_retryable is not None and not is_retryable(exc):
                logger.debug("%s failed with non-retryable error: %s", label, exc)
                break
            if attempt == policy.max_attempts:
                break

            delay = policy.delay_for(attempt)
            if deadline is not None:
                remaining = deadline.remaining()
                if remaining is not None:
                    delay = min(delay, remaining)
            logger.warning(
                "%s failed (attempt %d/%d): %s — retrying in %.1fs",
                label, attempt, policy.max_attempts, exc, delay,
            )
            sleep(delay)

    raise RetryExhaustedError(label, attempts, last_error) from last_error
