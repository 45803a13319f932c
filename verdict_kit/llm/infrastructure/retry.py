"""Bounded exponential-backoff retry for transient model-call failures."""

import asyncio
import random
from collections.abc import Awaitable, Callable

from pydantic import BaseModel, Field

from verdict_kit.core.errors import VerdictKitError

TRANSIENT_ERROR_PATTERNS: tuple[str, ...] = (
    "rate limit",
    "too many requests",
    "timeout",
    "connection refused",
    "connection reset",
    "temporary failure",
    "service unavailable",
    "internal server error",
    "bad gateway",
    "gateway timeout",
    "network",
)


class RetryPolicy(BaseModel, frozen=True):
    """How many times, and how patiently, a transient failure is retried."""

    max_retries: int = Field(default=3, ge=0)
    base_delay_seconds: float = Field(default=1.0, ge=0.0)
    max_delay_seconds: float = Field(default=30.0, ge=0.0)
    jitter_fraction: float = Field(default=0.1, ge=0.0, le=1.0)

    @property
    def max_attempts(self) -> int:
        return self.max_retries + 1

    def delay_for(self, attempt: int) -> float:
        """Backoff before retry number attempt + 1 (attempt is 0-based).

        ``base * 2**attempt`` capped at ``max_delay_seconds``, then moved by up
        to ``jitter_fraction`` of itself in either direction.
        """
        delay = min(self.base_delay_seconds * (2**attempt), self.max_delay_seconds)
        jitter = delay * self.jitter_fraction
        if jitter > 0:
            # Jitter only spreads retries out; it needs no cryptographic source.
            delay += random.uniform(-jitter, jitter)
        if delay < 0:
            return self.base_delay_seconds
        return delay


def is_retryable_error(exc: BaseException) -> bool:
    """Decide whether exc is worth retrying.

    Errors raised inside verdict-kit carry an explicit ``retriable`` flag and
    it is trusted as-is. Anything else is opaque, so its message is matched
    against known transient phrases.
    """
    if isinstance(exc, VerdictKitError):
        return exc.retriable
    message = str(exc).lower()
    return any(pattern in message for pattern in TRANSIENT_ERROR_PATTERNS)


type RetryCallback = Callable[[int, float, BaseException], None]


async def call_with_retry[T](
    call: Callable[[], Awaitable[T]],
    policy: RetryPolicy,
    on_retry: RetryCallback | None = None,
) -> T:
    """Await call(), retrying transient failures according to policy.

    The last exception is re-raised unchanged once attempts run out or a
    non-transient failure occurs. Backoff sleeps go through asyncio.sleep, so
    cancelling the caller also cancels a pending retry.
    """
    attempt = 0
    while True:
        try:
            return await call()
        except Exception as exc:
            if attempt >= policy.max_retries or not is_retryable_error(exc):
                raise
            delay = policy.delay_for(attempt)
            if on_retry is not None:
                on_retry(attempt + 1, delay, exc)
            await asyncio.sleep(delay)
            attempt += 1
