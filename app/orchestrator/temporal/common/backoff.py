# app/orchestrator/temporal/common/backoff.py
"""
In-activity retry with pure exponential backoff.

`retry(op)` calls `op(attempt)` (1-based) until it succeeds, the attempt
budget runs out, or it raises something `is_retryable` rejects. Between
attempts it suspends for `base_delay * 2 ** (attempt - 1)` seconds. The last
error is re-raised as-is.

This loop runs inside a single activity attempt; Temporal's own RetryPolicy
(see retry_policies.py) sits on top of it.
"""
from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from typing import Awaitable, Callable, Optional, TypeVar

from tenacity import (
    AsyncRetrying,
    RetryCallState,
    retry_if_exception,
    stop_after_attempt,
    wait_exponential,
)

from app.orchestrator.temporal.common.errors import is_retryable

T = TypeVar("T")

logger = logging.getLogger("freight.backoff")

DEFAULT_MAX_ATTEMPTS = 3
DEFAULT_BASE_DELAY = 0.5  # seconds


@dataclass(frozen=True)
class BackoffPolicy:
    max_attempts: int = DEFAULT_MAX_ATTEMPTS
    base_delay: float = DEFAULT_BASE_DELAY

    def __post_init__(self) -> None:
        if self.max_attempts < 1:
            raise ValueError("max_attempts must be >= 1")
        if self.base_delay < 0:
            raise ValueError("base_delay must be >= 0")


def _log_before_sleep(name: str) -> Callable[[RetryCallState], None]:
    def _before_sleep(state: RetryCallState) -> None:
        exc = state.outcome.exception() if state.outcome else None
        logger.warning(
            "%s attempt %d failed (%s); retrying in %.3fs",
            name,
            state.attempt_number,
            exc,
            state.next_action.sleep if state.next_action else 0.0,
        )
    return _before_sleep


async def retry(
    operation: Callable[[int], Awaitable[T]],
    max_attempts: int = DEFAULT_MAX_ATTEMPTS,
    base_delay: float = DEFAULT_BASE_DELAY,
    *,
    policy: Optional[BackoffPolicy] = None,
    sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    name: str = "operation",
) -> T:
    """Run `operation` under exponential backoff and return its value."""
    policy = policy or BackoffPolicy(max_attempts=max_attempts, base_delay=base_delay)

    retrying = AsyncRetrying(
        stop=stop_after_attempt(policy.max_attempts),
        wait=wait_exponential(multiplier=policy.base_delay, exp_base=2, min=0),
        retry=retry_if_exception(is_retryable),
        before_sleep=_log_before_sleep(name),
        sleep=sleep,
        reraise=True,
    )

    async for attempt in retrying:
        with attempt:
            result = await operation(attempt.retry_state.attempt_number)
    return result
