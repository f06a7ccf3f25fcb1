"""Exponential backoff for rate-limited cloud model calls."""
from __future__ import annotations

import asyncio
from typing import Awaitable, Callable, TypeVar

import structlog

logger = structlog.get_logger(__name__)

T = TypeVar("T")

DEFAULT_MAX_RETRIES = 3
DEFAULT_BASE_DELAY = 2.0

# Substrings (lower-case) that identify a rate-limit or quota error
RATE_LIMIT_MARKERS = (
    "429",
    "resource exhausted",
    "resource_exhausted",
    "too many requests",
    "quota",
)


def is_rate_limit_error(exc: BaseException) -> bool:
    """Return True when the error text looks like a rate-limit rejection."""
    message = str(exc).lower()
    return any(marker in message for marker in RATE_LIMIT_MARKERS)


async def with_retry(
    fn: Callable[[], Awaitable[T]],
    max_retries: int = DEFAULT_MAX_RETRIES,
    base_delay: float = DEFAULT_BASE_DELAY,
    *,
    sleep: Callable[[float], Awaitable[object]] = asyncio.sleep,
) -> T:
    """Await ``fn()`` retrying rate-limit failures with exponential backoff.

    The delay before retry ``n`` (0-indexed) is ``base_delay * 2**n``; there is
    no jitter. Errors that are not rate-limit shaped are re-raised at once, and
    the last error is re-raised after ``max_retries`` retries.
    """
    attempt = 0
    while True:
        try:
            return await fn()
        except Exception as exc:
            if not is_rate_limit_error(exc) or attempt >= max_retries:
                raise
            delay = base_delay * (2 ** attempt)
            logger.warning(
                "rate_limit_retry",
                attempt=attempt + 1,
                max_retries=max_retries,
                delay=delay,
                error=str(exc),
            )
            await sleep(delay)
            attempt += 1
