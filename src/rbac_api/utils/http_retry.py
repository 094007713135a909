"""Retry helper for outbound HTTP calls."""

import asyncio
import logging
import random
from collections.abc import Awaitable, Callable

import httpx

logger = logging.getLogger(__name__)


def is_retryable_status(status_code: int) -> bool:
    """Server errors are transient; client errors are never retried."""
    return status_code >= 500


def backoff_delay(attempt: int, base_delay: float, max_delay: float) -> float:
    """Compute the sleep before retry ``attempt`` (0-based).

    Exponential growth capped at ``max_delay`` with up to 10% jitter.
    """
    delay = min(base_delay * (2**attempt), max_delay)
    return delay + random.uniform(0, delay * 0.1)


async def send_with_retry(
    send: Callable[[], Awaitable[httpx.Response]],
    *,
    max_retries: int,
    base_delay: float,
    max_delay: float,
    operation: str = "request",
) -> httpx.Response:
    """Run ``send`` and retry on network errors, timeouts and 5xx replies.

    The returned response may still be a non-2xx response; callers decide
    what to do with it. 4xx replies are returned at once.

    Args:
        send: Zero-argument coroutine factory performing one attempt
        max_retries: Retries after the first attempt
        base_delay: Initial backoff delay in seconds
        max_delay: Upper bound for a single backoff delay
        operation: Label used in log messages

    Returns:
        The last response received

    Raises:
        httpx.TransportError: If the final attempt fails at transport level
    """
    attempts = max_retries + 1
    for attempt in range(attempts):
        last_attempt = attempt == attempts - 1
        try:
            response = await send()
        except (httpx.TimeoutException, httpx.NetworkError) as e:
            if last_attempt:
                raise
            delay = backoff_delay(attempt, base_delay, max_delay)
            logger.warning(f"{operation} failed ({type(e).__name__}), retrying in {delay:.2f}s")
            await asyncio.sleep(delay)
            continue

        if not is_retryable_status(response.status_code) or last_attempt:
            return response

        delay = backoff_delay(attempt, base_delay, max_delay)
        logger.warning(
            f"{operation} returned HTTP {response.status_code}, retrying in {delay:.2f}s"
        )
        await asyncio.sleep(delay)

    # Unreachable: the loop always returns or raises on the last attempt
    raise RuntimeError(f"{operation} exhausted retries")
