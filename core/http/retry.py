"""Retry utilities for async provider calls.

Transport failures and provider rate limits are retried with exponential
backoff using tenacity. Malformed responses are not retried.
"""

from __future__ import annotations

import asyncio
import logging

from aiohttp import ClientConnectorError, ClientError, ServerDisconnectedError
from tenacity import (
    before_sleep_log,
    retry,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)

from core.exceptions import RateLimitError, ServiceUnavailableError

logger = logging.getLogger(__name__)

TRANSIENT_EXCEPTIONS: tuple[type[BaseException], ...] = (
    ClientConnectorError,
    ServerDisconnectedError,
    ClientError,
    asyncio.TimeoutError,
    RateLimitError,
    ServiceUnavailableError,
)


def retry_async(
    max_retries: int = 2,
    retry_delay: float = 1.0,
    backoff_factor: float = 2.0,
    retry_exceptions: tuple[type[BaseException], ...] = TRANSIENT_EXCEPTIONS,
):
    """Build a tenacity decorator for async provider calls.

    Args:
        max_retries: Attempts after the first one.
        retry_delay: Backoff multiplier in seconds.
        backoff_factor: Exponential backoff base.
        retry_exceptions: Exception types that trigger another attempt.

    Example:
        @retry_async(max_retries=3)
        async def fetch():
            ...
    """
    return retry(
        stop=stop_after_attempt(max_retries + 1),
        wait=wait_exponential(multiplier=retry_delay, exp_base=backoff_factor),
        retry=retry_if_exception_type(retry_exceptions),
        before_sleep=before_sleep_log(logger, logging.WARNING),
        reraise=True,
    )
