"""
Shared HTTP request helpers for provider backends.

Keeps JSON request/response handling and error mapping consistent across
the Overpass and OSRM clients.
"""

from __future__ import annotations

import asyncio
import logging
from typing import TYPE_CHECKING, Any

import aiohttp

from config import get_blocked_hosts
from core.exceptions import (
    ExternalServiceError,
    RateLimitError,
    ServiceUnavailableError,
)
from core.http.blocklist import is_forbidden_host

if TYPE_CHECKING:
    from collections.abc import Iterable

logger = logging.getLogger(__name__)


async def request_json(
    method: str,
    url: str,
    *,
    session: Any,
    params: dict[str, Any] | None = None,
    json: dict[str, Any] | None = None,
    data: dict[str, Any] | str | None = None,
    headers: dict[str, str] | None = None,
    expected_status: int | Iterable[int] = 200,
    service_name: str = "Service",
    timeout: Any | None = None,
) -> Any:
    method_upper = method.upper()
    if isinstance(expected_status, int):
        expected = {expected_status}
    else:
        expected = set(expected_status)

    if is_forbidden_host(url, get_blocked_hosts()):
        msg = f"{service_name} blocked host: {url}"
        raise ValueError(msg)

    if method_upper == "GET":
        request_fn = session.get
    elif method_upper == "POST":
        request_fn = session.post
    else:
        msg = f"{service_name} request error: unsupported method {method_upper}"
        raise ExternalServiceError(msg, {"url": url})

    request_kwargs: dict[str, Any] = {"params": params, "headers": headers}
    if json is not None:
        request_kwargs["json"] = json
    if data is not None:
        request_kwargs["data"] = data
    if timeout is not None:
        request_kwargs["timeout"] = timeout

    try:
        async with request_fn(url, **request_kwargs) as response:
            if response.status == 429:
                retry_after = int(response.headers.get("Retry-After", 5))
                msg = f"{service_name} error: 429"
                raise RateLimitError(
                    msg,
                    {
                        "status": 429,
                        "retry_after": retry_after,
                        "url": str(getattr(response, "url", url)),
                    },
                )
            if response.status not in expected:
                body = await response.text()
                msg = f"{service_name} error: {response.status}"
                logger.debug("%s body for %s: %s", service_name, url, body[:500])
                raise ExternalServiceError(
                    msg,
                    {
                        "status": response.status,
                        "body": body,
                        "url": str(getattr(response, "url", url)),
                    },
                )
            return await response.json()
    except (aiohttp.ClientError, asyncio.TimeoutError) as exc:
        msg = f"{service_name} request failed: {str(exc) or type(exc).__name__}"
        raise ServiceUnavailableError(msg, {"url": url}) from exc
