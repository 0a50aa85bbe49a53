import asyncio
import logging
from typing import Any, Awaitable, Callable, Dict, Mapping, Optional

import httpx

from silver_care_mcp.errors import ExhaustedRetries, TransientNetworkFailure, Unauthorized, UpstreamError

logger = logging.getLogger("silver_care.fetcher")

DEFAULT_TIMEOUT_MS = 10000
DEFAULT_MAX_ATTEMPTS = 3
BACKOFF_SEC = 1.0

Sleep = Callable[[float], Awaitable[Any]]


class RetryingFetcher:
    """HTTP GET with a per-attempt timeout and linear backoff on transient failures.

    Only failures without an HTTP response (timeouts, DNS errors, refused
    connections) are retried. A 401 raises :class:`Unauthorized` at once and
    any other error status raises :class:`UpstreamError` at once. When every
    attempt fails transiently, :class:`ExhaustedRetries` is raised.

    The fetcher holds no per-request state, so one instance can serve
    concurrent invocations. Each attempt opens its own client.
    """

    def __init__(self, transport: Optional[httpx.AsyncBaseTransport] = None, sleep: Sleep = asyncio.sleep):
        self._transport = transport
        self._sleep = sleep

    async def fetch(
        self,
        url: str,
        *,
        params: Optional[Mapping[str, Any]] = None,
        headers: Optional[Dict[str, str]] = None,
        timeout_ms: int = DEFAULT_TIMEOUT_MS,
        max_attempts: int = DEFAULT_MAX_ATTEMPTS,
    ) -> Any:
        if max_attempts < 1:
            raise ValueError(f"max_attempts must be at least 1, got {max_attempts}")

        last_failure: Optional[TransientNetworkFailure] = None
        for attempt in range(1, max_attempts + 1):
            try:
                return await self._get_once(url, params, headers, timeout_ms)
            except TransientNetworkFailure as e:
                last_failure = e
                logger.warning(f"Request to {url} failed (attempt {attempt}/{max_attempts}): {e.message}")
                if attempt < max_attempts:
                    await self._sleep(BACKOFF_SEC * attempt)

        logger.error(f"Giving up on {url} after {max_attempts} attempts")
        raise ExhaustedRetries(url, max_attempts, last_failure)

    async def _get_once(
        self,
        url: str,
        params: Optional[Mapping[str, Any]],
        headers: Optional[Dict[str, str]],
        timeout_ms: int,
    ) -> Any:
        deadline = timeout_ms / 1000
        async with httpx.AsyncClient(transport=self._transport, timeout=httpx.Timeout(deadline)) as client:
            try:
                # httpx limits each network operation; the deadline covers the whole attempt
                response = await asyncio.wait_for(client.get(url, params=params, headers=headers), deadline)
                response.raise_for_status()
            except asyncio.TimeoutError as e:
                raise TransientNetworkFailure(url, e) from e
            except httpx.HTTPStatusError as e:
                status = e.response.status_code
                if status == 401:
                    logger.error(f"Unauthorized response from {url}")
                    raise Unauthorized(url) from e
                logger.error(f"HTTP {status} from {url}")
                raise UpstreamError(f"The upstream service answered with HTTP {status}.", status_code=status) from e
            except httpx.TransportError as e:
                raise TransientNetworkFailure(url, e) from e
            except httpx.RequestError as e:
                raise UpstreamError(f"Request to the upstream service failed: {str(e)}") from e

            try:
                return response.json()
            except ValueError as e:
                raise UpstreamError("The upstream service returned a malformed response.") from e
