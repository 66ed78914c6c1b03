"""Bounded retry-with-backoff for transient NPS server failures."""

import asyncio
import logging
from collections.abc import Awaitable, Callable

import httpx

from .consts import MAX_REQUEST_ATTEMPTS, RETRYABLE_STATUS_CODE

logger = logging.getLogger("nps-mcp.retry")


class RetryingRequester:
    """Issue one HTTP request, retrying on HTTP 500 only.

    The NPS server intermittently answers 500 on its auth endpoints. Every
    other status, 4xx and the remaining 5xx included, is returned at once.
    After each 500 with attempts left the requester waits ``2 ** attempt``
    seconds (1s, then 2s); no wait follows the final attempt.
    Once attempts are exhausted the last response is returned as-is; callers
    decide what a non-2xx status means. No body parsing happens here.
    """

    def __init__(
        self,
        http_client: httpx.AsyncClient,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ):
        """Initialize RetryingRequester.

        Args:
            http_client: Shared HTTP client.
            sleep: Coroutine used for backoff waits; injectable for tests.
        """
        self.http_client = http_client
        self._sleep = sleep

    async def request(
        self,
        method: str,
        url: str,
        max_attempts: int = MAX_REQUEST_ATTEMPTS,
        **kwargs,
    ) -> httpx.Response:
        """Send a request with the retry policy applied.

        Args:
            method: HTTP method.
            url: Complete URL.
            max_attempts: Upper bound on requests sent.
            **kwargs: Passed through to httpx.AsyncClient.request.

        Returns:
            The first non-500 response, or the last response once attempts run out.

        Raises:
            httpx.RequestError: For network errors, timeouts, DNS failures.
        """
        response = None
        for attempt in range(max_attempts):
            response = await self.http_client.request(method, url, **kwargs)
            if response.status_code != RETRYABLE_STATUS_CODE:
                return response

            if attempt < max_attempts - 1:
                delay = 2**attempt
                logger.warning(
                    f"{method} {url} returned {response.status_code} "
                    f"(attempt {attempt + 1}/{max_attempts}), backing off {delay}s"
                )
                await self._sleep(delay)

        logger.warning(f"{method} {url} still failing after {max_attempts} attempts")
        return response
