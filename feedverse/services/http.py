"""Async HTTP fetching for feed documents."""

from __future__ import annotations

import httpx
from tenacity import (
    retry,
    retry_if_not_exception_type,
    stop_after_attempt,
    wait_exponential,
)

from feedverse.core.logging import get_logger
from feedverse.core.settings import get_settings
from feedverse.utils.error_logger import log_http_error

logger = get_logger(__name__)

FEED_ACCEPT_HEADER = (
    "application/rss+xml, application/xml;q=0.9, text/xml;q=0.9, */*;q=0.5"
)


class NonRetryableError(Exception):
    """Exception for errors that should not be retried."""


def categorize_http_error(error: httpx.HTTPStatusError) -> Exception:
    """4xx responses will not get better on retry; 5xx may."""
    status_code = error.response.status_code
    if 500 <= status_code < 600:
        return error
    return NonRetryableError(f"HTTP {status_code} for {error.request.url}")


class HttpService:
    """Async HTTP client with retry on transient failures."""

    def __init__(self, timeout_seconds: float | None = None, max_retries: int | None = None):
        settings = get_settings()
        self.timeout = httpx.Timeout(
            timeout=timeout_seconds or settings.http_timeout_seconds,
            connect=10.0,
        )
        self.max_retries = max_retries or settings.http_max_retries
        self.headers = {
            "User-Agent": settings.http_user_agent,
            "Accept": FEED_ACCEPT_HEADER,
        }

    async def fetch(self, url: str) -> httpx.Response:
        """Fetch a URL, retrying connection errors and 5xx responses.

        Raises:
            NonRetryableError: on 4xx responses.
            httpx.HTTPError: when retries are exhausted.
        """
        fetcher = retry(
            stop=stop_after_attempt(self.max_retries),
            wait=wait_exponential(multiplier=1, min=1, max=8),
            retry=retry_if_not_exception_type(NonRetryableError),
            reraise=True,
        )(self._fetch_once)
        return await fetcher(url)

    async def _fetch_once(self, url: str) -> httpx.Response:
        async with httpx.AsyncClient(
            timeout=self.timeout,
            follow_redirects=True,
            headers=self.headers,
        ) as client:
            logger.debug("Fetching URL: %s", url)
            try:
                response = await client.get(url)
                response.raise_for_status()
            except httpx.HTTPStatusError as e:
                log_http_error(
                    "http_service", url, response=e.response, error=e, operation="http_fetch"
                )
                raise categorize_http_error(e) from e
            except httpx.HTTPError as e:
                logger.warning(
                    "Transport error fetching %s: %s",
                    url,
                    e,
                    extra={"component": "http_service", "operation": "http_fetch"},
                )
                raise

            logger.debug("Fetched %s: %s", url, response.status_code)
            return response

    async def fetch_text(self, url: str) -> str:
        response = await self.fetch(url)
        return response.text


# Global instance
_http_service: HttpService | None = None


def get_http_service() -> HttpService:
    """Get the global HTTP service instance."""
    global _http_service
    if _http_service is None:
        _http_service = HttpService()
    return _http_service
