from abc import ABC, abstractmethod
from typing import Any, Dict, Optional

import httpx
from loguru import logger
from tenacity import (
    retry,
    stop_after_attempt,
    wait_exponential,
    retry_if_exception_type,
)

from propdefense.config.settings import settings
from propdefense.models.enums import PropSource

# Define common HTTP status codes that warrant a retry
RETRYABLE_STATUS_CODES = {408, 429, 500, 502, 503, 504}


class ScraperError(Exception):
    """Custom exception for scraper-related errors."""

    pass


class AuthenticationError(ScraperError):
    """Exception raised for authentication failures (401, 403)."""

    pass


class RateLimitError(ScraperError):
    """Exception raised for rate limit errors (429)."""

    pass


class BaseScraper(ABC):
    """Abstract base class for prop source scrapers."""

    source: PropSource = PropSource.UNKNOWN

    def __init__(self, client: Optional[httpx.AsyncClient] = None):
        self.client = client or httpx.AsyncClient(
            timeout=httpx.Timeout(settings.request_timeout_s),
            follow_redirects=True,
            headers={
                "Accept": "application/json",
                "User-Agent": "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 (KHTML, like Gecko) Chrome/120.0.0.0 Safari/537.36",
            },
        )

    @abstractmethod
    async def fetch_props(self) -> Dict[str, Any]:
        """Fetch the raw prop board from the source.

        Returns:
            The decoded payload exactly as the source returned it.
        """
        pass

    @retry(
        stop=stop_after_attempt(4),  # 3 retries, 4 total attempts
        wait=wait_exponential(multiplier=1, min=1, max=10),
        retry=retry_if_exception_type(
            (httpx.RequestError, httpx.HTTPStatusError, RateLimitError)
        ),
        reraise=True,  # Reraise the exception after max attempts
    )
    async def _make_request(
        self,
        method: str,
        url: str,
        headers: Optional[Dict[str, str]] = None,
        params: Optional[Dict[str, Any]] = None,
        **kwargs,
    ) -> httpx.Response:
        """Makes an asynchronous HTTP request with retry logic."""
        logger.debug(f"Making request", method=method, url=url, params=params)
        try:
            response = await self.client.request(
                method, url, headers=headers, params=params, **kwargs
            )

            if response.status_code in {401, 403}:
                logger.warning(
                    f"Authentication error ({response.status_code}) for {self.source.value} at {url}. Check cookies."
                )
                # Don't retry auth errors further, raise specific exception
                raise AuthenticationError(
                    f"Authentication failed ({response.status_code}) for {self.source.value}"
                )

            if response.status_code == 429:
                retry_after = response.headers.get("Retry-After")
                logger.warning(
                    f"Rate limit hit (429) for {self.source.value} at {url}. Retry-After: {retry_after}"
                )
                raise RateLimitError(f"Rate limited by {self.source.value}")

            response.raise_for_status()  # Raises HTTPStatusError for 4xx/5xx
            logger.debug(f"Request successful: {response.status_code} for {url}")
            return response

        except httpx.HTTPStatusError as e:
            if e.response.status_code in RETRYABLE_STATUS_CODES:
                logger.warning(
                    f"Retrying request for {self.source.value} due to status {e.response.status_code}: {e}"
                )
                raise  # Re-raise to trigger tenacity retry
            logger.error(
                f"HTTP error during request for {self.source.value}: {e.response.status_code} - {e}"
            )
            raise ScraperError(f"HTTP error: {e.response.status_code}") from e
        except httpx.RequestError as e:
            # Network errors, timeouts etc. are retryable
            logger.warning(f"Request error for {self.source.value}, retrying: {e}")
            raise
        except (AuthenticationError, RateLimitError):
            raise
        except Exception as e:
            logger.exception(
                f"Unexpected error during request for {self.source.value}: {e}"
            )
            raise ScraperError("Unexpected error during HTTP request") from e

    async def close(self):
        """Closes the underlying HTTP client."""
        await self.client.aclose()
        logger.info(f"Closed HTTP client for {self.source.value}")
