"""
Infrastructure layer: Overpass API client with retry logic.
"""
import logging
from typing import Any, Dict, Optional
import httpx
from tenacity import (
    retry,
    stop_after_attempt,
    wait_exponential,
    retry_if_exception_type,
)

from landuse_api.config import settings
from landuse_api.domain.exceptions import FetchError
from landuse_api.infrastructure.api_constants import APIConstants, OverpassEndpoints

logger = logging.getLogger(__name__)


class RetryableFetchError(FetchError):
    """Upstream failure worth another attempt (5xx, 429, transport errors)."""


class OverpassClient:
    """
    Client for the Overpass interpreter endpoint.
    Implements retry logic with exponential backoff.
    """

    def __init__(self, base_url: Optional[str] = None, timeout: Optional[float] = None):
        """Initialize the API client with configuration."""
        self.base_url = base_url or settings.overpass_url
        self.client = httpx.AsyncClient(
            headers={
                "accept": APIConstants.CONTENT_TYPE_JSON,
                "user-agent": APIConstants.USER_AGENT,
            },
            timeout=timeout or settings.overpass_http_timeout,
        )

    async def __aenter__(self) -> "OverpassClient":
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.close()

    async def close(self):
        """Close the HTTP client."""
        await self.client.aclose()

    @retry(
        stop=stop_after_attempt(settings.max_retry_attempts),
        wait=wait_exponential(
            multiplier=settings.retry_backoff_multiplier,
            min=settings.retry_min_wait,
            max=settings.retry_max_wait,
        ),
        retry=retry_if_exception_type(RetryableFetchError),
        reraise=True,
    )
    async def _make_request(self, query: str) -> Dict[str, Any]:
        """
        Post a query with retry logic.

        Args:
            query: Overpass QL query text

        Returns:
            Response data as dictionary

        Raises:
            FetchError: If the request fails after retries
        """
        try:
            response = await self.client.post(
                self.base_url,
                data={OverpassEndpoints.QUERY_FIELD: query},
            )
            response.raise_for_status()
        except httpx.HTTPStatusError as e:
            status_code = e.response.status_code
            message = f"Overpass request failed: {status_code} - {e.response.text[:200]}"
            # Retry on server errors (5xx) and throttling
            if status_code >= 500 or status_code in APIConstants.RETRYABLE_CLIENT_STATUSES:
                logger.warning(f"{message} (retrying)")
                raise RetryableFetchError(message, status_code=status_code)
            # Don't retry on other client errors (4xx)
            raise FetchError(message, status_code=status_code)
        except httpx.RequestError as e:
            logger.warning(f"Overpass request error: {e!r} (retrying)")
            raise RetryableFetchError(f"Overpass request error: {str(e) or type(e).__name__}")

        try:
            return response.json()
        except ValueError as e:
            raise FetchError(f"Overpass returned invalid JSON: {e}")

    async def run_query(self, query: str) -> Dict[str, Any]:
        """
        Run a query and return the raw topology document.

        Args:
            query: Overpass QL query text

        Returns:
            Parsed JSON document with an ``elements`` list

        Raises:
            FetchError: On transport, status, JSON or server-side query errors
        """
        data = await self._make_request(query)

        if not isinstance(data, dict):
            raise FetchError("Overpass returned an unexpected document")

        remark = data.get("remark") or ""
        if any(marker in remark.lower() for marker in APIConstants.REMARK_ERROR_MARKERS):
            raise FetchError(f"Overpass query failed: {remark}")

        logger.debug(f"Overpass returned {len(data.get('elements') or [])} elements")
        return data


# Singleton instance
_api_client: Optional[OverpassClient] = None


def get_api_client() -> OverpassClient:
    """
    Get or create the singleton API client instance.

    Returns:
        OverpassClient instance
    """
    global _api_client
    if _api_client is None:
        _api_client = OverpassClient()
    return _api_client


async def close_api_client() -> None:
    """Close the singleton API client, if created, and forget it."""
    global _api_client
    if _api_client is not None:
        await _api_client.close()
    _api_client = None
