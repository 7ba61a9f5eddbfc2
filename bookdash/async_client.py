"""Async HTTP client for parallel Open Library requests."""
import asyncio
import httpx
from typing import Optional, Dict, Any
import logging

from bookdash.client import DEFAULT_BASE_URL, author_path, backoff_delay

logger = logging.getLogger(__name__)


class AsyncOpenLibraryClient:
    """Async client for concurrent author lookups."""

    def __init__(
        self,
        base_url: str = DEFAULT_BASE_URL,
        timeout: int = 10,
        max_concurrent: int = 10,
        max_retries: int = 3,
        base_backoff: float = 1.0,
        transport: Optional[httpx.AsyncBaseTransport] = None
    ):
        """
        Initialize async client.

        Args:
            base_url: API root
            timeout: Request timeout
            max_concurrent: Maximum concurrent requests
            max_retries: Maximum attempts per request
            base_backoff: Base delay for exponential backoff
            transport: Optional httpx transport (used by tests)
        """
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.max_retries = max_retries
        self.base_backoff = base_backoff
        self.semaphore = asyncio.Semaphore(max_concurrent)

        # Create async HTTP client
        self.client = httpx.AsyncClient(
            base_url=self.base_url,
            timeout=timeout,
            transport=transport
        )

    async def search(self, query: str, limit: Optional[int] = None) -> Optional[Dict[str, Any]]:
        """Search for books asynchronously."""
        params = {"q": query}
        if limit:
            params["limit"] = limit
        return await self.get_json("/search.json", params)

    async def get_author(self, author_key: str) -> Optional[Dict[str, Any]]:
        """Fetch an author profile."""
        return await self.get_json(f"{author_path(author_key)}.json")

    async def get_author_works(self, author_key: str) -> Optional[Dict[str, Any]]:
        """Fetch the works list of an author."""
        return await self.get_json(f"{author_path(author_key)}/works.json")

    async def get_json(
        self,
        path: str,
        params: Optional[Dict[str, Any]] = None
    ) -> Optional[Dict[str, Any]]:
        """
        GET a JSON document, retrying transient failures.

        Args:
            path: Path below the base URL
            params: Query parameters

        Returns:
            Decoded JSON or None
        """
        for attempt in range(self.max_retries):
            retryable = False

            # Use semaphore to limit concurrency
            async with self.semaphore:
                try:
                    logger.debug(f"Async request {attempt + 1}/{self.max_retries}: {path}")
                    response = await self.client.get(path, params=params)

                    if response.status_code == 200:
                        return response.json()

                    if response.status_code == 429 or response.status_code >= 500:
                        logger.warning(f"Status {response.status_code} on attempt {attempt + 1}: {path}")
                        retryable = True
                    else:
                        logger.warning(f"Status {response.status_code} for: {path}")
                        return None

                except httpx.TransportError as e:
                    # Timeouts and connection failures
                    logger.warning(f"Async request failed on attempt {attempt + 1}: {path}: {e!r}")
                    retryable = True

                except ValueError as e:
                    logger.error(f"Invalid JSON from {path}: {e}")
                    return None

                except httpx.HTTPError as e:
                    # Redirect loops and undecodable bodies
                    logger.error(f"Async request failed: {path}: {e!r}")
                    return None

            # Back off without holding a semaphore slot
            if retryable and attempt < self.max_retries - 1:
                await asyncio.sleep(backoff_delay(attempt, self.base_backoff))

        logger.error(f"All {self.max_retries} attempts failed: {path}")
        return None

    async def close(self):
        """Close the HTTP client."""
        await self.client.aclose()

    async def __aenter__(self):
        """Async context manager entry."""
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        """Async context manager exit."""
        await self.close()
