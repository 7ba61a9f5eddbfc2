"""HTTP client for the Open Library API with resilience patterns."""
import time
import random
import requests
from typing import Optional, Dict, Any
import logging

logger = logging.getLogger(__name__)

DEFAULT_BASE_URL = "https://openlibrary.org"


def author_path(author_key: str) -> str:
    """Normalize ``OL23919A`` or ``/authors/OL23919A`` to ``/authors/OL23919A``."""
    key = author_key.strip().rstrip("/").split("/")[-1]
    return f"/authors/{key}"


def backoff_delay(attempt: int, base_backoff: float) -> float:
    """
    Exponential backoff with jitter.

    Args:
        attempt: Current attempt number (0-indexed)
        base_backoff: Base delay in seconds

    Returns:
        Delay in seconds
    """
    # Exponential backoff: base * 2^attempt
    delay = base_backoff * (2 ** attempt)

    # Add jitter: random value between 0 and delay
    return delay + random.uniform(0, delay)


class OpenLibraryClient:
    """Client for the Open Library API with timeouts, retries, and backoff."""

    def __init__(
        self,
        base_url: str = DEFAULT_BASE_URL,
        timeout: int = 10,
        max_retries: int = 3,
        base_backoff: float = 1.0
    ):
        """
        Initialize Open Library API client.

        Args:
            base_url: API root, e.g. https://openlibrary.org
            timeout: Request timeout in seconds
            max_retries: Maximum number of attempts per request
            base_backoff: Base delay for exponential backoff
        """
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.max_retries = max_retries
        self.base_backoff = base_backoff

        # Create session for connection pooling
        self.session = requests.Session()

    def search(self, query: str, limit: Optional[int] = None) -> Optional[Dict[str, Any]]:
        """
        Search for books.

        Args:
            query: Search query string
            limit: Maximum number of documents (server default if None)

        Returns:
            API response JSON or None if all retries failed
        """
        params = {"q": query}
        if limit:
            params["limit"] = limit

        return self.get_json("/search.json", params)

    def get_author(self, author_key: str) -> Optional[Dict[str, Any]]:
        """Fetch an author profile."""
        return self.get_json(f"{author_path(author_key)}.json")

    def get_author_works(self, author_key: str) -> Optional[Dict[str, Any]]:
        """Fetch the works list of an author."""
        return self.get_json(f"{author_path(author_key)}/works.json")

    def get_json(
        self,
        path: str,
        params: Optional[Dict[str, Any]] = None
    ) -> Optional[Dict[str, Any]]:
        """
        Make HTTP request with retry logic.

        Args:
            path: Path below the base URL
            params: Query parameters

        Returns:
            Response JSON or None if all retries exhausted
        """
        url = f"{self.base_url}{path}"

        for attempt in range(self.max_retries):
            try:
                logger.debug(f"Request attempt {attempt + 1}/{self.max_retries}: {url}")

                response = self.session.get(
                    url,
                    params=params,
                    timeout=self.timeout
                )

                # Handle different status codes
                if response.status_code == 200:
                    return response.json()

                elif response.status_code == 429:
                    # Rate limited - must retry with backoff
                    logger.warning(f"Rate limited (429) on attempt {attempt + 1}: {url}")
                    if attempt < self.max_retries - 1:
                        self._backoff(attempt)
                        continue

                elif response.status_code >= 500:
                    # Server error - retryable
                    logger.warning(f"Server error ({response.status_code}) on attempt {attempt + 1}: {url}")
                    if attempt < self.max_retries - 1:
                        self._backoff(attempt)
                        continue

                else:
                    # Client error - don't retry
                    logger.error(f"Client error ({response.status_code}): {url}")
                    return None

            except requests.exceptions.Timeout:
                logger.warning(f"Timeout on attempt {attempt + 1}: {url}")
                if attempt < self.max_retries - 1:
                    self._backoff(attempt)
                    continue

            except requests.exceptions.ConnectionError as e:
                logger.warning(f"Connection error on attempt {attempt + 1}: {e}")
                if attempt < self.max_retries - 1:
                    self._backoff(attempt)
                    continue

            except ValueError as e:
                # Body was not valid JSON
                logger.error(f"Invalid JSON from {url}: {e}")
                return None

            except requests.exceptions.RequestException as e:
                # Redirect loops and bad URLs - not retryable
                logger.error(f"Request failed: {url}: {e!r}")
                return None

        logger.error(f"All {self.max_retries} attempts failed: {url}")
        return None

    def _backoff(self, attempt: int):
        """Sleep before the next attempt."""
        delay = backoff_delay(attempt, self.base_backoff)
        logger.info(f"Backing off for {delay:.2f} seconds")
        time.sleep(delay)

    def close(self):
        """Close the session."""
        self.session.close()

    def __enter__(self):
        """Context manager entry."""
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        """Context manager exit."""
        self.close()
