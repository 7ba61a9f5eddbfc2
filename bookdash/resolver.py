"""Author enrichment: birth date and top work for a book's first author."""
import asyncio
from dataclasses import dataclass
from typing import Any, Dict, Optional
import logging

from bookdash.errors import EnrichmentUnavailable
from bookdash.models import AuthorDetails, NOT_AVAILABLE, UNKNOWN
from bookdash.parse import parse_birth_date, select_top_work

logger = logging.getLogger(__name__)

PROFILE = "author profile"
WORKS = "author works"


@dataclass(frozen=True)
class FetchResult:
    """Outcome of one author sub-fetch: a payload or the error that replaced it."""
    value: Optional[Dict[str, Any]] = None
    error: Optional[EnrichmentUnavailable] = None

    @property
    def ok(self) -> bool:
        return self.error is None


def profile_result(author_key: str, payload: Any) -> FetchResult:
    if not isinstance(payload, dict):
        return FetchResult(error=EnrichmentUnavailable(author_key, PROFILE))
    return FetchResult(value=payload)


def works_result(author_key: str, payload: Any) -> FetchResult:
    if not isinstance(payload, dict) or not isinstance(payload.get("entries"), list):
        return FetchResult(error=EnrichmentUnavailable(author_key, WORKS))
    return FetchResult(value=payload)


def merge_author_details(profile: FetchResult, works: FetchResult) -> AuthorDetails:
    """
    Map both sub-fetch results onto author details.

    A failed sub-fetch only affects its own field: a missing profile gives
    "Unknown" for the birth date, a missing works list gives "N/A" for the
    top work.
    """
    for result in (profile, works):
        if not result.ok:
            logger.warning(f"Enrichment degraded: {result.error}")

    birth_date = parse_birth_date(profile.value) if profile.ok else UNKNOWN
    top_work = select_top_work(works.value["entries"]) if works.ok else NOT_AVAILABLE
    return AuthorDetails(birth_date=birth_date, top_work=top_work)


class EnrichmentResolver:
    """Resolves author details with an async client.

    Never raises: every failure degrades to sentinel values.
    """

    def __init__(self, client):
        self.client = client

    async def resolve(self, author_key: str) -> AuthorDetails:
        profile, works = await asyncio.gather(
            self._fetch(self.client.get_author, author_key),
            self._fetch(self.client.get_author_works, author_key),
        )
        return merge_author_details(
            profile_result(author_key, profile),
            works_result(author_key, works),
        )

    async def _fetch(self, fetch, author_key: str) -> Any:
        try:
            return await fetch(author_key)
        except Exception as e:
            # A failed lookup only degrades this record
            logger.error(f"Author lookup raised for {author_key}: {e!r}")
            return None


class ThreadedEnrichmentResolver:
    """Same as EnrichmentResolver, for the blocking requests client."""

    def __init__(self, client):
        self.client = client

    def resolve(self, author_key: str) -> AuthorDetails:
        profile = self._fetch(self.client.get_author, author_key)
        works = self._fetch(self.client.get_author_works, author_key)
        return merge_author_details(
            profile_result(author_key, profile),
            works_result(author_key, works),
        )

    def _fetch(self, fetch, author_key: str) -> Any:
        try:
            return fetch(author_key)
        except Exception as e:
            logger.error(f"Author lookup raised for {author_key}: {e!r}")
            return None
