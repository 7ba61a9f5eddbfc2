"""Assemble book records from a search response plus per-author enrichment."""
import asyncio
from concurrent.futures import ThreadPoolExecutor, as_completed
from typing import Any, Dict, List, Optional
import logging

from bookdash.errors import SourceUnavailable
from bookdash.models import AuthorDetails, BookRecord
from bookdash.parse import extract_docs, first_author_key, parse_book_record
from bookdash.resolver import EnrichmentResolver, ThreadedEnrichmentResolver

logger = logging.getLogger(__name__)

DEFAULT_QUERY = "books"


def _require_docs(response: Any, query: str) -> List[Dict[str, Any]]:
    docs = extract_docs(response)
    if docs is None:
        raise SourceUnavailable(f"Search for {query!r} failed or returned no document list")
    return docs


class RecordAssembler:
    """Fetches the primary search and enriches every document concurrently."""

    def __init__(
        self,
        client,
        query: str = DEFAULT_QUERY,
        limit: Optional[int] = None,
        resolver: Optional[EnrichmentResolver] = None
    ):
        """
        Args:
            client: AsyncOpenLibraryClient (or anything with the same coroutines)
            query: Primary search query
            limit: Maximum documents to request
            resolver: Author resolver, built from ``client`` if omitted
        """
        self.client = client
        self.query = query
        self.limit = limit
        self.resolver = resolver or EnrichmentResolver(client)

    async def assemble(self) -> List[BookRecord]:
        """
        Build the record collection.

        Returns:
            Records in search response order

        Raises:
            SourceUnavailable: if the primary search fails
        """
        logger.info(f"Searching for: {self.query}")
        docs = _require_docs(await self.client.search(self.query, self.limit), self.query)
        logger.info(f"Enriching {len(docs)} documents")

        # gather() keeps argument order, so index i is document i
        details = await asyncio.gather(*(self._details(doc) for doc in docs))
        return [
            parse_book_record(doc, index, author)
            for index, (doc, author) in enumerate(zip(docs, details))
        ]

    async def _details(self, doc: Dict[str, Any]) -> AuthorDetails:
        author_key = first_author_key(doc)
        if author_key is None:
            return AuthorDetails()
        return await self.resolver.resolve(author_key)


def assemble_threaded(
    client,
    query: str = DEFAULT_QUERY,
    limit: Optional[int] = None,
    max_workers: int = 10
) -> List[BookRecord]:
    """
    Blocking twin of RecordAssembler.assemble using a thread pool.

    Args:
        client: OpenLibraryClient
        query: Primary search query
        limit: Maximum documents to request
        max_workers: Thread pool size, bounds concurrent enrichments

    Returns:
        Records in search response order

    Raises:
        SourceUnavailable: if the primary search fails
    """
    logger.info(f"Searching for: {query}")
    docs = _require_docs(client.search(query, limit), query)
    resolver = ThreadedEnrichmentResolver(client)
    details: List[AuthorDetails] = [AuthorDetails()] * len(docs)

    with ThreadPoolExecutor(max_workers=max_workers) as pool:
        futures = {}
        for index, doc in enumerate(docs):
            author_key = first_author_key(doc)
            if author_key is not None:
                futures[pool.submit(resolver.resolve, author_key)] = index

        for future in as_completed(futures):
            details[futures[future]] = future.result()

    logger.info(f"Enriched {len(futures)} of {len(docs)} documents")
    return [
        parse_book_record(doc, index, details[index])
        for index, doc in enumerate(docs)
    ]
