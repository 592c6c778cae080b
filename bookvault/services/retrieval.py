"""Semantic retrieval over the catalog.

Every query is a brute-force scan of the candidate pool (books with an
embedding): O(N x D) per query, which is fine for a personal catalog of a
few thousand books.
"""

import logging
from typing import Optional, Sequence

from bookvault.domain.entities import Book, SearchResult
from bookvault.domain.exceptions import ValidationFailure
from bookvault.domain.repositories import IBookRepository, IEmbeddingService
from bookvault.domain.services import IRetrievalEngine
from bookvault.services.similarity import cosine_similarities

logger = logging.getLogger(__name__)


def rank(
    query_vector: Sequence[float],
    candidates: list[Book],
    limit: int = 0,
    exclude_id: Optional[int] = None,
) -> list[SearchResult]:
    """Score, sort (descending, stable) and truncate.  ``limit <= 0`` keeps all."""
    pool = [b for b in candidates if b.embedding and (exclude_id is None or b.id != exclude_id)]
    scores = cosine_similarities(query_vector, [b.embedding for b in pool])
    results = [SearchResult(book=b, similarity=s) for b, s in zip(pool, scores)]
    results.sort(key=lambda r: r.similarity, reverse=True)
    if limit > 0:
        results = results[:limit]
    return results


class RetrievalEngine(IRetrievalEngine):

    def __init__(self, book_repository: IBookRepository, embedding_service: IEmbeddingService):
        self.book_repository = book_repository
        self.embedding_service = embedding_service

    async def search(self, query: str, limit: int = 10) -> list[SearchResult]:
        if not query or not query.strip():
            raise ValidationFailure("search query must not be empty")

        query_vector = await self.embedding_service.generate_embedding(query)
        candidates = await self.book_repository.list_embedded()
        results = rank(query_vector, candidates, limit)
        logger.info(
            "Search %r: %d candidates, returning %d", query, len(candidates), len(results)
        )
        return results

    async def find_similar(self, book_id: int, limit: int = 5) -> list[SearchResult]:
        candidates = await self.book_repository.list_embedded()
        seed = next((b for b in candidates if b.id == book_id), None)
        if seed is None:
            logger.info("Book %s has no embedding; nothing to compare against", book_id)
            return []
        return rank(seed.embedding, candidates, limit, exclude_id=book_id)
