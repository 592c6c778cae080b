"""Dependency injection container."""

from typing import Optional

from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession

from bookvault.core.config import settings
from bookvault.domain.repositories import IBookRepository, IEmbeddingService, IMetadataSource
from bookvault.domain.services import ICatalogService, IRetrievalEngine
from bookvault.infrastructure.database.connection import get_db
from bookvault.infrastructure.database.repository import BookRepository
from bookvault.infrastructure.embedding.services import (
    MockEmbeddingService,
    OllamaEmbeddingService,
    OpenAIEmbeddingService,
)
from bookvault.infrastructure.metadata.googlebooks import GoogleBooksSource
from bookvault.infrastructure.metadata.openlibrary import OpenLibrarySource
from bookvault.services.catalog_service import CatalogService
from bookvault.services.retrieval import RetrievalEngine


# ---------------------------------------------------------------------------
# Infrastructure providers
# ---------------------------------------------------------------------------
def get_embedding_service() -> IEmbeddingService:
    """Return the configured embedding provider.

    ``embedding_model`` applies to Ollama and OpenAI; when empty each uses
    its own ``DEFAULT_MODEL``.
    """
    if settings.embedding_provider == "mock":
        return MockEmbeddingService(dimension=settings.embedding_dimension)
    elif settings.embedding_provider == "ollama":
        return OllamaEmbeddingService(
            base_url=settings.embedding_base_url,
            model=settings.embedding_model or OllamaEmbeddingService.DEFAULT_MODEL,
            timeout=settings.embedding_timeout,
        )
    elif settings.embedding_provider == "openai":
        return OpenAIEmbeddingService(
            api_key=settings.embedding_api_key,
            model=settings.embedding_model or OpenAIEmbeddingService.DEFAULT_MODEL,
            timeout=settings.embedding_timeout,
        )
    raise ValueError(f"Unknown embedding provider: {settings.embedding_provider}")


def get_metadata_source(name: Optional[str] = None) -> IMetadataSource:
    """Return the named metadata source, or the configured default."""
    name = name or settings.metadata_source
    if name == "openlibrary":
        return OpenLibrarySource(timeout=settings.metadata_timeout)
    elif name == "googlebooks":
        return GoogleBooksSource(
            api_key=settings.google_books_api_key,
            timeout=settings.metadata_timeout,
        )
    raise ValueError(f"Unknown metadata source: {name}")


# ---------------------------------------------------------------------------
# Repository providers
# ---------------------------------------------------------------------------
async def get_book_repository(session: AsyncSession = Depends(get_db)) -> IBookRepository:
    return BookRepository(session)


# ---------------------------------------------------------------------------
# Service providers
# ---------------------------------------------------------------------------
async def get_catalog_service(
    repo: IBookRepository = Depends(get_book_repository),
    embedder: IEmbeddingService = Depends(get_embedding_service),
) -> ICatalogService:
    return CatalogService(book_repository=repo, embedding_service=embedder)


async def get_retrieval_engine(
    repo: IBookRepository = Depends(get_book_repository),
    embedder: IEmbeddingService = Depends(get_embedding_service),
) -> IRetrievalEngine:
    return RetrievalEngine(book_repository=repo, embedding_service=embedder)
