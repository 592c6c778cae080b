"""Shared fixtures: an in-memory catalog and a controllable embedding provider."""

from typing import Optional

import pytest
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from bookvault.domain.entities import Book
from bookvault.domain.exceptions import ProviderError
from bookvault.domain.repositories import IEmbeddingService
from bookvault.infrastructure.database.connection import create_tables
from bookvault.infrastructure.database.repository import BookRepository
from bookvault.services.catalog_service import CatalogService
from bookvault.services.retrieval import RetrievalEngine


class FakeEmbeddingService(IEmbeddingService):
    """Maps keywords to fixed 4-d vectors and records every request.

    The vector for a text is the sum of the vectors of the keywords it
    contains (case-insensitive); text with no keyword gets ``default``.
    """

    KEYWORDS = {
        "space": [1.0, 0.0, 0.0, 0.0],
        "dune": [1.0, 0.2, 0.0, 0.0],
        "foo": [0.0, 1.0, 0.0, 0.0],
        "cooking": [0.0, 0.0, 1.0, 0.0],
        "history": [0.0, 0.0, 0.0, 1.0],
    }

    def __init__(self, default: Optional[list[float]] = None):
        self.calls: list[str] = []
        self.fail = False
        self.default = default or [0.1, 0.1, 0.1, 0.1]

    async def generate_embedding(self, text: str) -> list[float]:
        self.calls.append(text)
        if self.fail:
            raise ProviderError("embedding provider unavailable")
        lowered = text.lower()
        vector = [0.0, 0.0, 0.0, 0.0]
        hit = False
        for word, vec in self.KEYWORDS.items():
            if word in lowered:
                hit = True
                vector = [a + b for a, b in zip(vector, vec)]
        return vector if hit else list(self.default)


@pytest.fixture
async def engine():
    engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    await create_tables(engine)
    yield engine
    await engine.dispose()


@pytest.fixture
async def session(engine):
    maker = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)
    async with maker() as session:
        yield session


@pytest.fixture
def repo(session):
    return BookRepository(session)


@pytest.fixture
def embedder():
    return FakeEmbeddingService()


@pytest.fixture
def catalog(repo, embedder):
    return CatalogService(book_repository=repo, embedding_service=embedder)


@pytest.fixture
def retrieval(repo, embedder):
    return RetrievalEngine(book_repository=repo, embedding_service=embedder)


def make_book(title: str = "Foo", author: str = "Bar", **kwargs) -> Book:
    return Book(title=title, author=author, **kwargs)
