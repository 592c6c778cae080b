"""Domain-level application service interfaces (ports).

The API layer depends on these contracts only.  Concrete implementations
live in ``bookvault/services/`` and are wired together by the composition
root in ``bookvault/core/dependencies.py``, so every service can be swapped
for a test double via FastAPI's ``app.dependency_overrides``.
"""

from abc import ABC, abstractmethod
from typing import Optional

from bookvault.domain.entities import Book, BookStatus, DuplicateMatch, SearchResult


class ICatalogService(ABC):

    @abstractmethod
    async def add_book(self, book: Book) -> Book:
        """Add a book after checking for duplicates.

        Raises ``DuplicateRecord`` without persisting anything when the
        candidate matches an existing record.  The record is stored first
        and embedded second; if the embedding provider fails the record
        stays in the catalog without an embedding and ``ProviderError``
        propagates.
        """
        pass

    @abstractmethod
    async def force_add_book(self, book: Book) -> Book:
        """Add a book without the duplicate guard."""
        pass

    @abstractmethod
    async def check_duplicate(self, book: Book) -> Optional[DuplicateMatch]:
        pass

    @abstractmethod
    async def get_book(self, book_id: int) -> Book:
        pass

    @abstractmethod
    async def list_books(self) -> list[Book]:
        pass

    @abstractmethod
    async def list_books_by_status(self, status: BookStatus) -> list[Book]:
        pass

    @abstractmethod
    async def count_books(self) -> int:
        pass

    @abstractmethod
    async def update_book(self, book: Book) -> Book:
        """Replace all fields and regenerate the embedding."""
        pass

    @abstractmethod
    async def delete_book(self, book_id: int) -> bool:
        pass

    @abstractmethod
    async def reindex_missing(self) -> int:
        """Embed every book that has no embedding; return how many were fixed."""
        pass


class IRetrievalEngine(ABC):

    @abstractmethod
    async def search(self, query: str, limit: int = 10) -> list[SearchResult]:
        pass

    @abstractmethod
    async def find_similar(self, book_id: int, limit: int = 5) -> list[SearchResult]:
        pass
