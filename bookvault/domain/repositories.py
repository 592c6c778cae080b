"""Repository interfaces (ports) for dependency inversion."""

from abc import ABC, abstractmethod
from typing import Optional

from bookvault.domain.entities import Book, BookStatus


class IBookRepository(ABC):
    """Single source of truth for book records, keyed by integer id."""

    @abstractmethod
    async def create(self, book: Book) -> Book:
        """Persist every field except the embedding and return the stored book."""
        pass

    @abstractmethod
    async def get_by_id(self, book_id: int) -> Book:
        """Return the book or raise ``NotFound``."""
        pass

    @abstractmethod
    async def list_all(self) -> list[Book]:
        """All books, most recently created first."""
        pass

    @abstractmethod
    async def list_by_status(self, status: BookStatus) -> list[Book]:
        pass

    @abstractmethod
    async def count(self) -> int:
        pass

    @abstractmethod
    async def update(self, book: Book) -> Book:
        """Replace all mutable fields.  Raises ``NotFound`` for an unknown id."""
        pass

    @abstractmethod
    async def delete(self, book_id: int) -> bool:
        pass

    @abstractmethod
    async def set_embedding(self, book_id: int, embedding: list[float]) -> None:
        """Overwrite the embedding column only."""
        pass

    @abstractmethod
    async def list_embedded(self) -> list[Book]:
        """Books whose embedding is present and non-empty (the candidate pool)."""
        pass

    @abstractmethod
    async def find_by_isbn(self, isbn: str) -> Optional[Book]:
        pass

    @abstractmethod
    async def find_by_title_author(self, title: str, author: str) -> Optional[Book]:
        """Case-insensitive match on both fields."""
        pass


class IEmbeddingService(ABC):

    @abstractmethod
    async def generate_embedding(self, text: str) -> list[float]:
        """Return the embedding of ``text`` or raise ``ProviderError``."""
        pass


class IMetadataSource(ABC):
    """A third-party catalog that produces candidate books."""

    name: str = ""

    @abstractmethod
    async def search(self, query: str, limit: int = 0) -> list[Book]:
        pass

    @abstractmethod
    async def fetch_by_isbn(self, isbn: str) -> Optional[Book]:
        pass
