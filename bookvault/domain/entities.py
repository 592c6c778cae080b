"""Domain entities for bookvault."""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Optional


class BookStatus(str, Enum):
    WANT_TO_READ = "want_to_read"
    READING = "reading"
    READ = "read"


@dataclass
class Book:
    """A catalog entry.

    ``id`` is ``None`` until the store assigns one.  ``rating`` uses 0 for
    "unrated".  ``embedding`` is populated after creation, once the
    embedding provider has produced a vector for the record's text.
    """

    title: str
    author: str
    id: Optional[int] = None
    isbn: str = ""
    description: str = ""
    genre: str = ""
    tags: list[str] = field(default_factory=list)
    cover_url: str = ""
    page_count: int = 0
    current_page: int = 0
    rating: int = 0
    status: BookStatus = BookStatus.WANT_TO_READ
    notes: str = ""
    created_at: datetime = field(default_factory=datetime.utcnow)
    date_read: Optional[datetime] = None
    embedding: Optional[list[float]] = None

    @property
    def progress(self) -> int:
        """Reading progress as a percentage (0-100)."""
        if self.page_count <= 0 or self.current_page <= 0:
            return 0
        return min(self.current_page * 100 // self.page_count, 100)

    @property
    def has_embedding(self) -> bool:
        return bool(self.embedding)


@dataclass
class SearchResult:
    book: Book
    similarity: float


@dataclass
class DuplicateMatch:
    """An existing record a candidate collides with, and the rule that matched."""

    existing: Book
    reason: str  # "ISBN" | "title+author"
