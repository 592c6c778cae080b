"""Pydantic schemas for API requests and responses."""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

from bookvault.domain.entities import Book, BookStatus


# ---------------------------------------------------------------------------
# Books
# ---------------------------------------------------------------------------
class BookBase(BaseModel):
    title: str = Field(..., min_length=1, max_length=512)
    author: str = Field(..., min_length=1, max_length=512)
    isbn: str = Field("", max_length=32)
    description: str = ""
    genre: str = Field("", max_length=100)
    tags: list[str] = Field(default_factory=list)
    cover_url: str = ""
    page_count: int = Field(0, ge=0)
    current_page: int = Field(0, ge=0)
    rating: int = Field(0, ge=0, le=5)  # 0 = unrated
    status: BookStatus = BookStatus.WANT_TO_READ
    notes: str = ""

    def to_entity(self, book_id: Optional[int] = None) -> Book:
        return Book(id=book_id, **self.model_dump())


class BookCreate(BookBase):
    pass


class BookUpdate(BookBase):
    """Full replacement of a book's mutable fields."""


class BookResponse(BaseModel):
    id: int
    title: str
    author: str
    isbn: str
    description: str
    genre: str
    tags: list[str]
    cover_url: str
    page_count: int
    current_page: int
    progress: int
    rating: int
    status: BookStatus
    notes: str
    created_at: datetime
    date_read: Optional[datetime] = None
    has_embedding: bool

    model_config = ConfigDict(from_attributes=True)


class DuplicateResponse(BaseModel):
    detail: str
    reason: str
    existing: BookResponse


# ---------------------------------------------------------------------------
# Search
# ---------------------------------------------------------------------------
class SearchResultResponse(BaseModel):
    book: BookResponse
    similarity: float

    model_config = ConfigDict(from_attributes=True)


class SearchResponse(BaseModel):
    query: Optional[str] = None
    results: list[SearchResultResponse]


# ---------------------------------------------------------------------------
# Discovery / import / stats
# ---------------------------------------------------------------------------
class CandidateResponse(BaseModel):
    title: str
    author: str
    isbn: str
    description: str
    genre: str
    tags: list[str]
    cover_url: str
    page_count: int
    duplicate_of: Optional[int] = None
    duplicate_reason: Optional[str] = None

    model_config = ConfigDict(from_attributes=True)


class ImportResponse(BaseModel):
    imported: int
    skipped: int
    failed: int
    unembedded: int

    model_config = ConfigDict(from_attributes=True)


class StatsResponse(BaseModel):
    total: int
    want_to_read: int
    reading: int
    read: int
    rated_books: int
    average_rating: float
    genre_counts: dict[str, int]
    read_by_month: dict[str, int]
    top_rated: list[BookResponse]
    recently_read: list[BookResponse]

    model_config = ConfigDict(from_attributes=True)


class ReindexResponse(BaseModel):
    embedded: int
