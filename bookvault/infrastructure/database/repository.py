"""Repository implementations."""

import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator, Optional

from sqlalchemy import delete, func, select, update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from bookvault.domain.entities import Book, BookStatus
from bookvault.domain.exceptions import NotFound, StorageFailure
from bookvault.domain.repositories import IBookRepository
from bookvault.infrastructure.database.models import BookModel
from bookvault.infrastructure.database.vector_codec import decode_embedding, encode_embedding

logger = logging.getLogger(__name__)

_NEWEST_FIRST = (BookModel.created_at.desc(), BookModel.id.desc())


def match_key(text: str) -> str:
    """Case-insensitive comparison key (Unicode casefold, done in Python)."""
    return (text or "").strip().casefold()


# ---------------------------------------------------------------------------
# Book Repository
# ---------------------------------------------------------------------------
class BookRepository(IBookRepository):

    def __init__(self, session: AsyncSession):
        self.session = session

    @asynccontextmanager
    async def _storage_errors(self, action: str) -> AsyncIterator[None]:
        """Roll back and re-raise database errors as ``StorageFailure``."""
        try:
            yield
        except SQLAlchemyError as exc:
            logger.error("Storage error during %s: %s", action, exc)
            await self.session.rollback()
            raise StorageFailure(f"{action}: {exc}") from exc

    async def create(self, book: Book) -> Book:
        db_book = BookModel(
            title=book.title,
            author=book.author,
            title_key=match_key(book.title),
            author_key=match_key(book.author),
            isbn=book.isbn,
            description=book.description,
            genre=book.genre,
            tags=list(book.tags),
            cover_url=book.cover_url,
            page_count=book.page_count,
            current_page=book.current_page,
            rating=book.rating,
            status=BookStatus(book.status).value,
            notes=book.notes,
            created_at=book.created_at,
            date_read=book.date_read,
            embedding=None,
        )
        async with self._storage_errors("create book"):
            self.session.add(db_book)
            await self.session.commit()
            await self.session.refresh(db_book)
        return self._to_entity(db_book)

    async def get_by_id(self, book_id: int) -> Book:
        async with self._storage_errors("get book"):
            db_book = await self.session.get(BookModel, book_id, populate_existing=True)
        if db_book is None:
            raise NotFound(book_id)
        return self._to_entity(db_book)

    async def list_all(self) -> list[Book]:
        return await self._fetch(select(BookModel).order_by(*_NEWEST_FIRST), "list books")

    async def list_by_status(self, status: BookStatus) -> list[Book]:
        stmt = (
            select(BookModel)
            .where(BookModel.status == BookStatus(status).value)
            .order_by(*_NEWEST_FIRST)
        )
        return await self._fetch(stmt, "list books by status")

    async def count(self) -> int:
        async with self._storage_errors("count books"):
            result = await self.session.execute(select(func.count()).select_from(BookModel))
            return result.scalar_one()

    async def update(self, book: Book) -> Book:
        async with self._storage_errors("update book"):
            db_book = await self.session.get(BookModel, book.id, populate_existing=True)
            if db_book is None:
                raise NotFound(book.id)
            db_book.title = book.title
            db_book.author = book.author
            db_book.title_key = match_key(book.title)
            db_book.author_key = match_key(book.author)
            db_book.isbn = book.isbn
            db_book.description = book.description
            db_book.genre = book.genre
            db_book.tags = list(book.tags)
            db_book.cover_url = book.cover_url
            db_book.page_count = book.page_count
            db_book.current_page = book.current_page
            db_book.rating = book.rating
            db_book.status = BookStatus(book.status).value
            db_book.notes = book.notes
            db_book.date_read = book.date_read
            await self.session.commit()
            await self.session.refresh(db_book)
        return self._to_entity(db_book)

    async def delete(self, book_id: int) -> bool:
        async with self._storage_errors("delete book"):
            result = await self.session.execute(delete(BookModel).where(BookModel.id == book_id))
            await self.session.commit()
        return result.rowcount > 0

    async def set_embedding(self, book_id: int, embedding: list[float]) -> None:
        blob = encode_embedding(embedding) or None
        async with self._storage_errors("set embedding"):
            result = await self.session.execute(
                update(BookModel)
                .where(BookModel.id == book_id)
                .values(embedding=blob)
                .execution_options(synchronize_session=False)
            )
            await self.session.commit()
        if result.rowcount == 0:
            raise NotFound(book_id)

    async def list_embedded(self) -> list[Book]:
        stmt = select(BookModel).where(BookModel.embedding.is_not(None)).order_by(*_NEWEST_FIRST)
        books = await self._fetch(stmt, "list embedded books")
        return [b for b in books if b.embedding]

    async def find_by_isbn(self, isbn: str) -> Optional[Book]:
        if not isbn:
            return None
        stmt = select(BookModel).where(BookModel.isbn == isbn).order_by(BookModel.id).limit(1)
        return await self._fetch_one(stmt, "find by ISBN")

    async def find_by_title_author(self, title: str, author: str) -> Optional[Book]:
        if not title or not author:
            return None
        stmt = (
            select(BookModel)
            .where(BookModel.title_key == match_key(title))
            .where(BookModel.author_key == match_key(author))
            .order_by(BookModel.id)
            .limit(1)
        )
        return await self._fetch_one(stmt, "find by title and author")

    async def _fetch(self, stmt, action: str) -> list[Book]:
        async with self._storage_errors(action):
            result = await self.session.execute(stmt.execution_options(populate_existing=True))
            return [self._to_entity(row) for row in result.scalars().all()]

    async def _fetch_one(self, stmt, action: str) -> Optional[Book]:
        async with self._storage_errors(action):
            result = await self.session.execute(stmt.execution_options(populate_existing=True))
            db_book = result.scalar_one_or_none()
        return self._to_entity(db_book) if db_book else None

    @staticmethod
    def _to_entity(model: BookModel) -> Book:
        return Book(
            id=model.id,
            title=model.title,
            author=model.author,
            isbn=model.isbn or "",
            description=model.description or "",
            genre=model.genre or "",
            tags=list(model.tags or []),
            cover_url=model.cover_url or "",
            page_count=model.page_count or 0,
            current_page=model.current_page or 0,
            rating=model.rating or 0,
            status=BookStatus(model.status),
            notes=model.notes or "",
            created_at=model.created_at,
            date_read=model.date_read,
            embedding=decode_embedding(model.embedding) or None,
        )
