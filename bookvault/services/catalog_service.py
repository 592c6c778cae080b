"""Catalog service with business logic."""

import logging
from datetime import datetime
from typing import Optional

from bookvault.domain.entities import Book, BookStatus, DuplicateMatch
from bookvault.domain.exceptions import DuplicateRecord, ProviderError, ValidationFailure
from bookvault.domain.repositories import IBookRepository, IEmbeddingService
from bookvault.domain.services import ICatalogService
from bookvault.services.duplicates import DuplicateDetector

logger = logging.getLogger(__name__)


def build_embedding_text(book: Book) -> str:
    """Concatenate the text-bearing fields in a fixed order."""
    text = f"{book.title} by {book.author}"
    if book.description:
        text += f". {book.description}"
    if book.genre:
        text += f". Genre: {book.genre}"
    if book.tags:
        text += ". Tags: " + ", ".join(book.tags)
    if book.notes:
        text += f". Notes: {book.notes}"
    return text


def validate_book(book: Book) -> None:
    if not book.title or not book.title.strip():
        raise ValidationFailure("title is required")
    if not book.author or not book.author.strip():
        raise ValidationFailure("author is required")
    if book.rating != 0 and not 1 <= book.rating <= 5:
        raise ValidationFailure(f"rating must be 0 (unrated) or between 1 and 5, got {book.rating}")
    try:
        book.status = BookStatus(book.status)
    except ValueError:
        raise ValidationFailure(f"invalid status: {book.status!r}")
    if book.page_count < 0 or book.current_page < 0:
        raise ValidationFailure("page counts must not be negative")


class CatalogService(ICatalogService):
    """Orchestrates persistence, duplicate checks and embedding generation."""

    def __init__(
        self,
        book_repository: IBookRepository,
        embedding_service: IEmbeddingService,
        duplicate_detector: Optional[DuplicateDetector] = None,
    ):
        self.book_repository = book_repository
        self.embedding_service = embedding_service
        self.duplicate_detector = duplicate_detector or DuplicateDetector(book_repository)

    async def add_book(self, book: Book) -> Book:
        validate_book(book)
        match = await self.duplicate_detector.check(book)
        if match is not None:
            logger.info(
                "Rejected duplicate '%s' by '%s' (matches book %s by %s)",
                book.title, book.author, match.existing.id, match.reason,
            )
            raise DuplicateRecord(match.existing, match.reason)
        return await self._create(book)

    async def force_add_book(self, book: Book) -> Book:
        validate_book(book)
        return await self._create(book)

    async def check_duplicate(self, book: Book) -> Optional[DuplicateMatch]:
        return await self.duplicate_detector.check(book)

    async def get_book(self, book_id: int) -> Book:
        return await self.book_repository.get_by_id(book_id)

    async def list_books(self) -> list[Book]:
        return await self.book_repository.list_all()

    async def list_books_by_status(self, status: BookStatus) -> list[Book]:
        return await self.book_repository.list_by_status(status)

    async def count_books(self) -> int:
        return await self.book_repository.count()

    async def update_book(self, book: Book) -> Book:
        validate_book(book)
        existing = await self.book_repository.get_by_id(book.id)
        book.created_at = existing.created_at
        # date_read is set once and then carried forward
        book.date_read = existing.date_read or book.date_read
        self._apply_status(book)

        updated = await self.book_repository.update(book)
        logger.info("Book updated: %s", updated.id)
        updated.embedding = await self._embed(updated)
        return updated

    async def delete_book(self, book_id: int) -> bool:
        deleted = await self.book_repository.delete(book_id)
        if deleted:
            logger.info("Book deleted: %s", book_id)
        return deleted

    async def reindex_missing(self) -> int:
        embedded = {b.id for b in await self.book_repository.list_embedded()}
        missing = [b for b in await self.book_repository.list_all() if b.id not in embedded]
        fixed = 0
        for book in missing:
            try:
                await self._embed(book)
            except ProviderError as exc:
                logger.warning("Reindex: embedding failed for book %s: %s", book.id, exc)
                continue
            fixed += 1
        logger.info("Reindex: embedded %d of %d books without embeddings", fixed, len(missing))
        return fixed

    async def _create(self, book: Book) -> Book:
        book.id = None
        book.embedding = None
        book.created_at = datetime.utcnow()
        self._apply_status(book)

        created = await self.book_repository.create(book)
        logger.info("Book record created: %s ('%s' by '%s')", created.id, created.title, created.author)
        try:
            created.embedding = await self._embed(created)
        except ProviderError as exc:
            logger.warning("Book %s stored without embedding: %s", created.id, exc)
            raise
        return created

    async def _embed(self, book: Book) -> list[float]:
        embedding = await self.embedding_service.generate_embedding(build_embedding_text(book))
        await self.book_repository.set_embedding(book.id, embedding)
        return embedding

    @staticmethod
    def _apply_status(book: Book) -> None:
        if book.status == BookStatus.READ and book.date_read is None:
            book.date_read = datetime.utcnow()
