"""Domain errors raised by the catalog, its stores and its providers."""

from typing import Optional

from bookvault.domain.entities import Book


class CatalogError(Exception):
    """Base class for every error the catalog surfaces to callers."""


class ValidationFailure(CatalogError):
    """A record is missing a required field or carries an invalid value."""


class DuplicateRecord(CatalogError):
    """A candidate matches a record that is already in the catalog."""

    def __init__(self, existing: Book, reason: str):
        self.existing = existing
        self.reason = reason
        super().__init__(
            f"duplicate book: {existing.title} by {existing.author} "
            f"(ID: {existing.id}, matched by {reason})"
        )


class NotFound(CatalogError):
    def __init__(self, book_id: Optional[int]):
        self.book_id = book_id
        super().__init__(f"book {book_id} not found")


class StorageFailure(CatalogError):
    """Wraps an error raised by the persistence layer."""


class ProviderError(CatalogError):
    """Wraps an embedding-provider failure."""


class MetadataSourceError(CatalogError):
    """Wraps a failure of a third-party metadata source."""
