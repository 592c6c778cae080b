"""Catalog import and export (JSON and CSV)."""

import csv
import io
import json
import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Optional

from bookvault.domain.entities import Book, BookStatus
from bookvault.domain.exceptions import DuplicateRecord, ProviderError, ValidationFailure
from bookvault.domain.services import ICatalogService

logger = logging.getLogger(__name__)

CSV_HEADER = [
    "ID", "Title", "Author", "ISBN", "Genre", "Description", "Tags",
    "Rating", "Status", "Notes", "CoverURL", "DateAdded", "DateRead",
]
TAG_SEPARATOR = "|"


@dataclass
class ImportReport:
    imported: int = 0
    skipped: int = 0  # duplicates
    failed: int = 0  # invalid rows
    unembedded: int = 0  # stored, but the embedding request failed


# ---------------------------------------------------------------------------
# Export
# ---------------------------------------------------------------------------
def book_to_dict(book: Book) -> dict[str, Any]:
    return {
        "id": book.id,
        "title": book.title,
        "author": book.author,
        "isbn": book.isbn,
        "description": book.description,
        "genre": book.genre,
        "tags": list(book.tags),
        "cover_url": book.cover_url,
        "page_count": book.page_count,
        "current_page": book.current_page,
        "rating": book.rating,
        "status": BookStatus(book.status).value,
        "notes": book.notes,
        "date_added": book.created_at.isoformat() if book.created_at else None,
        "date_read": book.date_read.isoformat() if book.date_read else None,
    }


def export_json(books: list[Book]) -> str:
    return json.dumps([book_to_dict(b) for b in books], indent=2)


def export_csv(books: list[Book]) -> str:
    out = io.StringIO()
    writer = csv.writer(out)
    writer.writerow(CSV_HEADER)
    for b in books:
        writer.writerow([
            b.id,
            b.title,
            b.author,
            b.isbn,
            b.genre,
            b.description,
            TAG_SEPARATOR.join(b.tags),
            b.rating,
            BookStatus(b.status).value,
            b.notes,
            b.cover_url,
            b.created_at.isoformat() if b.created_at else "",
            b.date_read.isoformat() if b.date_read else "",
        ])
    return out.getvalue()


# ---------------------------------------------------------------------------
# Import
# ---------------------------------------------------------------------------
def parse_json(payload: str) -> list[Book]:
    try:
        records = json.loads(payload)
    except json.JSONDecodeError as exc:
        raise ValidationFailure(f"invalid JSON: {exc}") from exc
    if not isinstance(records, list):
        raise ValidationFailure("invalid JSON: expected a list of books")

    books = []
    for record in records:
        if not isinstance(record, dict):
            continue
        books.append(
            Book(
                title=_to_str(record.get("title")),
                author=_to_str(record.get("author")),
                isbn=_to_str(record.get("isbn")),
                description=_to_str(record.get("description")),
                genre=_to_str(record.get("genre")),
                tags=_to_tags(record.get("tags")),
                cover_url=_to_str(record.get("cover_url")),
                page_count=_to_int(record.get("page_count")),
                current_page=_to_int(record.get("current_page")),
                rating=_to_int(record.get("rating")),
                status=_to_str(record.get("status")) or BookStatus.WANT_TO_READ,
                notes=_to_str(record.get("notes")),
                date_read=_to_datetime(record.get("date_read")),
            )
        )
    return books


def parse_csv(payload: str) -> list[Book]:
    reader = csv.reader(io.StringIO(payload))
    try:
        next(reader)  # header
    except StopIteration:
        raise ValidationFailure("invalid CSV: empty file")
    except csv.Error as exc:
        raise ValidationFailure(f"invalid CSV: {exc}") from exc

    books = []
    try:
        for row in reader:
            if len(row) < 9:
                continue
            books.append(
                Book(
                    title=row[1],
                    author=row[2],
                    isbn=row[3],
                    genre=row[4],
                    description=row[5],
                    tags=[t for t in row[6].split(TAG_SEPARATOR) if t] if row[6] else [],
                    rating=_to_int(row[7]),
                    status=row[8] or BookStatus.WANT_TO_READ,
                    notes=row[9] if len(row) > 9 else "",
                    cover_url=row[10] if len(row) > 10 else "",
                    date_read=_to_datetime(row[12]) if len(row) > 12 else None,
                )
            )
    except csv.Error as exc:
        raise ValidationFailure(f"CSV read error: {exc}") from exc
    return books


async def import_books(service: ICatalogService, books: list[Book]) -> ImportReport:
    """Add each book through the duplicate guard.

    Duplicates and invalid records are counted and skipped.  Storage
    failures abort the import.
    """
    report = ImportReport()
    for book in books:
        try:
            await service.add_book(book)
        except DuplicateRecord:
            report.skipped += 1
        except ValidationFailure as exc:
            logger.info("Import: skipping invalid record '%s': %s", book.title, exc)
            report.failed += 1
        except ProviderError:
            report.imported += 1
            report.unembedded += 1
        else:
            report.imported += 1
    logger.info(
        "Import finished: %d imported, %d skipped, %d failed, %d without embedding",
        report.imported, report.skipped, report.failed, report.unembedded,
    )
    return report


def _to_int(value: Any) -> int:
    try:
        return int(value)
    except (TypeError, ValueError, OverflowError):
        return 0


def _to_datetime(value: Any) -> Optional[datetime]:
    if not value:
        return None
    try:
        return datetime.fromisoformat(str(value).replace("Z", "+00:00")).replace(tzinfo=None)
    except ValueError:
        return None


def _to_str(value: Any) -> str:
    # numbers are coerced; any other non-string becomes ""
    if isinstance(value, str):
        return value
    if isinstance(value, (int, float)):
        return str(value)
    return ""


def _to_tags(value: Any) -> list[str]:
    if isinstance(value, str):
        return [t for t in value.split(TAG_SEPARATOR) if t]
    if isinstance(value, list):
        return [s for s in (_to_str(t) for t in value) if s]
    return []
