"""Reading statistics over the catalog."""

from collections import Counter
from dataclasses import dataclass, field

from bookvault.domain.entities import Book, BookStatus

TOP_LIST_SIZE = 5


@dataclass
class CatalogStats:
    total: int = 0
    want_to_read: int = 0
    reading: int = 0
    read: int = 0
    rated_books: int = 0
    average_rating: float = 0.0
    genre_counts: dict[str, int] = field(default_factory=dict)
    read_by_month: dict[str, int] = field(default_factory=dict)
    top_rated: list[Book] = field(default_factory=list)
    recently_read: list[Book] = field(default_factory=list)


def compute_stats(books: list[Book]) -> CatalogStats:
    """Aggregate ``books`` (expected newest first, as the store lists them)."""
    stats = CatalogStats(total=len(books))
    statuses = Counter(BookStatus(b.status) for b in books)
    stats.want_to_read = statuses[BookStatus.WANT_TO_READ]
    stats.reading = statuses[BookStatus.READING]
    stats.read = statuses[BookStatus.READ]

    ratings = [b.rating for b in books if b.rating > 0]
    stats.rated_books = len(ratings)
    if ratings:
        stats.average_rating = sum(ratings) / len(ratings)

    stats.genre_counts = dict(Counter(b.genre for b in books if b.genre))

    finished = [b for b in books if b.status == BookStatus.READ and b.date_read]
    stats.read_by_month = dict(Counter(b.date_read.strftime("%Y-%m") for b in finished))
    stats.top_rated = [b for b in books if b.rating >= 4][:TOP_LIST_SIZE]
    stats.recently_read = sorted(finished, key=lambda b: b.date_read, reverse=True)[:TOP_LIST_SIZE]
    return stats
