"""
Tests for catalog reading statistics.
"""

from datetime import datetime

import pytest

from bookvault.domain.entities import BookStatus
from bookvault.services.stats import compute_stats
from conftest import make_book


def test_empty_catalog():
    stats = compute_stats([])

    assert stats.total == 0
    assert stats.average_rating == 0.0
    assert stats.genre_counts == {}
    assert stats.top_rated == []


def test_counts_and_ratings():
    books = [
        make_book("A", status=BookStatus.READ, rating=5, genre="SF", date_read=datetime(2024, 3, 5)),
        make_book("B", status=BookStatus.READ, rating=3, genre="SF", date_read=datetime(2024, 3, 20)),
        make_book("C", status=BookStatus.READING, rating=4, genre="History"),
        make_book("D", status=BookStatus.WANT_TO_READ),
    ]

    stats = compute_stats(books)

    assert (stats.total, stats.read, stats.reading, stats.want_to_read) == (4, 2, 1, 1)
    assert stats.rated_books == 3
    assert stats.average_rating == pytest.approx(4.0)
    assert stats.genre_counts == {"SF": 2, "History": 1}
    assert stats.read_by_month == {"2024-03": 2}
    assert [b.title for b in stats.top_rated] == ["A", "C"]


def test_recently_read_orders_by_date_read():
    books = [
        make_book(f"B{i}", status=BookStatus.READ, date_read=datetime(2024, i, 1))
        for i in range(1, 8)
    ]

    stats = compute_stats(books)

    assert [b.title for b in stats.recently_read] == ["B7", "B6", "B5", "B4", "B3"]
    assert len(stats.read_by_month) == 7


def test_status_strings_are_accepted():
    stats = compute_stats([make_book(status="reading")])
    assert stats.reading == 1
