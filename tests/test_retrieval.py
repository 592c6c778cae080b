"""
Tests for semantic search and similar-book ranking.
"""

from datetime import datetime, timedelta

import pytest

from bookvault.domain.entities import Book
from bookvault.domain.exceptions import ProviderError, ValidationFailure
from bookvault.services.retrieval import rank
from conftest import make_book


async def _add(repo, title, embedding=None, offset=0):
    book = await repo.create(
        make_book(title, "Author", created_at=datetime(2024, 1, 1) + timedelta(minutes=offset))
    )
    if embedding is not None:
        await repo.set_embedding(book.id, embedding)
    return book


async def _five_embedded(repo):
    vectors = {
        "north": [1.0, 0.0],
        "north-east": [1.0, 1.0],
        "east": [0.0, 1.0],
        "south": [-1.0, 0.0],
        "west-ish": [-0.5, 0.2],
    }
    books = {}
    for i, (title, vec) in enumerate(vectors.items()):
        books[title] = await _add(repo, title, vec, offset=i)
    return books


async def test_search_ranks_by_descending_similarity(repo, retrieval, embedder):
    embedder.default = [1.0, 0.1]
    await _five_embedded(repo)

    results = await retrieval.search("which way is north", limit=0)

    titles = [r.book.title for r in results]
    assert titles[0] == "north"
    assert titles[-1] == "south"
    scores = [r.similarity for r in results]
    assert scores == sorted(scores, reverse=True)
    assert len(results) == 5


async def test_search_limit_truncates_to_top_results(repo, retrieval, embedder):
    embedder.default = [1.0, 0.1]
    await _five_embedded(repo)

    results = await retrieval.search("north", limit=2)

    assert [r.book.title for r in results] == ["north", "north-east"]


@pytest.mark.parametrize("limit", [0, -1])
async def test_non_positive_limit_returns_everything(repo, retrieval, embedder, limit):
    embedder.default = [1.0, 0.1]
    await _five_embedded(repo)

    assert len(await retrieval.search("anything", limit=limit)) == 5


async def test_search_excludes_books_without_embeddings(repo, retrieval, embedder):
    embedder.default = [1.0, 0.0]
    await _add(repo, "embedded", [1.0, 0.0])
    await _add(repo, "bare")

    results = await retrieval.search("query", limit=0)

    assert [r.book.title for r in results] == ["embedded"]


async def test_search_on_empty_pool(retrieval):
    assert await retrieval.search("anything") == []


async def test_search_requires_query(retrieval, embedder):
    with pytest.raises(ValidationFailure):
        await retrieval.search("   ")
    assert embedder.calls == []


async def test_search_propagates_provider_errors(repo, retrieval, embedder):
    await _add(repo, "embedded", [1.0, 0.0])
    embedder.fail = True

    with pytest.raises(ProviderError):
        await retrieval.search("query")


async def test_mismatched_dimensions_score_zero(repo, retrieval, embedder):
    embedder.default = [1.0, 0.0]
    await _add(repo, "match", [1.0, 0.0], offset=0)
    await _add(repo, "three-d", [1.0, 0.0, 0.0], offset=1)

    results = await retrieval.search("query", limit=0)

    by_title = {r.book.title: r.similarity for r in results}
    assert by_title["match"] == pytest.approx(1.0, abs=1e-6)
    assert by_title["three-d"] == 0.0


async def test_find_similar_excludes_seed(repo, retrieval):
    books = await _five_embedded(repo)
    seed = books["north"]

    results = await retrieval.find_similar(seed.id, limit=0)

    assert seed.id not in [r.book.id for r in results]
    assert len(results) == 4
    assert results[0].book.title == "north-east"
    scores = [r.similarity for r in results]
    assert scores == sorted(scores, reverse=True)


async def test_find_similar_respects_limit(repo, retrieval):
    books = await _five_embedded(repo)

    results = await retrieval.find_similar(books["east"].id, limit=1)

    assert [r.book.title for r in results] == ["north-east"]


async def test_find_similar_without_seed_embedding_is_empty(repo, retrieval):
    await _five_embedded(repo)
    bare = await _add(repo, "bare")

    assert await retrieval.find_similar(bare.id) == []
    assert await retrieval.find_similar(12345) == []


async def test_find_similar_does_not_call_provider(repo, retrieval, embedder):
    books = await _five_embedded(repo)
    await retrieval.find_similar(books["north"].id)
    assert embedder.calls == []


def test_rank_ties_keep_scan_order():
    pool = [
        Book(id=i, title=f"t{i}", author="a", embedding=[1.0, 0.0]) for i in range(1, 5)
    ]

    results = rank([2.0, 0.0], pool)

    assert [r.book.id for r in results] == [1, 2, 3, 4]


def test_rank_skips_candidates_without_embeddings():
    pool = [
        Book(id=1, title="a", author="a", embedding=[1.0]),
        Book(id=2, title="b", author="b", embedding=None),
        Book(id=3, title="c", author="c", embedding=[]),
    ]
    assert [r.book.id for r in rank([1.0], pool)] == [1]
