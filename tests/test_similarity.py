"""
Tests for the cosine similarity kernel.
"""

import numpy as np
import pytest

from bookvault.services.similarity import cosine_similarities, cosine_similarity


def test_self_similarity_is_one():
    v = [0.3, -1.2, 4.5, 0.0, 2.2]
    assert cosine_similarity(v, v) == pytest.approx(1.0, abs=1e-6)


def test_negation_is_minus_one():
    v = [0.3, -1.2, 4.5, 0.7]
    assert cosine_similarity(v, [-x for x in v]) == pytest.approx(-1.0, abs=1e-6)


def test_orthogonal_unit_vectors_score_zero():
    assert cosine_similarity([1.0, 0.0, 0.0], [0.0, 1.0, 0.0]) == 0.0


def test_length_mismatch_scores_zero():
    assert cosine_similarity([1.0, 2.0], [1.0, 2.0, 3.0]) == 0.0


def test_zero_vector_scores_zero():
    assert cosine_similarity([0.0, 0.0, 0.0], [1.0, 2.0, 3.0]) == 0.0
    assert cosine_similarity([1.0, 2.0, 3.0], [0.0, 0.0, 0.0]) == 0.0


def test_empty_vectors_score_zero():
    assert cosine_similarity([], []) == 0.0


def test_result_is_narrowed_to_float32():
    score = cosine_similarity([1.0, 2.0, 3.0], [3.0, 1.0, 2.0])
    assert score == float(np.float32(score))


def test_batch_matches_pairwise():
    rng = np.random.RandomState(3)
    query = rng.randn(16).tolist()
    candidates = [rng.randn(16).tolist() for _ in range(5)]

    batch = cosine_similarities(query, candidates)

    for vec, score in zip(candidates, batch):
        assert score == pytest.approx(cosine_similarity(query, vec), abs=1e-6)


def test_batch_scores_mismatched_and_zero_candidates_as_zero():
    query = [1.0, 0.0, 0.0]
    candidates = [[1.0, 0.0, 0.0], [1.0, 0.0], [0.0, 0.0, 0.0], [0.0, 1.0, 0.0]]

    scores = cosine_similarities(query, candidates)

    assert scores[0] == pytest.approx(1.0, abs=1e-6)
    assert scores[1] == 0.0
    assert scores[2] == 0.0
    assert scores[3] == pytest.approx(0.0, abs=1e-7)


def test_batch_with_zero_query_scores_everything_zero():
    assert cosine_similarities([0.0, 0.0], [[1.0, 1.0], [2.0, 0.5]]) == [0.0, 0.0]


def test_batch_with_no_candidates():
    assert cosine_similarities([1.0, 2.0], []) == []
