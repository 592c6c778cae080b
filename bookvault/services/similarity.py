"""Cosine similarity between embedding vectors.

Scores are accumulated in float64 and narrowed to float32 on the way out.
A length mismatch, an empty vector or a zero-norm vector scores exactly 0.
"""

import logging
from typing import Sequence

import numpy as np
from sklearn.metrics.pairwise import cosine_similarity as _pairwise_cosine

logger = logging.getLogger(__name__)


def cosine_similarity(a: Sequence[float], b: Sequence[float]) -> float:
    if len(a) != len(b) or len(a) == 0:
        return 0.0
    va = np.asarray(a, dtype=np.float64)
    vb = np.asarray(b, dtype=np.float64)
    norm_a = np.linalg.norm(va)
    norm_b = np.linalg.norm(vb)
    if norm_a == 0 or norm_b == 0:
        return 0.0
    return float(np.float32(np.dot(va, vb) / (norm_a * norm_b)))


def cosine_similarities(query: Sequence[float], candidates: Sequence[Sequence[float]]) -> list[float]:
    """Score every candidate against ``query`` in one matrix product.

    Candidates whose dimensionality differs from the query's score 0.
    """
    scores = [0.0] * len(candidates)
    if not candidates or len(query) == 0:
        return scores

    dim = len(query)
    matched = [i for i, vec in enumerate(candidates) if len(vec) == dim]
    if len(matched) < len(candidates):
        logger.warning(
            "%d of %d candidate embeddings do not match query dimension %d; scored 0",
            len(candidates) - len(matched), len(candidates), dim,
        )
    if not matched:
        return scores

    q = np.asarray(query, dtype=np.float64).reshape(1, -1)
    if not np.any(q):
        return scores
    matrix = np.asarray([candidates[i] for i in matched], dtype=np.float64)
    # zero rows come back as 0 from sklearn's normalisation
    sims = _pairwise_cosine(q, matrix)[0].astype(np.float32)
    for i, sim in zip(matched, sims):
        scores[i] = float(sim)
    return scores
