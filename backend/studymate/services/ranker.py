"""
Semantic relevance ranking.

Scores candidates against a query vector by cosine similarity and returns the
best `limit` of them above `min_score`. Vectors are computed elsewhere; a
candidate whose embedding is not there yet is simply skipped.
"""
from __future__ import annotations

from collections.abc import Iterable, Sequence
from dataclasses import dataclass
from typing import Any

import numpy as np


@dataclass(frozen=True)
class SimilarityCandidate:
    id: str
    vector: Sequence[float] | None
    metadata: Any = None


@dataclass(frozen=True)
class RankedCandidate:
    candidate: SimilarityCandidate
    score: float


def cosine_similarity(a: Sequence[float], b: Sequence[float]) -> float:
    """Cosine similarity of two vectors.

    Mismatched lengths, empty vectors and zero vectors score 0.0 instead of
    raising, so one bad embedding never aborts a ranking.
    """
    if len(a) != len(b) or len(a) == 0:
        return 0.0

    vec_a = np.asarray(a, dtype=np.float64)
    vec_b = np.asarray(b, dtype=np.float64)

    norm_a = np.linalg.norm(vec_a)
    norm_b = np.linalg.norm(vec_b)
    if norm_a == 0 or norm_b == 0:
        return 0.0

    return float(np.dot(vec_a, vec_b) / (norm_a * norm_b))


def rank(
    query: Sequence[float],
    candidates: Iterable[SimilarityCandidate],
    min_score: float,
    limit: int,
) -> list[RankedCandidate]:
    """Return up to `limit` candidates scoring strictly above `min_score`, best first.

    Equal scores keep their input order.
    """
    if limit <= 0:
        return []

    scored = [
        RankedCandidate(candidate=c, score=cosine_similarity(query, c.vector))
        for c in candidates
        if c.vector is not None and len(c.vector) > 0
    ]
    relevant = [r for r in scored if r.score > min_score]
    relevant.sort(key=lambda r: r.score, reverse=True)
    return relevant[:limit]
