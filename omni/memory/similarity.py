"""
Cosine similarity, the single relevance metric for recall.

cos(a, b) = a·b / (|a| |b|), defined as 0 when either norm is 0.
Comparing vectors of different length raises instead of returning a number.
"""

from dataclasses import dataclass, field
from typing import Any, Sequence

import numpy as np

from .errors import DimensionMismatchError, ValidationError


@dataclass
class RankResult:
    hits: list[tuple[Any, float]] = field(default_factory=list)  # (key, score), best first
    scanned: int = 0


def as_vector(values) -> np.ndarray:
    vec = np.asarray(values, dtype=np.float64)
    if vec.ndim != 1:
        raise ValidationError(f"embedding must be a flat list of numbers, got shape {vec.shape}")
    return vec


def cosine_similarity(a, b) -> float:
    va, vb = as_vector(a), as_vector(b)
    if va.shape != vb.shape:
        raise DimensionMismatchError(va.size, vb.size)

    norm_a = np.linalg.norm(va)
    norm_b = np.linalg.norm(vb)
    if norm_a == 0 or norm_b == 0:
        return 0.0

    score = float(np.dot(va, vb) / (norm_a * norm_b))
    return max(-1.0, min(1.0, score))


def cosine_scores(query: np.ndarray, matrix: np.ndarray) -> np.ndarray:
    """Cosine of `query` against every row of `matrix`. Zero-norm rows score 0."""
    query_norm = np.linalg.norm(query)
    if query_norm == 0:
        return np.zeros(matrix.shape[0])

    row_norms = np.linalg.norm(matrix, axis=1)
    dots = matrix @ query
    with np.errstate(divide="ignore", invalid="ignore"):
        scores = np.where(row_norms > 0, dots / (row_norms * query_norm), 0.0)
    return np.clip(scores, -1.0, 1.0)


def rank(
    query,
    candidates: Sequence[tuple[Any, Any]],
    min_similarity: float,
    limit: int,
) -> RankResult:
    """
    Score (key, vector) candidates against `query`, drop anything below
    `min_similarity`, and return at most `limit` hits, highest first.

    Equal scores keep the candidates' input order. Any candidate whose length
    differs from the query fails the whole ranking.
    """
    q = as_vector(query)
    if not candidates:
        return RankResult(hits=[], scanned=0)

    for key, vec in candidates:
        if len(vec) != q.size:
            raise DimensionMismatchError(q.size, len(vec), record_id=key)

    matrix = np.asarray([vec for _, vec in candidates], dtype=np.float64)
    scores = cosine_scores(q, matrix)

    keep = np.flatnonzero(np.isfinite(scores) & (scores >= min_similarity))
    order = keep[np.argsort(-scores[keep], kind="stable")][:limit]

    return RankResult(
        hits=[(candidates[i][0], float(scores[i])) for i in order],
        scanned=len(candidates),
    )
