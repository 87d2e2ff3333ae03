"""Cosine distances between adjacent group embeddings."""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass
import math

import numpy as np

from .models import SegmentGroup

# Used for a gap where either side has no embedding.
MISSING_EMBEDDING_DISTANCE = 0.5


@dataclass(frozen=True)
class DistanceStatistics:
    mean: float
    standard_deviation: float
    min: float
    max: float


def cosine_similarity(a: Sequence[float], b: Sequence[float]) -> float:
    """Cosine similarity clamped to ``[0, 1]``; ``0.0`` if either vector is all zeros.

    Non-finite components propagate as NaN so later stages can skip the gap.
    """

    left = np.asarray(a, dtype=float)
    right = np.asarray(b, dtype=float)
    if left.shape != right.shape:
        raise ValueError("Vectors must have the same dimension.")

    left_norm = np.linalg.norm(left)
    right_norm = np.linalg.norm(right)
    if left_norm == 0.0 or right_norm == 0.0:
        return 0.0

    similarity = float(np.dot(left, right) / (left_norm * right_norm))
    if not math.isfinite(similarity):
        return similarity
    return max(0.0, min(1.0, similarity))


def cosine_distance(a: Sequence[float], b: Sequence[float]) -> float:
    return 1.0 - cosine_similarity(a, b)


def adjacent_distances(groups: Sequence[SegmentGroup]) -> list[float]:
    """Return the ``n - 1`` distances between consecutive groups."""

    distances: list[float] = []
    for left, right in zip(groups, groups[1:]):
        if left.embedding is None or right.embedding is None:
            distances.append(MISSING_EMBEDDING_DISTANCE)
        else:
            distances.append(cosine_distance(left.embedding, right.embedding))
    return distances


def distance_statistics(distances: Sequence[float]) -> DistanceStatistics:
    finite = np.asarray([value for value in distances if math.isfinite(value)], dtype=float)
    if finite.size == 0:
        return DistanceStatistics(mean=0.0, standard_deviation=0.0, min=0.0, max=0.0)

    deviation = float(np.std(finite, ddof=1)) if finite.size > 1 else 0.0
    return DistanceStatistics(
        mean=float(np.mean(finite)),
        standard_deviation=deviation,
        min=float(np.min(finite)),
        max=float(np.max(finite)),
    )
