"""Percentile-based chunk boundary detection."""

from __future__ import annotations

from collections.abc import Sequence
import math

from .models import SegmentGroup


def percentile(values: Sequence[float], fraction: float) -> float:
    """Linearly interpolated percentile of the finite values.

    ``fraction`` is in ``[0, 1]``. With ``m`` finite samples the result sits at
    rank ``fraction * (m - 1)`` of the sorted samples. No samples gives ``0.0``.
    """

    if not 0.0 <= fraction <= 1.0:
        raise ValueError("Percentile must be between 0.0 and 1.0.")

    ordered = sorted(value for value in values if math.isfinite(value))
    if not ordered:
        return 0.0
    if len(ordered) == 1:
        return ordered[0]

    rank = fraction * (len(ordered) - 1)
    index = int(rank)
    frac = rank - index
    if index + 1 < len(ordered):
        return ordered[index] * (1 - frac) + ordered[index + 1] * frac
    return ordered[index]


def find_breakpoints(distances: Sequence[float], threshold: float) -> list[int]:
    """Indices whose finite distance is at or above ``threshold``."""

    return [
        index
        for index, distance in enumerate(distances)
        if math.isfinite(distance) and distance >= threshold
    ]


def identify_breakpoints(distances: Sequence[float], fraction: float) -> list[int]:
    if not distances:
        return []
    return find_breakpoints(distances, percentile(distances, fraction))


def segment_boundaries(groups: Sequence[SegmentGroup], breakpoints: Sequence[int]) -> list[int]:
    """Translate gap indices between groups into the index of the segment ending a chunk.

    Groups dropped for size leave holes in the group sequence, so a gap index is
    mapped through the core segment of the group on its left.
    """

    return [groups[breakpoint].index for breakpoint in breakpoints]
