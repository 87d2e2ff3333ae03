"""Per-call chunking options."""

from __future__ import annotations

from dataclasses import dataclass

from ..config import Settings


@dataclass(frozen=True)
class ChunkingOptions:
    """Immutable knobs read by every pipeline stage.

    Args:
        max_tokens_per_chunk: Upper token bound for segments, groups and chunks.
        min_tokens_per_chunk: Lower token bound for regular (non-fallback) chunks.
        buffer_size: Neighbouring segments on each side included when embedding.
        breakpoint_percentile: Percentile in ``[0, 1]`` of the distance
            distribution at or above which a gap becomes a chunk boundary.
        enable_caching: Reuse embeddings for identical group texts.
        max_cache_size: Entry bound of the embedding cache.
    """

    max_tokens_per_chunk: int = 512
    min_tokens_per_chunk: int = 10
    buffer_size: int = 1
    breakpoint_percentile: float = 0.75
    enable_caching: bool = True
    max_cache_size: int = 1000

    def __post_init__(self) -> None:
        if self.max_tokens_per_chunk < 1:
            raise ValueError("max_tokens_per_chunk must be greater than zero")
        if self.min_tokens_per_chunk < 0:
            raise ValueError("min_tokens_per_chunk must be non-negative")
        if self.min_tokens_per_chunk > self.max_tokens_per_chunk:
            raise ValueError("min_tokens_per_chunk must not exceed max_tokens_per_chunk")
        if self.buffer_size < 0:
            raise ValueError("buffer_size must be non-negative")
        if not 0.0 <= self.breakpoint_percentile <= 1.0:
            raise ValueError("breakpoint_percentile must be between 0.0 and 1.0")
        if self.max_cache_size < 1:
            raise ValueError("max_cache_size must be greater than zero")

    @classmethod
    def from_settings(cls, settings: Settings) -> ChunkingOptions:
        return cls(
            max_tokens_per_chunk=settings.max_tokens_per_chunk,
            min_tokens_per_chunk=settings.min_tokens_per_chunk,
            buffer_size=settings.buffer_size,
            breakpoint_percentile=settings.breakpoint_percentile,
            enable_caching=settings.enable_caching,
            max_cache_size=settings.max_cache_size,
        )
