"""Context windows around segments for embedding generation."""

from __future__ import annotations

from collections.abc import Sequence
import logging

from .models import Segment, SegmentGroup
from .options import ChunkingOptions
from .tokens import TokenCounter

LOGGER = logging.getLogger("ragchunk.processing.grouping")


def build_groups(segments: Sequence[Segment], buffer_size: int) -> list[SegmentGroup]:
    """Build one overlapping window of ``2 * buffer_size + 1`` segments per segment.

    Windows are clipped at both ends of the sequence, so ``n`` segments always
    produce ``n`` groups.
    """

    if buffer_size < 0:
        raise ValueError("buffer_size must be non-negative")

    groups: list[SegmentGroup] = []
    last = len(segments) - 1
    for index, segment in enumerate(segments):
        first_index = max(0, index - buffer_size)
        last_index = min(last, index + buffer_size)
        window = segments[first_index : last_index + 1]
        groups.append(
            SegmentGroup(
                segments=[item.text for item in window],
                core_text=segment.text,
                start=window[0].start,
                end=window[-1].end,
                index=index,
            )
        )
    return groups


def enforce_group_budget(
    groups: Sequence[SegmentGroup],
    options: ChunkingOptions,
    token_counter: TokenCounter,
) -> list[SegmentGroup]:
    """Shrink or drop groups whose combined text exceeds the token budget."""

    budget = options.max_tokens_per_chunk
    kept: list[SegmentGroup] = []
    for group in groups:
        if token_counter.count(group.combined_text) <= budget:
            kept.append(group)
            continue

        if group.core_text and token_counter.count(group.core_text) <= budget:
            LOGGER.info(
                "Group [%s-%s] exceeds %s tokens; embedding its core segment without context",
                group.start,
                group.end,
                budget,
            )
            kept.append(
                SegmentGroup(
                    segments=[group.core_text],
                    core_text=group.core_text,
                    start=group.start,
                    end=group.end,
                    index=group.index,
                )
            )
            continue

        LOGGER.warning(
            "Dropping group [%s-%s]: its core segment alone exceeds %s tokens",
            group.start,
            group.end,
            budget,
        )

    return kept
