"""Token-budget enforcement for atomic segments."""

from __future__ import annotations

from collections.abc import Iterable
import logging
import threading

from .cancellation import raise_if_cancelled
from .models import Segment
from .options import ChunkingOptions
from .tokens import TokenCounter

LOGGER = logging.getLogger("ragchunk.processing.validation")


def validate_segments(
    segments: Iterable[Segment],
    options: ChunkingOptions,
    token_counter: TokenCounter,
    cancel_event: threading.Event | None = None,
) -> list[Segment]:
    """Return segments that fit ``max_tokens_per_chunk``, splitting any that do not."""

    validated: list[Segment] = []
    for segment in segments:
        raise_if_cancelled(cancel_event, "segment validation")

        if token_counter.count(segment.text) <= options.max_tokens_per_chunk:
            validated.append(segment)
            continue

        pieces = split_oversized_segment(segment, options, token_counter)
        LOGGER.debug(
            "Split oversized segment [%s-%s] into %s pieces",
            segment.start,
            segment.end,
            len(pieces),
        )
        validated.extend(pieces)

    return validated


def split_oversized_segment(
    segment: Segment,
    options: ChunkingOptions,
    token_counter: TokenCounter,
) -> list[Segment]:
    """Greedily pack whole words into sub-segments under the token budget.

    A word that alone exceeds the budget cannot be split further and is emitted
    as its own sub-segment.
    """

    budget = options.max_tokens_per_chunk
    words = segment.text.split()
    if len(words) <= 1:
        LOGGER.warning(
            "Segment [%s-%s] is a single word over the %s token budget; keeping it whole",
            segment.start,
            segment.end,
            budget,
        )
        return [segment]

    pieces: list[Segment] = []
    current: list[str] = []
    cursor = segment.start

    for word in words:
        current.append(word)
        if token_counter.count(" ".join(current)) <= budget:
            continue

        if len(current) > 1:
            current.pop()
            piece_text = " ".join(current)
            relative = segment.text.find(piece_text, cursor - segment.start)
            start = segment.start + relative if relative >= 0 else cursor
            pieces.append(Segment(text=piece_text, start=start, end=start + len(piece_text)))
            current = [word]
            cursor = start + len(piece_text) + 1
        else:
            LOGGER.warning(
                "Word at offset %s exceeds the %s token budget on its own; keeping it whole",
                cursor,
                budget,
            )
            relative = segment.text.find(word, cursor - segment.start)
            start = segment.start + relative if relative >= 0 else cursor
            pieces.append(Segment(text=word, start=start, end=start + len(word)))
            current = []
            cursor = start + len(word) + 1

    if current:
        tail = " ".join(current)
        relative = segment.text.find(tail, cursor - segment.start)
        start = segment.start + relative if relative >= 0 else cursor
        pieces.append(Segment(text=tail, start=start, end=min(start + len(tail), segment.end)))

    return pieces
