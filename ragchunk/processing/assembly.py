"""Chunk assembly from validated segments and breakpoints."""

from __future__ import annotations

from collections.abc import Iterator, Mapping, Sequence
import logging
import threading
from typing import Any

from .cancellation import raise_if_cancelled
from .models import Segment, TextChunk
from .options import ChunkingOptions
from .tokens import TokenCounter

LOGGER = logging.getLogger("ragchunk.processing.assembly")


def _make_chunk(
    segments: Sequence[Segment],
    text: str,
    token_count: int,
    metadata: Mapping[str, Any] | None,
    *,
    is_fallback: bool,
) -> TextChunk:
    chunk_metadata = dict(metadata or {})
    chunk_metadata["token_count"] = token_count
    chunk_metadata["segment_count"] = len(segments)
    chunk_metadata["is_fallback"] = is_fallback
    return TextChunk(
        text=text,
        start=segments[0].start,
        end=segments[-1].end,
        metadata=chunk_metadata,
    )


def assemble_chunks(
    segments: Sequence[Segment],
    breakpoints: Sequence[int],
    options: ChunkingOptions,
    token_counter: TokenCounter,
    metadata: Mapping[str, Any] | None = None,
    cancel_event: threading.Event | None = None,
) -> Iterator[TextChunk]:
    """Yield chunks whose boundaries follow ``breakpoints``.

    ``breakpoints`` are indices into ``segments``; each marks the last segment of
    a chunk, and the final segment always closes the last chunk. Candidates
    outside ``[min_tokens_per_chunk, max_tokens_per_chunk]`` are dropped. If no
    candidate survives, the whole document is emitted as one fallback chunk when
    it fits ``max_tokens_per_chunk``; otherwise every segment that fits becomes
    its own fallback chunk.
    """

    if not segments:
        return

    emitted = 0
    chunk_start = 0
    for boundary in [*breakpoints, len(segments) - 1]:
        raise_if_cancelled(cancel_event, "chunk assembly")
        if boundary < chunk_start:
            continue

        window = segments[chunk_start : boundary + 1]
        chunk_start = boundary + 1
        if not window:
            continue

        text = " ".join(segment.text for segment in window)
        token_count = token_counter.count(text)
        if options.min_tokens_per_chunk <= token_count <= options.max_tokens_per_chunk:
            emitted += 1
            yield _make_chunk(window, text, token_count, metadata, is_fallback=False)
        else:
            LOGGER.debug(
                "Dropping candidate chunk [%s-%s] with %s tokens outside [%s, %s]",
                window[0].start,
                window[-1].end,
                token_count,
                options.min_tokens_per_chunk,
                options.max_tokens_per_chunk,
            )

    if emitted:
        return

    raise_if_cancelled(cancel_event, "chunk assembly")
    whole_text = " ".join(segment.text for segment in segments)
    whole_count = token_counter.count(whole_text)
    if whole_count <= options.max_tokens_per_chunk:
        LOGGER.info("No chunk met the token window; emitting the whole document as one chunk")
        yield _make_chunk(segments, whole_text, whole_count, metadata, is_fallback=True)
        return

    LOGGER.info("No chunk met the token window; emitting segments individually")
    for segment in segments:
        raise_if_cancelled(cancel_event, "chunk assembly")
        token_count = token_counter.count(segment.text)
        if token_count <= options.max_tokens_per_chunk:
            yield _make_chunk([segment], segment.text, token_count, metadata, is_fallback=True)
        else:
            LOGGER.warning(
                "Skipping segment [%s-%s] with %s tokens over the %s token budget",
                segment.start,
                segment.end,
                token_count,
                options.max_tokens_per_chunk,
            )
