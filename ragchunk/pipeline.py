"""Semantic chunking entrypoint and stage orchestration."""

from __future__ import annotations

from collections.abc import Iterator, Mapping
import json
import logging
import os
import threading
import time
from typing import Any
import uuid

from .config import Settings, load_settings
from .processing.assembly import assemble_chunks
from .processing.breakpoints import identify_breakpoints, segment_boundaries
from .processing.cache import EmbeddingCache
from .processing.cancellation import raise_if_cancelled
from .processing.distances import adjacent_distances, distance_statistics
from .processing.embeddings import EmbeddingGenerator, OpenAIEmbeddingGenerator, embed_groups
from .processing.grouping import build_groups, enforce_group_budget
from .processing.models import TextChunk
from .processing.options import ChunkingOptions
from .processing.segmentation import SentenceSegmenter, TextSegmenter
from .processing.tokens import TiktokenCounter, TokenCounter
from .processing.validation import validate_segments

LOGGER = logging.getLogger("ragchunk.pipeline")
if not LOGGER.handlers:
    configured_level = os.getenv("RAGCHUNK_LOG_LEVEL", "INFO").strip().upper() or "INFO"
    logging.basicConfig(level=getattr(logging, configured_level, logging.INFO), format="%(message)s")


def _log_event(*, run_id: str, stage: str, event: str, elapsed_s: float | None = None, **extra: object) -> None:
    if not LOGGER.isEnabledFor(logging.DEBUG):
        return
    payload: dict[str, object] = {
        "run_id": run_id,
        "stage": stage,
        "event": event,
    }
    if elapsed_s is not None:
        payload["elapsed_s"] = round(elapsed_s, 3)
    payload.update(extra)
    LOGGER.debug(json.dumps(payload, sort_keys=True, default=str))


class SemanticChunker:
    """Split text into token-bounded chunks at points of maximal semantic change.

    The embedding cache belongs to the instance, so repeated or concurrent calls
    on the same chunker share previously computed embeddings.
    """

    def __init__(
        self,
        token_counter: TokenCounter,
        embedding_generator: EmbeddingGenerator,
        *,
        segmenter: TextSegmenter | None = None,
        cache: EmbeddingCache | None = None,
        options: ChunkingOptions | None = None,
    ) -> None:
        if token_counter is None:
            raise TypeError("token_counter must not be None")
        if embedding_generator is None:
            raise TypeError("embedding_generator must not be None")

        self._token_counter = token_counter
        self._embedding_generator = embedding_generator
        self._segmenter = segmenter or SentenceSegmenter()
        self._options = options or ChunkingOptions()
        self._cache = cache if cache is not None else EmbeddingCache(self._options.max_cache_size)

    @classmethod
    def from_settings(cls, settings: Settings | None = None) -> SemanticChunker:
        settings = settings or load_settings()
        return cls(
            TiktokenCounter.for_model(settings.tokenizer_model),
            OpenAIEmbeddingGenerator.from_settings(settings),
            options=ChunkingOptions.from_settings(settings),
        )

    @property
    def cache(self) -> EmbeddingCache:
        return self._cache

    @property
    def options(self) -> ChunkingOptions:
        return self._options

    def chunk(
        self,
        text: str,
        options: ChunkingOptions | None = None,
        metadata: Mapping[str, Any] | None = None,
        cancel_event: threading.Event | None = None,
    ) -> Iterator[TextChunk]:
        """Return a lazy iterator over the chunks of ``text``.

        Args:
            text: Source text. ``None`` is rejected immediately.
            options: Overrides the chunker's default options for this call.
            metadata: Copied into every chunk's metadata.
            cancel_event: When set, the run stops with ``ChunkingCancelled``.
        """

        if text is None:
            raise TypeError("text must not be None")
        return self._run(text, options or self._options, metadata, cancel_event)

    def _run(
        self,
        text: str,
        options: ChunkingOptions,
        metadata: Mapping[str, Any] | None,
        cancel_event: threading.Event | None,
    ) -> Iterator[TextChunk]:
        if not text.strip():
            return

        run_id = uuid.uuid4().hex[:12]
        start = time.perf_counter()

        segments = list(self._segmenter.segment(text, cancel_event))
        _log_event(run_id=run_id, stage="segmentation", event="completed", segments=len(segments))
        if not segments:
            return

        validated = validate_segments(segments, options, self._token_counter, cancel_event)
        _log_event(run_id=run_id, stage="validation", event="completed", segments=len(validated))
        if not validated:
            return

        raise_if_cancelled(cancel_event, "grouping")
        groups = enforce_group_budget(
            build_groups(validated, options.buffer_size),
            options,
            self._token_counter,
        )
        _log_event(run_id=run_id, stage="grouping", event="completed", groups=len(groups))

        embedded = embed_groups(groups, self._embedding_generator, self._cache, options, cancel_event)
        _log_event(
            run_id=run_id,
            stage="embedding",
            event="completed",
            embedded=embedded,
            cached=len(groups) - embedded,
        )

        distances = adjacent_distances(groups)
        breakpoints = identify_breakpoints(distances, options.breakpoint_percentile)
        stats = distance_statistics(distances)
        _log_event(
            run_id=run_id,
            stage="breakpoints",
            event="completed",
            breakpoints=len(breakpoints),
            distance_mean=stats.mean,
            distance_std=stats.standard_deviation,
            distance_min=stats.min,
            distance_max=stats.max,
        )

        emitted = 0
        for chunk in assemble_chunks(
            validated,
            segment_boundaries(groups, breakpoints),
            options,
            self._token_counter,
            metadata,
            cancel_event,
        ):
            emitted += 1
            yield chunk

        _log_event(
            run_id=run_id,
            stage="assembly",
            event="completed",
            elapsed_s=time.perf_counter() - start,
            chunks=emitted,
        )
