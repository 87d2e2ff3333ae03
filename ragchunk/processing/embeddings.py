"""Embedding generation for segment groups."""

from __future__ import annotations

from collections.abc import Iterable, Sequence
import logging
import random
import threading
import time
from typing import Protocol

from ..config import Settings
from .cache import EmbeddingCache
from .cancellation import raise_if_cancelled
from .models import SegmentGroup
from .options import ChunkingOptions

LOGGER = logging.getLogger("ragchunk.processing.embeddings")


class EmbeddingError(RuntimeError):
    """Raised when embedding generation fails or returns the wrong number of vectors."""


class EmbeddingGenerator(Protocol):
    """Batch embedder: one vector per input text, in input order."""

    def generate_batch(self, texts: Sequence[str]) -> Iterable[Sequence[float]]: ...


def _chunked(items: Sequence[str], batch_size: int) -> Iterable[Sequence[str]]:
    for index in range(0, len(items), batch_size):
        yield items[index : index + batch_size]


class OpenAIEmbeddingGenerator:
    """Embeds texts through an OpenAI-compatible ``client.embeddings.create`` API."""

    def __init__(
        self,
        client: object,
        model: str,
        *,
        batch_size: int = 64,
        max_retries: int = 4,
        initial_backoff_s: float = 1.0,
    ) -> None:
        if batch_size < 1:
            raise ValueError("batch_size must be >= 1")
        if max_retries < 0:
            raise ValueError("max_retries must be non-negative")
        self._client = client
        self._model = model
        self._batch_size = batch_size
        self._max_retries = max_retries
        self._initial_backoff_s = initial_backoff_s

    @classmethod
    def from_settings(cls, settings: Settings, **kwargs: object) -> OpenAIEmbeddingGenerator:
        from openai import OpenAI

        client = OpenAI(api_key=settings.openai_api_key)
        return cls(client, settings.openai_embedding_model, **kwargs)

    @property
    def model(self) -> str:
        return self._model

    def generate_batch(self, texts: Sequence[str]) -> list[list[float]]:
        vectors: list[list[float]] = []
        for batch in _chunked(list(texts), self._batch_size):
            vectors.extend(self._embed_batch(batch))
        return vectors

    def _embed_batch(self, texts: Sequence[str]) -> list[list[float]]:
        for attempt in range(self._max_retries + 1):
            try:
                response = self._client.embeddings.create(model=self._model, input=list(texts))
                return [list(row.embedding) for row in response.data]
            except Exception as error:  # noqa: BLE001
                if attempt >= self._max_retries:
                    raise EmbeddingError(
                        f"Failed to embed batch after {self._max_retries + 1} attempts"
                    ) from error

                delay = self._initial_backoff_s * (2**attempt)
                jitter = random.uniform(0, delay * 0.2)
                sleep_seconds = delay + jitter
                LOGGER.warning(
                    "Embedding API error on attempt %s/%s; retrying in %.2fs: %s",
                    attempt + 1,
                    self._max_retries + 1,
                    sleep_seconds,
                    error,
                )
                time.sleep(sleep_seconds)

        raise EmbeddingError("Unreachable retry state")


def embed_groups(
    groups: Sequence[SegmentGroup],
    generator: EmbeddingGenerator,
    cache: EmbeddingCache,
    options: ChunkingOptions,
    cancel_event: threading.Event | None = None,
) -> int:
    """Attach an embedding to every group, reusing cached vectors.

    All cache misses are sent to ``generator`` in a single batch. Returns the
    number of texts that had to be embedded.
    """

    pending: list[SegmentGroup] = []
    for group in groups:
        cached = cache.get(group.combined_text) if options.enable_caching else None
        if cached is not None:
            group.embedding = cached
        else:
            pending.append(group)

    if not pending:
        return 0

    raise_if_cancelled(cancel_event, "embedding generation")
    vectors = [list(vector) for vector in generator.generate_batch([group.combined_text for group in pending])]
    raise_if_cancelled(cancel_event, "embedding generation")

    if len(vectors) != len(pending):
        raise EmbeddingError(
            f"Embedding generator returned {len(vectors)} vectors for {len(pending)} texts"
        )

    for group, vector in zip(pending, vectors, strict=True):
        group.embedding = vector
        if options.enable_caching:
            cache.put(group.combined_text, vector, max_size=options.max_cache_size)

    dimensions = {len(group.embedding) for group in groups if group.embedding is not None}
    if len(dimensions) > 1:
        raise EmbeddingError(f"Embeddings have mixed dimensionality: {sorted(dimensions)}")

    LOGGER.debug(
        "Embedded %s of %s groups (%s from cache)",
        len(pending),
        len(groups),
        len(groups) - len(pending),
    )
    return len(pending)
