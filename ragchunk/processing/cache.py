"""In-process, size-bounded embedding cache keyed by content hash."""

from __future__ import annotations

from collections.abc import Callable, Iterable, Sequence
import hashlib
from itertools import islice
import logging
import threading

LOGGER = logging.getLogger("ragchunk.processing.cache")

EvictionPolicy = Callable[[Iterable[str], int], list[str]]


def evict_in_iteration_order(keys: Iterable[str], count: int) -> list[str]:
    """Pick the first ``count`` keys the map yields.

    This is not LRU: entries read recently are as likely to go as any other.
    """

    return list(islice(keys, count))


def content_hash(text: str) -> str:
    return hashlib.sha256(text.encode("utf-8")).hexdigest()


class EmbeddingCache:
    """Thread-safe map from SHA-256 of a text to its embedding vector.

    When an insert finds the cache full, it first shrinks the cache below the
    bound and evicts roughly a quarter of that bound on top, as chosen by
    ``eviction_policy``.
    """

    def __init__(
        self,
        max_size: int = 1000,
        eviction_policy: EvictionPolicy = evict_in_iteration_order,
    ) -> None:
        if max_size < 1:
            raise ValueError("max_size must be greater than zero")
        self._max_size = max_size
        self._eviction_policy = eviction_policy
        self._entries: dict[str, list[float]] = {}
        self._lock = threading.Lock()

    @property
    def max_size(self) -> int:
        return self._max_size

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)

    def get(self, text: str) -> list[float] | None:
        if not text:
            return None
        key = content_hash(text)
        with self._lock:
            return self._entries.get(key)

    def put(self, text: str, vector: Sequence[float] | None, *, max_size: int | None = None) -> None:
        """Store ``vector`` for ``text``; ``max_size`` overrides the bound for this insert."""

        if not text or vector is None:
            return

        bound = max_size if max_size is not None else self._max_size
        key = content_hash(text)
        with self._lock:
            if key in self._entries:
                return
            if len(self._entries) >= bound:
                self._evict(len(self._entries) - bound + max(1, bound // 4))
            self._entries[key] = list(vector)

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()

    def _evict(self, count: int) -> None:
        victims = self._eviction_policy(iter(self._entries), count)
        for key in victims:
            self._entries.pop(key, None)
        LOGGER.debug("Evicted %s embedding cache entries", len(victims))
