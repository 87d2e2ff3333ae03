"""Cooperative cancellation for chunking runs."""

from __future__ import annotations

import threading


class ChunkingCancelled(RuntimeError):
    """Raised when a caller cancels a chunking run part-way through."""


def raise_if_cancelled(cancel_event: threading.Event | None, stage: str) -> None:
    if cancel_event is not None and cancel_event.is_set():
        raise ChunkingCancelled(f"Chunking cancelled during {stage}")
