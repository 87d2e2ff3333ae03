"""Sentence segmentation with offsets into the source text."""

from __future__ import annotations

from collections.abc import Iterator
import re
import threading
from typing import Protocol

from .cancellation import raise_if_cancelled
from .models import Segment

# Split on whitespace that follows sentence-ending punctuation and precedes a
# capital letter, except after common English honorifics.
DEFAULT_SENTENCE_PATTERN = (
    r"(?<!Mr\.)(?<!Mrs\.)(?<!Ms\.)(?<!Dr\.)(?<!Prof\.)(?<!Sr\.)(?<!Jr\.)"
    r"(?<=[.!?])\s+(?=[A-Z])"
)


class TextSegmenter(Protocol):
    def segment(
        self, text: str, cancel_event: threading.Event | None = None
    ) -> Iterator[Segment]: ...


class SentenceSegmenter:
    """Regex sentence splitter.

    Each call to :meth:`segment` returns a fresh lazy iterator, so the same
    text can be segmented any number of times.
    """

    def __init__(self, pattern: str | None = None) -> None:
        self._pattern = re.compile(pattern or DEFAULT_SENTENCE_PATTERN)

    @classmethod
    def with_pattern(cls, pattern: str) -> SentenceSegmenter:
        if pattern is None or not pattern.strip():
            raise ValueError("pattern must not be empty")
        return cls(pattern)

    @property
    def pattern(self) -> str:
        return self._pattern.pattern

    def _pieces(self, text: str) -> Iterator[str]:
        cursor = 0
        for match in self._pattern.finditer(text):
            if match.end() == match.start():
                continue
            yield text[cursor : match.start()]
            cursor = match.end()
        yield text[cursor:]

    def segment(
        self, text: str, cancel_event: threading.Event | None = None
    ) -> Iterator[Segment]:
        if text is None:
            raise TypeError("text must not be None")
        return self._segment(text, cancel_event)

    def _segment(self, text: str, cancel_event: threading.Event | None) -> Iterator[Segment]:
        if not text.strip():
            return

        emitted = False
        search_from = 0
        for piece in self._pieces(text):
            raise_if_cancelled(cancel_event, "segmentation")

            sentence = piece.strip()
            if not sentence:
                continue

            # Locate from the previous end so repeated sentences map to their own position.
            start = text.find(sentence, search_from)
            if start < 0:
                continue
            end = start + len(sentence)
            emitted = True
            yield Segment(text=sentence, start=start, end=end)
            search_from = end

        if not emitted:
            trimmed = text.strip()
            start = text.find(trimmed)
            yield Segment(text=trimmed, start=start, end=start + len(trimmed))
