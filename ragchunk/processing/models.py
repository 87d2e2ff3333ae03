"""Value types passed between the chunking stages."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any

_PREVIEW_CHARS = 50


def _preview(text: str, limit: int = _PREVIEW_CHARS) -> str:
    if len(text) <= limit:
        return text
    return text[:limit] + "..."


@dataclass(frozen=True)
class Segment:
    """An atomic span of source text with its ``[start, end)`` offsets."""

    text: str
    start: int
    end: int

    @property
    def length(self) -> int:
        return len(self.text)

    def __str__(self) -> str:
        return f"Segment[{self.start}-{self.end}]: {_preview(self.text)}"


@dataclass
class SegmentGroup:
    """A window of neighbouring segment texts embedded as one unit.

    ``core_text`` is the text of the segment the window was built around and
    ``index`` is that segment's position; the core is what remains when the
    window has to shed its buffer to fit the token budget.
    The embedding is attached once, after the batched embedding call.
    """

    segments: list[str]
    core_text: str
    start: int
    end: int
    index: int = 0
    embedding: list[float] | None = None

    @property
    def combined_text(self) -> str:
        return " ".join(self.segments)

    @property
    def has_embedding(self) -> bool:
        return self.embedding is not None

    @property
    def segment_count(self) -> int:
        return len(self.segments)

    def __str__(self) -> str:
        return (
            f"SegmentGroup[{self.start}-{self.end}, {self.segment_count} segments]: "
            f"{_preview(self.combined_text, 100)}"
        )


@dataclass(frozen=True)
class TextChunk:
    """A final output chunk.

    ``metadata`` always carries ``token_count``, ``segment_count`` and
    ``is_fallback`` next to any caller-supplied keys.
    """

    text: str
    start: int
    end: int
    metadata: Mapping[str, Any] = field(default_factory=dict)

    def __post_init__(self) -> None:
        object.__setattr__(self, "metadata", MappingProxyType(dict(self.metadata)))

    @property
    def length(self) -> int:
        return len(self.text)

    @property
    def token_count(self) -> int:
        return int(self.metadata.get("token_count", 0))

    @property
    def segment_count(self) -> int:
        return int(self.metadata.get("segment_count", 0))

    @property
    def is_fallback(self) -> bool:
        return bool(self.metadata.get("is_fallback", False))

    def __str__(self) -> str:
        return f"TextChunk[{self.start}-{self.end}]: {_preview(self.text)}"
