"""Token counting collaborators."""

from __future__ import annotations

import re
from typing import Protocol

import tiktoken

_TOKEN_PATTERN = re.compile(r"\w+|[^\w\s]", re.UNICODE)

DEFAULT_TOKENIZER_MODEL = "gpt-4"


class TokenCounter(Protocol):
    """Deterministic, side-effect free token counting."""

    def count(self, text: str) -> int: ...


class RegexTokenCounter:
    """Estimate token count with a lightweight regex tokenization heuristic.

    Every run of word characters and every punctuation mark counts as one token.
    """

    def count(self, text: str) -> int:
        if text is None:
            raise TypeError("text must not be None")
        return len(_TOKEN_PATTERN.findall(text))


class TiktokenCounter:
    """Exact BPE token counts using a ``tiktoken`` encoding."""

    def __init__(self, encoding: tiktoken.Encoding | None = None) -> None:
        self._encoding = encoding or tiktoken.encoding_for_model(DEFAULT_TOKENIZER_MODEL)

    @property
    def encoding_name(self) -> str:
        return self._encoding.name

    @classmethod
    def for_model(cls, model_name: str) -> TiktokenCounter:
        if not model_name or not model_name.strip():
            raise ValueError("model_name must not be empty")
        try:
            encoding = tiktoken.encoding_for_model(model_name.strip())
        except KeyError as error:
            raise ValueError(f"No tokenizer registered for model '{model_name}'") from error
        return cls(encoding)

    def count(self, text: str) -> int:
        if text is None:
            raise TypeError("text must not be None")
        if not text:
            return 0
        return len(self._encoding.encode(text, disallowed_special=()))
