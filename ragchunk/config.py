"""Runtime configuration for the chunking pipeline."""

from __future__ import annotations

from dataclasses import dataclass
from functools import lru_cache
import os


@dataclass(frozen=True)
class Settings:
    """Environment-backed application settings."""

    # OpenAI
    openai_api_key: str
    openai_embedding_model: str

    # Tokenizer
    tokenizer_model: str

    # Chunking defaults
    max_tokens_per_chunk: int
    min_tokens_per_chunk: int
    buffer_size: int
    breakpoint_percentile: float
    enable_caching: bool
    max_cache_size: int


_TRUE_VALUES = frozenset({"1", "true", "yes", "on"})
_FALSE_VALUES = frozenset({"0", "false", "no", "off"})


def _get_env(name: str, *, default: str | None = None, required: bool = False) -> str:
    value = os.getenv(name, default)
    if required and (value is None or value == ""):
        raise ValueError(f"Missing required environment variable: {name}")
    if value is None:
        return ""
    return value


def _get_int(name: str, default: int) -> int:
    raw = _get_env(name, default=str(default)).strip()
    try:
        return int(raw)
    except ValueError as error:
        raise ValueError(f"Environment variable {name} must be an integer, got {raw!r}") from error


def _get_float(name: str, default: float) -> float:
    raw = _get_env(name, default=str(default)).strip()
    try:
        return float(raw)
    except ValueError as error:
        raise ValueError(f"Environment variable {name} must be a number, got {raw!r}") from error


def _get_bool(name: str, default: bool) -> bool:
    raw = _get_env(name, default="true" if default else "false").strip().lower()
    if raw in _TRUE_VALUES:
        return True
    if raw in _FALSE_VALUES:
        return False
    raise ValueError(f"Environment variable {name} must be a boolean, got {raw!r}")


@lru_cache(maxsize=1)
def load_settings() -> Settings:
    """Load and cache Settings from environment variables.

    Only ``OPENAI_API_KEY`` is required; every chunking knob falls back to the
    library defaults.
    """

    return Settings(
        openai_api_key=_get_env("OPENAI_API_KEY", required=True),
        openai_embedding_model=_get_env("OPENAI_EMBEDDING_MODEL", default="text-embedding-3-small"),
        tokenizer_model=_get_env("RAGCHUNK_TOKENIZER_MODEL", default="gpt-4"),
        max_tokens_per_chunk=_get_int("RAGCHUNK_MAX_TOKENS_PER_CHUNK", 512),
        min_tokens_per_chunk=_get_int("RAGCHUNK_MIN_TOKENS_PER_CHUNK", 10),
        buffer_size=_get_int("RAGCHUNK_BUFFER_SIZE", 1),
        breakpoint_percentile=_get_float("RAGCHUNK_BREAKPOINT_PERCENTILE", 0.75),
        enable_caching=_get_bool("RAGCHUNK_ENABLE_CACHING", True),
        max_cache_size=_get_int("RAGCHUNK_MAX_CACHE_SIZE", 1000),
    )
