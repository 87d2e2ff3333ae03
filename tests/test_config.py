import pytest

from ragchunk.config import load_settings
from ragchunk.processing.options import ChunkingOptions

_CHUNKING_ENV = (
    "OPENAI_EMBEDDING_MODEL",
    "RAGCHUNK_TOKENIZER_MODEL",
    "RAGCHUNK_MAX_TOKENS_PER_CHUNK",
    "RAGCHUNK_MIN_TOKENS_PER_CHUNK",
    "RAGCHUNK_BUFFER_SIZE",
    "RAGCHUNK_BREAKPOINT_PERCENTILE",
    "RAGCHUNK_ENABLE_CACHING",
    "RAGCHUNK_MAX_CACHE_SIZE",
)


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch):
    for name in _CHUNKING_ENV:
        monkeypatch.delenv(name, raising=False)
    load_settings.cache_clear()
    yield
    load_settings.cache_clear()


def test_load_settings_uses_defaults(monkeypatch) -> None:
    monkeypatch.setenv("OPENAI_API_KEY", "sk-test")

    settings = load_settings()

    assert settings.openai_api_key == "sk-test"
    assert settings.openai_embedding_model == "text-embedding-3-small"
    assert settings.tokenizer_model == "gpt-4"
    assert ChunkingOptions.from_settings(settings) == ChunkingOptions()


def test_load_settings_reads_overrides(monkeypatch) -> None:
    monkeypatch.setenv("OPENAI_API_KEY", "sk-test")
    monkeypatch.setenv("RAGCHUNK_MAX_TOKENS_PER_CHUNK", "256")
    monkeypatch.setenv("RAGCHUNK_BREAKPOINT_PERCENTILE", "0.9")
    monkeypatch.setenv("RAGCHUNK_ENABLE_CACHING", "off")

    options = ChunkingOptions.from_settings(load_settings())

    assert options.max_tokens_per_chunk == 256
    assert options.breakpoint_percentile == 0.9
    assert options.enable_caching is False


def test_missing_api_key_is_rejected(monkeypatch) -> None:
    monkeypatch.delenv("OPENAI_API_KEY", raising=False)

    with pytest.raises(ValueError, match="OPENAI_API_KEY"):
        load_settings()


@pytest.mark.parametrize(
    ("name", "value"),
    [
        ("RAGCHUNK_BUFFER_SIZE", "two"),
        ("RAGCHUNK_BREAKPOINT_PERCENTILE", "high"),
        ("RAGCHUNK_ENABLE_CACHING", "maybe"),
    ],
)
def test_malformed_values_are_rejected(monkeypatch, name: str, value: str) -> None:
    monkeypatch.setenv("OPENAI_API_KEY", "sk-test")
    monkeypatch.setenv(name, value)

    with pytest.raises(ValueError, match=name):
        load_settings()


@pytest.mark.parametrize(
    "kwargs",
    [
        {"max_tokens_per_chunk": 0},
        {"min_tokens_per_chunk": -1},
        {"min_tokens_per_chunk": 600},
        {"buffer_size": -1},
        {"breakpoint_percentile": 1.2},
        {"max_cache_size": 0},
    ],
)
def test_invalid_options_are_rejected(kwargs) -> None:
    with pytest.raises(ValueError):
        ChunkingOptions(**kwargs)
