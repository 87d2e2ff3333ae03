from types import SimpleNamespace

import pytest

from ragchunk.processing import tokens as tokens_module
from ragchunk.processing.tokens import RegexTokenCounter, TiktokenCounter


def test_regex_counter_counts_words_and_punctuation() -> None:
    counter = RegexTokenCounter()

    assert counter.count("Hello, world!") == 4
    assert counter.count("") == 0


def test_regex_counter_rejects_none() -> None:
    with pytest.raises(TypeError):
        RegexTokenCounter().count(None)  # type: ignore[arg-type]


def test_tiktoken_counter_counts_encoded_ids() -> None:
    encoding = SimpleNamespace(name="fake", encode=lambda text, **_kwargs: list(text))
    counter = TiktokenCounter(encoding)

    assert counter.count("abcd") == 4
    assert counter.count("") == 0
    assert counter.encoding_name == "fake"


def test_for_model_resolves_encoding(monkeypatch) -> None:
    requested = []
    encoding = SimpleNamespace(name="fake", encode=lambda text, **_kwargs: text.split())

    def _encoding_for_model(name):
        requested.append(name)
        return encoding

    monkeypatch.setattr(tokens_module.tiktoken, "encoding_for_model", _encoding_for_model)

    counter = TiktokenCounter.for_model(" gpt-4 ")

    assert requested == ["gpt-4"]
    assert counter.count("three word text") == 3


def test_for_model_rejects_unknown_model(monkeypatch) -> None:
    def _encoding_for_model(name):
        raise KeyError(name)

    monkeypatch.setattr(tokens_module.tiktoken, "encoding_for_model", _encoding_for_model)

    with pytest.raises(ValueError, match="no-such-model"):
        TiktokenCounter.for_model("no-such-model")


def test_for_model_rejects_blank_name() -> None:
    with pytest.raises(ValueError):
        TiktokenCounter.for_model("  ")

