import sys
from pathlib import Path

import pytest

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from ragchunk.processing.tokens import RegexTokenCounter  # noqa: E402


class CharCounter:
    """Counts one token per character, handy for exact budget arithmetic."""

    def count(self, text: str) -> int:
        return len(text)


@pytest.fixture
def regex_counter() -> RegexTokenCounter:
    return RegexTokenCounter()


@pytest.fixture
def char_counter() -> CharCounter:
    return CharCounter()
