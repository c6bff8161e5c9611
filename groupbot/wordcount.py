"""Hot-word counting over chat history."""

from __future__ import annotations

import re
from bisect import bisect_left
from collections import Counter
from typing import Iterable, Mapping, Sequence

MAX_MESSAGES = 10000
DEFAULT_MESSAGES = 1000
TOP_WORDS = 20

_CHINESE_WORD = re.compile("[一-龥]+")


def load_stopwords(text: str) -> list[str]:
    """Split a stopword file into a sorted list of lines."""
    return sorted(text.replace("\r", "").split("\n"))


def is_countable(word: str, stopwords: Sequence[str]) -> bool:
    """True for an all-Chinese word that is not in the sorted stopword list."""
    if not _CHINESE_WORD.fullmatch(word):
        return False
    i = bisect_left(stopwords, word)
    return i >= len(stopwords) or stopwords[i] != word


def count_words(slices: Iterable[str], stopwords: Sequence[str]) -> dict[str, int]:
    """Count the countable words among segmented slices."""
    return dict(
        Counter(
            word
            for word in (s.strip() for s in slices)
            if is_countable(word, stopwords)
        )
    )


def rank_by_word_count(frequencies: Mapping[str, int]) -> list[tuple[str, int]]:
    """Return (word, count) pairs, most frequent first."""
    return sorted(frequencies.items(), key=lambda item: item[1], reverse=True)


def clamp_message_count(count: int) -> int:
    """Cap the number of messages to scan; zero means the default."""
    if count > MAX_MESSAGES:
        return MAX_MESSAGES
    if count == 0:
        return DEFAULT_MESSAGES
    return count