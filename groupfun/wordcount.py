"""Hot words of a group chat: filtering, counting and ranking."""

from __future__ import annotations

import re
from collections import Counter
from collections.abc import Callable, Iterable, Mapping

HAN_WORD = re.compile(r"[一-龥]+")
MAX_MESSAGES = 10000
DEFAULT_MESSAGES = 1000
MESSAGES_PER_PAGE = 20
TOP_N = 20


def load_stopwords(text: str) -> list[str]:
    """Split a stop word file into a sorted list, ignoring carriage returns."""
    return sorted(text.replace("\r", "").split("\n"))


def clamp_message_count(p: int) -> int:
    """Limit the requested number of messages; zero means the default."""
    if p > MAX_MESSAGES:
        return MAX_MESSAGES
    if p == 0:
        return DEFAULT_MESSAGES
    return p


def count_words(
    texts: Iterable[str],
    segment: Callable[[str], Iterable[str]],
    stopwords: Iterable[str],
) -> Counter[str]:
    """Count the Han-character words of every message that are not stop words.

    ``segment`` splits one message into words.
    """
    stop = set(stopwords)
    counts: Counter[str] = Counter()
    for text in texts:
        text = text.strip()
        if not text:
            continue
        for word in segment(text):
            word = word.strip()
            if HAN_WORD.fullmatch(word) and word not in stop:
                counts[word] += 1
    return counts


def rank_by_word_count(freqs: Mapping[str, int]) -> list[tuple[str, int]]:
    """Return (word, count) pairs, most frequent first."""
    return sorted(freqs.items(), key=lambda pair: pair[1], reverse=True)