"""Canned replies chosen at random for known phrases."""

from __future__ import annotations

import json
import random
from collections.abc import Mapping, Sequence


class Thesaurus:
    """Maps a phrase to the replies it may receive."""

    def __init__(self, mapping: Mapping[str, Sequence[str] | None]) -> None:
        self._replies = {key: tuple(value or ()) for key, value in mapping.items()}

    def __contains__(self, key: object) -> bool:
        return key in self._replies

    def __len__(self) -> int:
        return len(self._replies)

    def keys(self) -> list[str]:
        """Return every phrase that has replies."""
        return list(self._replies)

    def reply(self, key: str, rng: random.Random) -> str:
        """Pick one reply for ``key``; raises KeyError for unknown phrases."""
        replies = self._replies[key]
        if not replies:
            raise LookupError(f"no replies for {key!r}")
        return replies[rng.randrange(len(replies))]


def load_thesaurus(data: str | bytes) -> Thesaurus:
    """Parse a JSON object of phrase to list of replies."""
    raw = json.loads(data)
    if not isinstance(raw, dict):
        raise ValueError("thesaurus data must be a JSON object")
    return Thesaurus(raw)