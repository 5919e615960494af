"""Random rebirth: a country by population share and a gender."""

from __future__ import annotations

import bisect
import itertools
import json
import random
from collections.abc import Iterable
from typing import Generic, TypeVar

T = TypeVar("T")

SUCCESS_THRESHOLD = 1 << 27
FAILURE_TEXT = "投胎失败！\n您没能活到出生，祝您下次好运！"


class WeightedChooser(Generic[T]):
    """Picks items with probability proportional to integer weights."""

    def __init__(self, choices: Iterable[tuple[T, int]]) -> None:
        pairs = list(choices)
        if any(weight < 0 for _, weight in pairs):
            raise ValueError("weights must not be negative")
        self._items = tuple(item for item, _ in pairs)
        self._totals = list(itertools.accumulate(int(weight) for _, weight in pairs))
        if not self._totals or self._totals[-1] <= 0:
            raise ValueError("no valid choices")

    @property
    def items(self) -> tuple[T, ...]:
        return self._items

    @property
    def total(self) -> int:
        return self._totals[-1]

    def pick(self, rng: random.Random) -> T:
        """Draw one item."""
        r = rng.randrange(self.total) + 1
        return self._items[bisect.bisect_left(self._totals, r)]


GENDERS: WeightedChooser[str] = WeightedChooser(
    [("男孩子", 50707), ("女孩子", 48292), ("雌雄同体", 1001)]
)


def load_rates(data: str | bytes) -> WeightedChooser[str]:
    """Build the country chooser from a JSON list of {name, weight}."""
    return WeightedChooser(
        (entry["name"], int(entry["weight"] * 1e9)) for entry in json.loads(data)
    )


def reborn_message(countries: WeightedChooser[str], rng: random.Random) -> str:
    """Return the outcome of one rebirth attempt."""
    if rng.randrange(1 << 31) > SUCCESS_THRESHOLD:
        country = countries.pick(rng)
        gender = GENDERS.pick(rng)
        return f"投胎成功！\n您出生在 {country}, 是 {gender}。"
    return FAILURE_TEXT