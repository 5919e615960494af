import json
import random
from collections import Counter

import pytest

from groupfun.reborn import (
    FAILURE_TEXT,
    GENDERS,
    WeightedChooser,
    load_rates,
    reborn_message,
)


class ScriptedRandom(random.Random):
    def __init__(self, values):
        super().__init__(0)
        self._values = list(values)

    def randrange(self, start, stop=None, step=1):
        return self._values.pop(0)


def test_chooser_rejects_empty():
    with pytest.raises(ValueError):
        WeightedChooser([])


def test_chooser_rejects_zero_total():
    with pytest.raises(ValueError):
        WeightedChooser([("a", 0)])


def test_chooser_rejects_negative():
    with pytest.raises(ValueError):
        WeightedChooser([("a", -1), ("b", 5)])


def test_zero_weight_never_picked():
    chooser = WeightedChooser([("a", 0), ("b", 5), ("c", 0)])
    rng = random.Random(4)
    assert {chooser.pick(rng) for _ in range(200)} == {"b"}


def test_pick_roughly_proportional():
    chooser = WeightedChooser([("a", 1), ("b", 3)])
    rng = random.Random(11)
    counts = Counter(chooser.pick(rng) for _ in range(4000))
    assert 0.2 < counts["a"] / 4000 < 0.3


def test_pick_bounds():
    chooser = WeightedChooser([("a", 2), ("b", 3)])
    assert chooser.pick(ScriptedRandom([0])) == "a"
    assert chooser.pick(ScriptedRandom([1])) == "a"
    assert chooser.pick(ScriptedRandom([2])) == "b"
    assert chooser.pick(ScriptedRandom([4])) == "b"


def test_load_rates():
    data = json.dumps([{"name": "A", "weight": 0.25}, {"name": "B", "weight": 0.75}])
    chooser = load_rates(data)
    assert chooser.items == ("A", "B")
    assert chooser.total == 10**9


def test_genders_weights():
    assert GENDERS.items == ("男孩子", "女孩子", "雌雄同体")
    assert GENDERS.total == 100000
    assert GENDERS.pick(ScriptedRandom([50706])) == "男孩子"
    assert GENDERS.pick(ScriptedRandom([50707])) == "女孩子"
    assert GENDERS.pick(ScriptedRandom([98998])) == "女孩子"
    assert GENDERS.pick(ScriptedRandom([98999])) == "雌雄同体"


def test_reborn_success():
    countries = WeightedChooser([("X国", 1)])
    text = reborn_message(countries, ScriptedRandom([1 << 30, 0, 0]))
    assert text == "投胎成功！\n您出生在 X国, 是 男孩子。"


def test_reborn_failure():
    countries = WeightedChooser([("X国", 1)])
    assert reborn_message(countries, ScriptedRandom([0])) == FAILURE_TEXT


def test_reborn_mostly_succeeds():
    countries = WeightedChooser([("X国", 1)])
    rng = random.Random(7)
    results = [reborn_message(countries, rng) for _ in range(500)]
    successes = sum(r.startswith("投胎成功") for r in results)
    assert successes > 400
    assert all(r == FAILURE_TEXT or "X国" in r for r in results)