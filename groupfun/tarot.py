"""Tarot card draws from the major arcana."""

from __future__ import annotations

import json
import random
import re
from collections.abc import Mapping
from dataclasses import dataclass

BED = "https://gitcode.net/shudorcl/zbp-tarot/-/raw/master/"
MAJOR_ARCANA = 22
MAX_DRAW = 20

COMMAND = re.compile(r"^抽(\d{1,2}张)?塔罗牌$")
INTERPRET_COMMAND = re.compile(r"^解塔罗牌\s?(.*)")

REASONS = ("您抽到的是~\n", "锵锵锵，塔罗牌的预言是~\n", "诶，让我看看您抽到了~\n")
POSITIONS = ("正位", "逆位")
REVERSE = ("", "Reverse")


@dataclass(frozen=True)
class Card:
    """A card's name and what it means upright and reversed."""

    name: str
    description: str
    reverse_description: str
    img_url: str


def load_cards(data: str | bytes) -> dict[str, Card]:
    """Parse the card table JSON, keyed by the card's number as a string."""
    raw = json.loads(data)
    cards = {}
    for key, entry in raw.items():
        info = entry.get("info") or {}
        cards[key] = Card(
            name=entry.get("name", ""),
            description=info.get("description", ""),
            reverse_description=info.get("reverseDescription", ""),
            img_url=info.get("imgUrl", ""),
        )
    return cards


def build_info_map(cards: Mapping[str, Card]) -> dict[str, Card]:
    """Key the cards by their name without the parenthesised part."""
    return {card.name.split("(")[0]: card for card in cards.values()}


def draw_cards(
    cards: Mapping[str, Card], n: int, rng: random.Random
) -> list[tuple[str, str]]:
    """Draw ``n`` distinct cards; return (text, image URL) for each."""
    if not 1 <= n <= MAJOR_ARCANA:
        raise ValueError(f"cannot draw {n} cards")
    seen: set[int] = set()
    draws = []
    for _ in range(n):
        i = rng.randrange(MAJOR_ARCANA)
        while i in seen:
            i = rng.randrange(MAJOR_ARCANA)
        seen.add(i)
        p = rng.randrange(2)
        card = cards.get(str(i))
        name = card.name if card is not None else ""
        reason = REASONS[rng.randrange(len(REASONS))]
        text = f"{reason}{POSITIONS[p]} 的 {name}\n"
        draws.append((text, f"{BED}MajorArcana{REVERSE[p]}/{i}.png"))
    return draws


def interpret(info_map: Mapping[str, Card], name: str) -> tuple[str | None, str]:
    """Return (image URL, meaning) of a card, or (None, not found text)."""
    card = info_map.get(name)
    if card is None:
        return None, f"没有找到{name}噢~"
    return (
        BED + card.img_url,
        f"\n{name}的含义是~\n正位:{card.description}\n逆位:{card.reverse_description}",
    )


def parse_count(match: str | None) -> int:
    """Turn the optional ``N张`` of a draw command into a card count."""
    if not match:
        return 1
    n = int(match.removesuffix("张"))
    if n <= 0:
        raise ValueError("张数必须为正")
    if n > MAX_DRAW:
        raise ValueError("抽取张数过多")
    return n