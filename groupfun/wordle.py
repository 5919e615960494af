"""Word guessing game with a coloured grid of past guesses."""

from __future__ import annotations

import bisect
import io
from collections.abc import Iterable, Sequence
from enum import Enum

from PIL import Image, ImageDraw, ImageFont


class WordleError(Exception):
    """Base class for rejected guesses."""


class LengthNotEnoughError(WordleError):
    """The guess does not have the target's length."""

    def __init__(self) -> None:
        super().__init__("length not enough")


class UnknownWordError(WordleError):
    """The guess is not in the dictionary."""

    def __init__(self) -> None:
        super().__init__("unknown word")


class TimesRunOutError(WordleError):
    """Every allowed guess has been used."""

    def __init__(self) -> None:
        super().__init__("times run out")


class CellState(Enum):
    MATCH = (125, 166, 108, 255)
    EXIST = (199, 183, 96, 255)
    NOT_EXIST = (123, 123, 123, 255)
    UNDONE = (219, 219, 219, 255)


CLASSES = {"": 5, "五阶": 5, "六阶": 6, "七阶": 7}

_WHITE = (255, 255, 255, 255)
_SIDE = 20
_SPACE = 10
_STEP = _SIDE + 4


def class_for(name: str) -> int:
    """Return the word length for a difficulty name such as ``六阶``."""
    try:
        return CLASSES[name]
    except KeyError:
        raise ValueError(f"unknown difficulty: {name!r}") from None


def load_dictionary(text: str) -> list[str]:
    """Split a newline separated word list and sort it for lookup."""
    return sorted(text.split("\n"))


class WordleGame:
    """One round: a target word, a sorted dictionary and the guesses so far."""

    def __init__(self, target: str, dictionary: Iterable[str]) -> None:
        self.target = target
        self._dictionary: Sequence[str] = sorted(dictionary)
        self._record: list[str] = []
        self.capacity = len(target) + 1

    @property
    def guesses(self) -> tuple[str, ...]:
        return tuple(self._record)

    def _known(self, word: str) -> bool:
        i = bisect.bisect_left(self._dictionary, word)
        return i < len(self._dictionary) and self._dictionary[i] == word

    def guess(self, word: str) -> bool:
        """Record a guess and return whether it wins.

        An empty guess records nothing. A guess that uses up the last try
        without winning raises TimesRunOutError after being recorded.
        """
        if not word:
            return False
        word = word.lower()
        win = word == self.target
        if not win:
            if len(word) != len(self.target):
                raise LengthNotEnoughError()
            if not self._known(word):
                raise UnknownWordError()
        self._record.append(word)
        if win:
            return True
        if len(self._record) >= self.capacity:
            raise TimesRunOutError()
        return False

    def _cell_state(self, word: str, j: int) -> CellState:
        letter = word[j]
        if letter == self.target[j]:
            return CellState.MATCH
        if letter in self.target:
            return CellState.EXIST
        return CellState.NOT_EXIST

    def render(self) -> bytes:
        """Draw the board as PNG bytes."""
        n = len(self.target)
        width = _STEP * n + _SPACE * 2 - 4
        height = _STEP * (n + 1) + _SPACE * 2 - 4
        image = Image.new("RGBA", (width, height), _WHITE)
        draw = ImageDraw.Draw(image)
        font = ImageFont.load_default()
        for i in range(n + 1):
            word = self._record[i] if i < len(self._record) else None
            for j in range(n):
                if word is not None:
                    x0 = _SPACE + j * _STEP
                    y0 = _SPACE + i * _STEP
                    colour = self._cell_state(word, j).value
                    draw.rectangle(
                        [x0, y0, x0 + _SIDE - 1, y0 + _SIDE - 1], fill=colour
                    )
                    draw.text(
                        (x0 + 7, y0 + 4), word[j].upper(), fill=_WHITE, font=font
                    )
                else:
                    x0 = _SPACE + j * _STEP + 1
                    y0 = _SPACE + i * _STEP + 1
                    draw.rectangle(
                        [x0, y0, x0 + _SIDE - 3, y0 + _SIDE - 3],
                        outline=CellState.UNDONE.value,
                        width=1,
                    )
        buffer = io.BytesIO()
        image.save(buffer, "PNG")
        return buffer.getvalue()