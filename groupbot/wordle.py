"""Word-guessing game with a coloured board."""

from __future__ import annotations

import io
from enum import Enum
from typing import Iterable

from PIL import Image, ImageDraw, ImageFont

SIDE = 20
SPACE = 10
GAP = 4
WHITE = (255, 255, 255)

CLASSES: dict[str, int] = {"": 5, "五阶": 5, "六阶": 6, "七阶": 7}

_COLORS = {
    0: (125, 166, 108),
    1: (199, 183, 96),
    2: (123, 123, 123),
    3: (219, 219, 219),
}


class Mark(Enum):
    """How one letter of a guess compares with the answer."""

    MATCH = 0
    EXIST = 1
    NOTEXIST = 2
    UNDONE = 3

    @property
    def color(self) -> tuple[int, int, int]:
        """RGB colour of a board cell with this mark."""
        return _COLORS[self.value]


class WordleError(Exception):
    """Base class for rejected guesses."""


class WrongLength(WordleError):
    """The guess does not have the answer's length."""


class UnknownWord(WordleError):
    """The guess is not in the dictionary."""


class TimesRunOut(WordleError):
    """The last allowed guess was used without finding the answer."""


def class_for(name: str) -> int:
    """Word length for a difficulty name such as "六阶"."""
    try:
        return CLASSES[name]
    except KeyError:
        raise WordleError(f"unknown class {name!r}") from None


def score_guess(guess: str, target: str) -> list[Mark]:
    """Mark each letter of a guess against the target."""
    return [
        Mark.MATCH if g == t else Mark.EXIST if g in target else Mark.NOTEXIST
        for g, t in zip(guess, target)
    ]


class WordleGame:
    """One game: a target word, the allowed words and the guesses so far."""

    def __init__(self, target: str, dictionary: Iterable[str]) -> None:
        self.target = target
        self.length = len(target)
        self.max_guesses = self.length + 1
        self._dictionary = frozenset(dictionary)
        self._record: list[str] = []

    @property
    def history(self) -> tuple[str, ...]:
        """The accepted guesses, oldest first."""
        return tuple(self._record)

    def guess(self, word: str) -> bool:
        """Make a guess and report whether it is the answer.

        An empty word makes no guess. A wrong guess that uses the last
        turn is recorded and then raises TimesRunOut.
        """
        if not word:
            return False
        word = word.lower()
        win = word == self.target
        if not win:
            if len(word) != self.length:
                raise WrongLength("length not enough")
            if word not in self._dictionary:
                raise UnknownWord("unknown word")
        self._record.append(word)
        if not win and len(self._record) >= self.max_guesses:
            raise TimesRunOut("times run out")
        return win

    def marks(self) -> list[list[Mark]]:
        """The board: one row per turn, unused rows all UNDONE."""
        rows = [score_guess(word, self.target) for word in self._record]
        rows.extend(
            [Mark.UNDONE] * self.length
            for _ in range(self.max_guesses - len(rows))
        )
        return rows

    def render(self) -> bytes:
        """Draw the board as a PNG image."""
        step = SIDE + GAP
        width = step * self.length + SPACE * 2 - GAP
        height = step * self.max_guesses + SPACE * 2 - GAP
        image = Image.new("RGB", (width, height), WHITE)
        draw = ImageDraw.Draw(image)
        font = ImageFont.load_default()
        for i, row in enumerate(self.marks()):
            for j, mark in enumerate(row):
                x = SPACE + j * step
                y = SPACE + i * step
                if mark is Mark.UNDONE:
                    draw.rectangle(
                        [x + 1, y + 1, x + SIDE - 2, y + SIDE - 2],
                        outline=mark.color,
                        width=1,
                    )
                    continue
                draw.rectangle([x, y, x + SIDE - 1, y + SIDE - 1], fill=mark.color)
                letter = self._record[i][j].upper()
                draw.text((x + 7, y + 5), letter, fill=WHITE, font=font)
        buffer = io.BytesIO()
        image.save(buffer, format="PNG")
        return buffer.getvalue()