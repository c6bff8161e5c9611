"""Random reincarnation: a weighted country and gender."""

from __future__ import annotations

import json
import random
from bisect import bisect_left
from itertools import accumulate
from pathlib import Path
from typing import Generic, Iterable, TypeVar

T = TypeVar("T")

SUCCESS_TEXT = "投胎成功！\n您出生在 {}, 是 {}。"
FAILURE_TEXT = "投胎失败！\n您没能活到出生，祝您下次好运！"
_SUCCESS_THRESHOLD = 1 << 27


class WeightedChooser(Generic[T]):
    """Picks items at random in proportion to integer weights."""

    def __init__(self, choices: Iterable[tuple[T, int]]) -> None:
        ordered = sorted(choices, key=lambda c: c[1])
        if any(weight < 0 for _, weight in ordered):
            raise ValueError("weights must not be negative")
        self._items = [item for item, _ in ordered]
        self._totals = list(accumulate(weight for _, weight in ordered))
        if not self._totals or self._totals[-1] <= 0:
            raise ValueError("no valid choices")
        self._max = self._totals[-1]

    def pick(self, rng: random.Random) -> T:
        """Return one item chosen with the given random source."""
        r = rng.randrange(self._max) + 1
        return self._items[bisect_left(self._totals, r)]


GENDER = WeightedChooser(
    [("男孩子", 50707), ("女孩子", 48292), ("雌雄同体", 1001)]
)


def load_areas(path: str | Path) -> list[tuple[str, float]]:
    """Read (name, weight) pairs from a JSON list of {name, weight} objects."""
    data = json.loads(Path(path).read_text(encoding="utf-8"))
    return [(str(entry["name"]), float(entry["weight"])) for entry in data]


def build_area_chooser(areas: Iterable[tuple[str, float]]) -> WeightedChooser[str]:
    """Build a chooser from fractional weights scaled by one billion."""
    return WeightedChooser((name, int(weight * 1e9)) for name, weight in areas)


def random_gender(rng: random.Random) -> str:
    """Pick a gender with the fixed birth weights."""
    return GENDER.pick(rng)


def reincarnate(area_chooser: WeightedChooser[str], rng: random.Random) -> str:
    """Return the reincarnation message for one attempt."""
    if rng.randrange(1 << 31) > _SUCCESS_THRESHOLD:
        country = area_chooser.pick(rng)
        return SUCCESS_TEXT.format(country, random_gender(rng))
    return FAILURE_TEXT