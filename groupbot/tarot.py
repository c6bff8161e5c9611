"""Major Arcana tarot draws, meanings and spreads."""

from __future__ import annotations

import json
import random
from dataclasses import dataclass
from typing import Mapping

BED = "https://gitcode.net/shudorcl/zbp-tarot/-/raw/master/"
MAJOR_ARCANA = 22
MAX_DRAW = 20
POSITIONS = ("正位", "逆位")
REASONS = ("您抽到的是~\n", "锵锵锵，塔罗牌的预言是~\n", "诶，让我看看您抽到了~\n")


class TarotError(Exception):
    """Raised for an invalid draw or an unknown card or spread."""


@dataclass(frozen=True)
class Card:
    """One card with its upright and reversed meanings."""

    name: str
    description: str = ""
    reverse_description: str = ""
    img_url: str = ""

    @property
    def short_name(self) -> str:
        """The name before any parenthesised part."""
        return self.name.split("(")[0]

    @property
    def image_url(self) -> str:
        """Full URL of the card's picture."""
        return BED + self.img_url


@dataclass(frozen=True)
class Formation:
    """A spread: how many cards it takes and what each position means."""

    cards_num: int
    is_cut: bool
    represent: tuple[tuple[str, ...], ...]


def card_image_url(index: int, reversed_: bool) -> str:
    """URL of a Major Arcana picture, upright or reversed."""
    return f"{BED}MajorArcana{'Reverse' if reversed_ else ''}/{index}.png"


_EMPTY = Card("")


class TarotDeck:
    """The loaded cards and spreads."""

    def __init__(self, cards: Mapping[str, Card], formations: Mapping[str, Formation]) -> None:
        self.cards = dict(cards)
        self.formations = dict(formations)
        self.infos = {card.short_name: card for card in self.cards.values()}

    @classmethod
    def from_json(cls, cards_json: str | bytes, formations_json: str | bytes) -> TarotDeck:
        """Load a deck from the card and spread JSON documents."""
        try:
            raw_cards = json.loads(cards_json)
            raw_formations = json.loads(formations_json)
        except ValueError as exc:
            raise TarotError(str(exc)) from exc
        cards = {}
        for key, entry in raw_cards.items():
            info = entry.get("info") or {}
            cards[key] = Card(
                str(entry.get("name", "")),
                str(info.get("description", "")),
                str(info.get("reverseDescription", "")),
                str(info.get("imgUrl", "")),
            )
        formations = {
            name: Formation(
                int(entry.get("cards_num", 0)),
                bool(entry.get("is_cut", False)),
                tuple(tuple(row) for row in entry.get("represent") or ()),
            )
            for name, entry in raw_formations.items()
        }
        return cls(cards, formations)

    def _pick(self, n: int, rng: random.Random) -> list[tuple[int, Card, bool]]:
        indexes = rng.sample(range(MAJOR_ARCANA), n)
        return [
            (i, self.cards.get(str(i), _EMPTY), rng.randrange(2) == 1)
            for i in indexes
        ]

    def draw(self, n: int = 1, rng: random.Random | None = None) -> list[tuple[int, Card, bool]]:
        """Draw n distinct cards as (index, card, reversed) triples."""
        if n <= 0:
            raise TarotError("张数必须为正")
        if n > MAX_DRAW:
            raise TarotError("抽取张数过多")
        return self._pick(n, rng or random.Random())

    def explain(self, name: str) -> Card:
        """Return the card whose short name is given."""
        try:
            return self.infos[name]
        except KeyError:
            raise TarotError(f"没有找到{name}噢~") from None

    def lay_out(
        self, name: str, rng: random.Random | None = None
    ) -> list[tuple[str, int, Card, bool]]:
        """Deal a spread as (position meaning, index, card, reversed) tuples."""
        formation = self.formations.get(name)
        if formation is None:
            raise TarotError(f"没有找到{name}噢~")
        meanings = formation.represent[0] if formation.represent else ()
        if len(meanings) < formation.cards_num or formation.cards_num > MAJOR_ARCANA:
            raise TarotError(f"牌阵{name}数据有误")
        picks = self._pick(formation.cards_num, rng or random.Random())
        return [
            (meaning, index, card, rev)
            for meaning, (index, card, rev) in zip(meanings, picks)
        ]