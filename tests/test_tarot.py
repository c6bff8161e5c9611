import json
import random

import pytest

from groupbot.tarot import (
    BED,
    MAJOR_ARCANA,
    MAX_DRAW,
    TarotDeck,
    TarotError,
    card_image_url,
)


def _cards_json():
    return json.dumps(
        {
            str(i): {
                "name": f"card{i}(C{i})",
                "info": {
                    "description": f"up{i}",
                    "reverseDescription": f"down{i}",
                    "imgUrl": f"img/{i}.png",
                },
            }
            for i in range(MAJOR_ARCANA)
        }
    )


def _formations_json():
    return json.dumps(
        {"圣三角": {"cards_num": 3, "is_cut": False, "represent": [["过去", "现在", "未来"]]}}
    )


@pytest.fixture
def deck():
    return TarotDeck.from_json(_cards_json(), _formations_json())


def test_explain_by_short_name(deck):
    card = deck.explain("card3")
    assert card.name == "card3(C3)"
    assert card.description == "up3"
    assert card.reverse_description == "down3"
    assert card.image_url == BED + "img/3.png"


def test_explain_unknown(deck):
    with pytest.raises(TarotError):
        deck.explain("nothing")


def test_draw_distinct_and_consistent(deck):
    drawn = deck.draw(MAX_DRAW, random.Random(1))
    assert len(drawn) == MAX_DRAW
    indexes = [i for i, _, _ in drawn]
    assert len(set(indexes)) == len(indexes)
    for index, card, _ in drawn:
        assert 0 <= index < MAJOR_ARCANA
        assert card.name == f"card{index}(C{index})"


@pytest.mark.parametrize("n", [0, -1, MAX_DRAW + 1])
def test_draw_rejects_bad_counts(deck, n):
    with pytest.raises(TarotError):
        deck.draw(n, random.Random(0))


def test_lay_out_follows_formation(deck):
    spread = deck.lay_out("圣三角", random.Random(2))
    assert [meaning for meaning, _, _, _ in spread] == ["过去", "现在", "未来"]
    indexes = {index for _, index, _, _ in spread}
    assert len(indexes) == 3


def test_lay_out_unknown(deck):
    with pytest.raises(TarotError):
        deck.lay_out("nothing", random.Random(0))


def test_card_image_url():
    assert card_image_url(3, False) == BED + "MajorArcana/3.png"
    assert card_image_url(5, True).endswith("MajorArcanaReverse/5.png")


def test_bad_json():
    with pytest.raises(TarotError):
        TarotDeck.from_json("{", "{}")