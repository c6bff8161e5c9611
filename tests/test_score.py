from datetime import datetime, timedelta

import pytest

from groupbot.score import (
    LEVELS,
    SCOREMAX,
    ScoreDB,
    get_level,
    hour_word,
    next_level_score,
    sign_in,
)


@pytest.fixture
def db(tmp_path):
    database = ScoreDB(tmp_path / "score.db")
    yield database
    database.close()


@pytest.mark.parametrize("level", range(len(LEVELS)))
def test_level_thresholds(level):
    assert get_level(LEVELS[level]) == level


@pytest.mark.parametrize("level", range(len(LEVELS) - 1))
def test_level_between_thresholds(level):
    if LEVELS[level] + 1 < LEVELS[level + 1]:
        assert get_level(LEVELS[level] + 1) == level
    assert get_level(LEVELS[level + 1] - 1) in (level, level + 1)


def test_level_out_of_range():
    assert get_level(SCOREMAX + 1) == -1
    assert get_level(-5) == -1


def test_next_level_score():
    for level in range(len(LEVELS) - 1):
        assert next_level_score(level) == LEVELS[level + 1]
    assert next_level_score(len(LEVELS) - 1) == SCOREMAX


@pytest.mark.parametrize(
    "hour,word",
    [(7, "早上好"), (12, "中午好"), (15, "下午好"), (20, "晚上好"), (3, "凌晨好")],
)
def test_hour_word(hour, word):
    assert hour_word(datetime(2022, 6, 1, hour)) == word


def test_score_defaults_and_updates(db):
    assert db.get_score(42) == 0
    db.set_score(42, 17)
    assert db.get_score(42) == 17


def test_top_scores_ordered(db):
    for uid, score in [(1, 5), (2, 50), (3, 20), (4, 1)]:
        db.set_score(uid, score)
    top = db.top_scores(3)
    assert len(top) == 3
    scores = [s for _, s in top]
    assert scores == sorted(scores, reverse=True)
    assert top[0] == (2, 50)


def test_sign_in_record_round_trip(db):
    moment = datetime(2022, 6, 1, 8, 30)
    assert db.get_sign_in(9).count == 0
    db.set_sign_in_count(9, 4, moment)
    record = db.get_sign_in(9)
    assert record.count == 4
    assert record.updated_at == moment


def test_sign_in_once_per_day(db):
    now = datetime(2022, 6, 1, 8, 0)
    first = sign_in(db, 7, now)
    assert not first.already_signed
    assert first.score == db.get_score(7)
    assert first.level == get_level(first.score)
    second = sign_in(db, 7, now + timedelta(hours=2))
    assert second.already_signed
    assert second.score == first.score


def test_sign_in_next_day_adds_again(db):
    now = datetime(2022, 6, 1, 8, 0)
    first = sign_in(db, 7, now)
    later = sign_in(db, 7, now + timedelta(days=1))
    assert not later.already_signed
    assert later.score == first.score + 1
    assert db.get_sign_in(7).count == 2


def test_sign_in_caps_score(db):
    db.set_score(5, SCOREMAX)
    result = sign_in(db, 5, datetime(2022, 6, 1, 8, 0))
    assert result.capped
    assert result.score == SCOREMAX
    assert db.get_score(5) == SCOREMAX
    assert result.next_level_score == SCOREMAX