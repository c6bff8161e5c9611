from datetime import datetime, timedelta

import pytest

from groupbot.sleep import (
    SleepDB,
    good_morning_text,
    good_night_text,
    is_evening,
    is_morning,
    time_duration,
)

GID = 7


@pytest.fixture
def db(tmp_path):
    sleep_db = SleepDB(tmp_path / "sleep.db")
    yield sleep_db
    sleep_db.close()


def test_first_sleep_has_no_duration(db):
    assert db.sleep(GID, 1, datetime(2022, 6, 1, 23, 0)) == (1, timedelta(0))


def test_sleep_positions_increase(db):
    db.sleep(GID, 1, datetime(2022, 6, 1, 22, 0))
    position, _ = db.sleep(GID, 2, datetime(2022, 6, 2, 2, 0))
    assert position == 2


def test_other_group_not_counted(db):
    db.sleep(GID, 1, datetime(2022, 6, 1, 22, 0))
    position, _ = db.sleep(GID + 1, 2, datetime(2022, 6, 1, 22, 30))
    assert position == 1


def test_get_up_reports_sleep_time(db):
    db.sleep(GID, 1, datetime(2022, 6, 1, 23, 0))
    db.sleep(GID, 2, datetime(2022, 6, 1, 23, 30))
    position, slept = db.get_up(GID, 1, datetime(2022, 6, 2, 7, 0))
    assert (position, slept) == (1, timedelta(hours=8))
    position, slept = db.get_up(GID, 2, datetime(2022, 6, 2, 7, 30))
    assert (position, slept) == (2, timedelta(hours=8))


def test_sleep_again_reports_awake_time(db):
    db.get_up(GID, 1, datetime(2022, 6, 2, 7, 0))
    position, awake = db.sleep(GID, 1, datetime(2022, 6, 2, 22, 15))
    assert awake == timedelta(hours=15, minutes=15)
    assert position == 1


def test_time_duration_splits():
    assert time_duration(timedelta(hours=1, minutes=2, seconds=3, microseconds=9)) == (1, 2, 3)
    assert time_duration(timedelta(0)) == (0, 0, 0)


def test_morning_and_evening_windows():
    assert is_morning(datetime(2022, 6, 1, 6, 0))
    assert is_morning(datetime(2022, 6, 1, 12, 59))
    assert not is_morning(datetime(2022, 6, 1, 13, 0))
    assert is_evening(datetime(2022, 6, 1, 21, 0))
    assert is_evening(datetime(2022, 6, 1, 3, 30))
    assert not is_evening(datetime(2022, 6, 1, 4, 0))


def test_messages():
    assert good_morning_text(3, timedelta(0)) == "早安成功！你是今天第3个起床的"
    assert good_night_text(1, timedelta(hours=25)) == "晚安成功！你是今天第1个睡觉的"
    assert good_morning_text(2, timedelta(hours=8, minutes=1, seconds=5)) == (
        "早安成功！你的睡眠时长为8时1分5秒,你是今天第2个起床的"
    )
    assert good_night_text(4, timedelta(hours=15, minutes=15)) == (
        "晚安成功！你的清醒时长为15时15分0秒,你是今天第4个睡觉的"
    )