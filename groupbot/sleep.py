"""Good-night and good-morning bookkeeping for group members."""

from __future__ import annotations

import sqlite3
import threading
from datetime import datetime, timedelta
from pathlib import Path

MORNING_PLAIN = "早安成功！你是今天第{}个起床的"
MORNING_FULL = "早安成功！你的睡眠时长为{}时{}分{}秒,你是今天第{}个起床的"
NIGHT_PLAIN = "晚安成功！你是今天第{}个睡觉的"
NIGHT_FULL = "晚安成功！你的清醒时长为{}时{}分{}秒,你是今天第{}个睡觉的"

_US_PER_SECOND = 1_000_000
_US_PER_MINUTE = 60 * _US_PER_SECOND
_US_PER_HOUR = 60 * _US_PER_MINUTE


def _fmt(moment: datetime) -> str:
    return moment.isoformat(sep=" ", timespec="microseconds")


def _trunc_div(a: int, b: int) -> int:
    q = abs(a) // b
    return q if a >= 0 else -q


class SleepDB:
    """Stores the last sleep or wake time of each member of each group."""

    def __init__(self, path: str | Path) -> None:
        self._conn = sqlite3.connect(str(path), check_same_thread=False)
        self._lock = threading.Lock()
        with self._conn:
            self._conn.execute(
                "CREATE TABLE IF NOT EXISTS sleep_manage ("
                "id INTEGER PRIMARY KEY AUTOINCREMENT, group_id INTEGER, "
                "user_id INTEGER, sleep_time TEXT)"
            )

    def _record(self, gid: int, uid: int, now: datetime, since: datetime) -> tuple[int, timedelta]:
        elapsed = timedelta(0)
        with self._lock, self._conn:
            row = self._conn.execute(
                "SELECT sleep_time FROM sleep_manage "
                "WHERE group_id = ? AND user_id = ? ORDER BY id LIMIT 1",
                (gid, uid),
            ).fetchone()
            if row is None:
                self._conn.execute(
                    "INSERT INTO sleep_manage (group_id, user_id, sleep_time) "
                    "VALUES (?, ?, ?)",
                    (gid, uid, _fmt(now)),
                )
            else:
                elapsed = now - datetime.fromisoformat(row[0])
                self._conn.execute(
                    "UPDATE sleep_manage SET sleep_time = ? "
                    "WHERE group_id = ? AND user_id = ?",
                    (_fmt(now), gid, uid),
                )
            (position,) = self._conn.execute(
                "SELECT COUNT(*) FROM sleep_manage "
                "WHERE group_id = ? AND sleep_time <= ? AND sleep_time >= ?",
                (gid, _fmt(now), _fmt(since)),
            ).fetchone()
        return position, elapsed

    def sleep(self, gid: int, uid: int, now: datetime | None = None) -> tuple[int, timedelta]:
        """Record a good night; return the rank tonight and the time awake."""
        now = now or datetime.now()
        if now.hour >= 21:
            since = now.replace(hour=21, minute=0, second=0)
        elif now.hour <= 3:
            since = (now - timedelta(days=1)).replace(hour=21, minute=0, second=0)
        else:
            since = datetime.min
        return self._record(gid, uid, now, since)

    def get_up(self, gid: int, uid: int, now: datetime | None = None) -> tuple[int, timedelta]:
        """Record a good morning; return the rank today and the time asleep."""
        now = now or datetime.now()
        since = now.replace(hour=6, minute=0, second=0)
        return self._record(gid, uid, now, since)

    def close(self) -> None:
        """Close the database."""
        with self._lock:
            self._conn.close()


def time_duration(delta: timedelta) -> tuple[int, int, int]:
    """Split a duration into whole hours, minutes and seconds."""
    total = delta // timedelta(microseconds=1)
    hour = _trunc_div(total, _US_PER_HOUR)
    rest = total - hour * _US_PER_HOUR
    minute = _trunc_div(rest, _US_PER_MINUTE)
    rest -= minute * _US_PER_MINUTE
    second = _trunc_div(rest, _US_PER_SECOND)
    return hour, minute, second


def is_morning(now: datetime) -> bool:
    """Good mornings count from 6 to 12 o'clock."""
    return 6 <= now.hour <= 12


def is_evening(now: datetime) -> bool:
    """Good nights count from 21 o'clock to 3 in the morning."""
    return now.hour >= 21 or now.hour <= 3


def _no_duration(hour: int, minute: int, second: int) -> bool:
    return (hour, minute, second) == (0, 0, 0) or hour >= 24


def good_morning_text(position: int, delta: timedelta) -> str:
    """Reply to a good morning."""
    hour, minute, second = time_duration(delta)
    if _no_duration(hour, minute, second):
        return MORNING_PLAIN.format(position)
    return MORNING_FULL.format(hour, minute, second, position)


def good_night_text(position: int, delta: timedelta) -> str:
    """Reply to a good night."""
    hour, minute, second = time_duration(delta)
    if _no_duration(hour, minute, second):
        return NIGHT_PLAIN.format(position)
    return NIGHT_FULL.format(hour, minute, second, position)