"""Daily sign-in and the cookie score it earns."""

from __future__ import annotations

import sqlite3
import threading
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path

SCOREMAX = 120
SIGNIN_MAX = 1
SCORE_ADD = 1
LEVELS: tuple[int, ...] = (0, 1, 2, 5, 10, 20, 35, 55, 75, 100, 120)

DAY_FORMAT = "%Y%m%d"
MONTH_FORMAT = "%m/%d"

ALREADY_SIGNED_TEXT = "今天你已经签到过了！"
CAPPED_TEXT = "你获得的小熊饼干已经达到上限"


@dataclass(frozen=True)
class SignIn:
    """A member's sign-in count and the moment it last changed."""

    uid: int
    count: int
    updated_at: datetime | None


@dataclass(frozen=True)
class SignInResult:
    """What one sign-in attempt produced."""

    already_signed: bool
    score: int
    level: int
    next_level_score: int
    capped: bool
    greeting: str
    date_text: str


class ScoreDB:
    """Scores and sign-in counts kept in SQLite."""

    def __init__(self, path: str | Path) -> None:
        self._conn = sqlite3.connect(str(path), check_same_thread=False)
        self._lock = threading.Lock()
        with self._conn:
            self._conn.execute(
                "CREATE TABLE IF NOT EXISTS score ("
                "uid INTEGER PRIMARY KEY, score INTEGER NOT NULL DEFAULT 0)"
            )
            self._conn.execute(
                "CREATE TABLE IF NOT EXISTS sign_in ("
                "uid INTEGER PRIMARY KEY, count INTEGER NOT NULL DEFAULT 0, "
                "updated_at TEXT)"
            )

    def __enter__(self) -> ScoreDB:
        return self

    def __exit__(self, *exc: object) -> None:
        self.close()

    def get_score(self, uid: int) -> int:
        """Return a member's score, creating a zero score if none exists."""
        with self._lock, self._conn:
            self._conn.execute(
                "INSERT OR IGNORE INTO score (uid, score) VALUES (?, 0)", (uid,)
            )
            (score,) = self._conn.execute(
                "SELECT score FROM score WHERE uid = ?", (uid,)
            ).fetchone()
        return score

    def set_score(self, uid: int, score: int) -> None:
        """Insert or update a member's score."""
        with self._lock, self._conn:
            self._conn.execute(
                "INSERT INTO score (uid, score) VALUES (?, ?) "
                "ON CONFLICT(uid) DO UPDATE SET score = excluded.score",
                (uid, score),
            )

    def get_sign_in(self, uid: int) -> SignIn:
        """Return a member's sign-in record, creating an empty one if needed."""
        with self._lock, self._conn:
            self._conn.execute(
                "INSERT OR IGNORE INTO sign_in (uid, count) VALUES (?, 0)", (uid,)
            )
            count, updated = self._conn.execute(
                "SELECT count, updated_at FROM sign_in WHERE uid = ?", (uid,)
            ).fetchone()
        moment = datetime.fromisoformat(updated) if updated else None
        return SignIn(uid, count, moment)

    def set_sign_in_count(self, uid: int, count: int, now: datetime | None = None) -> None:
        """Insert or update a member's sign-in count, stamped with now."""
        stamp = (now or datetime.now()).isoformat(sep=" ")
        with self._lock, self._conn:
            self._conn.execute(
                "INSERT INTO sign_in (uid, count, updated_at) VALUES (?, ?, ?) "
                "ON CONFLICT(uid) DO UPDATE SET count = excluded.count, "
                "updated_at = excluded.updated_at",
                (uid, count, stamp),
            )

    def top_scores(self, n: int) -> list[tuple[int, int]]:
        """Return up to n (uid, score) pairs, highest score first."""
        with self._lock:
            rows = self._conn.execute(
                "SELECT uid, score FROM score ORDER BY score DESC, uid LIMIT ?",
                (n,),
            ).fetchall()
        return [(uid, score) for uid, score in rows]

    def close(self) -> None:
        """Close the database."""
        with self._lock:
            self._conn.close()


def get_level(count: int) -> int:
    """Return the level reached with a score; -1 when it is out of range."""
    for level, threshold in enumerate(LEVELS):
        if count == threshold:
            return level
        if count < threshold:
            return level - 1
    return -1


def hour_word(moment: datetime) -> str:
    """Greeting for the time of day."""
    h = moment.hour
    if 6 <= h < 12:
        return "早上好"
    if 12 <= h < 14:
        return "中午好"
    if 14 <= h < 19:
        return "下午好"
    if 19 <= h < 24:
        return "晚上好"
    return "凌晨好"


def next_level_score(level: int) -> int:
    """Score needed for the level after the given one."""
    if level < len(LEVELS) - 1:
        return LEVELS[level + 1]
    return SCOREMAX


def sign_in(db: ScoreDB, uid: int, now: datetime | None = None) -> SignInResult:
    """Sign a member in for today and award the daily cookie."""
    now = now or datetime.now()
    today = now.strftime(DAY_FORMAT)
    record = db.get_sign_in(uid)
    last_day = record.updated_at.strftime(DAY_FORMAT) if record.updated_at else ""
    greeting = hour_word(now)
    date_text = now.strftime(MONTH_FORMAT)

    if record.count >= SIGNIN_MAX and last_day == today:
        score = db.get_score(uid)
        level = get_level(score)
        return SignInResult(
            True, score, level, next_level_score(level), False, greeting, date_text
        )

    if last_day != today:
        db.set_sign_in_count(uid, 0, now)
    db.set_sign_in_count(uid, record.count + 1, now)

    score = db.get_score(uid) + SCORE_ADD
    capped = score > SCOREMAX
    if capped:
        score = SCOREMAX
    db.set_score(uid, score)
    level = get_level(score)
    return SignInResult(
        False, score, level, next_level_score(level), capped, greeting, date_text
    )