"""Checks that decide who may marry, divorce or cut in on a couple today."""

from __future__ import annotations

import random
import threading
import time
from datetime import date, timedelta
from typing import Any, Callable, Iterable, Mapping

from groupbot.marriage import DATE_FORMAT, Couple, MarriageRegistry, Status

SKILL_INTERVAL = 12 * 60 * 60
RECENT_MEMBERS = 30

ALREADY_TOGETHER = "笨蛋~你们明明已经在一起了啊w"
YOU_DECLARED_SINGLE = "今天的你是单身贵族噢"
YOU_ARE_HUSBAND = "笨蛋~你家里还有个吃白饭的w"
YOU_ARE_WIFE = "该是0就是0，当0有什么不好"
THEY_DECLARED_SINGLE = "今天的ta是单身贵族噢"
THEY_ARE_HUSBAND = "他有别的女人了，你该放下了"
THEY_ARE_WIFE = "这是一个纯爱的世界，拒绝NTR"

MISTRESS_TARGET_SINGLE = "ta现在还是单身哦，快向ta表白吧！"
MISTRESS_YOU_DECLARED_SINGLE = "今天的你是单身贵族哦"
MISTRESS_YOU_ARE_HUSBAND = "打灭，不给纳小妾！"
MISTRESS_THEY_DECLARED_SINGLE = "今天的ta是单身贵族哦"

NOT_MARRIED = "今天你还没有结婚哦"

NOBODY_LEFT = "~群里没有ta人是单身了哦 明天再试试叭"
PICKED_SELF = "呜...没娶到，你可以再尝试一次"


class RuleRejection(Exception):
    """Raised with the reply text when a request is turned down."""


class CooldownManager:
    """Allows each key one use per interval."""

    def __init__(
        self,
        interval: float | timedelta = SKILL_INTERVAL,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        if isinstance(interval, timedelta):
            interval = interval.total_seconds()
        self._interval = float(interval)
        self._clock = clock
        self._last: dict[Any, float] = {}
        self._lock = threading.Lock()

    def allow(self, key: Any) -> bool:
        """Use the key's turn if it is available and report whether it was."""
        now = self._clock()
        with self._lock:
            last = self._last.get(key)
            if last is not None and now - last < self._interval:
                return False
            self._last[key] = now
            return True


def _stamp(today: date | str) -> str:
    if isinstance(today, date):
        return today.strftime(DATE_FORMAT)
    return str(today)


def _target(couple: Couple | None) -> int:
    return couple.target if couple is not None else 0


def ensure_today(registry: MarriageRegistry, gid: int, today: date | str) -> bool:
    """Reset the group's registry if it is from an earlier day.

    Returns True when a reset took place.
    """
    if registry.check_update(gid, today) == _stamp(today):
        return False
    registry.reset(gid, today)
    return True


def check_single(
    registry: MarriageRegistry, gid: int, uid: int, fiancee: int, today: date | str
) -> None:
    """Reject a proposal unless both sides are still free today."""
    if ensure_today(registry, gid, today):
        return
    mine, my_status = registry.lookup(gid, uid)
    theirs, their_status = registry.lookup(gid, fiancee)
    if my_status is Status.SINGLE and their_status is Status.SINGLE:
        return
    if _target(mine) == fiancee:
        raise RuleRejection(ALREADY_TOGETHER)
    if my_status is not Status.SINGLE and _target(mine) == 0:
        raise RuleRejection(YOU_DECLARED_SINGLE)
    if my_status is Status.HUSBAND:
        raise RuleRejection(YOU_ARE_HUSBAND)
    if my_status is Status.WIFE:
        raise RuleRejection(YOU_ARE_WIFE)
    if their_status is not Status.SINGLE and _target(theirs) == 0:
        raise RuleRejection(THEY_DECLARED_SINGLE)
    if their_status is Status.HUSBAND:
        raise RuleRejection(THEY_ARE_HUSBAND)
    if their_status is Status.WIFE:
        raise RuleRejection(THEY_ARE_WIFE)


def check_mistress(
    registry: MarriageRegistry, gid: int, uid: int, fiancee: int, today: date | str
) -> None:
    """Reject an attempt to cut in unless the target is married and uid is free."""
    if ensure_today(registry, gid, today):
        raise RuleRejection(MISTRESS_TARGET_SINGLE)
    mine, my_status = registry.lookup(gid, uid)
    if _target(mine) == fiancee:
        raise RuleRejection(ALREADY_TOGETHER)
    if my_status is not Status.SINGLE and _target(mine) == 0:
        raise RuleRejection(MISTRESS_YOU_DECLARED_SINGLE)
    if fiancee == uid:
        return
    if my_status is Status.HUSBAND:
        raise RuleRejection(MISTRESS_YOU_ARE_HUSBAND)
    if my_status is Status.WIFE:
        raise RuleRejection(YOU_ARE_WIFE)
    theirs, their_status = registry.lookup(gid, fiancee)
    if their_status is Status.SINGLE:
        raise RuleRejection(MISTRESS_TARGET_SINGLE)
    if _target(theirs) == 0:
        raise RuleRejection(MISTRESS_THEY_DECLARED_SINGLE)


def check_fiancee(
    registry: MarriageRegistry, gid: int, uid: int, today: date | str
) -> tuple[Couple | None, Status]:
    """Reject a divorce request from someone unmarried; return their record."""
    if ensure_today(registry, gid, today):
        raise RuleRejection(NOT_MARRIED)
    couple, status = registry.lookup(gid, uid)
    if status is Status.SINGLE:
        raise RuleRejection(NOT_MARRIED)
    return couple, status


def pick_wife(
    registry: MarriageRegistry,
    gid: int,
    uid: int,
    members: Iterable[Mapping[str, Any]],
    rng: random.Random,
) -> int:
    """Pick a random single among the most recently active members.

    Each member is a mapping with "user_id" and "last_sent_time".
    """
    ordered = sorted(members, key=lambda m: int(m.get("last_sent_time", 0)))
    recent = ordered[-RECENT_MEMBERS:]
    candidates = [
        user
        for user in (int(m.get("user_id", 0)) for m in recent)
        if registry.lookup(gid, user)[1] is Status.SINGLE
    ]
    if len(candidates) <= 1:
        raise RuleRejection(NOBODY_LEFT)
    fiancee = candidates[rng.randrange(len(candidates))]
    if fiancee == uid:
        raise RuleRejection(PICKED_SELF)
    return fiancee