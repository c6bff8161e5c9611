"""Stepwise selection of VTuber voice clips and their download."""

from __future__ import annotations

import re
from pathlib import Path
from typing import Sequence
from urllib.parse import quote_plus

import requests

from groupbot.vtb_db import ThirdCategory, VtbDB

TIMEOUT = 30
MAX_ERRORS = 3

BAD_NUMBER = "请输入正确的序号，三次输入错误，指令可退出重输"
EMPTY_CHOICE = "你选择的序号没有内容，请重新选择，三次输入错误，指令可退出重输"
NO_CLIP = "没有内容请重新选择，三次输入错误，指令可退出重输"
TOO_MANY_ERRORS = "输入错误太多,请重新发指令"
ENJOY = "请欣赏《{}》"

_HEADERS = {
    "Content-Type": "application/x-www-form-urlencoded",
    "User-Agent": "Mozilla/5.0 (Windows NT 6.1; WOW64; rv:6.0) Gecko/20100101 Firefox/6.0",
}

_LAST_SEGMENT = re.compile(r".*/(.*)")
_NUMBER = re.compile(r"[+-]?[0-9]+")


def escape_record_url(url: str) -> str:
    """Query-escape the last path segment of a clip URL, spaces as %20."""
    matched = _LAST_SEGMENT.search(url)
    if matched is None:
        return url
    segment = matched.group(1)
    url = url.replace(segment, quote_plus(segment, safe=""))
    return url.replace("+", "%20")


def _ext(url: str) -> str:
    name = url.rsplit("/", 1)[-1]
    dot = name.rfind(".")
    return name[dot:] if dot >= 0 else ""


def record_filename(store: str | Path, indexes: Sequence[int], url: str) -> Path:
    """Cache path of a clip: the three indexes joined by dashes plus the URL's extension."""
    first, second, third = indexes
    return Path(store) / f"{first}-{second}-{third}{_ext(url)}"


def download_record(path: str | Path, url: str) -> Path:
    """Download a clip to path unless it is already there."""
    path = Path(path)
    if path.exists():
        return path
    response = requests.get(url, headers=_HEADERS, timeout=TIMEOUT)
    path.write_bytes(response.content)
    return path


class QuoteSession:
    """One conversation that picks a VTuber, a clip group and a clip by number."""

    def __init__(self, db: VtbDB) -> None:
        self._db = db
        self.indexes = [0, 0, 0]
        self.step = 0
        self.error_count = 0
        self.done = False
        self.clip: ThirdCategory | None = None
        self.record_url = ""
        self.prompt = db.first_category_menu()

    def feed(self, text: str) -> list[str]:
        """Take one reply from the user and return the messages to send back."""
        if self.done:
            raise RuntimeError("the session has finished")
        if self.error_count >= MAX_ERRORS:
            self.done = True
            return [TOO_MANY_ERRORS]
        if not _NUMBER.fullmatch(text):
            self.error_count += 1
            return [BAD_NUMBER]
        num = int(text)
        if self.step == 0:
            return self._choose_first(num)
        if self.step == 1:
            return self._choose_second(num)
        return self._choose_third(num)

    def _choose_first(self, num: int) -> list[str]:
        self.indexes[0] = num
        menu = self._db.second_category_menu(num)
        if not menu:
            self.error_count += 1
            return [EMPTY_CHOICE, self._db.first_category_menu()]
        self.step += 1
        return [menu]

    def _choose_second(self, num: int) -> list[str]:
        self.indexes[1] = num
        menu = self._db.third_category_menu(self.indexes[0], num)
        if not menu:
            self.error_count += 1
            return [EMPTY_CHOICE, self._db.second_category_menu(self.indexes[0])]
        self.step += 1
        return [menu]

    def _choose_third(self, num: int) -> list[str]:
        self.indexes[2] = num
        clip = self._db.third_category(*self.indexes)
        if clip is None or not clip.path:
            self.error_count += 1
            self.step = 1
            return [NO_CLIP, self._db.first_category_menu()]
        self.clip = clip
        self.record_url = escape_record_url(clip.path)
        self.done = True
        return [ENJOY.format(clip.name)]