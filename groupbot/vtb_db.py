"""SQLite store of VTuber voice clips in three category levels."""

from __future__ import annotations

import json
import random
import re
import sqlite3
import threading
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Iterable, Mapping

import requests

LIST_URL = "https://vtbkeyboard.moe/api/get_vtb_list"
PAGE_URL = "https://vtbkeyboard.moe/api/get_vtb_page?uid="
TIMEOUT = 30

FIRST_MENU_HEADER = "请选择一个vtb并发送序号:\n"
SECOND_MENU_HEADER = "请选择一个语录类别并发送序号:\n"
THIRD_MENU_HEADER = "请选择一个语录并发送序号:\n"

_USER_AGENTS = (
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/96.0.4664.110 Safari/537.36",
    "Mozilla/5.0 (Macintosh; Intel Mac OS X 10_15_7) AppleWebKit/605.1.15 "
    "(KHTML, like Gecko) Version/15.1 Safari/605.1.15",
    "Mozilla/5.0 (X11; Linux x86_64; rv:95.0) Gecko/20100101 Firefox/95.0",
)

_UNICODE_ESCAPE = re.compile(r"\\u([0-9a-fA-F]{4})")


@dataclass(frozen=True)
class FirstCategory:
    """A VTuber."""

    index: int
    name: str
    uid: str
    description: str
    icon_path: str


@dataclass(frozen=True)
class SecondCategory:
    """A group of clips of one VTuber."""

    index: int
    first_uid: str
    name: str
    author: str
    description: str


@dataclass(frozen=True)
class ThirdCategory:
    """One voice clip."""

    index: int
    second_index: int
    first_uid: str
    name: str
    path: str
    author: str
    description: str


def _text(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, str):
        return value
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (int, float)):
        return str(value)
    return json.dumps(value, ensure_ascii=False)


def _field(item: Any, *keys: str) -> str:
    for key in keys:
        if not isinstance(item, Mapping):
            return ""
        item = item.get(key)
    return _text(item)


def _decode(body: bytes) -> Any:
    text = _UNICODE_ESCAPE.sub(lambda m: chr(int(m.group(1), 16)), body.decode("utf-8"))
    return json.loads(text)


def _get(url: str) -> bytes:
    headers = {"User-Agent": random.choice(_USER_AGENTS)}
    return requests.get(url, headers=headers, timeout=TIMEOUT).content


_FIRST_COLS = (
    "first_category_index, first_category_name, first_category_uid, "
    "first_category_description, first_category_icon_path"
)
_THIRD_COLS = (
    "third_category_index, second_category_index, first_category_uid, "
    "third_category_name, third_category_path, third_category_author, "
    "third_category_description"
)


class VtbDB:
    """Voice-clip database with menus for stepwise selection."""

    def __init__(self, path: str | Path) -> None:
        self._conn = sqlite3.connect(str(path), check_same_thread=False)
        self._lock = threading.Lock()
        with self._conn:
            self._conn.execute(
                "CREATE TABLE IF NOT EXISTS first_category ("
                "id INTEGER PRIMARY KEY AUTOINCREMENT, "
                "first_category_index INTEGER, first_category_name TEXT, "
                "first_category_uid TEXT, first_category_description TEXT, "
                "first_category_icon_path TEXT)"
            )
            self._conn.execute(
                "CREATE TABLE IF NOT EXISTS second_category ("
                "id INTEGER PRIMARY KEY AUTOINCREMENT, "
                "second_category_index INTEGER, first_category_uid TEXT, "
                "second_category_name TEXT, second_category_author TEXT, "
                "second_category_description TEXT)"
            )
            self._conn.execute(
                "CREATE TABLE IF NOT EXISTS third_category ("
                "id INTEGER PRIMARY KEY AUTOINCREMENT, "
                "third_category_index INTEGER, second_category_index INTEGER, "
                "first_category_uid TEXT, third_category_name TEXT, "
                "third_category_path TEXT, third_category_author TEXT, "
                "third_category_description TEXT)"
            )

    def __enter__(self) -> VtbDB:
        return self

    def __exit__(self, *exc: object) -> None:
        self.close()

    def _first_uid(self, first_index: int) -> str:
        row = self._conn.execute(
            "SELECT first_category_uid FROM first_category "
            "WHERE first_category_index = ? ORDER BY id LIMIT 1",
            (first_index,),
        ).fetchone()
        return row[0] if row else ""

    def first_category_menu(self) -> str:
        """Numbered list of every VTuber."""
        with self._lock:
            rows = self._conn.execute(
                "SELECT first_category_index, first_category_name "
                "FROM first_category ORDER BY id"
            ).fetchall()
        return FIRST_MENU_HEADER + "".join(f"{i}. {name}\n" for i, name in rows)

    def second_category_menu(self, first_index: int) -> str:
        """Numbered clip groups of one VTuber; empty when there are none."""
        with self._lock:
            uid = self._first_uid(first_index)
            rows = self._conn.execute(
                "SELECT second_category_index, second_category_name "
                "FROM second_category WHERE first_category_uid = ? ORDER BY id",
                (uid,),
            ).fetchall()
        if not rows:
            return ""
        return SECOND_MENU_HEADER + "".join(f"{i}. {name}\n" for i, name in rows)

    def third_category_menu(self, first_index: int, second_index: int) -> str:
        """Numbered clips of one group; empty when there are none."""
        with self._lock:
            uid = self._first_uid(first_index)
            rows = self._conn.execute(
                "SELECT third_category_index, third_category_name "
                "FROM third_category WHERE first_category_uid = ? "
                "AND second_category_index = ? ORDER BY id",
                (uid, second_index),
            ).fetchall()
        if not rows:
            return ""
        return THIRD_MENU_HEADER + "".join(f"{i}. {name}\n" for i, name in rows)

    def third_category(
        self, first_index: int, second_index: int, third_index: int
    ) -> ThirdCategory | None:
        """The clip at the given three indexes, or None."""
        with self._lock:
            uid = self._first_uid(first_index)
            row = self._conn.execute(
                f"SELECT {_THIRD_COLS} FROM third_category "
                "WHERE first_category_uid = ? AND second_category_index = ? "
                "AND third_category_index = ? LIMIT 1",
                (uid, second_index, third_index),
            ).fetchone()
        return ThirdCategory(*row) if row else None

    def random_vtb(self, rng: random.Random | None = None) -> ThirdCategory | None:
        """A clip chosen at random, or None when there are none."""
        rng = rng or random.Random()
        with self._lock:
            (count,) = self._conn.execute(
                "SELECT COUNT(*) FROM third_category"
            ).fetchone()
            if count == 0:
                return None
            row = self._conn.execute(
                f"SELECT {_THIRD_COLS} FROM third_category ORDER BY id "
                "LIMIT 1 OFFSET ?",
                (rng.randrange(count),),
            ).fetchone()
        return ThirdCategory(*row) if row else None

    def first_category_by_uid(self, uid: str) -> FirstCategory | None:
        """The VTuber with the given uid, or None."""
        with self._lock:
            row = self._conn.execute(
                f"SELECT {_FIRST_COLS} FROM first_category "
                "WHERE first_category_uid = ? LIMIT 1",
                (uid,),
            ).fetchone()
        return FirstCategory(*row) if row else None

    def store_vtb_list(self, items: Iterable[Mapping[str, Any]]) -> list[str]:
        """Insert or update VTubers from the list document; return their uids."""
        uids = []
        with self._lock, self._conn:
            for index, item in enumerate(items):
                uid = _field(item, "uid")
                values = (
                    index,
                    _field(item, "name"),
                    _field(item, "description"),
                    _field(item, "icon_path"),
                )
                exists = self._conn.execute(
                    "SELECT 1 FROM first_category WHERE first_category_uid = ? LIMIT 1",
                    (uid,),
                ).fetchone()
                if exists:
                    self._conn.execute(
                        "UPDATE first_category SET first_category_index = ?, "
                        "first_category_name = ?, first_category_description = ?, "
                        "first_category_icon_path = ? WHERE first_category_uid = ?",
                        (*values, uid),
                    )
                else:
                    self._conn.execute(
                        "INSERT INTO first_category (first_category_index, "
                        "first_category_name, first_category_description, "
                        "first_category_icon_path, first_category_uid) "
                        "VALUES (?, ?, ?, ?, ?)",
                        (*values, uid),
                    )
                uids.append(uid)
        return uids

    def store_vtb_page(self, uid: str, page: Mapping[str, Any]) -> None:
        """Insert or update the clip groups and clips of one VTuber."""
        data = page.get("data") if isinstance(page, Mapping) else None
        voices = data.get("voices") if isinstance(data, Mapping) else None
        with self._lock, self._conn:
            for second_index, group in enumerate(voices or []):
                self._store_second(uid, second_index, group)
                clips = group.get("voiceList") if isinstance(group, Mapping) else None
                for third_index, clip in enumerate(clips or []):
                    self._store_third(uid, second_index, third_index, clip)

    def _store_second(self, uid: str, index: int, group: Any) -> None:
        values = (
            _field(group, "categoryName"),
            _field(group, "author"),
            _field(group, "categoryDescription", "zh-CN"),
        )
        key = (uid, index)
        exists = self._conn.execute(
            "SELECT 1 FROM second_category WHERE first_category_uid = ? "
            "AND second_category_index = ? LIMIT 1",
            key,
        ).fetchone()
        if exists:
            self._conn.execute(
                "UPDATE second_category SET second_category_name = ?, "
                "second_category_author = ?, second_category_description = ? "
                "WHERE first_category_uid = ? AND second_category_index = ?",
                (*values, *key),
            )
        else:
            self._conn.execute(
                "INSERT INTO second_category (second_category_name, "
                "second_category_author, second_category_description, "
                "first_category_uid, second_category_index) VALUES (?, ?, ?, ?, ?)",
                (*values, *key),
            )

    def _store_third(self, uid: str, second: int, index: int, clip: Any) -> None:
        values = (
            _field(clip, "name"),
            _field(clip, "description", "zh-CN"),
            _field(clip, "path"),
            _field(clip, "author"),
        )
        key = (uid, second, index)
        exists = self._conn.execute(
            "SELECT 1 FROM third_category WHERE first_category_uid = ? "
            "AND second_category_index = ? AND third_category_index = ? LIMIT 1",
            key,
        ).fetchone()
        if exists:
            self._conn.execute(
                "UPDATE third_category SET third_category_name = ?, "
                "third_category_description = ?, third_category_path = ?, "
                "third_category_author = ? WHERE first_category_uid = ? "
                "AND second_category_index = ? AND third_category_index = ?",
                (*values, *key),
            )
        else:
            self._conn.execute(
                "INSERT INTO third_category (third_category_name, "
                "third_category_description, third_category_path, "
                "third_category_author, first_category_uid, "
                "second_category_index, third_category_index) "
                "VALUES (?, ?, ?, ?, ?, ?, ?)",
                (*values, *key),
            )

    def fetch_vtb_list(self) -> list[str]:
        """Download the VTuber list, store it and return the uids."""
        items = _decode(_get(LIST_URL))
        if not isinstance(items, list):
            return []
        return self.store_vtb_list(items)

    def store_vtb(self, uid: str) -> None:
        """Download and store one VTuber's clips."""
        page = _decode(_get(PAGE_URL + uid))
        if isinstance(page, Mapping):
            self.store_vtb_page(uid, page)

    def close(self) -> None:
        """Close the database."""
        with self._lock:
            self._conn.close()