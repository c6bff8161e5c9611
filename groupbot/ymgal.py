"""Galgame CG and emoticon picture sets scraped into SQLite."""

from __future__ import annotations

import random
import re
import sqlite3
import threading
import time
from dataclasses import dataclass
from pathlib import Path
from typing import Callable
from urllib.parse import quote_plus

import lxml.html
import requests

WEB_URL = "https://www.ymgal.com"
CG_TYPE = "Gal CG"
EMOTICON_TYPE = "其他"
PIC_URL = WEB_URL + "/co/picset/"
CG_URL = WEB_URL + "/search?type=picset&sort=default&category=" + quote_plus(CG_TYPE) + "&page="
EMOTICON_URL = (
    WEB_URL + "/search?type=picset&sort=default&category=" + quote_plus(EMOTICON_TYPE) + "&page="
)
PAUSE = 0.5
TIMEOUT = 30

_PAGE_NUMBER = (
    "//*[@id='pager-box']/div/a[@class='icon item pager-next']"
    "/preceding-sibling::a[1]/text()"
)
_PICSET_LINKS = "//*[@id='picset-result-list']/ul/div/div[1]/a"
_META_NAME = "//meta[@name='name']"
_META_DESCRIPTION = "//meta[@name='description']"
_PICTURE_COUNT = "//div[@class='meta-info']/div[@class='meta-right']/span[2]/text()"
_CG_PICTURE = (
    "//*[@id='main-picset-warp']/div/div[2]/div"
    "/div[@class='swiper-wrapper']/div[{}]"
)
_EMOTICON_PICTURE = "//*[@id='main-picset-warp']/div/div[@class='stream-list']/div[{}]/img"
_NUMBER = re.compile(r"\d+")

_COLUMNS = "id, title, picture_type, picture_description, picture_list"


@dataclass(frozen=True)
class Ymgal:
    """One picture set."""

    id: int
    title: str
    picture_type: str
    picture_description: str
    picture_list: str

    @property
    def pictures(self) -> list[str]:
        """The picture URLs of the set."""
        return self.picture_list.split(",") if self.picture_list else []


class YmgalDB:
    """Picture sets kept in SQLite."""

    def __init__(self, path: str | Path) -> None:
        self._conn = sqlite3.connect(str(path), check_same_thread=False)
        self._lock = threading.Lock()
        with self._conn:
            self._conn.execute(
                "CREATE TABLE IF NOT EXISTS ymgal ("
                "id INTEGER PRIMARY KEY, title TEXT, picture_type TEXT, "
                "picture_description TEXT, picture_list TEXT)"
            )

    def __enter__(self) -> YmgalDB:
        return self

    def __exit__(self, *exc: object) -> None:
        self.close()

    def upsert(
        self,
        id_: int,
        title: str,
        picture_type: str,
        picture_description: str,
        picture_list: str,
    ) -> None:
        """Insert a picture set or update the one with the same id."""
        with self._lock, self._conn:
            self._conn.execute(
                f"INSERT INTO ymgal ({_COLUMNS}) VALUES (?, ?, ?, ?, ?) "
                "ON CONFLICT(id) DO UPDATE SET title = excluded.title, "
                "picture_type = excluded.picture_type, "
                "picture_description = excluded.picture_description, "
                "picture_list = excluded.picture_list",
                (id_, title, picture_type, picture_description, picture_list),
            )

    def get_by_id(self, id_: int | str) -> Ymgal | None:
        """The picture set with the given id, or None."""
        with self._lock:
            row = self._conn.execute(
                f"SELECT {_COLUMNS} FROM ymgal WHERE id = ? LIMIT 1", (id_,)
            ).fetchone()
        return Ymgal(*row) if row else None

    def _pick(self, where: str, params: tuple, rng: random.Random | None) -> Ymgal | None:
        rng = rng or random.Random()
        with self._lock:
            (count,) = self._conn.execute(
                f"SELECT COUNT(*) FROM ymgal WHERE {where}", params
            ).fetchone()
            if count == 0:
                return None
            row = self._conn.execute(
                f"SELECT {_COLUMNS} FROM ymgal WHERE {where} ORDER BY id LIMIT 1 OFFSET ?",
                (*params, rng.randrange(count)),
            ).fetchone()
        return Ymgal(*row) if row else None

    def random(self, picture_type: str, rng: random.Random | None = None) -> Ymgal | None:
        """A random picture set of the given type, or None."""
        return self._pick("picture_type = ?", (picture_type,), rng)

    def search(
        self, picture_type: str, key: str, rng: random.Random | None = None
    ) -> Ymgal | None:
        """A random set of the type whose title or description contains key."""
        pattern = f"%{key}%"
        return self._pick(
            "picture_type = ? AND (picture_description LIKE ? OR title LIKE ?)",
            (picture_type, pattern, pattern),
            rng,
        )

    def close(self) -> None:
        """Close the database."""
        with self._lock:
            self._conn.close()


def _document(html: str | bytes):
    return lxml.html.document_fromstring(html)


def _find_one(doc, xpath: str):
    found = doc.xpath(xpath)
    if not found:
        raise ValueError(f"nothing matches {xpath}")
    return found[0]


def _attr(element, position: int) -> str:
    values = list(element.attrib.values())
    if len(values) <= position:
        raise ValueError(f"<{element.tag}> has no attribute at position {position}")
    return values[position]


def _to_int(text: str) -> int:
    if not re.fullmatch(r"[+-]?[0-9]+", text):
        raise ValueError(f"not a number: {text!r}")
    return int(text)


def parse_page_count(html: str | bytes) -> int:
    """Number of the last result page shown in the pager."""
    return _to_int(str(_find_one(_document(html), _PAGE_NUMBER)))


def parse_picset_ids(html: str | bytes) -> list[str]:
    """Picture set ids linked from a search result page, in page order."""
    ids = []
    for link in _document(html).xpath(_PICSET_LINKS):
        values = list(link.attrib.values())
        matched = _NUMBER.search(values[0]) if values else None
        ids.append(matched.group(0) if matched else "")
    return ids


def _parse_picset(html: str | bytes, picture_xpath: str) -> tuple[str, str, str]:
    doc = _document(html)
    title = _attr(_find_one(doc, _META_NAME), 1)
    description = _attr(_find_one(doc, _META_DESCRIPTION), 1)
    matched = _NUMBER.search(str(_find_one(doc, _PICTURE_COUNT)))
    count = _to_int(matched.group(0) if matched else "")
    pictures = [
        _attr(_find_one(doc, picture_xpath.format(i)), 1) for i in range(1, count + 1)
    ]
    return title, description, ",".join(pictures)


def parse_cg_picset(html: str | bytes) -> tuple[str, str, str]:
    """Title, description and comma-joined picture URLs of a CG set page."""
    return _parse_picset(html, _CG_PICTURE)


def parse_emoticon_picset(html: str | bytes) -> tuple[str, str, str]:
    """Title, description and comma-joined picture URLs of an emoticon set page."""
    return _parse_picset(html, _EMOTICON_PICTURE)


def _fetch(url: str) -> str:
    response = requests.get(url, timeout=TIMEOUT)
    response.raise_for_status()
    return response.text


def _collect_ids(base: str, pages: int, fetch, sleep) -> list[str]:
    ids: list[str] = []
    for page in range(1, pages + 1):
        ids.extend(parse_picset_ids(fetch(base + str(page))))
        sleep(PAUSE)
    return ids


def _store_new(db: YmgalDB, ids: list[str], picture_type: str, parse, fetch, sleep) -> int:
    stored = 0
    for picset_id in reversed(ids):
        existing = db.get_by_id(picset_id)
        if existing is not None and existing.picture_list:
            break
        number = _to_int(picset_id)
        title, description, pictures = parse(fetch(PIC_URL + picset_id))
        db.upsert(number, title, picture_type, description, pictures)
        stored += 1
        sleep(PAUSE)
    return stored


def update_pictures(
    db: YmgalDB,
    fetch: Callable[[str], str | bytes] = _fetch,
    sleep: Callable[[float], None] = time.sleep,
) -> int:
    """Scrape new CG and emoticon sets into the database; return how many were stored."""
    cg_pages = parse_page_count(fetch(CG_URL + "1"))
    emoticon_pages = parse_page_count(fetch(EMOTICON_URL + "1"))
    cg_ids = _collect_ids(CG_URL, cg_pages, fetch, sleep)
    emoticon_ids = _collect_ids(EMOTICON_URL, emoticon_pages, fetch, sleep)
    stored = _store_new(db, cg_ids, CG_TYPE, parse_cg_picset, fetch, sleep)
    stored += _store_new(
        db, emoticon_ids, EMOTICON_TYPE, parse_emoticon_picset, fetch, sleep
    )
    return stored