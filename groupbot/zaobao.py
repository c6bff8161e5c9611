"""The daily news picture, fetched once and cached for the day."""

from __future__ import annotations

import threading
from datetime import datetime, timedelta
from typing import Callable

import requests

API_URL = "http://api.soyiji.com/news_jpg"
REFERER = "safe.soyiji.com"
USER_AGENT = (
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/87.0.4280.88 Safari/537.36 Edg/87.0.664.66"
)
TIMEOUT = 30
MAX_AGE = timedelta(hours=8)


class DailyNewsCache:
    """Keeps the last fetched picture while it is fresh and from the same day."""

    def __init__(self, fetch: Callable[[], bytes]) -> None:
        self._fetch = fetch
        self._data: bytes | None = None
        self._fetched_at: datetime | None = None
        self._lock = threading.Lock()

    def get(self, now: datetime | None = None) -> bytes:
        """Return the picture, fetching it again when the cache is stale."""
        now = now or datetime.now()
        with self._lock:
            if (
                self._data is not None
                and self._fetched_at is not None
                and now - self._fetched_at <= MAX_AGE
                and now.day == self._fetched_at.day
            ):
                return self._data
            data = self._fetch()
            self._data = data
            self._fetched_at = now
            return data


def _get(url: str, referer: str = "") -> bytes:
    headers = {"User-Agent": USER_AGENT}
    if referer:
        headers["Referer"] = referer
    response = requests.get(url, headers=headers, timeout=TIMEOUT)
    response.raise_for_status()
    return response.content


def fetch_news_image() -> bytes:
    """Ask the news service for today's picture URL and download it."""
    meta = requests.models.complexjson.loads(_get(API_URL) or b"{}")
    url = meta.get("url", "") if isinstance(meta, dict) else ""
    return _get(str(url), REFERER)