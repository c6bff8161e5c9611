from datetime import datetime, timedelta
from unittest import mock

import pytest

from groupbot.zaobao import API_URL, REFERER, DailyNewsCache, fetch_news_image


class _Fetcher:
    def __init__(self):
        self.calls = 0

    def __call__(self):
        self.calls += 1
        return b"pic%d" % self.calls


START = datetime(2022, 6, 13, 9, 0)


def test_cached_within_same_day():
    fetch = _Fetcher()
    cache = DailyNewsCache(fetch)
    first = cache.get(START)
    second = cache.get(START + timedelta(hours=3))
    assert first == second
    assert fetch.calls == 1


def test_refetch_after_eight_hours():
    fetch = _Fetcher()
    cache = DailyNewsCache(fetch)
    cache.get(START)
    later = cache.get(START + timedelta(hours=8, minutes=1))
    assert fetch.calls == 2
    assert later == b"pic2"


def test_refetch_on_new_day():
    fetch = _Fetcher()
    cache = DailyNewsCache(fetch)
    cache.get(datetime(2022, 6, 13, 23, 0))
    cache.get(datetime(2022, 6, 14, 1, 0))
    assert fetch.calls == 2


def test_fetch_error_propagates_and_retries():
    attempts = []

    def fetch():
        attempts.append(1)
        if len(attempts) == 1:
            raise OSError("down")
        return b"ok"

    cache = DailyNewsCache(fetch)
    with pytest.raises(OSError):
        cache.get(START)
    assert cache.get(START) == b"ok"
    assert len(attempts) == 2


def _response(content):
    resp = mock.Mock()
    resp.content = content
    resp.raise_for_status = mock.Mock()
    return resp


def test_fetch_news_image_follows_url():
    responses = [_response(b'{"url": "http://example.com/news.jpg"}'), _response(b"JPEG")]
    with mock.patch("requests.get", side_effect=responses) as get:
        data = fetch_news_image()
    assert data == b"JPEG"
    assert get.call_args_list[0].args[0] == API_URL
    assert get.call_args_list[1].args[0] == "http://example.com/news.jpg"
    assert get.call_args_list[1].kwargs["headers"]["Referer"] == REFERER