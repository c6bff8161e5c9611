import json
from unittest import mock

import pytest

from groupbot.wtf import API_PREFIX, TABLE, Wtf, WtfError, list_text, new_wtf


def _response(status=200, payload=None):
    resp = mock.MagicMock()
    resp.status_code = status
    resp.content = json.dumps(payload or {}).encode()
    return resp


def test_new_wtf_bounds():
    assert new_wtf(0) == Wtf("你的意义是什么?", "mRIFuS")
    assert new_wtf(len(TABLE) - 1) == TABLE[-1]
    assert new_wtf(-1) is None
    assert new_wtf(len(TABLE)) is None


def test_list_text_lines_match_table():
    lines = list_text().splitlines()
    assert len(lines) == len(TABLE)
    assert lines[0] == "00. 你的意义是什么?"
    for line, w in zip(lines, TABLE):
        assert line.endswith(". " + w.name)


def test_predict_success_builds_url():
    payload = {"ok": True, "text": "hello", "msg": ""}
    with mock.patch("groupbot.wtf.requests.get", return_value=_response(200, payload)) as get:
        result = TABLE[0].predict("alice bob", "carol")
    assert result == "> 你的意义是什么?\nhello"
    url = get.call_args.args[0]
    assert url == API_PREFIX + "mRIFuS/alice+bob/carol"


def test_predict_escapes_slash():
    payload = {"ok": True, "text": "t"}
    with mock.patch("groupbot.wtf.requests.get", return_value=_response(200, payload)) as get:
        result = TABLE[2].predict("a/b")
    assert result == "> " + TABLE[2].name + "\nt"
    assert get.call_args.args[0] == API_PREFIX + TABLE[2].path + "/a%2Fb"


def test_predict_failure_raises_message():
    payload = {"ok": False, "text": "", "msg": "bad name"}
    with mock.patch("groupbot.wtf.requests.get", return_value=_response(200, payload)):
        with pytest.raises(WtfError, match="bad name"):
            TABLE[1].predict("x")


def test_predict_http_error():
    with mock.patch("groupbot.wtf.requests.get", return_value=_response(503)):
        with pytest.raises(WtfError):
            TABLE[1].predict("x")