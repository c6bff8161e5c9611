from unittest import mock

import pytest

from groupbot.vtb import (
    BAD_NUMBER,
    EMPTY_CHOICE,
    ENJOY,
    NO_CLIP,
    TOO_MANY_ERRORS,
    QuoteSession,
    download_record,
    escape_record_url,
    record_filename,
)
from groupbot.vtb_db import VtbDB

CLIP_PATH = "https://cdn.example.com/v/hello world.mp3"


@pytest.fixture
def db(tmp_path):
    database = VtbDB(tmp_path / "vtb.db")
    database.store_vtb_list([{"name": "Alice", "uid": "u1"}])
    database.store_vtb_page(
        "u1",
        {
            "data": {
                "voices": [
                    {
                        "categoryName": "Greetings",
                        "voiceList": [{"name": "Hello", "path": CLIP_PATH}],
                    }
                ]
            }
        },
    )
    yield database
    database.close()


def test_escape_record_url_spaces():
    assert escape_record_url(CLIP_PATH) == "https://cdn.example.com/v/hello%20world.mp3"


def test_escape_record_url_without_slash_is_unchanged():
    assert escape_record_url("plain name") == "plain name"


def test_record_filename(tmp_path):
    path = record_filename(tmp_path, (1, 2, 3), "https://x.example.com/a/b.mp3")
    assert path == tmp_path / "1-2-3.mp3"


def test_record_filename_without_extension(tmp_path):
    path = record_filename(tmp_path, (0, 0, 4), "https://x.example.com/a/clip")
    assert path.name == "0-0-4"


def test_download_record_skips_existing(tmp_path):
    target = tmp_path / "clip.mp3"
    target.write_bytes(b"old")
    with mock.patch("groupbot.vtb.requests.get") as get:
        result = download_record(target, "https://x.example.com/c.mp3")
    assert result.read_bytes() == b"old"
    assert get.call_count == 0


def test_download_record_writes_body(tmp_path):
    target = tmp_path / "clip.mp3"
    with mock.patch("groupbot.vtb.requests.get") as get:
        get.return_value = mock.Mock(content=b"audio")
        download_record(target, "https://x.example.com/c.mp3")
    assert target.read_bytes() == b"audio"
    assert get.call_args[0][0] == "https://x.example.com/c.mp3"


def test_session_full_selection(db):
    session = QuoteSession(db)
    assert session.prompt == db.first_category_menu()
    assert session.feed("0") == [db.second_category_menu(0)]
    assert session.feed("0") == [db.third_category_menu(0, 0)]
    assert session.feed("0") == [ENJOY.format("Hello")]
    assert session.done
    assert session.clip.name == "Hello"
    assert session.record_url == escape_record_url(CLIP_PATH)


def test_session_rejects_non_number(db):
    session = QuoteSession(db)
    assert session.feed("abc") == [BAD_NUMBER]
    assert session.error_count == 1
    assert session.step == 0


def test_session_empty_first_choice(db):
    session = QuoteSession(db)
    assert session.feed("9") == [EMPTY_CHOICE, db.first_category_menu()]
    assert session.step == 0


def test_session_missing_clip_goes_back(db):
    session = QuoteSession(db)
    session.feed("0")
    session.feed("0")
    assert session.feed("7") == [NO_CLIP, db.first_category_menu()]
    assert session.step == 1
    assert not session.done


def test_session_too_many_errors(db):
    session = QuoteSession(db)
    for _ in range(3):
        session.feed("x")
    assert session.feed("0") == [TOO_MANY_ERRORS]
    assert session.done
    with pytest.raises(RuntimeError):
        session.feed("0")