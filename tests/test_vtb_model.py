import json
import random

import pytest
import responses
from responses import matchers

from groupfun.vtb_model import (
    FIRST_HEADER,
    SECOND_HEADER,
    THIRD_HEADER,
    VTB_LIST_URL,
    VTB_PAGE_URL,
    FirstCategory,
    VtbDB,
    decode_unicode_escapes,
)

PAGE = {
    "data": {
        "voices": [
            {
                "categoryName": "greetings",
                "author": "ann",
                "categoryDescription": {"zh-CN": "hello things"},
                "voiceList": [
                    {
                        "name": "hi",
                        "path": "https://cdn.example.com/u1/hi.mp3",
                        "author": "bob",
                        "description": {"zh-CN": "says hi"},
                    },
                    {"name": "bye", "path": "https://cdn.example.com/u1/bye.mp3"},
                ],
            }
        ]
    }
}


@pytest.fixture
def db(tmp_path):
    with VtbDB(str(tmp_path / "vtb.db")) as database:
        yield database


def test_empty_first_message_is_header(db):
    assert db.first_category_message() == FIRST_HEADER


def test_store_list_returns_uids_and_lists_names(db):
    uids = db.store_vtb_list(
        [{"name": "Alice", "uid": "u1"}, {"name": "Bob", "uid": "u2"}]
    )
    assert uids == ["u1", "u2"]
    assert db.first_category_message() == FIRST_HEADER + "0. Alice\n1. Bob\n"


def test_store_list_updates_without_duplicates(db):
    db.store_vtb_list([{"name": "Alice", "uid": "u1"}])
    db.store_vtb_list([{"name": "Alicia", "uid": "u1", "icon_path": "i.png"}])
    message = db.first_category_message()
    assert message.count("\n") == 2
    assert "Alicia" in message
    assert db.first_category_by_uid("u1") == FirstCategory(0, "Alicia", "u1", "", "i.png")


def test_unknown_indexes_give_empty_messages(db):
    db.store_vtb_list([{"name": "Alice", "uid": "u1"}])
    assert db.second_category_message(5) == ""
    assert db.third_category_message(0, 0) == ""
    assert db.third_category(0, 0, 0) is None


def test_page_categories_and_clips(db):
    db.store_vtb_list([{"name": "Alice", "uid": "u1"}])
    db.store_vtb_page("u1", PAGE)
    assert db.second_category_message(0) == SECOND_HEADER + "0. greetings\n"
    assert db.third_category_message(0, 0) == THIRD_HEADER + "0. hi\n1. bye\n"
    clip = db.third_category(0, 0, 0)
    assert clip.name == "hi"
    assert clip.path == "https://cdn.example.com/u1/hi.mp3"
    assert clip.author == "bob"
    assert clip.description == "says hi"
    assert clip.first_uid == "u1"


def test_storing_page_twice_keeps_one_copy(db):
    db.store_vtb_list([{"name": "Alice", "uid": "u1"}])
    db.store_vtb_page("u1", PAGE)
    db.store_vtb_page("u1", PAGE)
    assert db.third_category_message(0, 0).count("\n") == 3


def test_random_vtb(db):
    rng = random.Random(1)
    assert db.random_vtb(rng) is None
    db.store_vtb_list([{"name": "Alice", "uid": "u1"}])
    db.store_vtb_page("u1", PAGE)
    picked = db.random_vtb(rng)
    assert picked.name in {"hi", "bye"}


def test_first_category_by_unknown_uid(db):
    assert db.first_category_by_uid("missing") is None


def test_decode_unicode_escapes():
    assert decode_unicode_escapes("a\\u4f60b") == "a你b"
    assert decode_unicode_escapes("plain") == "plain"


@pytest.mark.parametrize("bad", ["\\u12", "\\uzzzz", "\\ud83d"])
def test_decode_unicode_escapes_rejects_bad(bad):
    with pytest.raises(ValueError):
        decode_unicode_escapes(bad)


def test_fetch_vtb_list(db):
    with responses.RequestsMock() as rsps:
        rsps.add(
            responses.GET,
            VTB_LIST_URL,
            body='[{"name":"A\\u0042","uid":7}]',
        )
        assert db.fetch_vtb_list() == ["7"]
    assert db.first_category_by_uid("7").name == "AB"


def test_store_vtb_downloads_page(db):
    with responses.RequestsMock() as rsps:
        rsps.add(
            responses.GET,
            VTB_PAGE_URL,
            body=json.dumps(PAGE),
            match=[matchers.query_param_matcher({"uid": "u1"})],
        )
        db.store_vtb_list([{"name": "Alice", "uid": "u1"}])
        db.store_vtb("u1")
    assert db.third_category(0, 0, 1).name == "bye"