import random

import pytest

from groupfun.ymgal import (
    CG_TYPE,
    CG_URL,
    EMOTICON_TYPE,
    EMOTICON_URL,
    NO_PICTURE,
    WEB_PIC_URL,
    YmgalDB,
    YmgalEntry,
    forward_messages,
    parse_page_number,
    parse_pic_ids,
    parse_picset,
    update_pictures,
)


def search_page(last_page, ids):
    links = "".join(
        f'<div><div><a href="/co/picset/{i}">x</a></div><div>y</div></div>' for i in ids
    )
    return (
        "<html><body>"
        '<div id="pager-box"><div><a>1</a>'
        f'<a>{last_page}</a><a class="icon item pager-next">next</a></div></div>'
        f'<div id="picset-result-list"><ul>{links}</ul></div>'
        "</body></html>"
    )


def picset_head(title, description, count):
    return (
        "<html><head>"
        f'<meta name="name" content="{title}">'
        f'<meta name="description" content="{description}">'
        "</head><body>"
        '<div class="meta-info"><div class="meta-right">'
        f"<span>a</span><span>共{count}张</span></div></div>"
    )


def cg_page(title, description, urls):
    slides = "".join(f'<div class="swiper-slide" data-src="{u}"></div>' for u in urls)
    return (
        picset_head(title, description, len(urls))
        + '<div id="main-picset-warp"><div><div>head</div><div><div>'
        f'<div class="swiper-wrapper">{slides}</div></div></div></div></div>'
        "</body></html>"
    )


def emoticon_page(title, description, urls):
    items = "".join(f'<div><img class="pic" src="{u}"></div>' for u in urls)
    return (
        picset_head(title, description, len(urls))
        + f'<div id="main-picset-warp"><div><div class="stream-list">{items}</div></div></div>'
        "</body></html>"
    )


@pytest.fixture
def db(tmp_path):
    with YmgalDB(str(tmp_path / "ymgal.db")) as store:
        yield store


def test_upsert_and_get(db):
    db.upsert(5, "t", CG_TYPE, "d", "a,b")
    assert db.get_by_id("5") == YmgalEntry(5, "t", CG_TYPE, "d", "a,b")
    db.upsert(5, "t2", CG_TYPE, "d2", "c")
    assert db.get_by_id(5).title == "t2"
    assert db.get_by_id(5).pictures == ["c"]


def test_get_missing(db):
    assert db.get_by_id(99) is None


def test_random_by_type(db):
    db.upsert(1, "cg", CG_TYPE, "", "x")
    db.upsert(2, "emo", EMOTICON_TYPE, "", "y")
    rng = random.Random(1)
    for _ in range(10):
        assert db.random(CG_TYPE, rng).id == 1
    assert db.random("none", rng) is None


def test_search_title_and_description(db):
    db.upsert(1, "summer days", CG_TYPE, "", "x")
    db.upsert(2, "winter", CG_TYPE, "about summer", "y")
    db.upsert(3, "summer", EMOTICON_TYPE, "", "z")
    rng = random.Random(3)
    found = {db.search(CG_TYPE, "summer", rng).id for _ in range(30)}
    assert found == {1, 2}
    assert db.search(CG_TYPE, "autumn", rng) is None


def test_parse_page_number():
    assert parse_page_number(search_page(7, [])) == 7


def test_parse_page_number_missing():
    with pytest.raises(ValueError):
        parse_page_number("<html><body><p>none</p></body></html>")


def test_parse_pic_ids():
    assert parse_pic_ids(search_page(1, ["123", "456"])) == ["123", "456"]


def test_parse_cg_picset():
    urls = ["https://img.example.com/1.jpg", "https://img.example.com/2.jpg"]
    title, description, pictures = parse_picset(cg_page("T", "D", urls), CG_TYPE)
    assert (title, description) == ("T", "D")
    assert pictures.split(",") == urls


def test_parse_emoticon_picset():
    urls = ["https://img.example.com/e.png"]
    result = parse_picset(emoticon_page("E", "F", urls), EMOTICON_TYPE)
    assert result == ("E", "F", urls[0])


def site(pages):
    fetched = []

    def fetch(url):
        fetched.append(url)
        return pages[url]

    return fetch, fetched


def build_site():
    return {
        CG_URL + "1": search_page(1, ["11", "12"]),
        EMOTICON_URL + "1": search_page(1, ["21"]),
        WEB_PIC_URL + "11": cg_page("A", "da", ["https://img.example.com/a.jpg"]),
        WEB_PIC_URL + "12": cg_page("B", "db", ["https://img.example.com/b.jpg"]),
        WEB_PIC_URL + "21": emoticon_page("C", "dc", ["https://img.example.com/c.png"]),
    }


def test_update_pictures_stores_everything(db):
    fetch, _ = site(build_site())
    assert update_pictures(db, fetch, 0) == 3
    assert db.get_by_id(12).title == "B"
    assert db.get_by_id(21).picture_type == EMOTICON_TYPE
    assert db.get_by_id(11).picture_list == "https://img.example.com/a.jpg"


def test_update_pictures_stops_at_known(db):
    db.upsert(12, "old", CG_TYPE, "", "known")
    fetch, fetched = site(build_site())
    assert update_pictures(db, fetch, 0) == 1
    assert db.get_by_id(11) is None
    assert db.get_by_id(12).title == "old"
    assert WEB_PIC_URL + "11" not in fetched


def test_forward_messages():
    entry = YmgalEntry(1, "T", CG_TYPE, "D", "u1,u2")
    assert forward_messages(entry) == [
        ("text", "T"),
        ("text", "D"),
        ("image", "u1"),
        ("image", "u2"),
    ]


def test_forward_messages_without_description():
    entry = YmgalEntry(1, "T", CG_TYPE, "", "u1")
    assert forward_messages(entry) == [("text", "T"), ("image", "u1")]


def test_forward_messages_empty():
    with pytest.raises(LookupError, match=NO_PICTURE):
        forward_messages(None)
    with pytest.raises(LookupError):
        forward_messages(YmgalEntry(1, "T", CG_TYPE, "", ""))