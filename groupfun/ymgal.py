"""Galgame picture sets: a local store and the site scraper that fills it."""

from __future__ import annotations

import random
import re
import sqlite3
import threading
import time
from collections.abc import Callable
from dataclasses import dataclass
from urllib.parse import quote_plus

import lxml.html

WEB_URL = "https://www.ymgal.com"
CG_TYPE = "Gal CG"
EMOTICON_TYPE = "其他"
WEB_PIC_URL = WEB_URL + "/co/picset/"
CG_URL = WEB_URL + "/search?type=picset&sort=default&category=" + quote_plus(CG_TYPE) + "&page="
EMOTICON_URL = (
    WEB_URL + "/search?type=picset&sort=default&category=" + quote_plus(EMOTICON_TYPE) + "&page="
)

PAGE_NUMBER_XPATH = (
    "//*[@id='pager-box']/div/a[@class='icon item pager-next']"
    "/preceding-sibling::a[1]/text()"
)
PIC_ID_XPATH = "//*[@id='picset-result-list']/ul/div/div[1]/a"
PICTURE_COUNT_XPATH = "//div[@class='meta-info']/div[@class='meta-right']/span[2]/text()"
CG_PICTURE_XPATH = (
    "//*[@id='main-picset-warp']/div/div[2]/div/div[@class='swiper-wrapper']/div[{}]"
)
EMOTICON_PICTURE_XPATH = "//*[@id='main-picset-warp']/div/div[@class='stream-list']/div[{}]/img"

RANDOM_COMMAND = re.compile(r"^随机gal(CG|表情包)$")
SEARCH_COMMAND = re.compile(r"^gal(CG|表情包)([一-龥ぁ-んァ-ヶA-Za-z0-9]{1,25})$")

NO_PICTURE = "暂时没有这样的图呢"

_NUMBER = re.compile(r"\d+")


@dataclass(frozen=True)
class YmgalEntry:
    """One picture set: its id, title, kind, description and picture URLs."""

    id: int
    title: str
    picture_type: str
    picture_description: str
    picture_list: str

    @property
    def pictures(self) -> list[str]:
        return self.picture_list.split(",") if self.picture_list else []


_COLUMNS = "id, title, picture_type, picture_description, picture_list"


class YmgalDB:
    """SQLite store of picture sets keyed by their site id."""

    def __init__(self, path: str) -> None:
        self._lock = threading.Lock()
        self._conn = sqlite3.connect(path, check_same_thread=False)
        with self._conn:
            self._conn.execute(
                "CREATE TABLE IF NOT EXISTS ymgal ("
                "id INTEGER PRIMARY KEY, title TEXT NOT NULL DEFAULT '', "
                "picture_type TEXT NOT NULL DEFAULT '', "
                "picture_description TEXT NOT NULL DEFAULT '', "
                "picture_list TEXT NOT NULL DEFAULT '')"
            )

    def __enter__(self) -> YmgalDB:
        return self

    def __exit__(self, *exc: object) -> None:
        self.close()

    def upsert(
        self,
        id: int,
        title: str,
        picture_type: str,
        description: str,
        picture_list: str,
    ) -> None:
        """Insert a picture set or replace the fields of an existing one."""
        with self._lock, self._conn:
            self._conn.execute(
                "INSERT INTO ymgal (id, title, picture_type, picture_description, "
                "picture_list) VALUES (?, ?, ?, ?, ?) ON CONFLICT(id) DO UPDATE SET "
                "title = excluded.title, picture_type = excluded.picture_type, "
                "picture_description = excluded.picture_description, "
                "picture_list = excluded.picture_list",
                (int(id), title, picture_type, description, picture_list),
            )

    def get_by_id(self, id: int | str) -> YmgalEntry | None:
        """Return the picture set with this id, or None."""
        with self._lock:
            row = self._conn.execute(
                f"SELECT {_COLUMNS} FROM ymgal WHERE id = ?", (int(id),)
            ).fetchone()
        return YmgalEntry(*row) if row is not None else None

    def _pick(self, where: str, params: tuple[object, ...], rng: random.Random) -> YmgalEntry | None:
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
        return YmgalEntry(*row) if row is not None else None

    def random(self, picture_type: str, rng: random.Random) -> YmgalEntry | None:
        """Return a picture set of the given kind drawn uniformly, or None."""
        return self._pick("picture_type = ?", (picture_type,), rng)

    def search(self, picture_type: str, key: str, rng: random.Random) -> YmgalEntry | None:
        """Return a random set of the kind whose title or description holds ``key``."""
        pattern = f"%{key}%"
        return self._pick(
            "picture_type = ? AND (picture_description LIKE ? OR title LIKE ?)",
            (picture_type, pattern, pattern),
            rng,
        )

    def close(self) -> None:
        self._conn.close()


def _document(html: str):
    return lxml.html.fromstring(html)


def _first(doc, xpath: str):
    found = doc.xpath(xpath)
    if not found:
        raise ValueError(f"nothing found at {xpath}")
    return found[0]


def _attr(element, position: int) -> str:
    values = list(element.attrib.values())
    if len(values) <= position:
        raise ValueError(f"element <{element.tag}> has no attribute {position}")
    return values[position]


def parse_page_number(html: str) -> int:
    """Return the last page number shown by a search result pager."""
    return int(str(_first(_document(html), PAGE_NUMBER_XPATH)).strip())


def parse_pic_ids(html: str) -> list[str]:
    """Return the picture set ids listed on a search result page."""
    ids = []
    for link in _document(html).xpath(PIC_ID_XPATH):
        match = _NUMBER.search(_attr(link, 0))
        ids.append(match.group(0) if match else "")
    return ids


def parse_picset(html: str, picture_type: str) -> tuple[str, str, str]:
    """Return (title, description, comma separated picture URLs) of a set page."""
    doc = _document(html)
    title = _attr(_first(doc, "//meta[@name='name']"), 1)
    description = _attr(_first(doc, "//meta[@name='description']"), 1)
    count_text = str(_first(doc, PICTURE_COUNT_XPATH))
    match = _NUMBER.search(count_text)
    if match is None:
        raise ValueError(f"no picture count in {count_text!r}")
    template = CG_PICTURE_XPATH if picture_type == CG_TYPE else EMOTICON_PICTURE_XPATH
    urls = [
        _attr(_first(doc, template.format(i)), 1)
        for i in range(1, int(match.group(0)) + 1)
    ]
    return title, description, ",".join(urls)


def _search_url(picture_type: str, page: int) -> str:
    return (CG_URL if picture_type == CG_TYPE else EMOTICON_URL) + str(page)


def update_pictures(
    db: YmgalDB, fetch: Callable[[str], str], delay: float = 0.5
) -> int:
    """Store picture sets newer than the newest already known; return how many.

    ``fetch`` takes a URL and returns the page's HTML.
    """
    max_pages = {
        CG_TYPE: parse_page_number(fetch(CG_URL + "1")),
        EMOTICON_TYPE: parse_page_number(fetch(EMOTICON_URL + "1")),
    }
    ids: dict[str, list[str]] = {CG_TYPE: [], EMOTICON_TYPE: []}
    for picture_type, pages in max_pages.items():
        for page in range(1, pages + 1):
            ids[picture_type].extend(parse_pic_ids(fetch(_search_url(picture_type, page))))
            time.sleep(delay)
    stored = 0
    for picture_type, pic_ids in ids.items():
        for pic_id in reversed(pic_ids):
            entry = db.get_by_id(pic_id)
            if entry is not None and entry.picture_list:
                break
            title, description, pictures = parse_picset(
                fetch(WEB_PIC_URL + pic_id), picture_type
            )
            db.upsert(int(pic_id), title, picture_type, description, pictures)
            stored += 1
            time.sleep(delay)
    return stored


def forward_messages(entry: YmgalEntry | None) -> list[tuple[str, str]]:
    """Return ("text" | "image", content) nodes for forwarding a picture set."""
    if entry is None or not entry.picture_list:
        raise LookupError(NO_PICTURE)
    nodes = [("text", entry.title)]
    if entry.picture_description:
        nodes.append(("text", entry.picture_description))
    nodes.extend(("image", url) for url in entry.pictures)
    return nodes