"""Store of vtuber voice quotations: vtubers, categories and clips."""

from __future__ import annotations

import json
import random
import re
import sqlite3
import threading
from dataclasses import dataclass
from typing import Any

import requests

VTB_LIST_URL = "https://vtbkeyboard.moe/api/get_vtb_list"
VTB_PAGE_URL = "https://vtbkeyboard.moe/api/get_vtb_page"
TIMEOUT = 30

FIRST_HEADER = "请选择一个vtb并发送序号:\n"
SECOND_HEADER = "请选择一个语录类别并发送序号:\n"
THIRD_HEADER = "请选择一个语录并发送序号:\n"

_USER_AGENTS = (
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/96.0.4664.110 Safari/537.36",
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64; rv:95.0) Gecko/20100101 Firefox/95.0",
    "Mozilla/5.0 (Macintosh; Intel Mac OS X 10_15_7) AppleWebKit/605.1.15 "
    "(KHTML, like Gecko) Version/15.1 Safari/605.1.15",
)

_ESCAPE = re.compile(r"\\u(.{0,4})", re.DOTALL)
_HEX4 = re.compile(r"[0-9a-fA-F]{4}")


@dataclass(frozen=True)
class FirstCategory:
    """A vtuber."""

    index: int
    name: str
    uid: str
    description: str
    icon_path: str


@dataclass(frozen=True)
class ThirdCategory:
    """One voice clip of a vtuber, inside a quotation category."""

    index: int
    second_index: int
    first_uid: str
    name: str
    path: str
    author: str
    description: str


def decode_unicode_escapes(text: str) -> str:
    """Turn literal ``\\uXXXX`` sequences in ``text`` into the characters.

    Raises ValueError for a malformed escape or a surrogate code point.
    """

    def replace(match: re.Match[str]) -> str:
        digits = match.group(1)
        if not _HEX4.fullmatch(digits):
            raise ValueError(f"invalid unicode escape: \\u{digits}")
        code = int(digits, 16)
        if 0xD800 <= code <= 0xDFFF:
            raise ValueError(f"surrogate in unicode escape: \\u{digits}")
        return chr(code)

    return _ESCAPE.sub(replace, text)


def _get(obj: Any, *keys: str) -> Any:
    for key in keys:
        if isinstance(obj, dict):
            obj = obj.get(key)
        elif isinstance(obj, list) and key.isdigit() and int(key) < len(obj):
            obj = obj[int(key)]
        else:
            return None
    return obj


def _text(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, str):
        return value
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (dict, list)):
        return json.dumps(value, ensure_ascii=False, separators=(",", ":"))
    return str(value)


def _as_list(value: Any) -> list[Any]:
    return value if isinstance(value, list) else []


def _fetch_json(url: str, params: dict[str, str] | None = None) -> Any:
    response = requests.get(
        url,
        params=params,
        headers={"User-Agent": random.choice(_USER_AGENTS)},
        timeout=TIMEOUT,
    )
    body = decode_unicode_escapes(response.text)
    try:
        return json.loads(body)
    except ValueError:
        return None


class VtbDB:
    """SQLite store of vtubers, their quotation categories and clips."""

    def __init__(self, path: str) -> None:
        self._lock = threading.Lock()
        self._conn = sqlite3.connect(path, check_same_thread=False)
        with self._conn:
            self._conn.execute(
                "CREATE TABLE IF NOT EXISTS first_category ("
                "id INTEGER PRIMARY KEY AUTOINCREMENT, "
                "first_category_index INTEGER NOT NULL DEFAULT 0, "
                "first_category_name TEXT NOT NULL DEFAULT '', "
                "first_category_uid TEXT NOT NULL DEFAULT '', "
                "first_category_description TEXT NOT NULL DEFAULT '', "
                "first_category_icon_path TEXT NOT NULL DEFAULT '')"
            )
            self._conn.execute(
                "CREATE TABLE IF NOT EXISTS second_category ("
                "id INTEGER PRIMARY KEY AUTOINCREMENT, "
                "second_category_index INTEGER NOT NULL DEFAULT 0, "
                "first_category_uid TEXT NOT NULL DEFAULT '', "
                "second_category_name TEXT NOT NULL DEFAULT '', "
                "second_category_author TEXT NOT NULL DEFAULT '', "
                "second_category_description TEXT NOT NULL DEFAULT '')"
            )
            self._conn.execute(
                "CREATE TABLE IF NOT EXISTS third_category ("
                "id INTEGER PRIMARY KEY AUTOINCREMENT, "
                "third_category_index INTEGER NOT NULL DEFAULT 0, "
                "second_category_index INTEGER NOT NULL DEFAULT 0, "
                "first_category_uid TEXT NOT NULL DEFAULT '', "
                "third_category_name TEXT NOT NULL DEFAULT '', "
                "third_category_path TEXT NOT NULL DEFAULT '', "
                "third_category_author TEXT NOT NULL DEFAULT '', "
                "third_category_description TEXT NOT NULL DEFAULT '')"
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
        return row[0] if row is not None else ""

    def first_category_message(self) -> str:
        """Return the numbered list of every vtuber."""
        with self._lock:
            rows = self._conn.execute(
                "SELECT first_category_index, first_category_name "
                "FROM first_category ORDER BY id"
            ).fetchall()
        return FIRST_HEADER + "".join(f"{i}. {name}\n" for i, name in rows)

    def second_category_message(self, first_index: int) -> str:
        """Return the numbered quotation categories of a vtuber, or ''."""
        with self._lock:
            uid = self._first_uid(first_index)
            rows = self._conn.execute(
                "SELECT second_category_index, second_category_name "
                "FROM second_category WHERE first_category_uid = ? ORDER BY id",
                (uid,),
            ).fetchall()
        if not rows:
            return ""
        return SECOND_HEADER + "".join(f"{i}. {name}\n" for i, name in rows)

    def third_category_message(self, first_index: int, second_index: int) -> str:
        """Return the numbered clips of one category of a vtuber, or ''."""
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
        return THIRD_HEADER + "".join(f"{i}. {name}\n" for i, name in rows)

    _THIRD_COLUMNS = (
        "third_category_index, second_category_index, first_category_uid, "
        "third_category_name, third_category_path, third_category_author, "
        "third_category_description"
    )

    def third_category(
        self, first_index: int, second_index: int, third_index: int
    ) -> ThirdCategory | None:
        """Return the clip chosen by its three list numbers, or None."""
        with self._lock:
            uid = self._first_uid(first_index)
            row = self._conn.execute(
                f"SELECT {self._THIRD_COLUMNS} FROM third_category "
                "WHERE first_category_uid = ? AND second_category_index = ? "
                "AND third_category_index = ? ORDER BY id LIMIT 1",
                (uid, second_index, third_index),
            ).fetchone()
        return ThirdCategory(*row) if row is not None else None

    def random_vtb(self, rng: random.Random) -> ThirdCategory | None:
        """Return a clip drawn uniformly, or None when there are none."""
        with self._lock:
            (count,) = self._conn.execute(
                "SELECT COUNT(*) FROM third_category"
            ).fetchone()
            if count == 0:
                return None
            row = self._conn.execute(
                f"SELECT {self._THIRD_COLUMNS} FROM third_category "
                "ORDER BY id LIMIT 1 OFFSET ?",
                (rng.randrange(count),),
            ).fetchone()
        return ThirdCategory(*row) if row is not None else None

    def first_category_by_uid(self, uid: str) -> FirstCategory | None:
        """Return the vtuber with the given uid, or None."""
        with self._lock:
            row = self._conn.execute(
                "SELECT first_category_index, first_category_name, "
                "first_category_uid, first_category_description, "
                "first_category_icon_path FROM first_category "
                "WHERE first_category_uid = ? ORDER BY id LIMIT 1",
                (uid,),
            ).fetchone()
        return FirstCategory(*row) if row is not None else None

    def store_vtb_list(self, items: Any) -> list[str]:
        """Insert or update vtubers from the list API; return their uids."""
        uids: list[str] = []
        with self._lock, self._conn:
            for i, item in enumerate(_as_list(items)):
                name = _text(_get(item, "name"))
                description = _text(_get(item, "description"))
                icon = _text(_get(item, "icon_path"))
                uid = _text(_get(item, "uid"))
                found = self._conn.execute(
                    "SELECT id FROM first_category WHERE first_category_uid = ? "
                    "ORDER BY id LIMIT 1",
                    (uid,),
                ).fetchone()
                if found is None:
                    self._conn.execute(
                        "INSERT INTO first_category (first_category_index, "
                        "first_category_name, first_category_uid, "
                        "first_category_description, first_category_icon_path) "
                        "VALUES (?, ?, ?, ?, ?)",
                        (i, name, uid, description, icon),
                    )
                else:
                    self._conn.execute(
                        "UPDATE first_category SET first_category_index = ?, "
                        "first_category_name = ?, first_category_description = ?, "
                        "first_category_icon_path = ? WHERE first_category_uid = ?",
                        (i, name, description, icon, uid),
                    )
                uids.append(uid)
        return uids

    def store_vtb_page(self, uid: str, data: Any) -> None:
        """Insert or update the categories and clips of one vtuber's page."""
        with self._lock, self._conn:
            for second_index, voice in enumerate(_as_list(_get(data, "data", "voices"))):
                name = _text(_get(voice, "categoryName"))
                author = _text(_get(voice, "author"))
                description = _text(_get(voice, "categoryDescription", "zh-CN"))
                found = self._conn.execute(
                    "SELECT id FROM second_category WHERE first_category_uid = ? "
                    "AND second_category_index = ? LIMIT 1",
                    (uid, second_index),
                ).fetchone()
                if found is None:
                    self._conn.execute(
                        "INSERT INTO second_category (second_category_index, "
                        "first_category_uid, second_category_name, "
                        "second_category_author, second_category_description) "
                        "VALUES (?, ?, ?, ?, ?)",
                        (second_index, uid, name, author, description),
                    )
                else:
                    self._conn.execute(
                        "UPDATE second_category SET second_category_name = ?, "
                        "second_category_author = ?, second_category_description = ? "
                        "WHERE first_category_uid = ? AND second_category_index = ?",
                        (name, author, description, uid, second_index),
                    )
                for third_index, clip in enumerate(_as_list(_get(voice, "voiceList"))):
                    self._store_clip(uid, second_index, third_index, clip)

    def _store_clip(self, uid: str, second_index: int, third_index: int, clip: Any) -> None:
        name = _text(_get(clip, "name"))
        description = _text(_get(clip, "description", "zh-CN"))
        path = _text(_get(clip, "path"))
        author = _text(_get(clip, "author"))
        found = self._conn.execute(
            "SELECT id FROM third_category WHERE first_category_uid = ? "
            "AND second_category_index = ? AND third_category_index = ? LIMIT 1",
            (uid, second_index, third_index),
        ).fetchone()
        if found is None:
            self._conn.execute(
                "INSERT INTO third_category (third_category_index, "
                "second_category_index, first_category_uid, third_category_name, "
                "third_category_path, third_category_author, "
                "third_category_description) VALUES (?, ?, ?, ?, ?, ?, ?)",
                (third_index, second_index, uid, name, path, author, description),
            )
        else:
            self._conn.execute(
                "UPDATE third_category SET third_category_name = ?, "
                "third_category_description = ?, third_category_path = ?, "
                "third_category_author = ? WHERE first_category_uid = ? "
                "AND second_category_index = ? AND third_category_index = ?",
                (name, description, path, author, uid, second_index, third_index),
            )

    def fetch_vtb_list(self) -> list[str]:
        """Download the vtuber list, store it and return every uid."""
        return self.store_vtb_list(_fetch_json(VTB_LIST_URL))

    def store_vtb(self, uid: str) -> None:
        """Download and store one vtuber's quotation page."""
        self.store_vtb_page(uid, _fetch_json(VTB_PAGE_URL, {"uid": uid}))

    def close(self) -> None:
        self._conn.close()