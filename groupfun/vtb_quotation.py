"""Interactive choice of a vtuber quotation clip and its local caching."""

from __future__ import annotations

import os
import re
from urllib.parse import quote_plus

import requests

from groupfun.vtb_model import ThirdCategory, VtbDB

MAX_ERRORS = 3
TIMEOUT_SECONDS = 60
DOWNLOAD_TIMEOUT = 60

MSG_TOO_MANY = "输入错误太多,请重新发指令"
MSG_NOT_NUMBER = "请输入正确的序号，三次输入错误，指令可退出重输"
MSG_EMPTY_CHOICE = "你选择的序号没有内容，请重新选择，三次输入错误，指令可退出重输"
MSG_NO_CLIP = "没有内容请重新选择，三次输入错误，指令可退出重输"
MSG_EXPIRED = "vtb语录指令过期"

_LAST_SEGMENT = re.compile(r".*/(.*)")
_INTEGER = re.compile(r"[+-]?[0-9]+")

_DOWNLOAD_HEADERS = {
    "Content-Type": "application/x-www-form-urlencoded",
    "User-Agent": "Mozilla/5.0 (Windows NT 6.1; WOW64; rv:6.0) Gecko/20100101 Firefox/6.0",
}


def escape_record_url(url: str) -> str:
    """Percent-escape the last path segment of a clip URL."""
    match = _LAST_SEGMENT.search(url)
    if match is None:
        return url
    last = match.group(1)
    url = url.replace(last, quote_plus(last, safe=""))
    return url.replace("+", "%20")


def _extension(url: str) -> str:
    base = url.rsplit("/", 1)[-1]
    dot = base.rfind(".")
    return base[dot:] if dot >= 0 else ""


def record_file_name(store: str, first: int, second: int, third: int, url: str) -> str:
    """Return the cache path of a clip, keeping the URL's extension."""
    return os.path.join(store, f"{first}-{second}-{third}{_extension(url)}")


def download_record(path: str, url: str) -> None:
    """Download a clip to ``path`` unless it is already there."""
    if os.path.exists(path):
        return
    response = requests.get(url, headers=_DOWNLOAD_HEADERS, timeout=DOWNLOAD_TIMEOUT)
    with open(path, "wb") as out:
        out.write(response.content)


class QuotationSession:
    """Three-step choice: vtuber, category, clip.

    ``prompt`` is the first list to show; ``feed`` takes each reply and
    returns the messages to send back. When a clip is chosen, ``result``
    and ``record_url`` are set and ``finished`` becomes true.
    """

    def __init__(self, db: VtbDB) -> None:
        self._db = db
        self.step = 0
        self.errors = 0
        self.indexes = [0, 0, 0]
        self.finished = False
        self.result: ThirdCategory | None = None
        self.record_url = ""
        self.prompt = db.first_category_message()

    def feed(self, text: str) -> list[str]:
        """Handle one reply and return what to answer."""
        if self.finished:
            raise RuntimeError("quotation session is finished")
        if self.errors >= MAX_ERRORS:
            self.finished = True
            return [MSG_TOO_MANY]
        if not _INTEGER.fullmatch(text):
            self.errors += 1
            return [MSG_NOT_NUMBER]
        num = int(text)
        if self.step == 0:
            return self._choose_vtuber(num)
        if self.step == 1:
            return self._choose_category(num)
        return self._choose_clip(num)

    def _choose_vtuber(self, num: int) -> list[str]:
        self.indexes[0] = num
        message = self._db.second_category_message(num)
        if not message:
            self.errors += 1
            return [MSG_EMPTY_CHOICE, self._db.first_category_message()]
        self.step = 1
        return [message]

    def _choose_category(self, num: int) -> list[str]:
        self.indexes[1] = num
        message = self._db.third_category_message(self.indexes[0], num)
        if not message:
            self.errors += 1
            return [
                MSG_EMPTY_CHOICE,
                self._db.second_category_message(self.indexes[0]),
            ]
        self.step = 2
        return [message]

    def _choose_clip(self, num: int) -> list[str]:
        self.indexes[2] = num
        clip = self._db.third_category(*self.indexes)
        if clip is None or not clip.path:
            self.errors += 1
            self.step = 1
            return [MSG_NO_CLIP, self._db.first_category_message()]
        self.result = clip
        self.record_url = escape_record_url(clip.path)
        self.finished = True
        return [f"请欣赏《{clip.name}》"]