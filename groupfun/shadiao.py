"""Silly texts fetched from public joke, quote and comment services."""

from __future__ import annotations

import json
from typing import Any

import lxml.html
import requests

CHP_URL = "https://api.shadiao.app/chp"
DU_URL = "https://api.shadiao.app/du"
PYQ_URL = "https://api.shadiao.app/pyq"
YDUANZI_URL = "http://www.yduanzi.com/duanzi/getduanzi"
CHAYI_URL = "https://api.lovelive.tools/api/SweetNothings/Web/0"
GANHAI_URL = "https://api.lovelive.tools/api/SweetNothings/Web/1"
ERGOFABULOUS_URL = "https://ergofabulous.org/luther/?"
WANGYIYUN_URL = "https://api.gmit.vip/Api/HotComments?format=text"

UA = (
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/96.0.4664.110 Safari/537.36"
)
SD_REFERER = "https://api.shadiao.app/"
YDUANZI_REFERER = "http://www.yduanzi.com/?utm_source=shadiao.app"
LOVELIVE_REFERER = "https://lovelive.tools/"
WANGYIYUN_REFERER = "https://api.gmit.vip/"

ERGOFABULOUS_XPATH = '//main[@role="main"]/p[@class="larger"]/text()'
TIMEOUT = 30

SD_KINDS = {"哄我": CHP_URL, "来碗毒鸡汤": DU_URL, "发个朋友圈": PYQ_URL}
LOVELIVE_KINDS = {"来碗绿茶": CHAYI_URL, "渣我": GANHAI_URL}
DUANZI_KIND = "讲个段子"


def _request(url: str, method: str = "GET", referer: str = "") -> bytes:
    headers = {"User-Agent": UA}
    if referer:
        headers["Referer"] = referer
    response = requests.request(method, url, headers=headers, timeout=TIMEOUT)
    response.raise_for_status()
    return response.content


def _json_path(data: str | bytes, *keys: str) -> str:
    """Follow ``keys`` into a JSON document; missing values give ''."""
    try:
        value: Any = json.loads(data)
    except ValueError:
        return ""
    for key in keys:
        if not isinstance(value, dict):
            return ""
        value = value.get(key)
    if value is None:
        return ""
    if isinstance(value, str):
        return value
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (dict, list)):
        return json.dumps(value, ensure_ascii=False, separators=(",", ":"))
    return str(value)


def parse_duanzi(data: str | bytes) -> str:
    """Return the joke of a duanzi response with HTML line breaks undone."""
    return _json_path(data, "duanzi").replace("<br>", "\n")


def fetch_text(kind: str) -> str:
    """Fetch the text for one of the keyword commands."""
    if kind in SD_KINDS:
        return _json_path(_request(SD_KINDS[kind], referer=SD_REFERER), "data", "text")
    if kind in LOVELIVE_KINDS:
        data = _request(LOVELIVE_KINDS[kind], referer=LOVELIVE_REFERER)
        return _json_path(data, "returnObj", "content")
    if kind == DUANZI_KIND:
        return parse_duanzi(_request(YDUANZI_URL, "POST", YDUANZI_REFERER))
    raise ValueError(f"unknown kind: {kind!r}")


def ergofabulous_insult() -> str:
    """Fetch one insult from the Luther insult generator."""
    response = requests.get(ERGOFABULOUS_URL, timeout=TIMEOUT)
    response.raise_for_status()
    nodes = lxml.html.fromstring(response.content).xpath(ERGOFABULOUS_XPATH)
    if not nodes:
        raise LookupError("no insult found on the page")
    return str(nodes[0])


def hot_comment() -> str:
    """Fetch one popular music comment as plain text."""
    data = _request(WANGYIYUN_URL, referer=WANGYIYUN_REFERER)
    return data.decode("utf-8", errors="replace")