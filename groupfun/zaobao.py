"""Today's news picture, cached for the day."""

from __future__ import annotations

import json
import threading
from dataclasses import dataclass, field
from datetime import datetime, timedelta

import requests

API = "http://api.soyiji.com/news_jpg"
REFERER = "safe.soyiji.com"
UA = (
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/87.0.4280.88 Safari/537.36 Edg/87.0.664.66"
)
TIMEOUT = 30
MAX_AGE = timedelta(hours=8)


def _request(url: str, referer: str = "") -> bytes:
    headers = {"User-Agent": UA}
    if referer:
        headers["Referer"] = referer
    response = requests.get(url, headers=headers, timeout=TIMEOUT)
    response.raise_for_status()
    return response.content


def _picture_url(data: bytes) -> str:
    try:
        value = json.loads(data)
    except ValueError:
        return ""
    url = value.get("url") if isinstance(value, dict) else None
    return url if isinstance(url, str) else ""


@dataclass
class NewsCache:
    """Holds the news picture until it is too old or the day changes."""

    max_age: timedelta = MAX_AGE
    data: bytes | None = None
    fetched_at: datetime | None = None
    _lock: threading.Lock = field(
        default_factory=threading.Lock, repr=False, compare=False
    )

    def _fresh(self, now: datetime) -> bool:
        return (
            self.data is not None
            and self.fetched_at is not None
            and now - self.fetched_at <= self.max_age
            and now.day == self.fetched_at.day
        )

    def get(self, now: datetime | None = None) -> bytes:
        """Return today's picture, downloading it when the cache is stale."""
        now = now or datetime.now()
        with self._lock:
            if self._fresh(now):
                assert self.data is not None
                return self.data
            url = _picture_url(_request(API))
            try:
                self.data = _request(url, REFERER)
            except Exception:
                self.data = None
                raise
            self.fetched_at = now
            return self.data