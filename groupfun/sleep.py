"""Good-morning and good-night tracking per group."""

from __future__ import annotations

import sqlite3
import threading
from datetime import datetime, timedelta

_US_SECOND = 1_000_000
_US_MINUTE = 60 * _US_SECOND
_US_HOUR = 60 * _US_MINUTE


def _stamp(moment: datetime) -> str:
    return moment.isoformat(sep=" ", timespec="microseconds")


class SleepDB:
    """SQLite store of each member's last sleep or wake time."""

    def __init__(self, path: str) -> None:
        self._lock = threading.Lock()
        self._conn = sqlite3.connect(path, check_same_thread=False)
        with self._conn:
            self._conn.execute(
                "CREATE TABLE IF NOT EXISTS sleep_manage ("
                "id INTEGER PRIMARY KEY AUTOINCREMENT, "
                "group_id INTEGER NOT NULL, user_id INTEGER NOT NULL, "
                "sleep_time TEXT NOT NULL)"
            )

    def __enter__(self) -> SleepDB:
        return self

    def __exit__(self, *exc: object) -> None:
        self.close()

    def _touch(self, gid: int, uid: int, now: datetime, since: datetime) -> tuple[int, timedelta]:
        with self._lock, self._conn:
            row = self._conn.execute(
                "SELECT sleep_time FROM sleep_manage "
                "WHERE group_id = ? AND user_id = ? ORDER BY id LIMIT 1",
                (gid, uid),
            ).fetchone()
            elapsed = timedelta(0)
            if row is None:
                self._conn.execute(
                    "INSERT INTO sleep_manage (group_id, user_id, sleep_time) "
                    "VALUES (?, ?, ?)",
                    (gid, uid, _stamp(now)),
                )
            else:
                elapsed = now - datetime.fromisoformat(row[0])
                self._conn.execute(
                    "UPDATE sleep_manage SET sleep_time = ? "
                    "WHERE group_id = ? AND user_id = ?",
                    (_stamp(now), gid, uid),
                )
            (position,) = self._conn.execute(
                "SELECT COUNT(*) FROM sleep_manage "
                "WHERE group_id = ? AND sleep_time <= ? AND sleep_time >= ?",
                (gid, _stamp(now), _stamp(since)),
            ).fetchone()
        return position, elapsed

    def sleep(self, gid: int, uid: int, now: datetime) -> tuple[int, timedelta]:
        """Record going to sleep; return tonight's rank and time spent awake."""
        if now.hour >= 21:
            since = now.replace(hour=21, minute=0, second=0)
        elif now.hour <= 3:
            since = (now - timedelta(days=1)).replace(hour=21, minute=0, second=0)
        else:
            since = datetime.min
        return self._touch(gid, uid, now, since)

    def get_up(self, gid: int, uid: int, now: datetime) -> tuple[int, timedelta]:
        """Record getting up; return this morning's rank and time slept."""
        since = now.replace(hour=6, minute=0, second=0)
        return self._touch(gid, uid, now, since)

    def close(self) -> None:
        self._conn.close()


def _trunc_div(a: int, b: int) -> int:
    q = abs(a) // b
    return q if a >= 0 else -q


def time_duration(delta: timedelta) -> tuple[int, int, int]:
    """Split a duration into whole hours, minutes and seconds."""
    us = (delta.days * 86400 + delta.seconds) * _US_SECOND + delta.microseconds
    hour = _trunc_div(us, _US_HOUR)
    minute = _trunc_div(us - hour * _US_HOUR, _US_MINUTE)
    second = _trunc_div(us - hour * _US_HOUR - minute * _US_MINUTE, _US_SECOND)
    return hour, minute, second


def is_morning(moment: datetime) -> bool:
    """Good mornings count from 6 to 12 o'clock."""
    return 6 <= moment.hour <= 12


def is_evening(moment: datetime) -> bool:
    """Good nights count from 21 o'clock to 3 o'clock."""
    return moment.hour >= 21 or moment.hour <= 3


def _unknown(hour: int, minute: int, second: int) -> bool:
    return (hour == 0 and minute == 0 and second == 0) or hour >= 24


def morning_text(position: int, delta: timedelta) -> str:
    """Reply to a good morning."""
    hour, minute, second = time_duration(delta)
    if _unknown(hour, minute, second):
        return f"早安成功！你是今天第{position}个起床的"
    return (
        f"早安成功！你的睡眠时长为{hour}时{minute}分{second}秒,"
        f"你是今天第{position}个起床的"
    )


def evening_text(position: int, delta: timedelta) -> str:
    """Reply to a good night."""
    hour, minute, second = time_duration(delta)
    if _unknown(hour, minute, second):
        return f"晚安成功！你是今天第{position}个睡觉的"
    return (
        f"晚安成功！你的清醒时长为{hour}时{minute}分{second}秒,"
        f"你是今天第{position}个睡觉的"
    )