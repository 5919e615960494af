"""Daily sign-in scores with levels."""

from __future__ import annotations

import sqlite3
import threading
from dataclasses import dataclass
from datetime import datetime

SCORE_MAX = 120
SIGN_IN_MAX = 1
LEVELS = (0, 1, 2, 5, 10, 20, 35, 55, 75, 100, 120)


def _stamp(moment: datetime) -> str:
    return moment.isoformat(sep=" ", timespec="microseconds")


@dataclass(frozen=True)
class SignInRecord:
    """How often a user signed in and when the count last changed."""

    uid: int
    count: int
    updated_at: datetime


class ScoreDB:
    """SQLite store of scores and sign-in counts keyed by user."""

    def __init__(self, path: str) -> None:
        self._lock = threading.Lock()
        self._conn = sqlite3.connect(path, check_same_thread=False)
        with self._conn:
            self._conn.execute(
                "CREATE TABLE IF NOT EXISTS score "
                "(uid INTEGER PRIMARY KEY, score INTEGER NOT NULL DEFAULT 0)"
            )
            self._conn.execute(
                "CREATE TABLE IF NOT EXISTS sign_in "
                "(uid INTEGER PRIMARY KEY, count INTEGER NOT NULL DEFAULT 0, "
                "updated_at TEXT NOT NULL)"
            )

    def __enter__(self) -> ScoreDB:
        return self

    def __exit__(self, *exc: object) -> None:
        self.close()

    def get_score(self, uid: int) -> int:
        """Return the user's score, creating a zero entry if there is none."""
        with self._lock, self._conn:
            row = self._conn.execute(
                "SELECT score FROM score WHERE uid = ?", (uid,)
            ).fetchone()
            if row is not None:
                return row[0]
            self._conn.execute("INSERT INTO score (uid, score) VALUES (?, 0)", (uid,))
            return 0

    def set_score(self, uid: int, score: int) -> None:
        """Insert or update the user's score."""
        with self._lock, self._conn:
            self._conn.execute(
                "INSERT INTO score (uid, score) VALUES (?, ?) "
                "ON CONFLICT(uid) DO UPDATE SET score = excluded.score",
                (uid, score),
            )

    def get_sign_in(self, uid: int) -> SignInRecord:
        """Return the user's sign-in record, creating one with count zero."""
        with self._lock, self._conn:
            row = self._conn.execute(
                "SELECT count, updated_at FROM sign_in WHERE uid = ?", (uid,)
            ).fetchone()
            if row is not None:
                return SignInRecord(uid, row[0], datetime.fromisoformat(row[1]))
            now = datetime.now()
            self._conn.execute(
                "INSERT INTO sign_in (uid, count, updated_at) VALUES (?, 0, ?)",
                (uid, _stamp(now)),
            )
            return SignInRecord(uid, 0, now)

    def set_sign_in_count(self, uid: int, count: int) -> None:
        """Insert or update the user's sign-in count, stamping it with now."""
        now = _stamp(datetime.now())
        with self._lock, self._conn:
            self._conn.execute(
                "INSERT INTO sign_in (uid, count, updated_at) VALUES (?, ?, ?) "
                "ON CONFLICT(uid) DO UPDATE SET count = excluded.count, "
                "updated_at = excluded.updated_at",
                (uid, count, now),
            )

    def top_scores(self, n: int) -> list[tuple[int, int]]:
        """Return up to ``n`` (uid, score) pairs, highest score first."""
        with self._lock:
            rows = self._conn.execute(
                "SELECT uid, score FROM score ORDER BY score DESC LIMIT ?", (n,)
            ).fetchall()
        return [(uid, score) for uid, score in rows]

    def close(self) -> None:
        self._conn.close()


def get_level(count: int) -> int:
    """Return the level reached with ``count`` points, or -1 outside the table."""
    for level, threshold in enumerate(LEVELS):
        if count == threshold:
            return level
        if count < threshold:
            return level - 1
    return -1


def next_level_score(level: int) -> int:
    """Return the score needed for the level after ``level``."""
    if level < len(LEVELS) - 1:
        return LEVELS[level + 1]
    return SCORE_MAX


def get_hour_word(moment: datetime) -> str:
    """Return the greeting for the time of day."""
    h = moment.hour
    if 6 <= h < 12:
        return "早上好"
    if 12 <= h < 14:
        return "中午好"
    if 14 <= h < 19:
        return "下午好"
    if 19 <= h < 24:
        return "晚上好"
    if 0 <= h < 6:
        return "凌晨好"
    return ""