"""Random entries from a stored collection of lovesick diary lines."""

from __future__ import annotations

import random
import sqlite3
import threading


class TiangouDiary:
    """SQLite table of diary lines to draw from."""

    def __init__(self, path: str) -> None:
        self._lock = threading.Lock()
        self._conn = sqlite3.connect(path, check_same_thread=False)
        with self._conn:
            self._conn.execute(
                "CREATE TABLE IF NOT EXISTS tiangou "
                "(id INTEGER PRIMARY KEY, text TEXT NOT NULL DEFAULT '')"
            )

    def __enter__(self) -> TiangouDiary:
        return self

    def __exit__(self, *exc: object) -> None:
        self.close()

    def count(self) -> int:
        """Return how many lines are stored."""
        with self._lock:
            (n,) = self._conn.execute("SELECT COUNT(*) FROM tiangou").fetchone()
        return n

    def pick(self, rng: random.Random) -> str:
        """Return one line drawn uniformly; raises LookupError when empty."""
        with self._lock:
            (n,) = self._conn.execute("SELECT COUNT(*) FROM tiangou").fetchone()
            if n == 0:
                raise LookupError("no diary entries")
            (text,) = self._conn.execute(
                "SELECT text FROM tiangou ORDER BY id LIMIT 1 OFFSET ?",
                (rng.randrange(n),),
            ).fetchone()
        return text

    def close(self) -> None:
        self._conn.close()