"""Daily group marriage registry: one partner per member per day."""

from __future__ import annotations

import sqlite3
import threading
import time
from collections.abc import Callable, Iterable, Mapping
from dataclasses import dataclass, field
from datetime import datetime
from enum import IntEnum
from random import Random

DATE_FORMAT = "%Y/%m/%d"
NAME_WIDTH_LIMIT = 350
RECENT_MEMBERS = 30

MSG_TOGETHER = "笨蛋~你们明明已经在一起了啊w"
MSG_HAS_WIFE = "笨蛋~你家里还有个吃白饭的w"
MSG_IS_BOTTOM = "该是0就是0，当0有什么不好"
MSG_SELF_NOBLE = "今天的你是单身贵族噢"
MSG_TARGET_TAKEN = "他有别的女人了，你该放下了"
MSG_PURE_LOVE = "这是一个纯爱的世界，拒绝NTR"
MSG_TARGET_NOBLE = "今天的ta是单身贵族噢"
MSG_TARGET_SINGLE = "ta现在还是单身哦，快向ta表白吧！"
MSG_SELF_NOBLE_CP = "今天的你是单身贵族哦"
MSG_NO_CONCUBINE = "打灭，不给纳小妾！"
MSG_TARGET_NOBLE_CP = "今天的ta是单身贵族哦"
MSG_NOBODY_LEFT = "~群里没有ta人是单身了哦 明天再试试叭"


def _today() -> str:
    return datetime.now().strftime(DATE_FORMAT)


class Status(IntEnum):
    """Where a member stands in today's registry."""

    TARGET = 0
    USER = 1
    SINGLE = 3


@dataclass(frozen=True)
class MarriageRecord:
    """One registered couple in a group."""

    user: int
    target: int
    username: str
    targetname: str
    updatetime: str


class MarriageRegistry:
    """SQLite-backed registry of couples, kept per group and per day."""

    def __init__(self, path: str) -> None:
        self._lock = threading.Lock()
        self._conn = sqlite3.connect(path, check_same_thread=False)
        with self._conn:
            self._conn.execute(
                "CREATE TABLE IF NOT EXISTS updateinfo "
                "(gid INTEGER PRIMARY KEY, updatetime TEXT NOT NULL)"
            )
            self._conn.execute(
                "CREATE TABLE IF NOT EXISTS marriage ("
                "gid INTEGER NOT NULL, user INTEGER NOT NULL, "
                "target INTEGER NOT NULL, username TEXT NOT NULL, "
                "targetname TEXT NOT NULL, updatetime TEXT NOT NULL, "
                "PRIMARY KEY (gid, user))"
            )

    def __enter__(self) -> MarriageRegistry:
        return self

    def __exit__(self, *exc: object) -> None:
        self.close()

    def check_update(self, gid: int) -> str:
        """Return the day the group was last reset, recording today if unknown."""
        with self._lock, self._conn:
            row = self._conn.execute(
                "SELECT updatetime FROM updateinfo WHERE gid = ?", (gid,)
            ).fetchone()
            if row is not None:
                return row[0]
            today = _today()
            self._conn.execute(
                "INSERT OR REPLACE INTO updateinfo (gid, updatetime) VALUES (?, ?)",
                (gid, today),
            )
            return today

    def reset(self, gid: int | str) -> None:
        """Clear one group's couples, or every group's for ``"ALL"``."""
        today = _today()
        with self._lock, self._conn:
            if str(gid) == "ALL":
                gids = {
                    row[0]
                    for row in self._conn.execute(
                        "SELECT gid FROM updateinfo UNION SELECT gid FROM marriage"
                    )
                }
                self._conn.execute("DELETE FROM marriage")
            else:
                group = int(gid)
                self._conn.execute("DELETE FROM marriage WHERE gid = ?", (group,))
                gids = {group}
            self._conn.executemany(
                "INSERT OR REPLACE INTO updateinfo (gid, updatetime) VALUES (?, ?)",
                [(g, today) for g in gids],
            )

    def divorce_wife(self, gid: int, wife: int) -> None:
        """Remove the couple whose target is ``wife``."""
        with self._lock, self._conn:
            self._conn.execute(
                "DELETE FROM marriage WHERE gid = ? AND target = ?", (gid, wife)
            )

    def divorce_husband(self, gid: int, husband: int) -> None:
        """Remove the couple whose target is ``husband``."""
        with self._lock, self._conn:
            self._conn.execute(
                "DELETE FROM marriage WHERE gid = ? AND target = ?", (gid, husband)
            )

    def remarry(
        self, gid: int, uid: int, target: int, username: str, targetname: str
    ) -> None:
        """Register ``uid`` with ``target`` unless both already head a couple."""
        with self._lock, self._conn:
            if self._find_user(gid, uid) and self._find_user(gid, target):
                return
            self._insert(gid, uid, target, username, targetname)

    def roster(self, gid: int) -> list[MarriageRecord]:
        """Return every couple of the group, ordered by the registering user."""
        with self._lock:
            rows = self._conn.execute(
                "SELECT user, target, username, targetname, updatetime "
                "FROM marriage WHERE gid = ? ORDER BY user",
                (gid,),
            ).fetchall()
        return [MarriageRecord(*row) for row in rows]

    def lookup(self, gid: int, uid: int) -> tuple[MarriageRecord | None, Status]:
        """Find the couple ``uid`` belongs to and which side of it they are."""
        with self._lock:
            record = self._find_user(gid, uid)
            if record is not None:
                return record, Status.USER
            row = self._conn.execute(
                "SELECT user, target, username, targetname, updatetime "
                "FROM marriage WHERE gid = ? AND target = ? ORDER BY rowid LIMIT 1",
                (gid, uid),
            ).fetchone()
        if row is not None:
            return MarriageRecord(*row), Status.TARGET
        return None, Status.SINGLE

    def register(
        self, gid: int, uid: int, target: int, username: str, targetname: str
    ) -> None:
        """Record ``uid`` as married to ``target`` today."""
        with self._lock, self._conn:
            self._insert(gid, uid, target, username, targetname)

    def close(self) -> None:
        self._conn.close()

    def _find_user(self, gid: int, uid: int) -> MarriageRecord | None:
        row = self._conn.execute(
            "SELECT user, target, username, targetname, updatetime "
            "FROM marriage WHERE gid = ? AND user = ?",
            (gid, uid),
        ).fetchone()
        return MarriageRecord(*row) if row is not None else None

    def _insert(
        self, gid: int, uid: int, target: int, username: str, targetname: str
    ) -> None:
        self._conn.execute(
            "INSERT OR REPLACE INTO marriage "
            "(gid, user, target, username, targetname, updatetime) "
            "VALUES (?, ?, ?, ?, ?, ?)",
            (gid, uid, target, username, targetname, _today()),
        )


@dataclass
class SkillCooldown:
    """Allows one use per key in every ``interval`` seconds."""

    interval: float = 12 * 3600.0
    clock: Callable[[], float] = time.monotonic
    _last: dict[str, float] = field(default_factory=dict, repr=False)
    _lock: threading.Lock = field(default_factory=threading.Lock, repr=False)

    def try_acquire(self, key: str) -> bool:
        """Use the skill for ``key`` if it is off cooldown."""
        now = self.clock()
        with self._lock:
            last = self._last.get(key)
            if last is not None and now - last < self.interval:
                return False
            self._last[key] = now
            return True


def slice_name(name: str, measure: Callable[[str], float]) -> str:
    """Shorten a name whose drawn width would exceed the column width."""
    width = 0
    last_fit = 0
    for i, ch in enumerate(name):
        width += int(measure(ch))
        if width > NAME_WIDTH_LIMIT:
            break
        last_fit = i
    if width > NAME_WIDTH_LIMIT:
        return name[: max(last_fit - 1, 0)] + "......"
    return name


def _refresh(registry: MarriageRegistry, gid: int) -> bool:
    """Reset the group if its records are from an earlier day."""
    if registry.check_update(gid) != _today():
        registry.reset(gid)
        return True
    return False


def _target_of(record: MarriageRecord | None) -> int:
    return record.target if record is not None else 0


def check_single(
    registry: MarriageRegistry, gid: int, uid: int, fiancee: int
) -> str | None:
    """Check both sides may marry; return the refusal, or None if allowed."""
    if _refresh(registry, gid):
        return None
    own, own_status = registry.lookup(gid, uid)
    other, other_status = registry.lookup(gid, fiancee)
    if own_status is Status.SINGLE and other_status is Status.SINGLE:
        return None
    if _target_of(own) == fiancee:
        return MSG_TOGETHER
    if own_status is Status.USER:
        return MSG_HAS_WIFE
    if own_status is Status.TARGET:
        return MSG_IS_BOTTOM
    if own_status is not Status.SINGLE and _target_of(own) == 0:
        return MSG_SELF_NOBLE
    if other_status is Status.USER:
        return MSG_TARGET_TAKEN
    if other_status is Status.TARGET:
        return MSG_PURE_LOVE
    if other_status is not Status.SINGLE and _target_of(other) == 0:
        return MSG_TARGET_NOBLE
    return None


def check_mistress(
    registry: MarriageRegistry, gid: int, uid: int, fiancee: int
) -> str | None:
    """Check ``uid`` may break into ``fiancee``'s couple; return the refusal or None."""
    if _refresh(registry, gid):
        return MSG_TARGET_SINGLE
    if fiancee == uid:
        return None
    own, own_status = registry.lookup(gid, uid)
    if _target_of(own) == fiancee:
        return MSG_TOGETHER
    if own_status is not Status.SINGLE and _target_of(own) == 0:
        return MSG_SELF_NOBLE_CP
    if own_status is Status.USER:
        return MSG_NO_CONCUBINE
    if own_status is Status.TARGET:
        return MSG_IS_BOTTOM
    other, other_status = registry.lookup(gid, fiancee)
    if other_status is Status.SINGLE:
        return MSG_TARGET_SINGLE
    if _target_of(other) == 0:
        return MSG_TARGET_NOBLE_CP
    return None


def pick_bride(
    registry: MarriageRegistry,
    gid: int,
    uid: int,
    members: Iterable[Mapping[str, int]],
    rng: Random,
) -> int:
    """Draw a single member among the 30 most recent speakers.

    The draw may land on ``uid`` itself. Raises LookupError when nobody
    else is left single.
    """
    recent = sorted(members, key=lambda m: m.get("last_sent_time", 0))
    recent = recent[max(0, len(recent) - RECENT_MEMBERS) :]
    candidates = [
        m["user_id"]
        for m in recent
        if registry.lookup(gid, m["user_id"])[1] is Status.SINGLE
    ]
    if len(candidates) <= 1:
        raise LookupError(MSG_NOBODY_LEFT)
    return candidates[rng.randrange(len(candidates))]