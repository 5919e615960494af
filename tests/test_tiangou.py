import random
import sqlite3

import pytest

from groupfun.tiangou import TiangouDiary

LINES = ["今天也在等你回消息", "你说晚安，我说好", "我又去了你楼下"]


@pytest.fixture
def db_path(tmp_path):
    path = str(tmp_path / "tiangou.db")
    conn = sqlite3.connect(path)
    conn.execute("CREATE TABLE tiangou (id INTEGER PRIMARY KEY, text TEXT)")
    conn.executemany("INSERT INTO tiangou (text) VALUES (?)", [(t,) for t in LINES])
    conn.commit()
    conn.close()
    return path


def test_count(db_path):
    with TiangouDiary(db_path) as diary:
        assert diary.count() == len(LINES)


def test_pick_covers_every_line(db_path):
    rng = random.Random(7)
    with TiangouDiary(db_path) as diary:
        seen = {diary.pick(rng) for _ in range(200)}
    assert seen == set(LINES)


def test_pick_is_reproducible(db_path):
    with TiangouDiary(db_path) as diary:
        a = [diary.pick(random.Random(3)) for _ in range(3)]
    assert len(set(a)) == 1
    assert a[0] in LINES


def test_empty_database(tmp_path):
    with TiangouDiary(str(tmp_path / "empty.db")) as diary:
        assert diary.count() == 0
        with pytest.raises(LookupError):
            diary.pick(random.Random(0))