from datetime import datetime, timedelta

import pytest

from groupfun.sleep import (
    SleepDB,
    evening_text,
    is_evening,
    is_morning,
    morning_text,
    time_duration,
)


@pytest.fixture
def db(tmp_path):
    database = SleepDB(str(tmp_path / "manage.db"))
    yield database
    database.close()


def test_first_sleep_has_no_awake_time(db):
    position, awake = db.sleep(1, 100, datetime(2022, 6, 1, 22, 0))
    assert position == 1
    assert awake == timedelta(0)


def test_sleep_positions_increase(db):
    night = datetime(2022, 6, 1, 22, 0)
    first, _ = db.sleep(1, 100, night)
    second, _ = db.sleep(1, 200, night + timedelta(minutes=5))
    assert second == first + 1


def test_groups_are_counted_apart(db):
    night = datetime(2022, 6, 1, 22, 0)
    db.sleep(1, 100, night)
    position, _ = db.sleep(2, 200, night + timedelta(minutes=1))
    assert position == 1


def test_get_up_reports_time_slept(db):
    bedtime = datetime(2022, 6, 1, 23, 0)
    wake = datetime(2022, 6, 2, 7, 30)
    db.sleep(1, 100, bedtime)
    position, slept = db.get_up(1, 100, wake)
    assert slept == wake - bedtime
    assert position == 1


def test_get_up_ignores_members_still_asleep(db):
    db.sleep(1, 100, datetime(2022, 6, 1, 23, 0))
    db.sleep(1, 200, datetime(2022, 6, 1, 23, 10))
    position, _ = db.get_up(1, 100, datetime(2022, 6, 2, 7, 0))
    assert position == 1


def test_sleep_after_midnight_counts_previous_evening(db):
    db.sleep(1, 100, datetime(2022, 6, 1, 23, 0))
    position, _ = db.sleep(1, 200, datetime(2022, 6, 2, 1, 0))
    assert position == 2


def test_time_duration_splits():
    delta = timedelta(hours=5, minutes=6, seconds=7, microseconds=999)
    assert time_duration(delta) == (5, 6, 7)
    assert time_duration(timedelta(0)) == (0, 0, 0)


def test_is_morning_bounds():
    assert is_morning(datetime(2022, 6, 1, 6, 0))
    assert is_morning(datetime(2022, 6, 1, 12, 59))
    assert not is_morning(datetime(2022, 6, 1, 13, 0))
    assert not is_morning(datetime(2022, 6, 1, 5, 59))


def test_is_evening_bounds():
    assert is_evening(datetime(2022, 6, 1, 21, 0))
    assert is_evening(datetime(2022, 6, 1, 3, 59))
    assert not is_evening(datetime(2022, 6, 1, 4, 0))
    assert not is_evening(datetime(2022, 6, 1, 20, 59))


def test_morning_text_without_duration():
    assert morning_text(3, timedelta(0)) == "早安成功！你是今天第3个起床的"
    assert morning_text(3, timedelta(hours=30)) == "早安成功！你是今天第3个起床的"


def test_morning_text_with_duration():
    text = morning_text(2, timedelta(hours=8, minutes=1, seconds=2))
    assert text == "早安成功！你的睡眠时长为8时1分2秒,你是今天第2个起床的"


def test_evening_texts():
    assert evening_text(4, timedelta(0)) == "晚安成功！你是今天第4个睡觉的"
    text = evening_text(1, timedelta(hours=15, minutes=2, seconds=3))
    assert text == "晚安成功！你的清醒时长为15时2分3秒,你是今天第1个睡觉的"