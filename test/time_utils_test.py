import pytest
from datetime import date, datetime

from utils.time_utils import (
    InvalidTimeFormat,
    day_of_week_iso,
    duration_minutes,
    is_time_in_range,
    is_valid_time_format,
    is_weekend,
    is_work_day,
    minutes_to_time,
    parse_work_days,
    safe_duration_minutes,
    safe_time_to_minutes,
    time_to_minutes,
)


def test_time_to_minutes():
    assert time_to_minutes("00:00") == 0
    assert time_to_minutes("09:30") == 570
    assert time_to_minutes("23:59") == 1439


@pytest.mark.parametrize("clock", ["9:30", "24:00", "12:60", "ab:cd", "", "08:00:00", None])
def test_time_to_minutes_rejects_malformed(clock):
    with pytest.raises(InvalidTimeFormat):
        time_to_minutes(clock)
    assert not is_valid_time_format(clock)


def test_safe_time_to_minutes_degrades_to_zero():
    assert safe_time_to_minutes("bad") == 0
    assert safe_time_to_minutes(None) == 0
    assert safe_time_to_minutes("07:15") == 435


def test_minutes_to_time():
    assert minutes_to_time(0) == "00:00"
    assert minutes_to_time(75) == "01:15"
    assert minutes_to_time(1500) == "25:00"
    with pytest.raises(ValueError):
        minutes_to_time(-1)


def test_duration_minutes():
    assert duration_minutes("08:00", "17:00") == 540
    assert duration_minutes("10:00", "10:00") == 0


def test_duration_minutes_crosses_midnight():
    assert duration_minutes("22:00", "06:00") == 480
    assert duration_minutes("20:37", "00:00") == 203


def test_safe_duration_minutes():
    assert safe_duration_minutes("xx", "10:00") == 0
    assert safe_duration_minutes("12:00", "13:00") == 60


def test_day_of_week_iso():
    assert day_of_week_iso(date(2024, 1, 1)) == 1
    assert day_of_week_iso(date(2024, 1, 7)) == 7
    assert day_of_week_iso(datetime(2024, 1, 3, 10, 0)) == 3
    assert day_of_week_iso("2024-01-03") == 3


def test_is_weekend():
    assert is_weekend(date(2024, 1, 6))
    assert is_weekend(date(2024, 1, 7))
    assert not is_weekend(date(2024, 1, 5))


def test_is_time_in_range():
    assert is_time_in_range("10:00", "08:00", "17:00")
    assert is_time_in_range("17:00", "08:00", "17:00")
    assert not is_time_in_range("17:01", "08:00", "17:00")
    assert not is_time_in_range("bad", "08:00", "17:00")


def test_is_time_in_overnight_range():
    assert is_time_in_range("23:30", "22:00", "05:00")
    assert is_time_in_range("04:00", "22:00", "05:00")
    assert not is_time_in_range("12:00", "22:00", "05:00")


def test_parse_work_days():
    assert parse_work_days("[1, 2, 3, 8]") == [1, 2, 3]
    assert parse_work_days(["1", "x", 7]) == [1, 7]
    assert parse_work_days("not json") == []
    assert parse_work_days(None) == []


def test_is_work_day():
    assert is_work_day(date(2024, 1, 1), [1, 2, 3, 4, 5])
    assert not is_work_day(date(2024, 1, 6), [1, 2, 3, 4, 5])
