import json
import re
from datetime import date, datetime
from typing import Iterable, List, Optional, Union

MINUTES_PER_DAY = 24 * 60

CLOCK_PATTERN = re.compile(r"^(\d{2}):(\d{2})$")


class InvalidTimeFormat(ValueError):
    pass


def parse_time(clock: str) -> tuple:
    match = CLOCK_PATTERN.match(clock.strip()) if isinstance(clock, str) else None
    if not match:
        raise InvalidTimeFormat(f"Invalid time format: {clock!r}")
    hours, minutes = int(match.group(1)), int(match.group(2))
    if hours > 23 or minutes > 59:
        raise InvalidTimeFormat(f"Time out of range: {clock!r}")
    return hours, minutes


def is_valid_time_format(clock: Optional[str]) -> bool:
    try:
        parse_time(clock)
    except InvalidTimeFormat:
        return False
    return True


def time_to_minutes(clock: str) -> int:
    hours, minutes = parse_time(clock)
    return hours * 60 + minutes


def safe_time_to_minutes(clock: Optional[str]) -> int:
    # Malformed input counts as midnight
    try:
        return time_to_minutes(clock)
    except InvalidTimeFormat:
        return 0


def minutes_to_time(minutes: int) -> str:
    """Render a minute count as HH:MM. Hours may exceed 23 for aggregated durations."""
    if minutes < 0:
        raise ValueError(f"Negative minutes: {minutes}")
    return f"{minutes // 60:02d}:{minutes % 60:02d}"


def duration_minutes(start: str, end: str) -> int:
    start_minutes = time_to_minutes(start)
    end_minutes = time_to_minutes(end)
    if end_minutes < start_minutes:
        end_minutes += MINUTES_PER_DAY
    return end_minutes - start_minutes


def safe_duration_minutes(start: Optional[str], end: Optional[str]) -> int:
    try:
        return duration_minutes(start, end)
    except InvalidTimeFormat:
        return 0


def is_time_in_range(clock: str, start: str, end: str) -> bool:
    if not (is_valid_time_format(clock) and is_valid_time_format(start) and is_valid_time_format(end)):
        return False

    target = time_to_minutes(clock)
    range_start = time_to_minutes(start)
    range_end = time_to_minutes(end)

    # Overnight range, e.g. 22:00-05:00
    if range_end < range_start:
        range_end += MINUTES_PER_DAY
        if target < range_start:
            target += MINUTES_PER_DAY

    return range_start <= target <= range_end


def to_date(value: Union[date, datetime, str]) -> date:
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    return date.fromisoformat(value[:10])


def day_of_week_iso(value: Union[date, datetime, str]) -> int:
    return to_date(value).isoweekday()


def is_weekend(value: Union[date, datetime, str]) -> bool:
    return day_of_week_iso(value) in (6, 7)


def parse_work_days(value) -> List[int]:
    if isinstance(value, str):
        try:
            value = json.loads(value)
        except ValueError:
            return []
    if not isinstance(value, Iterable):
        return []

    days = []
    for item in value:
        try:
            day = int(item)
        except (TypeError, ValueError):
            continue
        if 1 <= day <= 7:
            days.append(day)
    return days


def is_work_day(value: Union[date, datetime, str], work_days: Iterable[int]) -> bool:
    return day_of_week_iso(value) in set(work_days)
