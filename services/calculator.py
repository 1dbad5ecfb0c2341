from typing import List, Optional, Tuple

from models.schema import Shift, TimeCalculation, TimeRecord
from services.interpreter import PunchSource, collect_punches, interpret_punches
from utils.time_utils import MINUTES_PER_DAY, safe_duration_minutes, safe_time_to_minutes

NIGHT_START_MINUTES = 22 * 60
NIGHT_END_MINUTES = 5 * 60

# Workdays above six hours without a punched lunch get the standard lunch deducted
CLT_LUNCH_THRESHOLD_MINUTES = 360


def lunch_minutes(shift: Shift) -> int:
    return safe_duration_minutes(shift.lunch_start_time, shift.lunch_end_time)


def expected_work_minutes(shift: Shift) -> int:
    return safe_duration_minutes(shift.start_time, shift.end_time) - lunch_minutes(shift)


def _effective_clock_in(clock_in: str, shift: Optional[Shift]) -> str:
    if shift and safe_time_to_minutes(clock_in) < safe_time_to_minutes(shift.start_time):
        return shift.start_time
    return clock_in


def total_worked_minutes(record: TimeRecord, shift: Optional[Shift]) -> int:
    total = 0
    explicit_lunch = False

    if record.clock_in_1 and record.clock_out_1:
        start = _effective_clock_in(record.clock_in_1, shift)
        total += safe_duration_minutes(start, record.clock_out_1)
        if record.clock_in_2:
            explicit_lunch = True

    if record.clock_in_2 and record.clock_out_2:
        explicit_lunch = True
        total += safe_duration_minutes(record.clock_in_2, record.clock_out_2)
    elif record.clock_in_2:
        # Lunch return without a final clock-out leaves the whole day unpaid
        return 0

    if record.clock_in_3 and record.clock_out_3:
        total += safe_duration_minutes(record.clock_in_3, record.clock_out_3)

    if shift and not explicit_lunch and total > CLT_LUNCH_THRESHOLD_MINUTES:
        total -= lunch_minutes(shift)

    return max(0, total)


def late_minutes(clock_in: str, shift: Shift) -> int:
    actual = safe_time_to_minutes(clock_in)
    expected = safe_time_to_minutes(shift.start_time)
    if actual <= expected:
        return 0
    diff = actual - expected
    return diff - shift.tolerance_minutes if diff > shift.tolerance_minutes else 0


def early_leave_minutes(clock_out: str, shift: Shift) -> int:
    diff = safe_time_to_minutes(shift.end_time) - safe_time_to_minutes(clock_out)
    return diff - shift.tolerance_minutes if diff > shift.tolerance_minutes else 0


def _overlap(start: int, end: int, window_start: int, window_end: int) -> int:
    return max(0, min(end, window_end) - max(start, window_start))


def night_shift_minutes(record: TimeRecord) -> int:
    intervals: List[Tuple[int, int]] = [
        (safe_time_to_minutes(clock_in), safe_time_to_minutes(clock_out))
        for clock_in, clock_out in record.pairs()
        if clock_in and clock_out
    ]

    night = 0
    for start, end in intervals:
        if end < start:
            night += _overlap(start, MINUTES_PER_DAY, NIGHT_START_MINUTES, MINUTES_PER_DAY)
            night += _overlap(0, end, 0, NIGHT_END_MINUTES)
        else:
            night += _overlap(start, end, NIGHT_START_MINUTES, MINUTES_PER_DAY)
            night += _overlap(start, end, 0, NIGHT_END_MINUTES)
    return night


def calculate(source: PunchSource, shift: Optional[Shift], original_count: Optional[int] = None) -> TimeCalculation:
    """Compute the day's time metrics.

    ``original_count`` is the number of punches the day had before any
    interpretation. Reprocessing an already interpreted record must pass the
    count stored at import time, otherwise the record's own valid punches are
    counted.
    """
    calculation = TimeCalculation()

    punches = collect_punches(source)
    if not punches:
        if shift:
            calculation.missing_minutes = max(0, expected_work_minutes(shift))
        return calculation

    if original_count is None:
        original_count = len(punches)

    record = interpret_punches(source, shift).record

    if shift and not record.has_clock_out() and original_count != 1:
        calculation.missing_minutes = max(0, expected_work_minutes(shift))
        return calculation

    calculation.total_worked_minutes = total_worked_minutes(record, shift)

    if shift:
        if record.clock_in_1:
            calculation.late_minutes = late_minutes(record.clock_in_1, shift)

        last_clock_out = record.last_clock_out()
        if last_clock_out:
            calculation.early_leave_minutes = early_leave_minutes(last_clock_out, shift)

        if record.clock_out_1 and record.clock_in_2:
            calculation.lunch_duration_minutes = safe_duration_minutes(record.clock_out_1, record.clock_in_2)
            calculation.excessive_lunch_minutes = max(0, calculation.lunch_duration_minutes - lunch_minutes(shift))

        expected = expected_work_minutes(shift)
        if calculation.total_worked_minutes > expected:
            calculation.regular_minutes = expected
            calculation.overtime_minutes = calculation.total_worked_minutes - expected
        else:
            calculation.regular_minutes = calculation.total_worked_minutes
            calculation.missing_minutes = expected - calculation.total_worked_minutes

        calculation.night_shift_minutes = night_shift_minutes(record)
    else:
        calculation.regular_minutes = calculation.total_worked_minutes

    return calculation.model_copy(update={
        name: max(0, value) for name, value in calculation.model_dump().items()
    })
