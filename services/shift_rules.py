from models.schema import Shift
from utils.time_utils import MINUTES_PER_DAY, duration_minutes, is_time_in_range, time_to_minutes

MIN_SHIFT_MINUTES = 240
MAX_SHIFT_MINUTES = 720
MIN_LUNCH_MINUTES = 30
MAX_LUNCH_MINUTES = 120


class ShiftValidationError(ValueError):
    pass


def validate_shift(shift: Shift) -> Shift:
    """Reject shifts the calculator cannot work with.

    Raises ShiftValidationError (or InvalidTimeFormat for malformed times).
    """
    work = duration_minutes(shift.start_time, shift.end_time)
    lunch = duration_minutes(shift.lunch_start_time, shift.lunch_end_time)

    if work < MIN_SHIFT_MINUTES:
        raise ShiftValidationError(f"Shift {shift.name!r} must last at least {MIN_SHIFT_MINUTES} minutes")
    if work > MAX_SHIFT_MINUTES:
        raise ShiftValidationError(f"Shift {shift.name!r} cannot exceed {MAX_SHIFT_MINUTES} minutes")
    if lunch < MIN_LUNCH_MINUTES:
        raise ShiftValidationError(f"Lunch break must last at least {MIN_LUNCH_MINUTES} minutes")
    if lunch > MAX_LUNCH_MINUTES:
        raise ShiftValidationError(f"Lunch break cannot exceed {MAX_LUNCH_MINUTES} minutes")

    if not is_time_in_range(shift.lunch_start_time, shift.start_time, shift.end_time):
        raise ShiftValidationError("Lunch start must fall within the shift")
    if not is_time_in_range(shift.lunch_end_time, shift.start_time, shift.end_time):
        raise ShiftValidationError("Lunch end must fall within the shift")

    start = time_to_minutes(shift.start_time)
    lunch_start = time_to_minutes(shift.lunch_start_time)
    lunch_end = time_to_minutes(shift.lunch_end_time)

    # Night shifts: anything before the start belongs to the next day
    if lunch_start < start:
        lunch_start += MINUTES_PER_DAY
    if lunch_end < start:
        lunch_end += MINUTES_PER_DAY
    if lunch_start >= lunch_end:
        raise ShiftValidationError("Lunch end must be after lunch start")

    return shift
