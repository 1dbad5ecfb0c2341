import logging
from typing import List, Optional, Sequence, Tuple, Union

from models.schema import Interpretation, InterpretationCase, Shift, TimeRecord
from utils.time_utils import is_valid_time_format, safe_time_to_minutes, time_to_minutes

PunchSource = Union[TimeRecord, Sequence[Optional[str]]]

Slots = List[Optional[str]]


def collect_punches(source: PunchSource) -> List[str]:
    """Valid punches of a record or raw list, in chronological order."""
    clocks = source.clocks() if isinstance(source, TimeRecord) else list(source)
    punches = []
    for clock in clocks:
        if not clock:
            continue
        if not is_valid_time_format(clock):
            logging.warning(f"Ignoring malformed punch: {clock!r}")
            continue
        punches.append(clock.strip())
    return sorted(punches, key=time_to_minutes)


def _single_punch(entry: str, shift: Shift) -> Tuple[InterpretationCase, Slots]:
    return InterpretationCase.SINGLE_PUNCH, [entry, shift.lunch_start_time, shift.lunch_end_time]


def _two_punches(first: str, second: str, shift: Shift) -> Tuple[InterpretationCase, Slots]:
    first_minutes = time_to_minutes(first)
    second_minutes = time_to_minutes(second)
    shift_start = safe_time_to_minutes(shift.start_time)
    shift_end = safe_time_to_minutes(shift.end_time)
    lunch_start = safe_time_to_minutes(shift.lunch_start_time)
    lunch_end = safe_time_to_minutes(shift.lunch_end_time)
    window = shift.full_day_window_minutes

    if first_minutes <= shift_start + window and second_minutes >= shift_end - window:
        return InterpretationCase.FULL_DAY, [first, shift.lunch_start_time, shift.lunch_end_time, second]
    if second_minutes <= lunch_start:
        return InterpretationCase.CONTINUOUS, [first, second]
    if lunch_start < second_minutes <= lunch_end:
        return InterpretationCase.LUNCH_DEPARTURE, [first, second, shift.lunch_end_time]
    return InterpretationCase.LUNCH_RETURN, [first, None, second]


def interpret_punches(source: PunchSource, shift: Optional[Shift]) -> Interpretation:
    base = source if isinstance(source, TimeRecord) else TimeRecord()
    punches = collect_punches(source)
    count = len(punches)

    if count == 0:
        return Interpretation(case=InterpretationCase.EMPTY, record=base.with_clocks([]), punch_count=0)

    if shift is None:
        record = source.model_copy() if isinstance(source, TimeRecord) else base.with_clocks(punches)
        return Interpretation(case=InterpretationCase.NO_SHIFT, record=record, punch_count=count)

    if count == 1:
        case, slots = _single_punch(punches[0], shift)
    elif count == 2:
        case, slots = _two_punches(punches[0], punches[1], shift)
    else:
        case, slots = InterpretationCase.SEQUENTIAL, punches[:6]

    return Interpretation(case=case, record=base.with_clocks(slots), punch_count=count)


def interpret(source: PunchSource, shift: Optional[Shift]) -> TimeRecord:
    return interpret_punches(source, shift).record
