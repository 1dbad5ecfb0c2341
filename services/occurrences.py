from typing import List, Optional

from models.schema import OccurrenceCandidate, OccurrenceType, Shift, TimeCalculation, TimeRecord

SLOT_LABELS = ("1", "2", "3")


def is_record_complete(record: TimeRecord) -> bool:
    return all(bool(clock_in) == bool(clock_out) for clock_in, clock_out in record.pairs())


def incomplete_description(record: TimeRecord) -> str:
    missing = []
    for label, (clock_in, clock_out) in zip(SLOT_LABELS, record.pairs()):
        if clock_in and not clock_out:
            missing.append(f"Falta saída {label}")
        if clock_out and not clock_in:
            missing.append(f"Falta entrada {label}")
    return ", ".join(missing)


def _candidate(record: TimeRecord, occurrence_type: OccurrenceType, minutes: int, description: str) -> OccurrenceCandidate:
    return OccurrenceCandidate(
        employee_id=record.employee_id,
        time_record_id=record.id,
        date=record.date,
        type=occurrence_type,
        minutes=minutes,
        description=description,
    )


def generate_occurrences(record: TimeRecord, calculation: TimeCalculation, shift: Optional[Shift]) -> List[OccurrenceCandidate]:
    if shift is None:
        return []

    occurrences = []
    complete = is_record_complete(record)
    total = calculation.total_worked_minutes

    if total == 0 and calculation.missing_minutes > 0:
        occurrences.append(_candidate(
            record, OccurrenceType.ABSENCE, calculation.missing_minutes,
            "Falta - nenhum trabalho registrado.",
        ))

    if calculation.late_minutes > 0:
        occurrences.append(_candidate(
            record, OccurrenceType.LATE_ARRIVAL, calculation.late_minutes,
            f"Atraso de {calculation.late_minutes} min",
        ))

    if calculation.early_leave_minutes > 0:
        occurrences.append(_candidate(
            record, OccurrenceType.EARLY_DEPARTURE, calculation.early_leave_minutes,
            f"Saída antecipada de {calculation.early_leave_minutes} min",
        ))

    if calculation.excessive_lunch_minutes > 0:
        occurrences.append(_candidate(
            record, OccurrenceType.EXCESSIVE_LUNCH, calculation.excessive_lunch_minutes,
            f"Excesso de almoço: {calculation.excessive_lunch_minutes} min",
        ))

    if shift.overtime_allowed and complete and calculation.overtime_minutes > 0:
        occurrences.append(_candidate(
            record, OccurrenceType.OVERTIME, calculation.overtime_minutes,
            f"{calculation.overtime_minutes} min de hora extra",
        ))

    if not complete:
        occurrences.append(_candidate(
            record, OccurrenceType.INCOMPLETE_RECORD, 0, incomplete_description(record),
        ))

    if record.is_weekend and total > 0:
        occurrences.append(_candidate(
            record, OccurrenceType.WEEKEND_WORK, total,
            f"Trabalho fim de semana: {total} min",
        ))

    if record.is_holiday and total > 0:
        occurrences.append(_candidate(
            record, OccurrenceType.HOLIDAY_WORK, total,
            f"Trabalho em feriado: {total} min",
        ))

    return occurrences
