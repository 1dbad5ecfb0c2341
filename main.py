import logging
from collections import defaultdict
from datetime import date
from typing import Dict, List, Optional, Tuple

from models.schema import (
    Analysis,
    BatchReport,
    Employee,
    ImportLog,
    ImportReport,
    ImportStatus,
    OccurrenceCandidate,
    OccurrenceType,
    ProcessingOptions,
    ProcessingResult,
    ProcessingSummary,
    RawPunchSet,
    Shift,
    TimeCalculation,
    TimeRecord,
    TimeRecordEntry,
)
from services.analyzer import analyze
from services.calculator import calculate
from services.interpreter import collect_punches, interpret
from services.occurrences import generate_occurrences, is_record_complete
from utils.helper import TimeRecordStore

CHUNK_SIZE = 50
EXCESSIVE_LUNCH_ISSUE_MINUTES = 15


def resolve_shift(store: TimeRecordStore, employee: Employee) -> Optional[Shift]:
    if employee.shift_id is None:
        return None
    shift = store.get_shift(employee.shift_id)
    if shift is None:
        logging.warning(f"Shift {employee.shift_id} not found for employee_id: {employee.id}")
        return None
    if not shift.is_active:
        logging.warning(f"Inactive shift {shift.name!r} for employee_id: {employee.id}")
        return None
    return shift


def has_issues(calculation: TimeCalculation, analysis: Optional[Analysis] = None) -> bool:
    flagged = (
        calculation.late_minutes > 0
        or calculation.early_leave_minutes > 0
        or calculation.missing_minutes > 0
        or calculation.excessive_lunch_minutes > EXCESSIVE_LUNCH_ISSUE_MINUTES
    )
    return flagged or bool(analysis and analysis.issues)


def build_notes(calculation: TimeCalculation, analysis: Analysis) -> Optional[str]:
    notes = []
    if analysis.interpretation != "Registro normal":
        notes.append(f"[{analysis.interpretation}]")
    if calculation.late_minutes > 0:
        notes.append(f"Atraso: {calculation.late_minutes}m")
    if calculation.overtime_minutes > 0:
        notes.append(f"HE: {calculation.overtime_minutes / 60:.2f}h")
    if calculation.night_shift_minutes > 0:
        notes.append(f"ADN: {calculation.night_shift_minutes / 60:.2f}h")
    if analysis.issues:
        notes.append(f"! {analysis.issues[0]}")
    return " | ".join(notes) if notes else None


def filter_occurrences(occurrences: List[OccurrenceCandidate], options: ProcessingOptions) -> List[OccurrenceCandidate]:
    dropped = set()
    if not options.consider_weekends:
        dropped.add(OccurrenceType.WEEKEND_WORK)
    if not options.consider_holidays:
        dropped.add(OccurrenceType.HOLIDAY_WORK)
    return [occurrence for occurrence in occurrences if occurrence.type not in dropped]


def evaluate_day(record: TimeRecord, shift: Optional[Shift], punch_count: Optional[int],
                 options: ProcessingOptions) -> Tuple[TimeRecordEntry, List[OccurrenceCandidate]]:
    record = interpret(record, shift)
    calculation = calculate(record, shift, original_count=punch_count)
    analysis = analyze(record, shift, original_count=punch_count)

    occurrences = []
    if options.generate_occurrences:
        occurrences = filter_occurrences(generate_occurrences(record, calculation, shift), options)

    entry = TimeRecordEntry(
        record=record,
        calculation=calculation,
        punch_count=punch_count,
        has_issues=has_issues(calculation, analysis),
        notes=build_notes(calculation, analysis),
    )
    return entry, occurrences


def to_result(entry: TimeRecordEntry, occurrences: List[OccurrenceCandidate]) -> ProcessingResult:
    return ProcessingResult(
        time_record_id=entry.record.id,
        employee_id=entry.record.employee_id,
        date=entry.record.date,
        calculations=entry.calculation,
        occurrences=occurrences,
        has_issues=entry.has_issues,
        is_complete=is_record_complete(entry.record),
    )


def persist_day(store: TimeRecordStore, entry: TimeRecordEntry, occurrences: List[OccurrenceCandidate],
                options: ProcessingOptions) -> ProcessingResult:
    replacement = occurrences if options.generate_occurrences else None
    saved = store.save_batch([(entry, replacement)])[0]
    stored = store.get_occurrences(saved.record.id) if options.generate_occurrences else []
    return to_result(saved, stored)


def refresh_record(store: TimeRecordStore, record: TimeRecord) -> TimeRecord:
    return record.model_copy(update={"is_holiday": store.is_holiday(record.date)})


def summarize(results: List[ProcessingResult]) -> ProcessingSummary:
    total_minutes = sum(r.calculations.total_worked_minutes for r in results)
    overtime_minutes = sum(r.calculations.overtime_minutes for r in results)
    return ProcessingSummary(
        total_records=len(results),
        total_worked_hours=f"{total_minutes / 60:.2f}",
        total_overtime_hours=f"{overtime_minutes / 60:.2f}",
        total_late_minutes=sum(r.calculations.late_minutes for r in results),
        records_with_issues=len([r for r in results if r.has_issues]),
    )


def process_single_day(store: TimeRecordStore, employee_id: int, day: date,
                       options: Optional[ProcessingOptions] = None) -> Optional[ProcessingResult]:
    options = options or ProcessingOptions()
    employee = store.get_employee(employee_id)
    if not employee:
        logging.error(f"Unknown employee_id: {employee_id}")
        return None

    shift = resolve_shift(store, employee)
    existing = store.get_time_record(employee_id, day)
    if existing is None:
        # Days without punches still get a record so the absence can be reviewed
        record = TimeRecord.for_day(employee_id, day)
        punch_count = 0
    else:
        record = existing.record
        punch_count = existing.punch_count

    entry, occurrences = evaluate_day(refresh_record(store, record), shift, punch_count, options)
    result = persist_day(store, entry, occurrences, options)
    logging.info(f"Processed day {day} for employee_id: {employee_id}")
    return result


def process_time_records(store: TimeRecordStore, start_date: date, end_date: date,
                         options: Optional[ProcessingOptions] = None, employee_id: Optional[int] = None,
                         shift_id: Optional[int] = None) -> BatchReport:
    if end_date < start_date:
        raise ValueError("End date must not be before start date")
    options = options or ProcessingOptions()

    results = []
    pending = []
    occurrences_generated = 0
    errors = 0

    for existing in store.list_time_records(start_date, end_date, employee_id=employee_id, shift_id=shift_id):
        try:
            employee = store.get_employee(existing.record.employee_id)
            if employee is None:
                raise LookupError(f"Unknown employee_id: {existing.record.employee_id}")
            shift = resolve_shift(store, employee)
            entry, occurrences = evaluate_day(refresh_record(store, existing.record), shift,
                                              existing.punch_count, options)
        except Exception:
            errors += 1
            logging.exception(f"Error processing time record {existing.record.id}")
            continue

        occurrences_generated += len(occurrences)
        pending.append((entry, occurrences if options.generate_occurrences else None))
        results.append(to_result(entry, occurrences))

    for start in range(0, len(pending), CHUNK_SIZE):
        store.save_batch(pending[start:start + CHUNK_SIZE])

    logging.info(
        f"Reprocessed {len(results)} time records between {start_date} and {end_date}: "
        f"{occurrences_generated} occurrences, {errors} errors"
    )
    return BatchReport(
        success=errors == 0,
        processed=len(results),
        occurrences_generated=occurrences_generated,
        errors=errors,
        summary=summarize(results),
    )


def analyze_time_record(store: TimeRecordStore, employee_id: int, day: date) -> Optional[Dict]:
    employee = store.get_employee(employee_id)
    if not employee:
        logging.error(f"Unknown employee_id: {employee_id}")
        return None
    entry = store.get_time_record(employee_id, day)
    if entry is None:
        logging.warning(f"No time record for employee_id: {employee_id} on {day}")
        return None

    shift = resolve_shift(store, employee)
    record = entry.record
    calculation = calculate(record, shift, original_count=entry.punch_count)

    return {
        "original": record.model_dump(include={
            "clock_in_1", "clock_out_1", "clock_in_2", "clock_out_2", "clock_in_3", "clock_out_3",
        }),
        "analysis": analyze(record, shift, original_count=entry.punch_count),
        "calculation": calculation,
        "total_worked_hours": f"{calculation.total_worked_minutes / 60:.2f}",
        "shift": {
            "name": shift.name,
            "start_time": shift.start_time,
            "end_time": shift.end_time,
            "tolerance": shift.tolerance_minutes,
        } if shift else None,
    }


def import_day(store: TimeRecordStore, employee: Employee, shift: Optional[Shift], punch_set: RawPunchSet,
               options: ProcessingOptions) -> ProcessingResult:
    punches = collect_punches(punch_set.punches)
    record = TimeRecord.for_day(employee.id, punch_set.date).with_clocks(punches)
    existing = store.get_time_record(employee.id, punch_set.date)
    if existing is not None:
        record = record.model_copy(update={"id": existing.record.id})

    entry, occurrences = evaluate_day(refresh_record(store, record), shift, len(punches), options)
    return persist_day(store, entry, occurrences, options)


def process_import(store: TimeRecordStore, punch_sets: List[RawPunchSet],
                   options: Optional[ProcessingOptions] = None) -> ImportReport:
    options = options or ProcessingOptions()
    logs = []
    processed = failed = skipped = occurrences = 0

    by_badge = defaultdict(list)
    for punch_set in punch_sets:
        by_badge[punch_set.badge_id].append(punch_set)
    logging.info(f"Importing punches for {len(by_badge)} badges")

    for badge_id, days in by_badge.items():
        employee = store.get_employee_by_badge(badge_id)
        if not employee or not employee.is_active:
            failed += len(days)
            logging.error(f"Unknown or inactive badge ID: {badge_id}")
            logs.append(ImportLog(status="ERROR", message=f"Employee not registered: {badge_id}", badge_id=badge_id))
            continue

        shift = resolve_shift(store, employee)
        seen = set()
        # One employee at a time, in date order, so repeated days are caught
        for punch_set in sorted(days, key=lambda p: p.date):
            exists = store.get_time_record(employee.id, punch_set.date) is not None
            if punch_set.date in seen or (exists and not options.update_existing):
                skipped += 1
                logging.warning(f"Time record already exists for employee_id: {employee.id} on {punch_set.date}")
                logs.append(ImportLog(status="WARNING", message=f"Record already exists: {employee.name}",
                                      badge_id=badge_id, date=punch_set.date))
                continue
            seen.add(punch_set.date)

            try:
                result = import_day(store, employee, shift, punch_set, options)
            except Exception as e:
                failed += 1
                logging.exception(f"Error importing punches for employee_id: {employee.id} on {punch_set.date}")
                logs.append(ImportLog(status="ERROR", message=f"Error processing record: {e}",
                                      badge_id=badge_id, date=punch_set.date))
                continue

            processed += 1
            occurrences += len(result.occurrences)
            logs.append(ImportLog(status="SUCCESS", message=f"Imported: {employee.name}",
                                  badge_id=badge_id, date=punch_set.date))

    if failed == 0 and skipped == 0:
        status = ImportStatus.COMPLETED
    elif processed == 0:
        status = ImportStatus.FAILED
    else:
        status = ImportStatus.PARTIALLY_COMPLETED

    return ImportReport(
        status=status,
        processed=processed,
        failed=failed,
        skipped=skipped,
        occurrences=occurrences,
        total=len(punch_sets),
        logs=logs,
        message=f"Import finished. Processed: {processed}, Failed: {failed}",
    )
