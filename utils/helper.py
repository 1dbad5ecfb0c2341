import logging
import threading
from datetime import date
from typing import Dict, Iterable, List, Optional, Protocol, Set, Tuple

from models.schema import Employee, OccurrenceCandidate, Shift, TimeRecordEntry
from services.shift_rules import validate_shift


class DuplicateTimeRecord(Exception):
    pass


class DuplicateShift(Exception):
    pass


def _next_id(table: Dict[int, object]) -> int:
    return max(table, default=0) + 1


def _bind(occurrences: List[OccurrenceCandidate], time_record_id: int) -> List[OccurrenceCandidate]:
    return [occurrence.model_copy(update={"time_record_id": time_record_id}) for occurrence in occurrences]


class TimeRecordStore(Protocol):
    def get_employee(self, employee_id: int) -> Optional[Employee]: ...

    def get_employee_by_badge(self, badge_id: str) -> Optional[Employee]: ...

    def list_employees(self) -> List[Employee]: ...

    def get_shift(self, shift_id: int) -> Optional[Shift]: ...

    def is_holiday(self, day: date) -> bool: ...

    def get_time_record(self, employee_id: int, day: date) -> Optional[TimeRecordEntry]: ...

    def list_time_records(self, start_date: date, end_date: date, employee_id: Optional[int] = None,
                          shift_id: Optional[int] = None) -> List[TimeRecordEntry]: ...

    def save_time_record(self, entry: TimeRecordEntry) -> TimeRecordEntry: ...

    def save_batch(self, items: Iterable[Tuple[TimeRecordEntry, Optional[List[OccurrenceCandidate]]]]) -> List[TimeRecordEntry]: ...

    def get_occurrences(self, time_record_id: int) -> List[OccurrenceCandidate]: ...


class InMemoryStore:
    def __init__(self):
        self.employees: Dict[int, Employee] = {}
        self.shifts: Dict[int, Shift] = {}
        self.holidays: Set[date] = set()
        self.time_records: Dict[int, TimeRecordEntry] = {}
        self.occurrences: Dict[int, List[OccurrenceCandidate]] = {}
        self._lock = threading.RLock()

    def add_shift(self, shift: Shift) -> Shift:
        validate_shift(shift)
        with self._lock:
            if shift.id is None:
                shift = shift.model_copy(update={"id": _next_id(self.shifts)})
            elif shift.id in self.shifts:
                raise DuplicateShift(f"Shift id {shift.id} is already taken")
            self.shifts[shift.id] = shift
        return shift

    def add_employee(self, employee: Employee) -> Employee:
        with self._lock:
            self.employees[employee.id] = employee
        return employee

    def add_holiday(self, day: date) -> None:
        with self._lock:
            self.holidays.add(day)

    def get_employee(self, employee_id: int) -> Optional[Employee]:
        with self._lock:
            return self.employees.get(employee_id)

    def get_employee_by_badge(self, badge_id: str) -> Optional[Employee]:
        with self._lock:
            for employee in self.employees.values():
                if employee.badge_id == badge_id:
                    return employee
        return None

    def list_employees(self) -> List[Employee]:
        with self._lock:
            return list(self.employees.values())

    def get_shift(self, shift_id: int) -> Optional[Shift]:
        with self._lock:
            return self.shifts.get(shift_id)

    def is_holiday(self, day: date) -> bool:
        with self._lock:
            return day in self.holidays

    def get_time_record(self, employee_id: int, day: date) -> Optional[TimeRecordEntry]:
        with self._lock:
            for entry in self.time_records.values():
                if entry.record.employee_id == employee_id and entry.record.date == day:
                    return entry
        return None

    def list_time_records(self, start_date: date, end_date: date, employee_id: Optional[int] = None,
                          shift_id: Optional[int] = None) -> List[TimeRecordEntry]:
        entries = []
        with self._lock:
            for entry in self.time_records.values():
                record = entry.record
                if not start_date <= record.date <= end_date:
                    continue
                if employee_id is not None and record.employee_id != employee_id:
                    continue
                if shift_id is not None:
                    employee = self.employees.get(record.employee_id)
                    if employee is None or employee.shift_id != shift_id:
                        continue
                entries.append(entry)
        return sorted(entries, key=lambda e: e.record.date)

    def _save(self, entry: TimeRecordEntry) -> TimeRecordEntry:
        record = entry.record
        existing = self.get_time_record(record.employee_id, record.date)
        if existing is not None and existing.record.id != record.id:
            raise DuplicateTimeRecord(f"Time record already exists for employee {record.employee_id} on {record.date}")
        if record.id is None:
            entry = entry.model_copy(update={"record": record.model_copy(update={"id": _next_id(self.time_records)})})
        self.time_records[entry.record.id] = entry
        return entry

    def save_time_record(self, entry: TimeRecordEntry) -> TimeRecordEntry:
        with self._lock:
            return self._save(entry)

    def save_batch(self, items: Iterable[Tuple[TimeRecordEntry, Optional[List[OccurrenceCandidate]]]]) -> List[TimeRecordEntry]:
        with self._lock:
            snapshot = (dict(self.time_records), dict(self.occurrences))
            saved_entries = []
            try:
                for entry, occurrences in items:
                    saved = self._save(entry)
                    if occurrences is not None:
                        self.occurrences[saved.record.id] = _bind(occurrences, saved.record.id)
                    saved_entries.append(saved)
            except Exception:
                logging.error("Batch write failed, rolling back")
                self.time_records, self.occurrences = snapshot
                raise
            return saved_entries

    def get_occurrences(self, time_record_id: int) -> List[OccurrenceCandidate]:
        with self._lock:
            return list(self.occurrences.get(time_record_id, []))
