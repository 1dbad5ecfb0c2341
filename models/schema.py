import datetime as dt
from enum import Enum
from typing import Dict, List, Optional, Tuple

from pydantic import BaseModel, Field, field_validator

from utils.time_utils import day_of_week_iso, is_weekend, parse_work_days

FULL_DAY_WINDOW_MINUTES = 120

DEFAULT_WORK_DAYS = [1, 2, 3, 4, 5]

CLOCK_FIELDS = ("clock_in_1", "clock_out_1", "clock_in_2", "clock_out_2", "clock_in_3", "clock_out_3")


class OccurrenceType(str, Enum):
    ABSENCE = "ABSENCE"
    LATE_ARRIVAL = "LATE_ARRIVAL"
    EARLY_DEPARTURE = "EARLY_DEPARTURE"
    EXCESSIVE_LUNCH = "EXCESSIVE_LUNCH"
    OVERTIME = "OVERTIME"
    INCOMPLETE_RECORD = "INCOMPLETE_RECORD"
    WEEKEND_WORK = "WEEKEND_WORK"
    HOLIDAY_WORK = "HOLIDAY_WORK"


class OccurrenceStatus(str, Enum):
    PENDING = "PENDING"
    APPROVED = "APPROVED"
    REJECTED = "REJECTED"


class InterpretationCase(str, Enum):
    EMPTY = "EMPTY"
    NO_SHIFT = "NO_SHIFT"
    SINGLE_PUNCH = "SINGLE_PUNCH"
    FULL_DAY = "FULL_DAY"
    CONTINUOUS = "CONTINUOUS"
    LUNCH_DEPARTURE = "LUNCH_DEPARTURE"
    LUNCH_RETURN = "LUNCH_RETURN"
    SEQUENTIAL = "SEQUENTIAL"


class ImportStatus(str, Enum):
    COMPLETED = "COMPLETED"
    PARTIALLY_COMPLETED = "PARTIALLY_COMPLETED"
    FAILED = "FAILED"


class Shift(BaseModel):
    id: Optional[int] = None
    name: str
    start_time: str
    end_time: str
    lunch_start_time: str
    lunch_end_time: str
    tolerance_minutes: int = 10
    overtime_allowed: bool = True
    is_active: bool = True
    full_day_window_minutes: int = FULL_DAY_WINDOW_MINUTES
    work_days: List[int] = Field(default_factory=lambda: list(DEFAULT_WORK_DAYS))

    @field_validator("work_days", mode="before")
    @classmethod
    def _parse_work_days(cls, value):
        return parse_work_days(value)


class Employee(BaseModel):
    id: int
    badge_id: str
    name: str = ""
    is_active: bool = True
    shift_id: Optional[int] = None


class RawPunchSet(BaseModel):
    badge_id: str
    date: dt.date
    punches: List[str] = Field(default_factory=list)


class TimeRecord(BaseModel):
    id: Optional[int] = None
    employee_id: Optional[int] = None
    date: Optional[dt.date] = None
    day_of_week: Optional[int] = None
    is_weekend: bool = False
    is_holiday: bool = False
    clock_in_1: Optional[str] = None
    clock_out_1: Optional[str] = None
    clock_in_2: Optional[str] = None
    clock_out_2: Optional[str] = None
    clock_in_3: Optional[str] = None
    clock_out_3: Optional[str] = None

    @classmethod
    def for_day(cls, employee_id: Optional[int], day: dt.date, **kwargs) -> "TimeRecord":
        return cls(
            employee_id=employee_id,
            date=day,
            day_of_week=day_of_week_iso(day),
            is_weekend=is_weekend(day),
            **kwargs,
        )

    def clocks(self) -> List[Optional[str]]:
        return [getattr(self, name) for name in CLOCK_FIELDS]

    def pairs(self) -> List[Tuple[Optional[str], Optional[str]]]:
        return [
            (self.clock_in_1, self.clock_out_1),
            (self.clock_in_2, self.clock_out_2),
            (self.clock_in_3, self.clock_out_3),
        ]

    def has_clock_out(self) -> bool:
        return bool(self.clock_out_1 or self.clock_out_2 or self.clock_out_3)

    def last_clock_out(self) -> Optional[str]:
        return self.clock_out_3 or self.clock_out_2 or self.clock_out_1

    def with_clocks(self, clocks: List[Optional[str]]) -> "TimeRecord":
        padded = (list(clocks) + [None] * len(CLOCK_FIELDS))[:len(CLOCK_FIELDS)]
        return self.model_copy(update=dict(zip(CLOCK_FIELDS, padded)))


class TimeCalculation(BaseModel):
    total_worked_minutes: int = 0
    regular_minutes: int = 0
    overtime_minutes: int = 0
    night_shift_minutes: int = 0
    late_minutes: int = 0
    early_leave_minutes: int = 0
    missing_minutes: int = 0
    lunch_duration_minutes: int = 0
    excessive_lunch_minutes: int = 0


class Interpretation(BaseModel):
    case: InterpretationCase
    record: TimeRecord
    punch_count: int


class Analysis(BaseModel):
    case: InterpretationCase
    interpretation: str
    issues: List[str] = Field(default_factory=list)
    suggestions: List[str] = Field(default_factory=list)
    calculations: Dict[str, int] = Field(default_factory=dict)


class OccurrenceCandidate(BaseModel):
    employee_id: Optional[int] = None
    time_record_id: Optional[int] = None
    date: Optional[dt.date] = None
    type: OccurrenceType
    status: OccurrenceStatus = OccurrenceStatus.PENDING
    minutes: int = 0
    description: str = ""


class TimeRecordEntry(BaseModel):
    """A persisted day: the interpreted record plus the metrics computed for it."""

    record: TimeRecord
    calculation: TimeCalculation = Field(default_factory=TimeCalculation)
    punch_count: Optional[int] = None
    has_issues: bool = False
    notes: Optional[str] = None


class ProcessingOptions(BaseModel):
    generate_occurrences: bool = True
    update_existing: bool = False
    consider_weekends: bool = True
    consider_holidays: bool = True


class ProcessingResult(BaseModel):
    time_record_id: Optional[int] = None
    employee_id: Optional[int] = None
    date: Optional[dt.date] = None
    calculations: TimeCalculation
    occurrences: List[OccurrenceCandidate] = Field(default_factory=list)
    has_issues: bool = False
    is_complete: bool = True


class ProcessingSummary(BaseModel):
    total_records: int = 0
    total_worked_hours: str = "0.00"
    total_overtime_hours: str = "0.00"
    total_late_minutes: int = 0
    records_with_issues: int = 0


class BatchReport(BaseModel):
    success: bool
    processed: int
    occurrences_generated: int
    errors: int
    summary: ProcessingSummary


class ImportLog(BaseModel):
    status: str
    message: str
    badge_id: Optional[str] = None
    date: Optional[dt.date] = None


class ImportReport(BaseModel):
    status: ImportStatus
    processed: int = 0
    failed: int = 0
    skipped: int = 0
    occurrences: int = 0
    total: int = 0
    logs: List[ImportLog] = Field(default_factory=list)
    message: str = ""
