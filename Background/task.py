import logging
from datetime import date
from typing import List, Optional

from fastapi import BackgroundTasks, Depends, FastAPI, HTTPException
from pydantic import BaseModel, Field

from main import analyze_time_record, process_import, process_single_day, process_time_records, resolve_shift
from models.schema import ProcessingOptions, RawPunchSet, Shift, TimeRecord
from services.analyzer import analyze
from services.calculator import calculate
from services.interpreter import collect_punches, interpret_punches
from services.occurrences import generate_occurrences
from utils.helper import InMemoryStore, TimeRecordStore
from utils.time_utils import is_work_day

app = FastAPI()
app.state.store = InMemoryStore()


def get_store() -> TimeRecordStore:
    return app.state.store


class BatchRequest(BaseModel):
    start_date: date
    end_date: date
    employee_id: Optional[int] = None
    shift_id: Optional[int] = None
    options: ProcessingOptions = Field(default_factory=ProcessingOptions)


class PreviewRequest(BaseModel):
    punches: List[str] = Field(default_factory=list)
    shift: Optional[Shift] = None
    day: Optional[date] = None


@app.post("/punches")
def receive_punches(punch_set: RawPunchSet, background_tasks: BackgroundTasks,
                    store: TimeRecordStore = Depends(get_store)):
    background_tasks.add_task(process_import, store, [punch_set])
    return {"status": "Punches received, processing in background."}


@app.post("/processing/day/{employee_id}/{day}")
def api_process_single_day(employee_id: int, day: date, store: TimeRecordStore = Depends(get_store)):
    result = process_single_day(store, employee_id, day)
    if result is None:
        raise HTTPException(status_code=404, detail="Employee not found")
    return result


@app.post("/processing/batch")
def api_process_time_records(request: BatchRequest, store: TimeRecordStore = Depends(get_store)):
    try:
        return process_time_records(store, request.start_date, request.end_date, request.options,
                                    employee_id=request.employee_id, shift_id=request.shift_id)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))


@app.get("/processing/analyze/{employee_id}/{day}")
def api_analyze_time_record(employee_id: int, day: date, store: TimeRecordStore = Depends(get_store)):
    analysis = analyze_time_record(store, employee_id, day)
    if analysis is None:
        raise HTTPException(status_code=404, detail="Time record not found")
    return analysis


@app.post("/processing/preview")
def preview(request: PreviewRequest):
    base = TimeRecord.for_day(None, request.day) if request.day else TimeRecord()
    punches = collect_punches(request.punches)
    interpretation = interpret_punches(base.with_clocks(punches), request.shift)
    record = interpretation.record
    calculation = calculate(record, request.shift, original_count=len(punches))
    return {
        "case": interpretation.case,
        "record": record,
        "calculation": calculation,
        "analysis": analyze(record, request.shift, original_count=len(punches)),
        "occurrences": generate_occurrences(record, calculation, request.shift),
    }


def run_end_of_day_check(store: TimeRecordStore, day: Optional[date] = None) -> int:
    day = day or date.today()
    logging.info(f"Running end-of-day absence check for {day}")
    created = 0
    for employee in store.list_employees():
        if not employee.is_active or store.get_time_record(employee.id, day) is not None:
            continue
        shift = resolve_shift(store, employee)
        if shift and not is_work_day(day, shift.work_days):
            continue
        process_single_day(store, employee.id, day)
        created += 1
    logging.info(f"End-of-day absence check completed: {created} empty days recorded")
    return created
