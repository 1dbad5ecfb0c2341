import threading
from datetime import date, timedelta

import pytest

from models.schema import Employee, OccurrenceCandidate, OccurrenceType, Shift, TimeRecord, TimeRecordEntry
from utils.helper import DuplicateShift, DuplicateTimeRecord, InMemoryStore

FIRST_DAY = date(2024, 1, 1)

store = None


def make_shift(**overrides):
    fields = dict(
        name="Comercial",
        start_time="08:00",
        end_time="17:00",
        lunch_start_time="12:00",
        lunch_end_time="13:00",
    )
    fields.update(overrides)
    return Shift(**fields)


def setup_function():
    global store
    store = InMemoryStore()
    store.add_employee(Employee(id=1, badge_id="123456"))


def test_generated_shift_ids_skip_explicit_ones():
    first = store.add_shift(make_shift(id=1, name="A"))
    second = store.add_shift(make_shift(name="B"))

    assert second.id != first.id
    assert store.get_shift(1).name == "A"
    assert store.get_shift(second.id).name == "B"


def test_explicit_shift_id_cannot_be_reused():
    store.add_shift(make_shift(id=3, name="A"))
    with pytest.raises(DuplicateShift):
        store.add_shift(make_shift(id=3, name="B"))
    assert store.get_shift(3).name == "A"


def test_generated_record_ids_skip_explicit_ones():
    store.save_time_record(TimeRecordEntry(record=TimeRecord.for_day(1, FIRST_DAY, id=1)))
    saved = store.save_time_record(TimeRecordEntry(record=TimeRecord.for_day(1, FIRST_DAY + timedelta(days=1))))

    assert saved.record.id == 2
    assert store.get_time_record(1, FIRST_DAY).record.id == 1


def test_same_day_is_stored_once():
    store.save_time_record(TimeRecordEntry(record=TimeRecord.for_day(1, FIRST_DAY)))
    with pytest.raises(DuplicateTimeRecord):
        store.save_time_record(TimeRecordEntry(record=TimeRecord.for_day(1, FIRST_DAY)))


def test_batch_binds_occurrences_to_saved_records():
    occurrence = OccurrenceCandidate(employee_id=1, date=FIRST_DAY, type=OccurrenceType.ABSENCE, minutes=480)
    saved = store.save_batch([(TimeRecordEntry(record=TimeRecord.for_day(1, FIRST_DAY)), [occurrence])])[0]

    stored = store.get_occurrences(saved.record.id)
    assert [o.time_record_id for o in stored] == [saved.record.id]


def test_holidays():
    store.add_holiday(FIRST_DAY)
    assert store.is_holiday(FIRST_DAY)
    assert not store.is_holiday(FIRST_DAY + timedelta(days=1))


def test_concurrent_reads_and_writes():
    errors = []
    done = threading.Event()

    def write():
        try:
            for offset in range(1000):
                day = FIRST_DAY + timedelta(days=offset)
                store.save_time_record(TimeRecordEntry(record=TimeRecord.for_day(1, day)))
                if offset % 10 == 0:
                    store.add_holiday(day)
        except Exception as e:
            errors.append(e)
        finally:
            done.set()

    def read():
        try:
            while not done.is_set():
                store.get_time_record(1, FIRST_DAY + timedelta(days=500))
                store.list_time_records(FIRST_DAY, FIRST_DAY + timedelta(days=1000), shift_id=1)
                store.is_holiday(FIRST_DAY)
                store.get_employee_by_badge("123456")
        except Exception as e:
            errors.append(e)

    threads = [threading.Thread(target=write)] + [threading.Thread(target=read) for _ in range(2)]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join()

    assert errors == []
    assert len(store.list_time_records(FIRST_DAY, FIRST_DAY + timedelta(days=1000))) == 1000
