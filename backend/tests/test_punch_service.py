import asyncio
import pytest
from datetime import timedelta
from pydantic import ValidationError as PydanticValidationError

from punchclock.models.enums import PunchType
from punchclock.services.punch_service import PunchLedger
from punchclock.store.memory_store import MemoryStore
from punchclock.utils.errors import AlreadyClockedInError, ConflictError, NotClockedInError, NotFoundError, ValidationError
from conftest import FixedClock, add_employee, at, run


class YieldingStore(MemoryStore):
    """Hands control back to the loop between reading and writing the state."""

    async def find_last_punch_by_employee(self, employee_id):
        last = await super().find_last_punch_by_employee(employee_id)
        await asyncio.sleep(0)
        return last


@pytest.fixture
def clock():
    return FixedClock(at(2025, 3, 3, 9))


def test_clock_in_then_out(store, clock):
    emp = run(add_employee(store))
    ledger = PunchLedger(store, clock)

    punch_in = run(ledger.clock_in(emp.id))
    assert punch_in.id is not None
    assert punch_in.punch_type == PunchType.IN
    assert punch_in.timestamp == clock.now
    assert run(ledger.current_state(emp.id)) == PunchType.IN

    clock.now += timedelta(hours=8)
    punch_out = run(ledger.clock_out(emp.id))
    assert punch_out.punch_type == PunchType.OUT
    assert run(ledger.current_state(emp.id)) == PunchType.OUT
    assert [p.id for p in run(ledger.list_punches(emp.id))] == [punch_in.id, punch_out.id]


def test_new_employee_starts_out(store):
    emp = run(add_employee(store))
    assert run(PunchLedger(store).current_state(emp.id)) == PunchType.OUT


def test_double_clock_in_rejected(store, clock):
    emp = run(add_employee(store))
    ledger = PunchLedger(store, clock)
    run(ledger.clock_in(emp.id))

    with pytest.raises(AlreadyClockedInError) as exc:
        run(ledger.clock_in(emp.id))
    assert exc.value.message == "Employee Jane Doe is already clocked IN."
    assert len(run(ledger.list_punches(emp.id))) == 1


def test_clock_out_without_clock_in_rejected(store, clock):
    emp = run(add_employee(store))
    with pytest.raises(NotClockedInError) as exc:
        run(PunchLedger(store, clock).clock_out(emp.id))
    assert exc.value.message == "Employee Jane Doe is not currently clocked IN."
    assert run(store.find_punches_by_employee(emp.id)) == []


def test_unknown_employee(store, clock):
    with pytest.raises(NotFoundError):
        run(PunchLedger(store, clock).clock_in(42))


def test_invalid_punch_type(store, clock):
    emp = run(add_employee(store))
    with pytest.raises(ValidationError) as exc:
        run(PunchLedger(store, clock).record_punch(emp.id, "BREAK"))
    assert "Must be 'IN' or 'OUT'" in exc.value.message


def test_record_punch_accepts_string_type(store, clock):
    emp = run(add_employee(store))
    assert run(PunchLedger(store, clock).record_punch(emp.id, "IN")).punch_type == PunchType.IN


def test_punches_of_different_employees_are_independent(store, clock):
    jane = run(add_employee(store))
    john = run(add_employee(store, "John", "Roe", "john@example.com"))
    ledger = PunchLedger(store, clock)
    run(ledger.clock_in(jane.id))
    run(ledger.clock_in(john.id))
    assert run(ledger.current_state(jane.id)) == PunchType.IN
    assert run(ledger.current_state(john.id)) == PunchType.IN


def test_list_all_punches_newest_first(store, clock):
    emp = run(add_employee(store))
    ledger = PunchLedger(store, clock)
    first = run(ledger.clock_in(emp.id))
    clock.now += timedelta(hours=1)
    second = run(ledger.clock_out(emp.id))

    assert [p.id for p in run(ledger.list_all_punches())] == [second.id, first.id]
    assert [p.id for p in run(ledger.list_all_punches(limit=1))] == [second.id]


def test_concurrent_clock_ins_record_one_punch(clock):
    store = YieldingStore()
    emp = run(add_employee(store))
    ledger = PunchLedger(store, clock)

    async def race():
        return await asyncio.gather(
            ledger.clock_in(emp.id), ledger.clock_in(emp.id), return_exceptions=True
        )

    results = run(race())
    recorded = [r for r in results if not isinstance(r, Exception)]
    failed = [r for r in results if isinstance(r, Exception)]
    assert len(recorded) == 1
    assert len(failed) == 1
    assert isinstance(failed[0], ConflictError)
    assert len(run(store.find_punches_by_employee(emp.id))) == 1


def test_stored_punch_is_immutable(store, clock):
    emp = run(add_employee(store))
    punch = run(PunchLedger(store, clock).clock_in(emp.id))
    with pytest.raises(PydanticValidationError):
        punch.punch_type = PunchType.OUT
    assert run(store.find_last_punch_by_employee(emp.id)).punch_type == PunchType.IN
