import logging
from datetime import datetime
from typing import Callable, List, Optional

from punchclock.models.employee import Employee
from punchclock.models.enums import PunchType
from punchclock.models.punch import Punch
from punchclock.services.hours_service import utcnow
from punchclock.store.base import AttendanceStore
from punchclock.utils.errors import (
    AlreadyClockedInError,
    ConflictError,
    NotClockedInError,
    NotFoundError,
    ValidationError,
)
from punchclock.utils.logger import EventTypes, log_event

logger = logging.getLogger(__name__)


class PunchLedger:
    """Records clock-in/clock-out punches.

    Per employee the session state is OUT or IN and is derived from the most
    recent punch (OUT when there is none). IN is only accepted from OUT and
    OUT only from IN. The store re-checks the state atomically when the punch
    is written, so two concurrent punches for one employee cannot both land.
    """

    def __init__(self, store: AttendanceStore, clock: Callable[[], datetime] = utcnow):
        self.store = store
        self.clock = clock

    async def _require_employee(self, employee_id: int) -> Employee:
        employee = await self.store.find_employee(employee_id)
        if employee is None:
            raise NotFoundError(f"Employee with ID {employee_id} not found.")
        return employee

    async def current_state(self, employee_id: int) -> PunchType:
        last_punch = await self.store.find_last_punch_by_employee(employee_id)
        if last_punch is not None and last_punch.punch_type == PunchType.IN:
            return PunchType.IN
        return PunchType.OUT

    @staticmethod
    def _check_transition(employee: Employee, state: PunchType, punch_type: PunchType):
        if punch_type == PunchType.IN and state == PunchType.IN:
            raise AlreadyClockedInError(f"Employee {employee.full_name} is already clocked IN.")
        if punch_type == PunchType.OUT and state == PunchType.OUT:
            raise NotClockedInError(f"Employee {employee.full_name} is not currently clocked IN.")

    async def record_punch(self, employee_id: int, punch_type) -> Punch:
        try:
            punch_type = PunchType(punch_type)
        except ValueError:
            raise ValidationError(f"Invalid punch type: {punch_type}. Must be 'IN' or 'OUT'.")

        employee = await self._require_employee(employee_id)
        state = await self.current_state(employee_id)
        self._check_transition(employee, state, punch_type)

        punch = Punch(employee_id=employee_id, punch_type=punch_type, timestamp=self.clock())
        stored = await self.store.insert_punch_if_state(punch, expected_state=state)
        if stored is None:
            # another punch for this employee won the race; report against the new state
            logger.info("Concurrent punch detected for employee %s", employee_id)
            self._check_transition(employee, await self.current_state(employee_id), punch_type)
            raise ConflictError("Punch state changed concurrently; please retry.")

        event = EventTypes.PUNCH_IN if punch_type == PunchType.IN else EventTypes.PUNCH_OUT
        await log_event(event, {"punch_id": stored.id, "timestamp": stored.timestamp.isoformat()}, user_id=employee_id)
        return stored

    async def clock_in(self, employee_id: int) -> Punch:
        return await self.record_punch(employee_id, PunchType.IN)

    async def clock_out(self, employee_id: int) -> Punch:
        return await self.record_punch(employee_id, PunchType.OUT)

    async def list_punches(self, employee_id: int) -> List[Punch]:
        await self._require_employee(employee_id)
        return await self.store.find_punches_by_employee(employee_id)

    async def list_all_punches(self, limit: Optional[int] = None) -> List[Punch]:
        return await self.store.find_all_punches_desc(limit)
