import logging
import math
from datetime import date, datetime
from typing import Awaitable, Callable, List, Optional

from punchclock.models.enums import OvertimeStatus
from punchclock.models.overtime import OvertimeRequest
from punchclock.services.email_service import send_email
from punchclock.services.hours_service import utcnow
from punchclock.store.base import AttendanceStore
from punchclock.utils.errors import InvalidStateError, NotFoundError, ValidationError
from punchclock.utils.logger import EventTypes, log_event

logger = logging.getLogger(__name__)

EmailSender = Callable[[str, str, str], Awaitable[bool]]


class OvertimeWorkflow:
    """Submission and review of overtime requests.

    A request starts PENDING and moves once, to APPROVED or REJECTED. The
    status check and the write are a single compare-and-set in the store, so
    two admins acting on the same request cannot both succeed.
    """

    def __init__(
        self,
        store: AttendanceStore,
        sender: EmailSender = send_email,
        clock: Callable[[], datetime] = utcnow,
    ):
        self.store = store
        self.sender = sender
        self.clock = clock

    async def submit(
        self,
        employee_id: int,
        overtime_date: date,
        requested_hours: float,
        reason: Optional[str] = None,
    ) -> OvertimeRequest:
        if await self.store.find_employee(employee_id) is None:
            raise NotFoundError(f"Employee with ID {employee_id} not found.")
        if requested_hours is None or not math.isfinite(requested_hours) or requested_hours <= 0:
            raise ValidationError("Requested hours must be greater than zero.")

        request = OvertimeRequest(
            employee_id=employee_id,
            request_date_time=self.clock(),
            overtime_date=overtime_date,
            requested_hours=requested_hours,
            status=OvertimeStatus.PENDING,
            reason=(reason or "").strip() or None,
        )
        stored = await self.store.insert_overtime(request)
        await log_event(EventTypes.OVERTIME_SUBMITTED, {"request_id": stored.id}, user_id=employee_id)
        return stored

    async def get(self, request_id: int) -> OvertimeRequest:
        request = await self.store.find_overtime(request_id)
        if request is None:
            raise NotFoundError(f"Overtime request with ID {request_id} not found.")
        return request

    async def list_pending(self, employee_id: int) -> List[OvertimeRequest]:
        return await self.store.find_overtime_by_employee_and_status(employee_id, OvertimeStatus.PENDING)

    async def list_approved(self, employee_id: int) -> List[OvertimeRequest]:
        return await self.store.find_overtime_by_employee_and_status(employee_id, OvertimeStatus.APPROVED)

    async def list_all_pending(self) -> List[OvertimeRequest]:
        return await self.store.find_overtime_by_status(OvertimeStatus.PENDING)

    async def approve(self, request_id: int) -> OvertimeRequest:
        return await self._decide(request_id, OvertimeStatus.APPROVED, "approved")

    async def reject(self, request_id: int) -> OvertimeRequest:
        return await self._decide(request_id, OvertimeStatus.REJECTED, "rejected")

    async def _decide(self, request_id: int, target: OvertimeStatus, verb: str) -> OvertimeRequest:
        updated = await self.store.transition_overtime(request_id, OvertimeStatus.PENDING, target)
        if updated is None:
            # tells "missing" apart from "already decided"
            await self.get(request_id)
            raise InvalidStateError(f"Only pending requests can be {verb}.")

        event = EventTypes.OVERTIME_APPROVED if target == OvertimeStatus.APPROVED else EventTypes.OVERTIME_REJECTED
        await log_event(event, {"request_id": request_id}, user_id=updated.employee_id)
        await self._notify_decision(updated, verb)
        return updated

    async def _notify_decision(self, request: OvertimeRequest, verb: str):
        employee = await self.store.find_employee(request.employee_id)
        if employee is None:
            return
        subject = f"Your overtime request was {verb}"
        body = (
            f"Dear {employee.full_name},\n\n"
            f"Your request for {request.requested_hours:g} overtime hour(s) on "
            f"{request.overtime_date.isoformat()} has been {verb}.\n"
        )
        try:
            await self.sender(employee.email, subject, body)
        except Exception as e:
            logger.error("Overtime decision email for request %s failed: %s", request.id, e)
            await log_event(EventTypes.EMAIL_FAILED, {"request_id": request.id})
