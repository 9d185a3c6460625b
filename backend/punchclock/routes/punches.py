from fastapi import APIRouter, Depends, Query
from typing import List, Optional
from datetime import datetime
from punchclock.db import get_store
from punchclock.models.enums import PunchType
from punchclock.schemas.punch import HoursOut, PunchOut, PunchRequest
from punchclock.services.hours_service import ReportService
from punchclock.services.punch_service import PunchLedger
from punchclock.utils.auth import Principal, ensure_owner_or_admin, require_admin, require_employee_or_admin

router = APIRouter()
admin_router = APIRouter()


def get_punch_ledger() -> PunchLedger:
    return PunchLedger(get_store())


def get_report_service() -> ReportService:
    return ReportService(get_store())


async def _punch(body: PunchRequest, principal: Principal, ledger: PunchLedger, punch_type: PunchType) -> PunchOut:
    ensure_owner_or_admin(principal, body.employeeId)
    punch = await ledger.record_punch(body.employeeId, punch_type)
    return PunchOut.from_model(punch)


@router.post("/in", response_model=PunchOut, status_code=201)
async def clock_in(
    body: PunchRequest,
    principal: Principal = Depends(require_employee_or_admin),
    ledger: PunchLedger = Depends(get_punch_ledger),
):
    return await _punch(body, principal, ledger, PunchType.IN)


@router.post("/out", response_model=PunchOut, status_code=201)
async def clock_out(
    body: PunchRequest,
    principal: Principal = Depends(require_employee_or_admin),
    ledger: PunchLedger = Depends(get_punch_ledger),
):
    return await _punch(body, principal, ledger, PunchType.OUT)


@router.get("/employee/{employee_id}", response_model=List[PunchOut])
async def get_punches_for_employee(
    employee_id: int,
    principal: Principal = Depends(require_employee_or_admin),
    ledger: PunchLedger = Depends(get_punch_ledger),
):
    ensure_owner_or_admin(principal, employee_id)
    return [PunchOut.from_model(p) for p in await ledger.list_punches(employee_id)]


@router.get("/employee/{employee_id}/hours", response_model=HoursOut)
async def get_hours_worked(
    employee_id: int,
    start: datetime = Query(..., description="Window start (ISO 8601, inclusive)"),
    end: datetime = Query(..., description="Window end (ISO 8601, inclusive)"),
    principal: Principal = Depends(require_employee_or_admin),
    reports: ReportService = Depends(get_report_service),
):
    ensure_owner_or_admin(principal, employee_id)
    hours = await reports.hours_in_range(employee_id, start, end)
    return HoursOut(employeeId=employee_id, start=start, end=end, hours=hours)


@admin_router.get("/all", response_model=List[PunchOut])
async def get_all_punches(
    limit: Optional[int] = Query(None, ge=1, le=1000),
    principal: Principal = Depends(require_admin),
    ledger: PunchLedger = Depends(get_punch_ledger),
):
    return [PunchOut.from_model(p) for p in await ledger.list_all_punches(limit)]
