from fastapi import APIRouter, Depends, Query
from punchclock.db import get_store
from punchclock.services.hours_service import ReportService
from punchclock.utils.auth import Principal, ensure_owner_or_admin, require_employee_or_admin

router = APIRouter()


def get_report_service() -> ReportService:
    return ReportService(get_store())


@router.get("/today-hours")
async def get_todays_hours(
    employeeId: int = Query(...),
    principal: Principal = Depends(require_employee_or_admin),
    reports: ReportService = Depends(get_report_service),
):
    ensure_owner_or_admin(principal, employeeId)
    return {"employeeId": employeeId, "hours": await reports.todays_hours(employeeId)}


@router.get("/weekly-hours")
async def get_weekly_hours(
    employeeId: int = Query(...),
    principal: Principal = Depends(require_employee_or_admin),
    reports: ReportService = Depends(get_report_service),
):
    ensure_owner_or_admin(principal, employeeId)
    return {"employeeId": employeeId, "hours": await reports.weekly_hours(employeeId)}
