from collections import defaultdict
from datetime import datetime
from typing import Callable, Dict, List

from punchclock.models.enums import OvertimeStatus, PunchType
from punchclock.services.hours_service import ReportService, day_window, hours_worked, local_zone, utcnow
from punchclock.store.base import AttendanceStore
from punchclock.utils.errors import NotFoundError


class DashboardService:
    """Aggregated views for the admin and employee dashboards."""

    def __init__(self, store: AttendanceStore, clock: Callable[[], datetime] = utcnow):
        self.store = store
        self.clock = clock
        self.reports = ReportService(store, clock)

    async def admin_stats(self) -> dict:
        employees = await self.store.list_employees()
        pending = await self.store.find_overtime_by_status(OvertimeStatus.PENDING)

        clocked_in = 0
        for employee in employees:
            last_punch = await self.store.find_last_punch_by_employee(employee.id)
            if last_punch is not None and last_punch.punch_type == PunchType.IN:
                clocked_in += 1

        start, end = day_window(self.clock())
        by_employee: Dict[int, List] = defaultdict(list)
        for punch in await self.store.find_punches_between(start, end):
            by_employee[punch.employee_id].append(punch)
        total_today = sum(hours_worked(punches, start, end) for punches in by_employee.values())

        return {
            "totalEmployees": len(employees),
            "pendingOvertimeRequests": len(pending),
            "employeesClockedIn": clocked_in,
            "totalHoursAcrossAllEmployeesToday": round(total_today, 2),
        }

    async def recent_activity(self, limit: int = 10) -> List[dict]:
        punches = await self.store.find_all_punches_desc(limit)
        names: Dict[int, str] = {}
        activity = []
        for punch in punches:
            if punch.employee_id not in names:
                employee = await self.store.find_employee(punch.employee_id)
                names[punch.employee_id] = employee.full_name if employee else "Unknown employee"
            activity.append({
                "id": punch.id,
                "employeeId": punch.employee_id,
                "employeeName": names[punch.employee_id],
                "punchType": punch.punch_type.value,
                "timestamp": punch.timestamp,
            })
        return activity

    async def employee_stats(self, employee_id: int) -> dict:
        employee = await self.store.find_employee(employee_id)
        if employee is None:
            raise NotFoundError(f"Employee with ID {employee_id} not found.")

        last_punch = await self.store.find_last_punch_by_employee(employee_id)
        current_status = "Not Clocked In"
        if last_punch is not None:
            tz = local_zone()
            if last_punch.timestamp.astimezone(tz).date() == self.clock().astimezone(tz).date():
                current_status = "Clocked In" if last_punch.punch_type == PunchType.IN else "Clocked Out"

        punches = await self.store.find_punches_by_employee(employee_id)
        recent = [
            {"id": p.id, "punchType": p.punch_type.value, "timestamp": p.timestamp}
            for p in reversed(punches[-5:])
        ]
        pending = await self.store.find_overtime_by_employee_and_status(employee_id, OvertimeStatus.PENDING)

        return {
            "employeeId": employee.id,
            "employeeFullName": employee.full_name,
            "department": employee.department,
            "todayHours": round(await self.reports.todays_hours(employee_id), 2),
            "weeklyHours": round(await self.reports.weekly_hours(employee_id), 2),
            "currentStatus": current_status,
            "lastPunchTime": last_punch.timestamp if last_punch else None,
            "recentPunches": recent,
            "pendingEmployeeOvertimeRequests": len(pending),
        }
