from pydantic import BaseModel, Field
from typing import Optional
from datetime import date, datetime
from punchclock.models.employee import Employee
from punchclock.models.overtime import OvertimeRequest


class OvertimeRequestCreate(BaseModel):
    overtimeDate: date
    requestedHours: float = Field(..., allow_inf_nan=False)
    reason: Optional[str] = None


class OvertimeRequestOut(BaseModel):
    id: int
    employeeId: int
    employeeFullName: Optional[str] = None
    employeeEmail: Optional[str] = None
    requestDateTime: datetime
    overtimeDate: date
    requestedHours: float
    status: str
    reason: Optional[str] = None

    @classmethod
    def from_model(cls, request: OvertimeRequest, employee: Optional[Employee] = None) -> "OvertimeRequestOut":
        return cls(
            id=request.id,
            employeeId=request.employee_id,
            employeeFullName=employee.full_name if employee else None,
            employeeEmail=employee.email if employee else None,
            requestDateTime=request.request_date_time,
            overtimeDate=request.overtime_date,
            requestedHours=request.requested_hours,
            status=request.status.value,
            reason=request.reason,
        )
