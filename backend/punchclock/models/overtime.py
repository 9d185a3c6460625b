from pydantic import BaseModel, Field
from typing import Optional
from datetime import date, datetime
from punchclock.models.enums import OvertimeStatus


class OvertimeRequest(BaseModel):
    id: Optional[int] = None
    employee_id: int
    request_date_time: datetime
    overtime_date: date
    requested_hours: float = Field(..., gt=0, allow_inf_nan=False)
    status: OvertimeStatus = OvertimeStatus.PENDING
    reason: Optional[str] = None
