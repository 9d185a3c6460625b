from pydantic import BaseModel
from datetime import datetime
from punchclock.models.punch import Punch


class PunchRequest(BaseModel):
    employeeId: int


class PunchOut(BaseModel):
    id: int
    employeeId: int
    punchType: str
    timestamp: datetime

    @classmethod
    def from_model(cls, punch: Punch) -> "PunchOut":
        return cls(
            id=punch.id,
            employeeId=punch.employee_id,
            punchType=punch.punch_type.value,
            timestamp=punch.timestamp,
        )


class HoursOut(BaseModel):
    employeeId: int
    start: datetime
    end: datetime
    hours: float
