from pydantic import BaseModel, ConfigDict
from typing import Optional
from datetime import datetime
from punchclock.models.enums import PunchType


class Punch(BaseModel):
    """A single clock event. Never updated once stored."""
    model_config = ConfigDict(frozen=True)

    id: Optional[int] = None
    employee_id: int
    punch_type: PunchType
    timestamp: datetime
