import os
from datetime import datetime, time, timedelta, timezone
from typing import Callable, Iterable, Optional, Tuple
from zoneinfo import ZoneInfo

from punchclock.models.enums import PunchType
from punchclock.models.punch import Punch
from punchclock.store.base import AttendanceStore
from punchclock.utils.errors import NotFoundError, ValidationError

APP_TIMEZONE = os.getenv("APP_TIMEZONE", "UTC")


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def hours_worked(punches: Iterable[Punch], start: datetime, end: datetime) -> float:
    """Total hours covered by IN/OUT pairs inside ``[start, end]``.

    ``punches`` must be sorted oldest first. Both window bounds are inclusive.
    Each pair counts in whole minutes. An OUT with no open IN is ignored, a
    second IN replaces the first, and an IN still open at the end of the
    window counts for nothing.
    """
    total_minutes = 0
    open_in: Optional[datetime] = None

    for punch in punches:
        if punch.timestamp < start or punch.timestamp > end:
            continue
        if punch.punch_type == PunchType.IN:
            open_in = punch.timestamp
        elif open_in is not None:
            total_minutes += int((punch.timestamp - open_in).total_seconds() // 60)
            open_in = None

    return total_minutes / 60.0


def local_zone() -> ZoneInfo:
    return ZoneInfo(APP_TIMEZONE)


def day_window(now: datetime, tz: ZoneInfo = None) -> Tuple[datetime, datetime]:
    """Local midnight to the last microsecond of the day containing ``now``."""
    tz = tz or local_zone()
    local_day = now.astimezone(tz).date()
    start = datetime.combine(local_day, time.min, tzinfo=tz)
    end = datetime.combine(local_day, time.max, tzinfo=tz)
    return start, end


def week_window(now: datetime, tz: ZoneInfo = None) -> Tuple[datetime, datetime]:
    """Monday 00:00 to Sunday end of day of the local week containing ``now``."""
    tz = tz or local_zone()
    local_day = now.astimezone(tz).date()
    monday = local_day - timedelta(days=local_day.weekday())
    sunday = monday + timedelta(days=6)
    return (
        datetime.combine(monday, time.min, tzinfo=tz),
        datetime.combine(sunday, time.max, tzinfo=tz),
    )


class ReportService:
    """Read-only hour reports built on ``hours_worked``."""

    def __init__(self, store: AttendanceStore, clock: Callable[[], datetime] = utcnow):
        self.store = store
        self.clock = clock

    async def _require_employee(self, employee_id: int):
        if await self.store.find_employee(employee_id) is None:
            raise NotFoundError(f"Employee with ID {employee_id} not found.")

    async def hours_in_range(self, employee_id: int, start: datetime, end: datetime) -> float:
        # naive bounds are wall-clock times in the configured zone
        if start.tzinfo is None:
            start = start.replace(tzinfo=local_zone())
        if end.tzinfo is None:
            end = end.replace(tzinfo=local_zone())
        if end < start:
            raise ValidationError("end must not be before start.")
        await self._require_employee(employee_id)
        start, end = start.astimezone(timezone.utc), end.astimezone(timezone.utc)
        punches = await self.store.find_punches_in_range(employee_id, start, end)
        return hours_worked(punches, start, end)

    async def todays_hours(self, employee_id: int) -> float:
        start, end = day_window(self.clock())
        return await self.hours_in_range(employee_id, start, end)

    async def weekly_hours(self, employee_id: int) -> float:
        start, end = week_window(self.clock())
        return await self.hours_in_range(employee_id, start, end)
