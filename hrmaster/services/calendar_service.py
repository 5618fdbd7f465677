"""
Work calendar: the schedule / settings singletons and working-day resolution.
"""
import logging
from dataclasses import dataclass
from datetime import date, datetime
from typing import List, Optional

from pymongo.errors import DuplicateKeyError

from hrmaster.core.constants import DAY_NAMES
from hrmaster.core.errors import ConflictingDayType, DuplicateResource, ValidationFailed
from hrmaster.core.ids import get_or_404
from hrmaster.core.timezone_utils import day_start, js_weekday, parse_hhmm
from hrmaster.models.org import WorkSchedule, SystemSettings, Holiday, SpecialWorkingDay
from hrmaster.services.notification_service import NotificationService

logger = logging.getLogger(__name__)


@dataclass
class WorkingDay:
    is_working_day: bool
    reason: Optional[str] = None


async def get_schedule() -> WorkSchedule:
    schedule = await WorkSchedule.find_one({})
    if not schedule:
        schedule = WorkSchedule()
        await schedule.insert()
    return schedule


async def get_system_settings() -> SystemSettings:
    current = await SystemSettings.find_one({})
    if not current:
        current = SystemSettings()
        await current.insert()
    return current


async def ensure_singletons() -> None:
    """Create the schedule and settings documents at startup."""
    await get_schedule()
    await get_system_settings()


async def resolve_working_day(d: date, schedule: Optional[WorkSchedule] = None) -> WorkingDay:
    """
    Special working day beats holiday, holiday beats the weekly schedule.
    """
    day = day_start(d)
    if await SpecialWorkingDay.find_one(SpecialWorkingDay.date == day):
        return WorkingDay(True)

    holiday = await Holiday.find_one(Holiday.date == day)
    if holiday:
        return WorkingDay(False, f"Holiday: {holiday.name}")

    schedule = schedule or await get_schedule()
    if js_weekday(day.date()) in schedule.work_days:
        return WorkingDay(True)
    return WorkingDay(False, "Weekend / Off Day")


def is_late(local_now: datetime, work_start_time: str) -> bool:
    """Late iff the local HH:MM is strictly after the schedule start."""
    start_hour, start_minute = parse_hhmm(work_start_time)
    return (local_now.hour, local_now.minute) > (start_hour, start_minute)


def _validate_hhmm(value: str) -> str:
    try:
        hour, minute = parse_hhmm(value)
    except (ValueError, AttributeError):
        raise ValidationFailed(f"Invalid time '{value}', expected HH:mm")
    if not (0 <= hour <= 23 and 0 <= minute <= 59):
        raise ValidationFailed(f"Invalid time '{value}', expected HH:mm")
    return f"{hour:02d}:{minute:02d}"


async def update_schedule(
    work_days: Optional[List[int]] = None,
    work_start_time: Optional[str] = None,
    work_end_time: Optional[str] = None,
) -> WorkSchedule:
    schedule = await get_schedule()
    if work_days:
        if any(d < 0 or d > 6 for d in work_days):
            raise ValidationFailed("Work days must be between 0 (Sunday) and 6 (Saturday)")
        schedule.work_days = sorted(set(work_days))
    if work_start_time:
        schedule.work_start_time = _validate_hhmm(work_start_time)
    if work_end_time:
        schedule.work_end_time = _validate_hhmm(work_end_time)
    schedule.updated_at = datetime.utcnow()
    await schedule.save()

    days = ", ".join(DAY_NAMES[d] for d in schedule.work_days)
    await NotificationService.broadcast(
        "Work Schedule Updated",
        f"The organization work schedule has been updated. Working days: {days}. "
        f"New hours: {schedule.work_start_time} - {schedule.work_end_time}.",
    )
    return schedule


# ==================== Holidays / special days ====================

async def list_holidays() -> List[Holiday]:
    return await Holiday.find({}).sort("+date").to_list()


async def add_holiday(name: str, d: date, description: Optional[str] = None) -> Holiday:
    day = day_start(d)
    if await SpecialWorkingDay.find_one(SpecialWorkingDay.date == day):
        raise ConflictingDayType(
            "This date is already marked as a Special Working Day. Please remove it first."
        )
    holiday = Holiday(name=name, date=day, description=description)
    try:
        await holiday.insert()
    except DuplicateKeyError:
        raise DuplicateResource("Holiday for this date already exists")

    await NotificationService.broadcast(
        "New Holiday Added",
        f"A new holiday \"{name}\" has been added for {day.strftime('%b %d, %Y')}.",
    )
    return holiday


async def delete_holiday(holiday_id) -> None:
    holiday = await get_or_404(Holiday, holiday_id, "Holiday not found")
    await holiday.delete()


async def list_special_days() -> List[SpecialWorkingDay]:
    return await SpecialWorkingDay.find({}).sort("+date").to_list()


async def add_special_day(d: date, reason: Optional[str] = None) -> SpecialWorkingDay:
    day = day_start(d)
    existing_holiday = await Holiday.find_one(Holiday.date == day)
    if existing_holiday:
        raise ConflictingDayType(
            f"This date is already marked as a Holiday ({existing_holiday.name}). Please remove it first."
        )
    special = SpecialWorkingDay(date=day, reason=reason)
    try:
        await special.insert()
    except DuplicateKeyError:
        raise DuplicateResource("Special working day for this date already exists")

    suffix = f": {reason}" if reason else ""
    await NotificationService.broadcast(
        "Special Working Day",
        f"A special working day has been scheduled for {day.strftime('%b %d, %Y')}{suffix}.",
    )
    return special


async def delete_special_day(special_id) -> None:
    special = await get_or_404(SpecialWorkingDay, special_id, "Special working day not found")
    await special.delete()
