"""
Attendance engine: check-in / check-out, admin edits, personal notes and the
correction request workflow.
"""
import logging
from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal, ROUND_HALF_UP
from typing import Any, Dict, List, Optional

from pymongo.errors import DuplicateKeyError

from hrmaster.core.constants import LEAVE_DAY_HOURS
from hrmaster.core.errors import (
    AlreadyCheckedIn, AlreadyCheckedOut, AlreadyReviewed, DuplicatePendingCorrection,
    DuplicateResource, NoCheckIn, NonWorkingDay, NotFound, ValidationFailed,
)
from hrmaster.core.ids import as_object_id, get_or_404
from hrmaster.core.timezone_utils import day_start, local_day, to_local, to_storage
from hrmaster.models.attendance import Attendance, AttendanceCorrection
from hrmaster.models.leave import Leave
from hrmaster.models.users import User
from hrmaster.services import calendar_service
from hrmaster.services.notification_service import NotificationService

logger = logging.getLogger(__name__)

VALID_STATUSES = ("present", "late", "absent", "leave")


def compute_hours(check_in: Optional[datetime], check_out: Optional[datetime]) -> float:
    """Whole elapsed minutes as hours, rounded half-up to one decimal."""
    if not check_in or not check_out:
        return 0.0
    minutes = int((check_out - check_in).total_seconds() // 60)
    if minutes <= 0:
        return 0.0
    hours = (Decimal(minutes) / Decimal(60)).quantize(Decimal("0.1"), rounding=ROUND_HALF_UP)
    return float(hours)


@dataclass
class TodayStatus:
    attendance: Optional[Attendance]
    is_working_day: bool
    non_working_reason: Optional[str]


class AttendanceService:
    @staticmethod
    async def _find_today(user_id: str, now: datetime) -> Optional[Attendance]:
        return await Attendance.find_one({"user_id": user_id, "date": local_day(now)})

    @staticmethod
    async def list_records(
        user_id: str,
        start: Optional[datetime] = None,
        end: Optional[datetime] = None,
        limit: int = 50,
    ) -> List[Attendance]:
        query: Dict[str, Any] = {"user_id": user_id}
        if start and end:
            query["date"] = {"$gte": day_start(start), "$lte": day_start(end)}
        return await Attendance.find(query).sort("-date").limit(limit).to_list()

    @staticmethod
    async def today_status(user: User, now: datetime) -> TodayStatus:
        working = await calendar_service.resolve_working_day(local_day(now))
        attendance = await AttendanceService._find_today(str(user.id), now)
        return TodayStatus(attendance, working.is_working_day, working.reason)

    @staticmethod
    async def check_in(user: User, now: datetime) -> Attendance:
        user_id = str(user.id)
        existing = await AttendanceService._find_today(user_id, now)
        if existing and existing.check_in:
            raise AlreadyCheckedIn()

        schedule = await calendar_service.get_schedule()
        working = await calendar_service.resolve_working_day(local_day(now), schedule)
        if not working.is_working_day:
            raise NonWorkingDay(f"Cannot check in today. {working.reason}")

        late = calendar_service.is_late(to_local(to_storage(now)), schedule.work_start_time)
        status = "late" if late else "present"
        stamp = to_storage(now)

        if existing:
            existing.check_in = stamp
            existing.status = status
            existing.updated_at = datetime.utcnow()
            await existing.save()
            attendance = existing
        else:
            attendance = Attendance(user_id=user_id, date=local_day(now), check_in=stamp, status=status)
            try:
                await attendance.insert()
            except DuplicateKeyError:
                # a concurrent check-in won the unique (user_id, date) index
                raise AlreadyCheckedIn()

        if late:
            local_time = to_local(stamp).strftime("%I:%M %p")
            logger.info("Late check-in for user %s at %s", user_id, local_time)
            await NotificationService.notify(
                user_id,
                type="attendance",
                title="Late Check-in",
                message=f"You checked in late today at {local_time}",
            )
        return attendance

    @staticmethod
    async def check_out(user: User, now: datetime) -> Attendance:
        attendance = await AttendanceService._find_today(str(user.id), now)
        if not attendance or not attendance.check_in:
            raise NoCheckIn()
        if attendance.check_out:
            raise AlreadyCheckedOut()

        attendance.check_out = to_storage(now)
        attendance.hours = compute_hours(attendance.check_in, attendance.check_out)
        attendance.updated_at = datetime.utcnow()
        await attendance.save()
        return attendance

    @staticmethod
    async def save_note(user: User, attendance_id: str, note: Optional[str]) -> Attendance:
        if not note or not note.strip():
            raise ValidationFailed("Note is required")
        attendance = await AttendanceService._get_owned(user, attendance_id)
        attendance.notes = note.strip()
        attendance.updated_at = datetime.utcnow()
        await attendance.save()
        return attendance

    @staticmethod
    async def _get_owned(user: User, attendance_id: str) -> Attendance:
        oid = as_object_id(attendance_id)
        attendance = await Attendance.find_one({"_id": oid, "user_id": str(user.id)}) if oid else None
        if not attendance:
            raise NotFound("Attendance record not found")
        return attendance

    @staticmethod
    async def admin_update(admin: User, attendance_id: str, changes: Dict[str, Any]) -> Attendance:
        """
        Apply an admin edit. `changes` holds only the fields the caller sent
        (status, check_in, check_out, date); absent/leave rows never keep times.
        """
        attendance = await get_or_404(Attendance, attendance_id, "Attendance record not found")

        status = changes.get("status")
        if status is not None:
            if status not in VALID_STATUSES:
                raise ValidationFailed("Invalid status")
            attendance.status = status

        if attendance.status in ("absent", "leave"):
            attendance.check_in = None
            attendance.check_out = None
            attendance.hours = LEAVE_DAY_HOURS if attendance.status == "leave" else 0
        else:
            if "check_in" in changes:
                attendance.check_in = to_storage(changes["check_in"]) if changes["check_in"] else None
            if "check_out" in changes:
                attendance.check_out = to_storage(changes["check_out"]) if changes["check_out"] else None
            attendance.hours = compute_hours(attendance.check_in, attendance.check_out)

        if changes.get("date") is not None:
            attendance.date = day_start(changes["date"])

        attendance.updated_at = datetime.utcnow()
        try:
            await attendance.save()
        except DuplicateKeyError:
            raise DuplicateResource("An attendance record already exists for that day")

        await NotificationService.notify(
            attendance.user_id,
            type="attendance",
            title="Attendance Updated",
            message=f"Your attendance record for {attendance.date.strftime('%b %d, %Y')} was updated by admin.",
            actor=str(admin.id),
        )
        return attendance

    # ==================== Corrections ====================

    @staticmethod
    async def request_correction(user: User, attendance_id: str, reason: Optional[str]) -> AttendanceCorrection:
        if not reason or not reason.strip():
            raise ValidationFailed("Reason is required")
        attendance = await AttendanceService._get_owned(user, attendance_id)

        # read-then-write: two simultaneous submissions can both pass this check
        pending = await AttendanceCorrection.find_one(
            {"attendance_id": str(attendance.id), "status": "pending"}
        )
        if pending:
            raise DuplicatePendingCorrection()

        correction = AttendanceCorrection(
            user_id=str(user.id),
            attendance_id=str(attendance.id),
            reason=reason.strip(),
        )
        await correction.insert()

        await NotificationService.notify_privileged(
            type="attendance",
            title="New Attendance Correction Request",
            message=f"{user.full_name} submitted an attendance correction request for review.",
            related_user=str(user.id),
            related_id=str(correction.id),
        )
        return correction

    @staticmethod
    async def list_corrections() -> List[AttendanceCorrection]:
        return await AttendanceCorrection.find({}).sort("-created_at").to_list()

    @staticmethod
    async def review_correction(
        reviewer: User, correction_id: str, status: str, review_notes: Optional[str] = None
    ) -> AttendanceCorrection:
        if status not in ("approved", "rejected"):
            raise ValidationFailed("Invalid status")
        correction = await get_or_404(AttendanceCorrection, correction_id, "Correction request not found")
        if correction.status != "pending":
            raise AlreadyReviewed()

        notes = (review_notes or "").strip()
        correction.status = status
        correction.reviewed_by = str(reviewer.id)
        correction.reviewed_at = datetime.utcnow()
        correction.review_notes = notes
        correction.updated_at = datetime.utcnow()
        await correction.save()
        logger.info("Correction %s %s by %s", correction.id, status, reviewer.id)

        suffix = f" Note: {notes}" if notes else ""
        await NotificationService.notify(
            correction.user_id,
            type="attendance",
            title=f"Correction Request {'Approved' if status == 'approved' else 'Rejected'}",
            message=f"Your attendance correction request has been {status}.{suffix}",
            actor=str(reviewer.id),
            related_id=str(correction.id),
        )
        return correction

    # ==================== End-of-day job ====================

    @staticmethod
    async def mark_absent(now: datetime) -> Dict[str, Any]:
        """
        On a working day, give every user without an attendance row a
        'leave' row (approved leave covering today) or an 'absent' row.
        """
        today = local_day(now)
        working = await calendar_service.resolve_working_day(today)
        if not working.is_working_day:
            return {"is_working_day": False, "marked_absent": 0, "marked_leave": 0}

        users = await User.find({}).to_list()
        todays = await Attendance.find({"date": today}).to_list()
        recorded = {a.user_id for a in todays}
        missing = [u for u in users if str(u.id) not in recorded]

        on_leave = await Leave.find(
            {"status": "approved", "start_date": {"$lte": today}, "end_date": {"$gte": today}}
        ).to_list()
        on_leave_ids = {l.user_id for l in on_leave}

        leave_users = [u for u in missing if str(u.id) in on_leave_ids]
        absent_users = [u for u in missing if str(u.id) not in on_leave_ids]

        rows = [
            Attendance(user_id=str(u.id), date=today, status="leave", hours=LEAVE_DAY_HOURS,
                       notes="Auto-marked on leave (Approved Leave)")
            for u in leave_users
        ] + [
            Attendance(user_id=str(u.id), date=today, status="absent", hours=0,
                       notes="Auto-marked absent by system")
            for u in absent_users
        ]
        if rows:
            await Attendance.insert_many(rows)
        logger.info("Absent marking for %s: %d absent, %d on leave", today.date(), len(absent_users), len(leave_users))

        return {
            "is_working_day": True,
            "marked_absent": len(absent_users),
            "marked_leave": len(leave_users),
            "absent_users": [{"id": str(u.id), "name": u.full_name} for u in absent_users],
            "leave_users": [{"id": str(u.id), "name": u.full_name} for u in leave_users],
        }
