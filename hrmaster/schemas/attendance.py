from pydantic import BaseModel
from typing import Optional, Literal
import datetime as dt
from datetime import datetime

from hrmaster.core.timezone_utils import format_datetime_local
from hrmaster.models.attendance import Attendance, AttendanceCorrection


class NoteIn(BaseModel):
    notes: Optional[str] = None


class CorrectionRequestIn(BaseModel):
    reason: Optional[str] = None


class CorrectionReviewIn(BaseModel):
    status: str
    review_notes: Optional[str] = None


class AttendanceAdminUpdate(BaseModel):
    """Only the fields present in the request body are applied."""
    status: Optional[Literal["present", "late", "absent", "leave"]] = None
    check_in: Optional[datetime] = None
    check_out: Optional[datetime] = None
    date: Optional[dt.date] = None


class AttendanceOut(BaseModel):
    id: str
    user_id: str
    date: dt.date
    check_in: Optional[str] = None
    check_out: Optional[str] = None
    hours: float
    status: str
    notes: str = ""

    @classmethod
    def from_doc(cls, a: Attendance) -> "AttendanceOut":
        return cls(
            id=str(a.id),
            user_id=a.user_id,
            date=a.date.date(),
            check_in=format_datetime_local(a.check_in),
            check_out=format_datetime_local(a.check_out),
            hours=a.hours,
            status=a.status,
            notes=a.notes,
        )


class TodayOut(BaseModel):
    attendance: Optional[AttendanceOut] = None
    is_working_day: bool
    non_working_reason: Optional[str] = None


class CorrectionOut(BaseModel):
    id: str
    user_id: str
    attendance_id: str
    reason: str
    status: str
    reviewed_by: Optional[str] = None
    reviewed_at: Optional[datetime] = None
    review_notes: str = ""
    created_at: datetime

    @classmethod
    def from_doc(cls, c: AttendanceCorrection) -> "CorrectionOut":
        return cls(
            id=str(c.id),
            user_id=c.user_id,
            attendance_id=c.attendance_id,
            reason=c.reason,
            status=c.status,
            reviewed_by=c.reviewed_by,
            reviewed_at=c.reviewed_at,
            review_notes=c.review_notes,
            created_at=c.created_at,
        )
