"""
Attendance Router - check-in/out, notes, corrections and admin edits
"""
import logging
from datetime import date, datetime
from typing import Dict, Optional

from fastapi import APIRouter, Depends, Query

from hrmaster.core.ids import as_object_id
from hrmaster.core.timezone_utils import get_local_now, to_local
from hrmaster.models.attendance import Attendance
from hrmaster.models.users import User
from hrmaster.routers.auth import get_current_user, require_privileged
from hrmaster.schemas.attendance import (
    AttendanceAdminUpdate, AttendanceOut, CorrectionOut, CorrectionRequestIn,
    CorrectionReviewIn, NoteIn, TodayOut,
)
from hrmaster.services.attendance_service import AttendanceService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/attendance", tags=["attendance"])


@router.get("")
async def list_attendance(
    start_date: Optional[date] = Query(None),
    end_date: Optional[date] = Query(None),
    limit: int = Query(50, ge=1, le=500),
    current_user: User = Depends(get_current_user),
):
    records = await AttendanceService.list_records(str(current_user.id), start_date, end_date, limit)
    return {"attendance": [AttendanceOut.from_doc(r) for r in records]}


@router.post("/checkin")
async def check_in(
    current_user: User = Depends(get_current_user),
    now: datetime = Depends(get_local_now),
):
    attendance = await AttendanceService.check_in(current_user, now)
    return {"message": "Checked in successfully", "attendance": AttendanceOut.from_doc(attendance)}


@router.post("/checkout")
async def check_out(
    current_user: User = Depends(get_current_user),
    now: datetime = Depends(get_local_now),
):
    attendance = await AttendanceService.check_out(current_user, now)
    return {"message": "Checked out successfully", "attendance": AttendanceOut.from_doc(attendance)}


@router.get("/today", response_model=TodayOut)
async def today(
    current_user: User = Depends(get_current_user),
    now: datetime = Depends(get_local_now),
):
    status = await AttendanceService.today_status(current_user, now)
    return TodayOut(
        attendance=AttendanceOut.from_doc(status.attendance) if status.attendance else None,
        is_working_day=status.is_working_day,
        non_working_reason=status.non_working_reason,
    )


@router.post("/{attendance_id}/note")
async def save_note(attendance_id: str, data: NoteIn, current_user: User = Depends(get_current_user)):
    attendance = await AttendanceService.save_note(current_user, attendance_id, data.notes)
    return {"message": "Note saved", "attendance": AttendanceOut.from_doc(attendance)}


@router.post("/{attendance_id}/request-correction", status_code=201)
async def request_correction(
    attendance_id: str, data: CorrectionRequestIn, current_user: User = Depends(get_current_user)
):
    correction = await AttendanceService.request_correction(current_user, attendance_id, data.reason)
    return {"message": "Correction request submitted", "correction": CorrectionOut.from_doc(correction)}


def _clock(dt: Optional[datetime]) -> str:
    return to_local(dt).strftime("%I:%M %p") if dt else "-"


@router.get("/corrections/pending")
async def list_corrections(current_user: User = Depends(require_privileged)):
    """All corrections, any status, joined with requester, record and reviewer."""
    corrections = await AttendanceService.list_corrections()

    user_ids = {c.user_id for c in corrections} | {c.reviewed_by for c in corrections if c.reviewed_by}
    users: Dict[str, User] = {
        str(u.id): u
        for u in await User.find({"_id": {"$in": [as_object_id(i) for i in user_ids if as_object_id(i)]}}).to_list()
    }
    attendance_ids = [as_object_id(c.attendance_id) for c in corrections if as_object_id(c.attendance_id)]
    records = {str(a.id): a for a in await Attendance.find({"_id": {"$in": attendance_ids}}).to_list()}

    result = []
    for c in corrections:
        requester = users.get(c.user_id)
        reviewer = users.get(c.reviewed_by) if c.reviewed_by else None
        record = records.get(c.attendance_id)
        result.append({
            **CorrectionOut.from_doc(c).model_dump(),
            "user": {
                "name": (requester.full_name or requester.username) if requester else "",
                "username": requester.username if requester else None,
                "email": requester.email if requester else None,
                "employee_id": requester.employee_id if requester else None,
                "position": requester.position if requester else None,
                "department": requester.department if requester else None,
            },
            "attendance": {
                "id": str(record.id),
                "date": record.date.strftime("%b %d, %Y"),
                "check_in": _clock(record.check_in),
                "check_out": _clock(record.check_out),
                "hours": f"{record.hours:.1f}",
                "status": record.status,
            } if record else None,
            "reviewer": {"name": reviewer.full_name or reviewer.username} if reviewer else None,
        })
    return {"corrections": result}


@router.post("/corrections/{correction_id}/review")
async def review_correction(
    correction_id: str, data: CorrectionReviewIn, current_user: User = Depends(require_privileged)
):
    correction = await AttendanceService.review_correction(
        current_user, correction_id, data.status, data.review_notes
    )
    return {"message": f"Correction request {correction.status}", "correction": CorrectionOut.from_doc(correction)}


@router.put("/{attendance_id}")
async def admin_update(
    attendance_id: str, data: AttendanceAdminUpdate, current_user: User = Depends(require_privileged)
):
    changes = {field: getattr(data, field) for field in data.model_fields_set}
    attendance = await AttendanceService.admin_update(current_user, attendance_id, changes)
    return {"message": "Attendance updated", "attendance": AttendanceOut.from_doc(attendance)}
