from pydantic import BaseModel
from typing import Optional
from datetime import date, datetime

from hrmaster.models.leave import Leave, LeaveBalance


class LeaveCreate(BaseModel):
    type: Optional[str] = None
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    reason: Optional[str] = None


class LeaveReject(BaseModel):
    reason: Optional[str] = None


class LeaveOut(BaseModel):
    id: str
    user_id: str
    user_name: Optional[str] = None
    type: str
    start_date: date
    end_date: date
    days: int
    reason: str
    status: str
    applied_on: datetime
    approved_by: Optional[str] = None
    approval_date: Optional[datetime] = None
    rejection_reason: str = ""

    @classmethod
    def from_doc(cls, leave: Leave, user_name: Optional[str] = None) -> "LeaveOut":
        return cls(
            id=str(leave.id),
            user_id=leave.user_id,
            user_name=user_name,
            type=leave.type,
            start_date=leave.start_date.date(),
            end_date=leave.end_date.date(),
            days=leave.days,
            reason=leave.reason,
            status=leave.status,
            applied_on=leave.applied_on,
            approved_by=leave.approved_by,
            approval_date=leave.approval_date,
            rejection_reason=leave.rejection_reason,
        )


class BucketOut(BaseModel):
    used: int
    total: int
    available: int


class BalanceOut(BaseModel):
    year: int
    sick_leave: BucketOut
    vacation: BucketOut
    personal_leave: BucketOut

    @classmethod
    def from_doc(cls, balance: LeaveBalance) -> "BalanceOut":
        def bucket(b):
            return BucketOut(used=b.used, total=b.total, available=b.available)

        return cls(
            year=balance.year,
            sick_leave=bucket(balance.sick_leave),
            vacation=bucket(balance.vacation),
            personal_leave=bucket(balance.personal_leave),
        )
