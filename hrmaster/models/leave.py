from datetime import datetime
from typing import Optional, Literal

import pymongo
from beanie import Document
from pydantic import BaseModel, Field
from pymongo import IndexModel

LeaveType = Literal["Sick Leave", "Vacation", "Personal Leave", "Other"]
LeaveStatus = Literal["pending", "approved", "rejected"]


class Leave(Document):
    user_id: str
    type: LeaveType
    # calendar days, naive midnight
    start_date: datetime
    end_date: datetime
    days: int
    reason: str
    status: LeaveStatus = "pending"
    applied_on: datetime = Field(default_factory=datetime.utcnow)
    approved_by: Optional[str] = None
    approval_date: Optional[datetime] = None
    rejected_by: Optional[str] = None
    rejection_reason: str = ""
    updated_at: datetime = Field(default_factory=datetime.utcnow)

    class Settings:
        name = "leaves"
        indexes = [
            IndexModel([("user_id", pymongo.ASCENDING), ("applied_on", pymongo.DESCENDING)]),
            IndexModel([("status", pymongo.ASCENDING), ("start_date", pymongo.ASCENDING)]),
        ]


class BalanceBucket(BaseModel):
    used: int = 0
    total: int = 0

    @property
    def available(self) -> int:
        return self.total - self.used


class LeaveBalance(Document):
    user_id: str
    year: int
    sick_leave: BalanceBucket
    vacation: BalanceBucket
    personal_leave: BalanceBucket
    created_at: datetime = Field(default_factory=datetime.utcnow)
    updated_at: datetime = Field(default_factory=datetime.utcnow)

    class Settings:
        name = "leave_balances"
        indexes = [
            IndexModel([("user_id", pymongo.ASCENDING), ("year", pymongo.ASCENDING)], unique=True),
        ]
