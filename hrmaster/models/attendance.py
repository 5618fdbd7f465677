from datetime import datetime
from typing import Optional, Literal

import pymongo
from beanie import Document
from pydantic import Field
from pymongo import IndexModel

AttendanceStatus = Literal["present", "late", "absent", "leave"]
CorrectionStatus = Literal["pending", "approved", "rejected"]


class Attendance(Document):
    # store plain user ids to simplify queries and avoid Link resolution
    user_id: str
    # local calendar day, naive midnight
    date: datetime
    check_in: Optional[datetime] = None
    check_out: Optional[datetime] = None
    hours: float = 0
    status: AttendanceStatus
    notes: str = ""
    created_at: datetime = Field(default_factory=datetime.utcnow)
    updated_at: datetime = Field(default_factory=datetime.utcnow)

    class Settings:
        name = "attendances"
        indexes = [
            # one row per user per day
            IndexModel([("user_id", pymongo.ASCENDING), ("date", pymongo.ASCENDING)], unique=True),
            IndexModel([("date", pymongo.DESCENDING)]),
        ]


class AttendanceCorrection(Document):
    user_id: str
    attendance_id: str
    reason: str
    status: CorrectionStatus = "pending"
    reviewed_by: Optional[str] = None
    reviewed_at: Optional[datetime] = None
    review_notes: str = ""
    created_at: datetime = Field(default_factory=datetime.utcnow)
    updated_at: datetime = Field(default_factory=datetime.utcnow)

    class Settings:
        name = "attendance_corrections"
        indexes = [
            IndexModel([("user_id", pymongo.ASCENDING), ("status", pymongo.ASCENDING), ("created_at", pymongo.DESCENDING)]),
            IndexModel([("attendance_id", pymongo.ASCENDING), ("status", pymongo.ASCENDING)]),
        ]
