from datetime import datetime
from typing import List, Optional

import pymongo
from beanie import Document, Indexed
from pydantic import Field
from pymongo import IndexModel

from hrmaster.core.constants import (
    DEFAULT_WORK_DAYS, DEFAULT_WORK_START, DEFAULT_WORK_END,
    DEFAULT_SICK_LEAVE, DEFAULT_VACATION_LEAVE, DEFAULT_PERSONAL_LEAVE,
)


# ================= Singletons =================
class WorkSchedule(Document):
    work_days: List[int] = Field(default_factory=lambda: list(DEFAULT_WORK_DAYS))
    work_start_time: str = DEFAULT_WORK_START
    work_end_time: str = DEFAULT_WORK_END
    updated_at: datetime = Field(default_factory=datetime.utcnow)

    class Settings:
        name = "work_schedules"


class SystemSettings(Document):
    signup_enabled: bool = True
    default_sick_leave: int = DEFAULT_SICK_LEAVE
    default_vacation_leave: int = DEFAULT_VACATION_LEAVE
    default_personal_leave: int = DEFAULT_PERSONAL_LEAVE
    updated_at: datetime = Field(default_factory=datetime.utcnow)

    class Settings:
        name = "system_settings"


# ================= Calendar =================
class Holiday(Document):
    name: str
    date: datetime
    description: Optional[str] = None
    created_at: datetime = Field(default_factory=datetime.utcnow)

    class Settings:
        name = "holidays"
        indexes = [IndexModel([("date", pymongo.ASCENDING)], unique=True)]


class SpecialWorkingDay(Document):
    date: datetime
    reason: Optional[str] = None
    created_at: datetime = Field(default_factory=datetime.utcnow)

    class Settings:
        name = "special_working_days"
        indexes = [IndexModel([("date", pymongo.ASCENDING)], unique=True)]


# ================= Lookup lists =================
class Department(Document):
    name: Indexed(str, unique=True)
    description: str = ""
    created_at: datetime = Field(default_factory=datetime.utcnow)

    class Settings:
        name = "departments"


class Zone(Document):
    name: Indexed(str, unique=True)
    description: str = ""
    created_at: datetime = Field(default_factory=datetime.utcnow)

    class Settings:
        name = "zones"


class AppRole(Document):
    name: Indexed(str, unique=True)
    description: str = ""
    protected: bool = False
    created_at: datetime = Field(default_factory=datetime.utcnow)

    class Settings:
        name = "roles"
