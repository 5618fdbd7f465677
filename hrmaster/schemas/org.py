from pydantic import BaseModel
from typing import List, Optional
import datetime as dt

from hrmaster.models.notifications import NotificationType


class ScheduleUpdate(BaseModel):
    work_days: Optional[List[int]] = None
    work_start_time: Optional[str] = None
    work_end_time: Optional[str] = None


class HolidayCreate(BaseModel):
    name: str
    date: dt.date
    description: Optional[str] = None


class SpecialDayCreate(BaseModel):
    date: dt.date
    reason: Optional[str] = None


class LookupCreate(BaseModel):
    name: Optional[str] = None
    description: Optional[str] = None


class LookupUpdate(BaseModel):
    name: Optional[str] = None
    description: Optional[str] = None


class SettingsUpdate(BaseModel):
    signup_enabled: Optional[bool] = None
    default_sick_leave: Optional[int] = None
    default_vacation_leave: Optional[int] = None
    default_personal_leave: Optional[int] = None


class NotificationCreate(BaseModel):
    user_id: Optional[str] = None
    type: NotificationType = "system"
    title: str
    message: str
    related_user: Optional[str] = None


class MessageCreate(BaseModel):
    content: Optional[str] = None
