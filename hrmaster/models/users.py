from beanie import Document, Indexed
from pydantic import Field
from datetime import datetime
from typing import Optional, Literal

UserRole = Literal["employee", "hr_admin", "admin"]


class User(Document):
    username: Indexed(str, unique=True)
    email: Indexed(str, unique=True)
    hashed_password: str
    full_name: str
    role: UserRole = "employee"
    is_active: bool = True

    # EMP-<year>-<yearSeq>-<globalSeq>, assigned once at signup
    employee_id: Indexed(str, unique=True)
    department: str
    position: str
    phone: str = ""
    location: str = ""

    join_date: datetime = Field(default_factory=datetime.utcnow)
    last_active: Optional[datetime] = None
    created_at: datetime = Field(default_factory=datetime.utcnow)
    updated_at: datetime = Field(default_factory=datetime.utcnow)

    class Settings:
        name = "users"
