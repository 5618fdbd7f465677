from pydantic import BaseModel, EmailStr
from typing import Optional, Literal
from datetime import datetime

from hrmaster.models.users import User


class SignupRequest(BaseModel):
    username: str
    email: EmailStr
    password: str
    full_name: str
    department: str
    position: str
    location: str = ""
    phone: str = ""
    # honored only for the first account
    role: Optional[Literal["employee", "admin"]] = None


class LoginRequest(BaseModel):
    username: str
    password: str


class ChangePasswordRequest(BaseModel):
    current_password: str
    new_password: str


class ProfileUpdate(BaseModel):
    full_name: Optional[str] = None
    email: Optional[EmailStr] = None
    phone: Optional[str] = None
    location: Optional[str] = None


class EmployeeUpdate(BaseModel):
    full_name: Optional[str] = None
    email: Optional[EmailStr] = None
    department: Optional[str] = None
    position: Optional[str] = None
    location: Optional[str] = None
    phone: Optional[str] = None
    role: Optional[Literal["employee", "hr_admin", "admin"]] = None
    is_active: Optional[bool] = None


class UserOut(BaseModel):
    id: str
    username: str
    email: str
    full_name: str
    role: str
    employee_id: str
    department: str
    position: str
    phone: str = ""
    location: str = ""
    is_active: bool
    join_date: datetime
    last_active: Optional[datetime] = None

    @classmethod
    def from_user(cls, user: User) -> "UserOut":
        data = user.model_dump(exclude={"id", "hashed_password", "created_at", "updated_at", "revision_id"})
        return cls(id=str(user.id), **data)


class Token(BaseModel):
    access_token: str
    token_type: str = "bearer"
    user: UserOut
