import logging
from datetime import datetime
from typing import Optional

from pymongo.errors import DuplicateKeyError

from hrmaster.core.constants import MIN_PASSWORD_LENGTH, ROLE_ADMIN, ROLE_EMPLOYEE
from hrmaster.core.errors import (
    DuplicateResource, NotAuthenticated, NotAuthorized, SignupDisabled, ValidationFailed,
)
from hrmaster.core.security import get_password_hash, verify_password
from hrmaster.models.org import AppRole, Department, Zone
from hrmaster.models.users import User
from hrmaster.services import calendar_service
from hrmaster.services.leave_service import LeaveService

logger = logging.getLogger(__name__)


async def has_users() -> bool:
    return await User.find({}).count() > 0


async def generate_employee_id(now: Optional[datetime] = None) -> str:
    """EMP-<year>-<users created this year + 1>-<all users + 1>"""
    now = now or datetime.utcnow()
    year_start = datetime(now.year, 1, 1)
    next_year = datetime(now.year + 1, 1, 1)
    year_count = await User.find({"created_at": {"$gte": year_start, "$lt": next_year}}).count()
    total = await User.find({}).count()
    return f"EMP-{now.year}-{year_count + 1:03d}-{total + 1:04d}"


def validate_password(password: Optional[str]) -> None:
    if not password or len(password) < MIN_PASSWORD_LENGTH:
        raise ValidationFailed(f"Password must be at least {MIN_PASSWORD_LENGTH} characters")


async def _ensure_lookup(model, value: str, label: str) -> None:
    if not await model.find_one({"name": value}):
        raise ValidationFailed(f"Invalid {label}: {value}")


async def signup(
    username: str,
    email: str,
    password: str,
    full_name: str,
    department: str,
    position: str,
    location: str = "",
    phone: str = "",
    role: Optional[str] = None,
) -> User:
    bootstrap = not await has_users()
    if not bootstrap:
        current = await calendar_service.get_system_settings()
        if not current.signup_enabled:
            raise SignupDisabled()

    validate_password(password)
    if await User.find_one({"username": username}):
        raise DuplicateResource("Username already exists")
    if await User.find_one({"email": email}):
        raise DuplicateResource("Email already registered")

    # the first account has nothing to validate against yet
    if not bootstrap:
        await _ensure_lookup(Department, department, "department")
        await _ensure_lookup(AppRole, position, "position")
        if location:
            await _ensure_lookup(Zone, location, "location")

    user = User(
        username=username,
        email=email,
        hashed_password=get_password_hash(password),
        full_name=full_name,
        role=ROLE_ADMIN if bootstrap and role == ROLE_ADMIN else ROLE_EMPLOYEE,
        employee_id=await generate_employee_id(),
        department=department,
        position=position,
        location=location,
        phone=phone,
    )
    try:
        await user.insert()
    except DuplicateKeyError:
        raise DuplicateResource("User already exists")

    await LeaveService.get_or_create_balance(str(user.id), datetime.utcnow().year)
    logger.info("User %s signed up as %s (%s)", user.username, user.role, user.employee_id)
    return user


async def authenticate(username: str, password: str) -> User:
    user = await User.find_one({"username": username})
    if not user:
        # allow logging in with the email address as well
        user = await User.find_one({"email": username})
    if not user or not verify_password(password, user.hashed_password):
        raise NotAuthenticated("Invalid username or password")
    if not user.is_active:
        raise NotAuthorized("Account is disabled. Contact your administrator.")
    user.last_active = datetime.utcnow()
    await user.save()
    return user


async def change_password(user: User, current_password: str, new_password: str) -> None:
    if not verify_password(current_password or "", user.hashed_password):
        raise ValidationFailed("Current password is incorrect")
    validate_password(new_password)
    user.hashed_password = get_password_hash(new_password)
    user.updated_at = datetime.utcnow()
    await user.save()


async def update_profile(user: User, changes: dict) -> User:
    email = changes.get("email")
    if email and email != user.email:
        if await User.find_one({"email": email, "_id": {"$ne": user.id}}):
            raise DuplicateResource("Email already in use")
    if changes.get("location"):
        await _ensure_lookup(Zone, changes["location"], "location")

    for field in ("full_name", "email", "phone", "location"):
        if changes.get(field) is not None:
            setattr(user, field, changes[field])
    user.updated_at = datetime.utcnow()
    await user.save()
    return user


async def admin_update(user: User, changes: dict) -> User:
    """Privileged edit of an employee record, including enabling/disabling the account."""
    if changes.get("department"):
        await _ensure_lookup(Department, changes["department"], "department")
    if changes.get("position"):
        await _ensure_lookup(AppRole, changes["position"], "position")
    if changes.get("location"):
        await _ensure_lookup(Zone, changes["location"], "location")
    email = changes.get("email")
    if email and email != user.email and await User.find_one({"email": email, "_id": {"$ne": user.id}}):
        raise DuplicateResource("Email already in use")

    for field in ("full_name", "email", "department", "position", "location", "phone", "role", "is_active"):
        if changes.get(field) is not None:
            setattr(user, field, changes[field])
    user.updated_at = datetime.utcnow()
    await user.save()
    logger.info("Employee %s updated (%s)", user.id, ", ".join(sorted(k for k, v in changes.items() if v is not None)))
    return user
