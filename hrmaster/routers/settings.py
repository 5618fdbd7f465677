from datetime import datetime

from fastapi import APIRouter, Depends

from hrmaster.core.errors import ValidationFailed
from hrmaster.core.timezone_utils import get_local_now
from hrmaster.models.users import User
from hrmaster.routers.auth import require_privileged
from hrmaster.schemas.org import SettingsUpdate
from hrmaster.services import calendar_service
from hrmaster.services.leave_service import LeaveService

router = APIRouter(prefix="/settings", tags=["settings"])


def _settings_out(current):
    return {
        "signup_enabled": current.signup_enabled,
        "default_sick_leave": current.default_sick_leave,
        "default_vacation_leave": current.default_vacation_leave,
        "default_personal_leave": current.default_personal_leave,
    }


@router.get("")
async def get_settings():
    # public: the signup page needs signup_enabled
    return _settings_out(await calendar_service.get_system_settings())


@router.put("")
async def update_settings(data: SettingsUpdate, current_user: User = Depends(require_privileged)):
    current = await calendar_service.get_system_settings()
    changes = data.model_dump(exclude_unset=True, exclude_none=True)
    for field, value in changes.items():
        if field.startswith("default_") and value < 0:
            raise ValidationFailed("Leave allocations cannot be negative")
        setattr(current, field, value)
    current.updated_at = datetime.utcnow()
    await current.save()
    return {"message": "Settings updated", "settings": _settings_out(current)}


@router.post("/apply-leave-defaults")
async def apply_leave_defaults(
    current_user: User = Depends(require_privileged), now: datetime = Depends(get_local_now)
):
    year = now.year
    updated = await LeaveService.apply_defaults(year)
    return {"message": "Leave defaults applied", "year": year, "updated": updated}
