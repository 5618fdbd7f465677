from fastapi import APIRouter, Depends

from hrmaster.models.org import Zone
from hrmaster.models.users import User
from hrmaster.routers.auth import get_current_user
from hrmaster.schemas.users import ChangePasswordRequest, ProfileUpdate, UserOut
from hrmaster.services import user_service

router = APIRouter(prefix="/profile", tags=["profile"])


async def _profile_out(user: User):
    zone = await Zone.find_one({"name": user.location}) if user.location else None
    return {
        **UserOut.from_user(user).model_dump(),
        "zone": {"id": str(zone.id), "name": zone.name, "description": zone.description} if zone else None,
    }


@router.get("")
async def get_profile(current_user: User = Depends(get_current_user)):
    return {"profile": await _profile_out(current_user)}


@router.put("")
async def update_profile(data: ProfileUpdate, current_user: User = Depends(get_current_user)):
    user = await user_service.update_profile(current_user, data.model_dump(exclude_unset=True))
    return {"message": "Profile updated", "profile": await _profile_out(user)}


@router.post("/change-password")
async def change_password(data: ChangePasswordRequest, current_user: User = Depends(get_current_user)):
    await user_service.change_password(current_user, data.current_password, data.new_password)
    return {"message": "Password changed successfully"}
