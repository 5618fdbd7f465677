from datetime import datetime
from typing import Dict, Optional

from fastapi import APIRouter, Depends

from hrmaster.core.ids import as_object_id
from hrmaster.core.timezone_utils import get_local_now
from hrmaster.models.users import User
from hrmaster.routers.auth import get_current_user
from hrmaster.schemas.leave import BalanceOut, LeaveCreate, LeaveOut, LeaveReject
from hrmaster.services.leave_service import LeaveService

router = APIRouter(prefix="/leave", tags=["leave"])


@router.get("/requests")
async def list_requests(current_user: User = Depends(get_current_user)):
    """Own requests for employees, every request for admins."""
    leaves = await LeaveService.list_requests(current_user)
    ids = [as_object_id(i) for i in {l.user_id for l in leaves} if as_object_id(i)]
    names: Dict[str, str] = {
        str(u.id): u.full_name or u.username for u in await User.find({"_id": {"$in": ids}}).to_list()
    }
    return {"requests": [LeaveOut.from_doc(l, names.get(l.user_id)) for l in leaves]}


@router.get("/balance", response_model=BalanceOut)
async def get_balance(current_user: User = Depends(get_current_user), now: datetime = Depends(get_local_now)):
    balance = await LeaveService.get_or_create_balance(str(current_user.id), now.year)
    return BalanceOut.from_doc(balance)


@router.post("/request", status_code=201)
async def submit_request(data: LeaveCreate, current_user: User = Depends(get_current_user)):
    leave = await LeaveService.submit(current_user, data.type, data.start_date, data.end_date, data.reason)
    return {"message": "Leave request submitted", "leave": LeaveOut.from_doc(leave, current_user.full_name)}


@router.post("/approve/{leave_id}")
async def approve(leave_id: str, current_user: User = Depends(get_current_user)):
    leave = await LeaveService.approve(current_user, leave_id)
    return {"message": "Leave approved", "leave": LeaveOut.from_doc(leave)}


@router.post("/reject/{leave_id}")
async def reject(leave_id: str, data: Optional[LeaveReject] = None, current_user: User = Depends(get_current_user)):
    leave = await LeaveService.reject(current_user, leave_id, data.reason if data else None)
    return {"message": "Leave rejected", "leave": LeaveOut.from_doc(leave)}
