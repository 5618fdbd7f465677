import hmac
import logging
from datetime import datetime
from typing import Optional

from fastapi import APIRouter, Depends, Header, Request

from hrmaster.core.config import settings
from hrmaster.core.timezone_utils import get_local_now
from hrmaster.routers.auth import get_current_user_dependency
from hrmaster.services.attendance_service import AttendanceService
from hrmaster.services.permission import PermissionService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/cron", tags=["cron"])


async def verify_cron_caller(request: Request, authorization: Optional[str] = Header(None)) -> None:
    """Scheduler calls carry the shared secret; anyone else must be an admin."""
    if settings.CRON_SECRET and authorization:
        expected = f"Bearer {settings.CRON_SECRET}"
        if hmac.compare_digest(authorization, expected):
            return
    user = await get_current_user_dependency(request, authorization)
    PermissionService.ensure_privileged(user)


@router.post("/mark-absent", dependencies=[Depends(verify_cron_caller)])
async def mark_absent(now: datetime = Depends(get_local_now)):
    result = await AttendanceService.mark_absent(now)
    if not result["is_working_day"]:
        return {"message": "Not a working day, skipped", **result}
    return {"message": "Absent marking completed", **result}
