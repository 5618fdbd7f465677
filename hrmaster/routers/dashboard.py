"""
Dashboard Router - employee and admin statistics, activity feeds, rankings
"""
from datetime import datetime

from fastapi import APIRouter, Depends

from hrmaster.core.timezone_utils import get_local_now
from hrmaster.models.users import User
from hrmaster.routers.auth import get_current_user, require_privileged
from hrmaster.services.report_service import ReportService

router = APIRouter(prefix="/dashboard", tags=["dashboard"])


@router.get("/stats")
async def employee_stats(current_user: User = Depends(get_current_user), now: datetime = Depends(get_local_now)):
    return await ReportService.employee_stats(str(current_user.id), now)


@router.get("/activity")
async def employee_activity(current_user: User = Depends(get_current_user)):
    return {"activities": await ReportService.employee_activity(str(current_user.id))}


# ==================== Admin ====================

@router.get("/admin/stats")
async def admin_stats(current_user: User = Depends(require_privileged), now: datetime = Depends(get_local_now)):
    return await ReportService.admin_stats(now)


@router.get("/admin/today-breakdown")
async def today_breakdown(current_user: User = Depends(require_privileged), now: datetime = Depends(get_local_now)):
    return await ReportService.today_breakdown(now)


@router.get("/admin/activity")
async def admin_activity(current_user: User = Depends(require_privileged)):
    return {"activities": await ReportService.admin_activity(str(current_user.id))}


@router.get("/admin/not-checked-in-today")
async def not_checked_in_today(
    current_user: User = Depends(require_privileged), now: datetime = Depends(get_local_now)
):
    return {"employees": await ReportService.not_checked_in_today(now)}


@router.get("/admin/top-employees")
async def top_employees(current_user: User = Depends(require_privileged), now: datetime = Depends(get_local_now)):
    return await ReportService.top_employees(now)
