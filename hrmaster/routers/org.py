"""
Org Router - work schedule, holidays, special working days and lookup lists
"""
from fastapi import APIRouter, Depends

from hrmaster.models.org import AppRole, Department, Zone
from hrmaster.models.users import User
from hrmaster.routers.auth import require_privileged
from hrmaster.schemas.org import HolidayCreate, LookupCreate, LookupUpdate, ScheduleUpdate, SpecialDayCreate
from hrmaster.services import calendar_service, org_service

router = APIRouter(prefix="/org", tags=["org"])


def _schedule_out(schedule):
    return {
        "work_days": schedule.work_days,
        "work_start_time": schedule.work_start_time,
        "work_end_time": schedule.work_end_time,
    }


def _holiday_out(h):
    return {"id": str(h.id), "name": h.name, "date": h.date.date(), "description": h.description}


def _special_day_out(s):
    return {"id": str(s.id), "date": s.date.date(), "reason": s.reason}


def _lookup_out(item):
    out = {"id": str(item.id), "name": item.name, "description": item.description or ""}
    if isinstance(item, AppRole):
        out["protected"] = item.protected
    return out


# ==================== Schedule ====================

@router.get("/schedule")
async def get_schedule(current_user: User = Depends(require_privileged)):
    return _schedule_out(await calendar_service.get_schedule())


@router.put("/schedule")
async def update_schedule(data: ScheduleUpdate, current_user: User = Depends(require_privileged)):
    schedule = await calendar_service.update_schedule(data.work_days, data.work_start_time, data.work_end_time)
    return {"message": "Schedule updated", "schedule": _schedule_out(schedule)}


# ==================== Holidays ====================

@router.get("/holidays")
async def list_holidays(current_user: User = Depends(require_privileged)):
    return [_holiday_out(h) for h in await calendar_service.list_holidays()]


@router.post("/holidays", status_code=201)
async def add_holiday(data: HolidayCreate, current_user: User = Depends(require_privileged)):
    holiday = await calendar_service.add_holiday(data.name, data.date, data.description)
    return _holiday_out(holiday)


@router.delete("/holidays/{holiday_id}")
async def delete_holiday(holiday_id: str, current_user: User = Depends(require_privileged)):
    await calendar_service.delete_holiday(holiday_id)
    return {"id": holiday_id}


@router.get("/special-days")
async def list_special_days(current_user: User = Depends(require_privileged)):
    return [_special_day_out(s) for s in await calendar_service.list_special_days()]


@router.post("/special-days", status_code=201)
async def add_special_day(data: SpecialDayCreate, current_user: User = Depends(require_privileged)):
    special = await calendar_service.add_special_day(data.date, data.reason)
    return _special_day_out(special)


@router.delete("/special-days/{special_id}")
async def delete_special_day(special_id: str, current_user: User = Depends(require_privileged)):
    await calendar_service.delete_special_day(special_id)
    return {"id": special_id}


# ==================== Lookup lists ====================

def _register_lookup(path: str, model):
    async def list_items(current_user: User = Depends(require_privileged)):
        return [_lookup_out(i) for i in await org_service.list_items(model)]

    async def create_item(data: LookupCreate, current_user: User = Depends(require_privileged)):
        return _lookup_out(await org_service.create_item(model, data.name, data.description))

    async def update_item(item_id: str, data: LookupUpdate, current_user: User = Depends(require_privileged)):
        return _lookup_out(await org_service.update_item(model, item_id, data.name, data.description))

    async def delete_item(item_id: str, current_user: User = Depends(require_privileged)):
        return {"id": await org_service.delete_item(model, item_id)}

    router.add_api_route(f"/{path}", list_items, methods=["GET"], name=f"list_{path}")
    router.add_api_route(f"/{path}", create_item, methods=["POST"], status_code=201, name=f"create_{path}")
    router.add_api_route(f"/{path}/{{item_id}}", update_item, methods=["PATCH"], name=f"update_{path}")
    router.add_api_route(f"/{path}/{{item_id}}", delete_item, methods=["DELETE"], name=f"delete_{path}")


_register_lookup("departments", Department)
_register_lookup("zones", Zone)
_register_lookup("roles", AppRole)
