from datetime import date, datetime
from typing import Optional

from fastapi import APIRouter, Depends, Query

from hrmaster.core.ids import get_or_404
from hrmaster.core.timezone_utils import day_start, get_local_now, local_day, month_bounds
from hrmaster.models.users import User
from hrmaster.routers.auth import require_privileged
from hrmaster.schemas.attendance import AttendanceOut
from hrmaster.schemas.users import EmployeeUpdate, UserOut
from hrmaster.services import user_service
from hrmaster.services.attendance_service import AttendanceService
from hrmaster.services.report_service import ReportService

router = APIRouter(prefix="/employees", tags=["employees"])


@router.get("")
async def list_employees(current_user: User = Depends(require_privileged)):
    users = await User.find({}).sort("+full_name").to_list()
    return {"employees": [UserOut.from_user(u) for u in users]}


# declared before "/{employee_id}" so it is not captured as an id
@router.get("/summary")
async def employees_summary(
    start_date: Optional[date] = Query(None),
    end_date: Optional[date] = Query(None),
    current_user: User = Depends(require_privileged),
    now: datetime = Depends(get_local_now),
):
    default_start, default_end = month_bounds(local_day(now))
    start = day_start(start_date) if start_date else default_start
    end = day_start(end_date) if end_date else default_end
    summaries = await ReportService.employees_summary(start, end)
    return {"start_date": start.date(), "end_date": end.date(), "summaries": summaries}


@router.get("/{employee_id}", response_model=UserOut)
async def get_employee(employee_id: str, current_user: User = Depends(require_privileged)):
    employee = await get_or_404(User, employee_id, "Employee not found")
    return UserOut.from_user(employee)


@router.patch("/{employee_id}", response_model=UserOut)
async def update_employee(
    employee_id: str, data: EmployeeUpdate, current_user: User = Depends(require_privileged)
):
    employee = await get_or_404(User, employee_id, "Employee not found")
    updated = await user_service.admin_update(employee, data.model_dump(exclude_unset=True))
    return UserOut.from_user(updated)


@router.get("/{employee_id}/attendance")
async def employee_attendance(
    employee_id: str,
    start_date: Optional[date] = Query(None),
    end_date: Optional[date] = Query(None),
    limit: int = Query(50, ge=1, le=500),
    current_user: User = Depends(require_privileged),
):
    employee = await get_or_404(User, employee_id, "Employee not found")
    records = await AttendanceService.list_records(str(employee.id), start_date, end_date, limit)
    return {"attendance": [AttendanceOut.from_doc(r) for r in records]}
