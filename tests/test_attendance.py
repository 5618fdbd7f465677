from datetime import date, datetime

import pytest

from hrmaster.core.errors import AlreadyCheckedIn, AlreadyCheckedOut, NoCheckIn, NonWorkingDay
from hrmaster.core.timezone_utils import day_start
from hrmaster.models.attendance import Attendance
from hrmaster.models.notifications import Notification
from hrmaster.services import calendar_service
from hrmaster.services.attendance_service import AttendanceService, compute_hours

from conftest import auth, local, make_user

pytestmark = pytest.mark.anyio


def test_compute_hours_ninety_minutes():
    start = datetime(2026, 3, 4, 9, 0)
    assert compute_hours(start, datetime(2026, 3, 4, 10, 30)) == 1.5


def test_compute_hours_rounds_half_up():
    start = datetime(2026, 3, 4, 9, 0)
    # 123 minutes = 2.05h
    assert compute_hours(start, datetime(2026, 3, 4, 11, 3)) == 2.1
    # 59 whole minutes
    assert compute_hours(start, datetime(2026, 3, 4, 9, 59, 59)) == 1.0


def test_compute_hours_missing_or_negative():
    start = datetime(2026, 3, 4, 9, 0)
    assert compute_hours(start, None) == 0
    assert compute_hours(None, start) == 0
    assert compute_hours(start, datetime(2026, 3, 4, 8, 0)) == 0


def test_is_late_compares_whole_minutes():
    assert not calendar_service.is_late(local(2026, 3, 4, 9, 0, 59), "09:00")
    assert calendar_service.is_late(local(2026, 3, 4, 9, 1), "09:00")
    assert not calendar_service.is_late(local(2026, 3, 4, 8, 59), "09:00")


async def test_check_in_on_time_is_present(employee):
    attendance = await AttendanceService.check_in(employee, local(2026, 3, 4, 8, 55))
    assert attendance.status == "present"
    assert attendance.date == datetime(2026, 3, 4)
    assert await Notification.find({"user_id": str(employee.id)}).count() == 0


async def test_second_check_in_fails_and_keeps_one_row(employee):
    await AttendanceService.check_in(employee, local(2026, 3, 4, 8, 55))
    with pytest.raises(AlreadyCheckedIn):
        await AttendanceService.check_in(employee, local(2026, 3, 4, 9, 30))
    assert await Attendance.find({"user_id": str(employee.id)}).count() == 1


async def test_check_in_on_weekend_fails(employee):
    with pytest.raises(NonWorkingDay) as exc:
        await AttendanceService.check_in(employee, local(2026, 3, 7, 9, 0))  # Saturday
    assert "Weekend / Off Day" in exc.value.message


async def test_check_in_on_holiday_fails_even_with_existing_row(employee):
    await calendar_service.add_holiday("Founders Day", date(2026, 3, 4))
    await Attendance(user_id=str(employee.id), date=day_start(date(2026, 3, 4)), status="absent").insert()
    with pytest.raises(NonWorkingDay) as exc:
        await AttendanceService.check_in(employee, local(2026, 3, 4, 9, 0))
    assert "Holiday: Founders Day" in exc.value.message


async def test_special_working_day_allows_weekend_check_in(employee):
    await calendar_service.add_special_day(date(2026, 3, 7), "Release weekend")
    attendance = await AttendanceService.check_in(employee, local(2026, 3, 7, 8, 0))
    assert attendance.status == "present"


async def test_check_in_updates_admin_created_row(employee):
    await Attendance(user_id=str(employee.id), date=day_start(date(2026, 3, 4)), status="absent").insert()
    attendance = await AttendanceService.check_in(employee, local(2026, 3, 4, 9, 10))
    assert attendance.status == "late"
    assert await Attendance.find({"user_id": str(employee.id)}).count() == 1


async def test_check_out_sets_hours(employee):
    await AttendanceService.check_in(employee, local(2026, 3, 4, 9, 0))
    attendance = await AttendanceService.check_out(employee, local(2026, 3, 4, 10, 30))
    assert attendance.hours == 1.5
    assert attendance.check_out is not None


async def test_check_out_without_check_in(employee):
    with pytest.raises(NoCheckIn):
        await AttendanceService.check_out(employee, local(2026, 3, 4, 17, 0))


async def test_check_out_twice(employee):
    await AttendanceService.check_in(employee, local(2026, 3, 4, 9, 0))
    await AttendanceService.check_out(employee, local(2026, 3, 4, 17, 0))
    with pytest.raises(AlreadyCheckedOut):
        await AttendanceService.check_out(employee, local(2026, 3, 4, 18, 0))


async def test_today_endpoint_reports_non_working_day(client, employee, clock):
    clock.set(2026, 3, 8, 10, 0)  # Sunday
    resp = await client.get("/api/attendance/today", headers=auth(employee))
    assert resp.status_code == 200
    body = resp.json()
    assert body["is_working_day"] is False
    assert body["non_working_reason"] == "Weekend / Off Day"
    assert body["attendance"] is None


async def test_check_in_endpoint_error_shape(client, employee, clock):
    clock.set(2026, 3, 7, 9, 0)
    resp = await client.post("/api/attendance/checkin", headers=auth(employee))
    assert resp.status_code == 400
    assert resp.json() == {"message": "Cannot check in today. Weekend / Off Day"}


async def test_check_in_and_out_endpoints(client, employee, clock):
    clock.set(2026, 3, 4, 9, 0)
    resp = await client.post("/api/attendance/checkin", headers=auth(employee))
    assert resp.status_code == 200
    assert resp.json()["attendance"]["status"] == "present"

    clock.set(2026, 3, 4, 10, 30)
    resp = await client.post("/api/attendance/checkout", headers=auth(employee))
    assert resp.status_code == 200
    assert resp.json()["attendance"]["hours"] == 1.5

    resp = await client.get("/api/attendance", headers=auth(employee))
    records = resp.json()["attendance"]
    assert len(records) == 1
    assert records[0]["date"] == "2026-03-04"


async def test_list_filters_by_range(client, employee):
    for day in (2, 3, 4):
        await Attendance(user_id=str(employee.id), date=datetime(2026, 3, day), status="present").insert()
    resp = await client.get(
        "/api/attendance",
        params={"start_date": "2026-03-03", "end_date": "2026-03-04"},
        headers=auth(employee),
    )
    dates = [r["date"] for r in resp.json()["attendance"]]
    assert dates == ["2026-03-04", "2026-03-03"]


async def test_note_only_by_owner(client, employee):
    other = await make_user("bob")
    attendance = Attendance(user_id=str(employee.id), date=datetime(2026, 3, 4), status="present")
    await attendance.insert()

    resp = await client.post(f"/api/attendance/{attendance.id}/note", json={"notes": "  WFH  "}, headers=auth(employee))
    assert resp.status_code == 200
    assert resp.json()["attendance"]["notes"] == "WFH"

    resp = await client.post(f"/api/attendance/{attendance.id}/note", json={"notes": "mine"}, headers=auth(other))
    assert resp.status_code == 404


async def test_requires_authentication(client):
    resp = await client.post("/api/attendance/checkin")
    assert resp.status_code == 401
    assert "message" in resp.json()
