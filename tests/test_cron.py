from datetime import datetime

import pytest

from hrmaster.core.config import settings
from hrmaster.models.attendance import Attendance
from hrmaster.models.leave import Leave
from hrmaster.services import calendar_service
from hrmaster.services.attendance_service import AttendanceService

from conftest import auth, local, make_user

pytestmark = pytest.mark.anyio

TODAY = datetime(2026, 3, 4)


async def test_marks_absent_and_leave_rows(admin, employee):
    bob = await make_user("bob")
    carol = await make_user("carol")
    await Attendance(user_id=str(bob.id), date=TODAY, status="present", check_in=datetime(2026, 3, 4, 9)).insert()
    await Leave(
        user_id=str(carol.id), type="Vacation", start_date=datetime(2026, 3, 2),
        end_date=datetime(2026, 3, 6), days=5, reason="Trip", status="approved",
    ).insert()

    result = await AttendanceService.mark_absent(local(2026, 3, 4, 23, 0))

    assert (result["marked_absent"], result["marked_leave"]) == (2, 1)
    rows = {a.user_id: a for a in await Attendance.find({"date": TODAY}).to_list()}
    assert rows[str(bob.id)].status == "present"
    assert (rows[str(carol.id)].status, rows[str(carol.id)].hours) == ("leave", 8)
    assert rows[str(employee.id)].status == "absent"
    assert rows[str(admin.id)].status == "absent"

    again = await AttendanceService.mark_absent(local(2026, 3, 4, 23, 30))
    assert (again["marked_absent"], again["marked_leave"]) == (0, 0)


async def test_skips_non_working_days(employee):
    await calendar_service.add_holiday("Founders Day", TODAY)
    result = await AttendanceService.mark_absent(local(2026, 3, 4, 23, 0))
    assert result["is_working_day"] is False
    assert await Attendance.find({}).count() == 0

    result = await AttendanceService.mark_absent(local(2026, 3, 7, 23, 0))
    assert result["is_working_day"] is False


async def test_endpoint_accepts_admin_or_shared_secret(client, clock, admin, employee, monkeypatch):
    clock.set(2026, 3, 4, 23, 0)

    resp = await client.post("/api/cron/mark-absent", headers=auth(employee))
    assert resp.status_code == 403

    monkeypatch.setattr(settings, "CRON_SECRET", "s3cret")
    resp = await client.post("/api/cron/mark-absent", headers={"Authorization": "Bearer s3cret"})
    assert resp.status_code == 200
    assert resp.json()["marked_absent"] == 2

    resp = await client.post("/api/cron/mark-absent", headers={"Authorization": "Bearer wrong"})
    assert resp.status_code == 401

    resp = await client.post("/api/cron/mark-absent", headers=auth(admin))
    assert resp.json()["message"] == "Absent marking completed"
