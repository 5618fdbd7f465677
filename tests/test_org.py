from datetime import date

import pytest

from hrmaster.core.errors import ConflictingDayType, ValidationFailed
from hrmaster.models.notifications import Notification
from hrmaster.models.org import AppRole
from hrmaster.services import calendar_service

from conftest import auth

pytestmark = pytest.mark.anyio


async def test_holiday_blocked_by_special_day(employee):
    await calendar_service.add_special_day(date(2026, 3, 7), "Inventory")
    with pytest.raises(ConflictingDayType):
        await calendar_service.add_holiday("Spring Break", date(2026, 3, 7))


async def test_special_day_blocked_by_holiday(employee):
    await calendar_service.add_holiday("Founders Day", date(2026, 3, 4))
    with pytest.raises(ConflictingDayType) as exc:
        await calendar_service.add_special_day(date(2026, 3, 4))
    assert "Founders Day" in exc.value.message


async def test_working_day_resolution_order(employee):
    assert (await calendar_service.resolve_working_day(date(2026, 3, 4))).is_working_day
    assert (await calendar_service.resolve_working_day(date(2026, 3, 8))).reason == "Weekend / Off Day"

    await calendar_service.add_holiday("Founders Day", date(2026, 3, 4))
    resolved = await calendar_service.resolve_working_day(date(2026, 3, 4))
    assert (resolved.is_working_day, resolved.reason) == (False, "Holiday: Founders Day")

    await calendar_service.add_special_day(date(2026, 3, 8))
    assert (await calendar_service.resolve_working_day(date(2026, 3, 8))).is_working_day


async def test_calendar_changes_broadcast_to_everyone(admin, employee):
    await calendar_service.add_holiday("Founders Day", date(2026, 3, 4))
    await calendar_service.update_schedule(work_days=[1, 2, 3, 4], work_start_time="08:30")

    for user in (admin, employee):
        titles = sorted(n.title for n in await Notification.find({"user_id": str(user.id)}).to_list())
        assert titles == ["New Holiday Added", "Work Schedule Updated"]


async def test_schedule_rejects_bad_time(admin):
    with pytest.raises(ValidationFailed):
        await calendar_service.update_schedule(work_start_time="25:00")


async def test_schedule_endpoints(client, admin):
    resp = await client.put(
        "/api/org/schedule",
        json={"work_days": [1, 2, 3, 4, 5, 6], "work_start_time": "8:00", "work_end_time": "16:00"},
        headers=auth(admin),
    )
    assert resp.status_code == 200
    assert resp.json()["schedule"] == {
        "work_days": [1, 2, 3, 4, 5, 6],
        "work_start_time": "08:00",
        "work_end_time": "16:00",
    }
    resp = await client.get("/api/org/schedule", headers=auth(admin))
    assert resp.json()["work_start_time"] == "08:00"


async def test_holiday_endpoints(client, admin):
    resp = await client.post(
        "/api/org/special-days", json={"date": "2026-03-07", "reason": "Inventory"}, headers=auth(admin)
    )
    assert resp.status_code == 201

    resp = await client.post("/api/org/holidays", json={"name": "Oops", "date": "2026-03-07"}, headers=auth(admin))
    assert resp.status_code == 400
    assert "Special Working Day" in resp.json()["message"]

    resp = await client.post("/api/org/holidays", json={"name": "Founders", "date": "2026-03-04"}, headers=auth(admin))
    holiday_id = resp.json()["id"]
    resp = await client.get("/api/org/holidays", headers=auth(admin))
    assert [h["date"] for h in resp.json()] == ["2026-03-04"]

    resp = await client.delete(f"/api/org/holidays/{holiday_id}", headers=auth(admin))
    assert resp.json() == {"id": holiday_id}
    resp = await client.delete(f"/api/org/holidays/{holiday_id}", headers=auth(admin))
    assert resp.status_code == 404


async def test_org_requires_privilege(client, employee):
    resp = await client.get("/api/org/departments", headers=auth(employee))
    assert resp.status_code == 403


async def test_lookup_crud(client, admin):
    resp = await client.post("/api/org/departments", json={"name": "Legal"}, headers=auth(admin))
    assert resp.status_code == 201
    dept_id = resp.json()["id"]

    resp = await client.post("/api/org/departments", json={"name": ""}, headers=auth(admin))
    assert resp.status_code == 400

    resp = await client.patch(
        f"/api/org/departments/{dept_id}", json={"description": "Contracts"}, headers=auth(admin)
    )
    assert resp.json() == {"id": dept_id, "name": "Legal", "description": "Contracts"}

    resp = await client.delete(f"/api/org/departments/{dept_id}", headers=auth(admin))
    assert resp.json() == {"id": dept_id}
    resp = await client.get("/api/org/departments", headers=auth(admin))
    assert resp.json() == []


async def test_protected_role_cannot_be_deleted(client, admin):
    role = AppRole(name="Admin", protected=True)
    await role.insert()
    resp = await client.delete(f"/api/org/roles/{role.id}", headers=auth(admin))
    assert resp.status_code == 400
    assert resp.json() == {"message": "Protected roles cannot be deleted"}


async def test_public_lists_need_no_login(client, org):
    resp = await client.get("/api/public/org/departments")
    assert resp.status_code == 200
    assert [d["name"] for d in resp.json()] == ["Engineering", "Human Resources"]


async def test_settings_public_read_and_admin_update(client, admin, employee):
    resp = await client.get("/api/settings")
    assert resp.json()["signup_enabled"] is True

    resp = await client.put("/api/settings", json={"signup_enabled": False}, headers=auth(employee))
    assert resp.status_code == 403

    resp = await client.put(
        "/api/settings", json={"signup_enabled": False, "default_vacation_leave": 20}, headers=auth(admin)
    )
    assert resp.status_code == 200
    assert resp.json()["settings"]["default_vacation_leave"] == 20
