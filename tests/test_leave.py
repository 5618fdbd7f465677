from datetime import date

import pytest

from hrmaster.core.errors import AlreadyProcessed, InsufficientBalance, InvalidRange, NotAuthorized
from hrmaster.models.leave import Leave, LeaveBalance
from hrmaster.models.notifications import Notification
from hrmaster.services.leave_service import LeaveService, count_days

from conftest import auth, make_user

pytestmark = pytest.mark.anyio


def test_count_days_is_inclusive():
    assert count_days(date(2026, 3, 10), date(2026, 3, 10)) == 1
    assert count_days(date(2026, 3, 10), date(2026, 3, 12)) == 3
    assert count_days(date(2026, 3, 12), date(2026, 3, 10)) == -1


async def _set_used(user, bucket, used, year=2026):
    balance = await LeaveService.get_or_create_balance(str(user.id), year)
    getattr(balance, bucket).used = used
    await balance.save()
    return balance


async def test_balance_created_from_defaults(employee):
    balance = await LeaveService.get_or_create_balance(str(employee.id), 2026)
    assert (balance.sick_leave.total, balance.vacation.total, balance.personal_leave.total) == (12, 15, 5)
    again = await LeaveService.get_or_create_balance(str(employee.id), 2026)
    assert again.id == balance.id


async def test_insufficient_balance_creates_nothing(employee):
    await _set_used(employee, "sick_leave", 10)
    with pytest.raises(InsufficientBalance) as exc:
        await LeaveService.submit(employee, "Sick Leave", date(2026, 3, 10), date(2026, 3, 12), "Flu")
    assert exc.value.message == "Insufficient leave balance. You have 2 days available."
    assert await Leave.find({}).count() == 0


async def test_end_before_start_is_invalid(employee):
    with pytest.raises(InvalidRange):
        await LeaveService.submit(employee, "Vacation", date(2026, 3, 12), date(2026, 3, 10), "Trip")


async def test_other_type_skips_balance_check(employee):
    await _set_used(employee, "personal_leave", 5)
    leave = await LeaveService.submit(employee, "Other", date(2026, 3, 1), date(2026, 3, 20), "Sabbatical")
    assert leave.days == 20


async def test_submit_notifies_admins(admin, employee):
    leave = await LeaveService.submit(employee, "Vacation", date(2026, 3, 10), date(2026, 3, 12), "Trip")
    assert leave.status == "pending"
    note = await Notification.find_one({"user_id": str(admin.id)})
    assert note.title == "New Leave Request"
    assert note.message == "Alice Smith has requested 3 day(s) of Vacation"
    assert note.related_user == str(employee.id)


async def test_approval_deducts_exactly_the_days(admin, employee):
    before = await _set_used(employee, "vacation", 4)
    leave = await LeaveService.submit(employee, "Vacation", date(2026, 3, 10), date(2026, 3, 12), "Trip")

    approved = await LeaveService.approve(admin, str(leave.id))

    after = await LeaveBalance.find_one({"user_id": str(employee.id), "year": 2026})
    assert after.vacation.used == before.vacation.used + 3
    assert approved.approved_by == str(admin.id)
    note = await Notification.find_one({"user_id": str(employee.id)})
    assert (note.type, note.title, note.actor) == ("approval", "Leave Request Approved", str(admin.id))


async def test_rejection_leaves_balance_untouched(admin, employee):
    before = await _set_used(employee, "sick_leave", 1)
    leave = await LeaveService.submit(employee, "Sick Leave", date(2026, 3, 10), date(2026, 3, 11), "Flu")

    rejected = await LeaveService.reject(admin, str(leave.id))

    after = await LeaveBalance.find_one({"user_id": str(employee.id), "year": 2026})
    assert after.sick_leave.used == before.sick_leave.used
    assert rejected.rejection_reason == "No reason provided"
    note = await Notification.find_one({"user_id": str(employee.id)})
    assert note.type == "alert"
    assert note.message.endswith("Reason: No reason provided")


async def test_decisions_are_terminal(admin, employee):
    leave = await LeaveService.submit(employee, "Vacation", date(2026, 3, 10), date(2026, 3, 10), "Day off")
    await LeaveService.approve(admin, str(leave.id))
    with pytest.raises(AlreadyProcessed):
        await LeaveService.reject(admin, str(leave.id), "late")
    with pytest.raises(AlreadyProcessed):
        await LeaveService.approve(admin, str(leave.id))


async def test_employee_cannot_approve(employee):
    leave = await LeaveService.submit(employee, "Vacation", date(2026, 3, 10), date(2026, 3, 10), "Day off")
    with pytest.raises(NotAuthorized):
        await LeaveService.approve(employee, str(leave.id))


async def test_leave_endpoints(client, admin, employee):
    resp = await client.post(
        "/api/leave/request",
        json={"type": "Personal Leave", "start_date": "2026-03-16", "end_date": "2026-03-17", "reason": "Moving"},
        headers=auth(employee),
    )
    assert resp.status_code == 201
    leave_id = resp.json()["leave"]["id"]

    resp = await client.post("/api/leave/request", json={"type": "Vacation"}, headers=auth(employee))
    assert resp.status_code == 400
    assert resp.json() == {"message": "All fields are required"}

    resp = await client.get("/api/leave/requests", headers=auth(admin))
    requests = resp.json()["requests"]
    assert [r["user_name"] for r in requests] == ["Alice Smith"]

    resp = await client.post(f"/api/leave/reject/{leave_id}", json={"reason": "Busy week"}, headers=auth(admin))
    assert resp.status_code == 200
    assert resp.json()["leave"]["rejection_reason"] == "Busy week"

    resp = await client.post(f"/api/leave/approve/{leave_id}", headers=auth(admin))
    assert resp.status_code == 400
    assert resp.json() == {"message": "Leave request already processed"}


async def test_employee_sees_only_own_requests(client, employee):
    other = await make_user("bob")
    await LeaveService.submit(other, "Vacation", date(2026, 3, 10), date(2026, 3, 10), "Day off")
    resp = await client.get("/api/leave/requests", headers=auth(employee))
    assert resp.json()["requests"] == []


async def test_apply_defaults_keeps_used(admin, employee):
    balance = await _set_used(employee, "vacation", 6)
    balance.vacation.total = 30
    await balance.save()

    await LeaveService.apply_defaults(2026)

    after = await LeaveBalance.find_one({"user_id": str(employee.id), "year": 2026})
    assert (after.vacation.used, after.vacation.total) == (6, 15)
