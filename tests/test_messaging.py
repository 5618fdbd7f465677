from datetime import datetime, timedelta

import pytest

from hrmaster.models.notifications import Message, Notification
from hrmaster.services.messaging_service import MessagingService

from conftest import auth, make_user

pytestmark = pytest.mark.anyio


async def test_conversations_include_everyone(admin, employee):
    carol = await make_user("carol", full_name="Carol Chen")
    sent = datetime(2026, 3, 4, 9, 0)
    for minutes, content in ((0, "hi alice"), (5, "are you there?")):
        await Message(
            sender_id=str(carol.id),
            receiver_id=str(employee.id),
            content=content,
            created_at=sent + timedelta(minutes=minutes),
        ).insert()

    conversations = await MessagingService.conversations(str(employee.id))

    assert [c["name"] for c in conversations] == ["Carol Chen", "Ada Admin"]
    assert conversations[0]["last_message"] == "are you there?"
    assert conversations[0]["unread_count"] == 2
    assert conversations[1]["last_message"] is None
    assert all(c["id"] != str(employee.id) for c in conversations)


async def test_online_threshold(admin, employee):
    now = datetime.utcnow()
    admin.last_active = now - timedelta(minutes=2)
    await admin.save()

    conversations = await MessagingService.conversations(str(employee.id), now)
    assert conversations[0]["is_online"] is True

    conversations = await MessagingService.conversations(str(employee.id), now + timedelta(minutes=4))
    assert conversations[0]["is_online"] is False


async def test_message_endpoints(client, admin, employee):
    resp = await client.post(f"/api/messages/{employee.id}", json={"content": "Welcome!"}, headers=auth(admin))
    assert resp.status_code == 201

    resp = await client.post(f"/api/messages/{employee.id}", json={"content": ""}, headers=auth(admin))
    assert resp.status_code == 400

    resp = await client.get("/api/messages/unread-count", headers=auth(employee))
    assert resp.json() == {"count": 1}

    resp = await client.get(f"/api/messages/{admin.id}", headers=auth(employee))
    assert [m["content"] for m in resp.json()["messages"]] == ["Welcome!"]

    resp = await client.put(f"/api/messages/{admin.id}/read", headers=auth(employee))
    assert resp.status_code == 200
    resp = await client.get("/api/messages/unread-count", headers=auth(employee))
    assert resp.json() == {"count": 0}


async def test_send_to_unknown_user(client, employee):
    resp = await client.post("/api/messages/507f1f77bcf86cd799439011", json={"content": "hi"}, headers=auth(employee))
    assert resp.status_code == 404


# ==================== Notifications ====================

async def test_notification_inbox(client, employee):
    other = await make_user("bob")
    for title in ("First", "Second"):
        await Notification(user_id=str(employee.id), type="system", title=title, message="m").insert()
    foreign = Notification(user_id=str(other.id), type="system", title="Bob's", message="m")
    await foreign.insert()

    resp = await client.get("/api/notifications", headers=auth(employee))
    notifications = resp.json()["notifications"]
    assert len(notifications) == 2
    assert notifications[0]["time"]

    resp = await client.get("/api/notifications/unread-count", headers=auth(employee))
    assert resp.json() == {"count": 2}

    resp = await client.patch(f"/api/notifications/{notifications[0]['id']}/read", headers=auth(employee))
    assert resp.status_code == 200
    resp = await client.get("/api/notifications/unread-count", headers=auth(employee))
    assert resp.json() == {"count": 1}

    resp = await client.post("/api/notifications/mark-all-read", headers=auth(employee))
    resp = await client.get("/api/notifications/unread-count", headers=auth(employee))
    assert resp.json() == {"count": 0}

    resp = await client.delete(f"/api/notifications/{foreign.id}", headers=auth(employee))
    assert resp.status_code == 404
    resp = await client.delete(f"/api/notifications/{notifications[1]['id']}", headers=auth(employee))
    assert resp.status_code == 200


async def test_only_privileged_notify_others(client, admin, employee):
    payload = {"user_id": str(admin.id), "title": "Hey", "message": "hello"}
    resp = await client.post("/api/notifications", json=payload, headers=auth(employee))
    assert resp.status_code == 403

    payload = {"user_id": str(employee.id), "type": "meeting", "title": "Standup", "message": "10am"}
    resp = await client.post("/api/notifications", json=payload, headers=auth(admin))
    assert resp.status_code == 201
    created = await Notification.find_one({"user_id": str(employee.id)})
    assert (created.type, created.actor) == ("meeting", str(admin.id))
