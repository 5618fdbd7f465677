from datetime import datetime
from typing import Dict

from fastapi import APIRouter, Depends, Query

from hrmaster.core.errors import NotAuthorized, NotFound
from hrmaster.core.ids import as_object_id
from hrmaster.core.timezone_utils import format_time_ago
from hrmaster.models.users import User
from hrmaster.routers.auth import get_current_user
from hrmaster.schemas.org import NotificationCreate
from hrmaster.services.notification_service import NotificationService
from hrmaster.services.permission import PermissionService

router = APIRouter(prefix="/notifications", tags=["notifications"])


@router.get("")
async def list_notifications(
    limit: int = Query(50, ge=1, le=200), current_user: User = Depends(get_current_user)
):
    notifications = await NotificationService.list_for(str(current_user.id), limit)

    related = [as_object_id(n.related_user) for n in notifications if as_object_id(n.related_user)]
    names: Dict[str, str] = {str(u.id): u.full_name for u in await User.find({"_id": {"$in": related}}).to_list()}
    now = datetime.utcnow()

    return {
        "notifications": [
            {
                "id": str(n.id),
                "type": n.type,
                "title": n.title,
                "message": n.message,
                "read": n.read,
                "time": format_time_ago(n.created_at, now),
                "timestamp": n.created_at,
                "related_user": names.get(n.related_user) if n.related_user else None,
                "related_id": n.related_id,
            }
            for n in notifications
        ]
    }


@router.get("/unread-count")
async def unread_count(current_user: User = Depends(get_current_user)):
    return {"count": await NotificationService.unread_count(str(current_user.id))}


@router.patch("/{notification_id}/read")
async def mark_read(notification_id: str, current_user: User = Depends(get_current_user)):
    await NotificationService.mark_read(str(current_user.id), notification_id)
    return {"message": "Notification marked as read"}


@router.post("/mark-all-read")
async def mark_all_read(current_user: User = Depends(get_current_user)):
    await NotificationService.mark_all_read(str(current_user.id))
    return {"message": "All notifications marked as read"}


@router.post("", status_code=201)
async def create_notification(data: NotificationCreate, current_user: User = Depends(get_current_user)):
    """Create a notification for yourself, or for another user when privileged."""
    own_id = str(current_user.id)
    target = data.user_id or own_id
    if target != own_id:
        if not PermissionService.is_privileged(current_user):
            raise NotAuthorized()
        oid = as_object_id(target)
        if not oid or not await User.get(oid):
            raise NotFound("User not found")

    notification = await NotificationService.notify(
        target,
        type=data.type,
        title=data.title,
        message=data.message,
        actor=own_id,
        related_user=data.related_user,
    )
    return {
        "message": "Notification created successfully",
        "notification": {
            "id": str(notification.id),
            "type": notification.type,
            "title": notification.title,
            "message": notification.message,
        },
    }


@router.delete("/{notification_id}")
async def delete_notification(notification_id: str, current_user: User = Depends(get_current_user)):
    await NotificationService.delete(str(current_user.id), notification_id)
    return {"message": "Notification deleted"}
