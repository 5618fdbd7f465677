import logging
from typing import List, Optional

from hrmaster.core.constants import PRIVILEGED_ROLES
from hrmaster.core.errors import NotFound
from hrmaster.core.ids import as_object_id
from hrmaster.models.notifications import Notification
from hrmaster.models.users import User

logger = logging.getLogger(__name__)


class NotificationService:
    @staticmethod
    async def notify(
        user_id: str,
        type: str,
        title: str,
        message: str,
        actor: Optional[str] = None,
        related_user: Optional[str] = None,
        related_id: Optional[str] = None,
    ) -> Notification:
        notification = Notification(
            user_id=str(user_id),
            type=type,
            title=title,
            message=message,
            actor=actor,
            related_user=related_user,
            related_id=related_id,
        )
        await notification.insert()
        return notification

    @staticmethod
    async def notify_privileged(
        type: str,
        title: str,
        message: str,
        related_user: Optional[str] = None,
        related_id: Optional[str] = None,
    ) -> int:
        """One notification per admin / hr_admin user."""
        admins = await User.find({"role": {"$in": list(PRIVILEGED_ROLES)}}).to_list()
        docs = [
            Notification(
                user_id=str(a.id),
                type=type,
                title=title,
                message=message,
                related_user=related_user,
                related_id=related_id,
            )
            for a in admins
        ]
        if docs:
            await Notification.insert_many(docs)
        return len(docs)

    @staticmethod
    async def broadcast(title: str, message: str, type: str = "system", actor: Optional[str] = None) -> int:
        """Fan out one notification to every user with a single bulk insert."""
        users: List[User] = await User.find({}).to_list()
        docs = [
            Notification(user_id=str(u.id), type=type, title=title, message=message, actor=actor)
            for u in users
        ]
        if docs:
            await Notification.insert_many(docs)
        logger.info("Broadcast '%s' to %d users", title, len(docs))
        return len(docs)

    # ==================== Inbox ====================

    @staticmethod
    async def list_for(user_id: str, limit: int = 50) -> List[Notification]:
        return await Notification.find({"user_id": user_id}).sort("-created_at").limit(limit).to_list()

    @staticmethod
    async def unread_count(user_id: str) -> int:
        return await Notification.find({"user_id": user_id, "read": False}).count()

    @staticmethod
    async def _get_owned(user_id: str, notification_id: str) -> Notification:
        oid = as_object_id(notification_id)
        notification = await Notification.find_one({"_id": oid, "user_id": user_id}) if oid else None
        if not notification:
            raise NotFound("Notification not found")
        return notification

    @staticmethod
    async def mark_read(user_id: str, notification_id: str) -> Notification:
        notification = await NotificationService._get_owned(user_id, notification_id)
        notification.read = True
        await notification.save()
        return notification

    @staticmethod
    async def mark_all_read(user_id: str) -> None:
        await Notification.find({"user_id": user_id, "read": False}).update({"$set": {"read": True}})

    @staticmethod
    async def delete(user_id: str, notification_id: str) -> None:
        notification = await NotificationService._get_owned(user_id, notification_id)
        await notification.delete()
