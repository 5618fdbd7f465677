import logging
from datetime import datetime
from typing import Any, Dict, List, Optional

from hrmaster.core.constants import ONLINE_THRESHOLD_SECONDS
from hrmaster.core.errors import NotFound, ValidationFailed
from hrmaster.core.ids import as_object_id
from hrmaster.models.notifications import Message
from hrmaster.models.users import User

logger = logging.getLogger(__name__)


def is_online(user: User, now: Optional[datetime] = None) -> bool:
    if not user.last_active:
        return False
    now = now or datetime.utcnow()
    return (now - user.last_active).total_seconds() < ONLINE_THRESHOLD_SECONDS


class MessagingService:
    @staticmethod
    async def unread_count(user_id: str) -> int:
        return await Message.find({"receiver_id": user_id, "read": False}).count()

    @staticmethod
    async def conversations(user_id: str, now: Optional[datetime] = None) -> List[Dict[str, Any]]:
        """
        Every other user, merged with the last message exchanged with them and
        the number of unread messages they sent. Users with messages come
        first (newest first), the rest alphabetically.
        """
        messages = await Message.find(
            {"$or": [{"sender_id": user_id}, {"receiver_id": user_id}]}
        ).sort("-created_at").to_list()

        last_message: Dict[str, Message] = {}
        unread: Dict[str, int] = {}
        for m in messages:
            other = m.receiver_id if m.sender_id == user_id else m.sender_id
            last_message.setdefault(other, m)
            if m.receiver_id == user_id and not m.read:
                unread[other] = unread.get(other, 0) + 1

        oid = as_object_id(user_id)
        others = await User.find({"_id": {"$ne": oid}}).to_list()

        result = []
        for u in others:
            uid = str(u.id)
            last = last_message.get(uid)
            result.append({
                "id": uid,
                "name": u.full_name or u.username,
                "employee_id": u.employee_id,
                "role": u.position or u.role,
                "department": u.department,
                "is_online": is_online(u, now),
                "last_message": last.content if last else None,
                "last_message_time": last.created_at if last else None,
                "unread_count": unread.get(uid, 0),
            })

        with_messages = sorted(
            (c for c in result if c["last_message_time"]),
            key=lambda c: c["last_message_time"],
            reverse=True,
        )
        without = sorted((c for c in result if not c["last_message_time"]), key=lambda c: c["name"].lower())
        return with_messages + without

    @staticmethod
    async def thread(user_id: str, other_id: str) -> List[Message]:
        return await Message.find(
            {
                "$or": [
                    {"sender_id": user_id, "receiver_id": other_id},
                    {"sender_id": other_id, "receiver_id": user_id},
                ]
            }
        ).sort("+created_at").to_list()

    @staticmethod
    async def send(sender_id: str, receiver_id: str, content: Optional[str]) -> Message:
        if not content or not content.strip():
            raise ValidationFailed("Content is required")
        oid = as_object_id(receiver_id)
        if not oid or not await User.get(oid):
            raise NotFound("Recipient not found")

        message = Message(sender_id=sender_id, receiver_id=str(oid), content=content)
        await message.insert()
        return message

    @staticmethod
    async def mark_read(reader_id: str, sender_id: str) -> None:
        await Message.find(
            {"sender_id": sender_id, "receiver_id": reader_id, "read": False}
        ).update({"$set": {"read": True}})
