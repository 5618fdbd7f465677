from datetime import datetime
from typing import Optional, Literal

import pymongo
from beanie import Document
from pydantic import Field
from pymongo import IndexModel

NotificationType = Literal["leave", "attendance", "system", "approval", "alert", "meeting", "reminder", "team"]


class Notification(Document):
    user_id: str
    type: NotificationType
    title: str
    message: str
    read: bool = False
    # user the notification is about, and user who caused it
    related_user: Optional[str] = None
    actor: Optional[str] = None
    related_id: Optional[str] = None
    created_at: datetime = Field(default_factory=datetime.utcnow)

    class Settings:
        name = "notifications"
        indexes = [
            IndexModel([("user_id", pymongo.ASCENDING), ("created_at", pymongo.DESCENDING)]),
            IndexModel([("actor", pymongo.ASCENDING)]),
        ]


class Message(Document):
    sender_id: str
    receiver_id: str
    content: str
    read: bool = False
    created_at: datetime = Field(default_factory=datetime.utcnow)

    class Settings:
        name = "messages"
        indexes = [
            IndexModel([("sender_id", pymongo.ASCENDING), ("receiver_id", pymongo.ASCENDING)]),
            IndexModel([("receiver_id", pymongo.ASCENDING), ("read", pymongo.ASCENDING)]),
        ]
