import logging
from typing import Optional

from beanie import init_beanie
from motor.motor_asyncio import AsyncIOMotorClient

from hrmaster.core.config import settings
from hrmaster.models.users import User
from hrmaster.models.attendance import Attendance, AttendanceCorrection
from hrmaster.models.leave import Leave, LeaveBalance
from hrmaster.models.notifications import Notification, Message
from hrmaster.models.org import (
    WorkSchedule, Holiday, SpecialWorkingDay, Department, Zone, AppRole, SystemSettings
)

logger = logging.getLogger(__name__)

DOCUMENT_MODELS = [
    User,
    Attendance,
    AttendanceCorrection,
    Leave,
    LeaveBalance,
    Notification,
    Message,
    WorkSchedule,
    Holiday,
    SpecialWorkingDay,
    Department,
    Zone,
    AppRole,
    SystemSettings,
]


async def init_db(client: Optional[AsyncIOMotorClient] = None, db_name: Optional[str] = None):
    """Register every document model with Beanie and create their indexes."""
    if client is None:
        client = AsyncIOMotorClient(settings.MONGODB_URL)
    db = client[db_name or settings.MONGODB_DB_NAME]

    await init_beanie(database=db, document_models=DOCUMENT_MODELS)
    logger.info("Database %s initialized with %d collections", db.name, len(DOCUMENT_MODELS))
    return db
