# hrmaster/routers/__init__.py
from .auth import auth_router
from .attendance import router as attendance_router
from .leave import router as leave_router
from .employees import router as employees_router
from .dashboard import router as dashboard_router
from .messages import router as messages_router
from .notifications import router as notifications_router
from .org import router as org_router
from .settings import router as settings_router
from .profile import router as profile_router
from .public_org import router as public_org_router
from .cron import router as cron_router

__all__ = [
    "auth_router",
    "attendance_router",
    "leave_router",
    "employees_router",
    "dashboard_router",
    "messages_router",
    "notifications_router",
    "org_router",
    "settings_router",
    "profile_router",
    "public_org_router",
    "cron_router",
]
