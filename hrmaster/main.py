import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from hrmaster.core.config import settings
from hrmaster.core.database import init_db
from hrmaster.core.exception_handlers import register_exception_handlers
from hrmaster.routers import (
    auth_router,
    attendance_router,
    leave_router,
    employees_router,
    dashboard_router,
    messages_router,
    notifications_router,
    org_router,
    settings_router,
    profile_router,
    public_org_router,
    cron_router,
)
from hrmaster.services.calendar_service import ensure_singletons

logging.basicConfig(
    level=settings.LOG_LEVEL.upper(),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)

app = FastAPI(title=settings.PROJECT_NAME, version=settings.VERSION)

# CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

register_exception_handlers(app)

api_prefix = settings.API_PREFIX
for router in (
    auth_router,
    attendance_router,
    leave_router,
    employees_router,
    dashboard_router,
    messages_router,
    notifications_router,
    org_router,
    settings_router,
    profile_router,
    public_org_router,
    cron_router,
):
    app.include_router(router, prefix=api_prefix)


@app.on_event("startup")
async def startup_event():
    await init_db()
    await ensure_singletons()
    logger.info("%s %s started (timezone %s)", settings.PROJECT_NAME, settings.VERSION, settings.TIMEZONE)


@app.get("/")
async def root():
    return {"message": "HR Master API is up and running", "version": settings.VERSION}


@app.get("/health")
async def health_check():
    return {"status": "healthy"}
