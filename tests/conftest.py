"""Shared fixtures: in-memory Mongo per test, ASGI client, fixed clock and users.

- Beanie is initialised against a fresh mongomock-motor database for every test.
- httpx.AsyncClient talks to the app through ASGITransport (no network).
- AnyIO runs the async tests (@pytest.mark.anyio) on asyncio.
"""
import uuid
from datetime import datetime
from typing import Dict, Optional

import pytest
from httpx import ASGITransport, AsyncClient
from mongomock_motor import AsyncMongoMockClient

from hrmaster.core.database import init_db
from hrmaster.core.security import create_access_token, get_password_hash
from hrmaster.core.timezone_utils import get_local_now, org_tz
from hrmaster.main import app
from hrmaster.models.users import User
from hrmaster.services.calendar_service import ensure_singletons
from hrmaster.services.org_service import seed_defaults

PASSWORD = "password123"


@pytest.fixture(scope="session")
def anyio_backend() -> str:
    return "asyncio"


@pytest.fixture
async def db():
    client = AsyncMongoMockClient()
    database = await init_db(client, f"hrmaster_test_{uuid.uuid4().hex}")
    await ensure_singletons()
    yield database


@pytest.fixture
async def org(db):
    await seed_defaults(
        ["Engineering", "Human Resources"],
        ["Remote (US)"],
        [{"name": "Admin", "protected": True}, {"name": "Software Engineer"}],
    )


class Clock:
    """Organization-local 'now' handed to the request handlers."""

    def __init__(self):
        self.now = local(2026, 3, 4, 8, 30)  # Wednesday

    def set(self, *args):
        self.now = local(*args)


def local(*args) -> datetime:
    return datetime(*args, tzinfo=org_tz())


@pytest.fixture
def clock():
    c = Clock()
    app.dependency_overrides[get_local_now] = lambda: c.now
    yield c
    app.dependency_overrides.pop(get_local_now, None)


@pytest.fixture
async def client(db, clock):
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as c:
        yield c


async def make_user(
    username: str,
    role: str = "employee",
    full_name: Optional[str] = None,
    is_active: bool = True,
) -> User:
    user = User(
        username=username,
        email=f"{username}@example.com",
        hashed_password=get_password_hash(PASSWORD),
        full_name=full_name or username.title(),
        role=role,
        is_active=is_active,
        employee_id=f"EMP-TEST-{uuid.uuid4().hex[:8]}",
        department="Engineering",
        position="Software Engineer",
    )
    await user.insert()
    return user


def auth(user: User) -> Dict[str, str]:
    token = create_access_token({"sub": str(user.id)})
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
async def admin(db):
    return await make_user("admin", role="admin", full_name="Ada Admin")


@pytest.fixture
async def employee(db):
    return await make_user("alice", full_name="Alice Smith")
