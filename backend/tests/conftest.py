# tests/conftest.py
import itertools
import os
import tempfile
import uuid

# Настройки читаются при импорте приложения, поэтому окружение задаем заранее
_DB_PATH = os.path.join(tempfile.gettempdir(), f"engagement-tests-{uuid.uuid4().hex}.db")
os.environ.setdefault("SECURITY__JWT_SECRET_KEY", "test-secret-key")
os.environ["DB__DB_URL"] = f"sqlite+aiosqlite:///{_DB_PATH}"
os.environ["DB__DB_ECHO"] = "false"

import pytest
from httpx import AsyncClient, ASGITransport

from engagement.core.database import db_helper
from engagement.core.security import SERVICE_SCOPE, create_access_token
from engagement.models import Base, User
from main import app

_emails = itertools.count(1)


@pytest.fixture
async def database():
    async with db_helper.engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield
    async with db_helper.engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)


@pytest.fixture
async def session(database):
    async with db_helper.session_factory() as session:
        yield session


@pytest.fixture
def make_user(session):
    async def _make(role: str = "user") -> User:
        user = User(email=f"user{next(_emails)}@example.com", role=role)
        session.add(user)
        await session.commit()
        return user
    return _make


@pytest.fixture
async def client(database):
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac


def auth_headers(user: User) -> dict:
    token = create_access_token(user.id)
    return {"Authorization": f"Bearer {token}"}


def service_headers(name: str = "feed-service") -> dict:
    token = create_access_token(name, scope=SERVICE_SCOPE)
    return {"Authorization": f"Bearer {token}"}


def pytest_sessionfinish(session, exitstatus):
    if os.path.exists(_DB_PATH):
        os.remove(_DB_PATH)
