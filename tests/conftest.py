# tests/conftest.py
import asyncio
import os
import tempfile

_DB_DIR = tempfile.mkdtemp(prefix="scanlog-tests-")
os.environ["SCANLOG_DATABASE_URL"] = f"sqlite+aiosqlite:///{_DB_DIR}/scanlog.db"
os.environ["SCANLOG_SECRET_KEY"] = "test-secret"
os.environ["SCANLOG_STATS_TIMEZONE"] = "UTC"

import pytest
from fastapi.testclient import TestClient

from app import models  # noqa: F401
from app.db.base import Base
from app.db.session import engine, get_session
from app.main import app

DEFAULT_PASSWORD = "correct-horse-battery"


async def _reset_schema() -> None:
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
        await conn.run_sync(Base.metadata.create_all)


@pytest.fixture(autouse=True)
def fresh_database():
    """Every test starts from empty tables."""
    asyncio.run(_reset_schema())
    yield


@pytest.fixture
def client():
    with TestClient(app) as c:
        yield c


@pytest.fixture
def lenient_client():
    """Client that returns 500 responses instead of re-raising server errors."""
    with TestClient(app, raise_server_exceptions=False) as c:
        yield c


@pytest.fixture
async def db_session():
    async with get_session() as session:
        yield session


def register(client: TestClient, mail: str = "arthur@example.com", **overrides) -> dict:
    payload = {
        "fullname": "Arthur Geay",
        "mail": mail,
        "password": DEFAULT_PASSWORD,
        "timezone": "UTC +1",
    }
    payload.update(overrides)
    response = client.post("/api/users/register", json=payload)
    assert response.status_code == 201, response.text
    return response.json()


def login(client: TestClient, mail: str = "arthur@example.com", password: str = DEFAULT_PASSWORD):
    return client.post("/api/users/login", json={"mail": mail, "password": password})


@pytest.fixture
def logged_in(client):
    """Register the first (admin) user, log in with the test client and return the profile."""
    user = register(client)
    response = login(client)
    assert response.status_code == 200, response.text
    return user
