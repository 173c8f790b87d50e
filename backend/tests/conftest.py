"""
Audit Quiz Platform - Test Configuration
Pytest fixtures and configuration for testing
"""
from collections.abc import AsyncGenerator
from typing import Any

import fakeredis
import fakeredis.aioredis
import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy import event
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from auditquiz.core.database import Base, get_db
from auditquiz.core.mailer import MailMessage, Mailer, get_mailer
from auditquiz.core.redis import get_redis
from auditquiz.main import app

# Test database URL (in-memory SQLite shared through one connection)
TEST_DATABASE_URL = "sqlite+aiosqlite://"


class RecordingMailer(Mailer):
    """Keeps sent messages for assertions."""

    def __init__(self):
        self.sent: list[MailMessage] = []

    async def send(self, message: MailMessage) -> None:
        self.sent.append(message)


@pytest_asyncio.fixture(scope="function")
async def session_maker() -> AsyncGenerator[async_sessionmaker[AsyncSession], None]:
    """Fresh schema for each test."""
    engine = create_async_engine(
        TEST_DATABASE_URL,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )

    @event.listens_for(engine.sync_engine, "connect")
    def enable_foreign_keys(dbapi_connection, connection_record):
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)

    await engine.dispose()


@pytest_asyncio.fixture(scope="function")
async def db_session(session_maker) -> AsyncGenerator[AsyncSession, None]:
    """Session for arranging and inspecting data directly."""
    async with session_maker() as session:
        yield session


@pytest_asyncio.fixture(scope="function")
async def redis_client():
    client = fakeredis.aioredis.FakeRedis(
        server=fakeredis.FakeServer(),
        decode_responses=True,
    )
    yield client
    await client.aclose()


@pytest.fixture
def mailer() -> RecordingMailer:
    return RecordingMailer()


@pytest_asyncio.fixture(scope="function")
async def client_factory(session_maker, redis_client, mailer):
    """
    Build HTTP clients against the app; each keeps its own cookies.

    Requests get their own unit of work, as in production.
    """
    async def override_get_db() -> AsyncGenerator[AsyncSession, None]:
        async with session_maker() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise

    async def override_get_redis():
        return redis_client

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_redis] = override_get_redis
    app.dependency_overrides[get_mailer] = lambda: mailer

    clients: list[AsyncClient] = []

    def make_client() -> AsyncClient:
        ac = AsyncClient(transport=ASGITransport(app=app), base_url="http://test")
        clients.append(ac)
        return ac

    yield make_client

    for ac in clients:
        await ac.aclose()
    app.dependency_overrides.clear()


@pytest_asyncio.fixture(scope="function")
async def client(client_factory) -> AsyncClient:
    """Create a test client with database, redis and mailer overrides."""
    return client_factory()


@pytest.fixture
def sample_user_data() -> dict[str, Any]:
    """Sample user registration data."""
    return {
        "name": "Test Owner",
        "email": "owner@example.com",
        "passCode": "secret123",
        "companyName": "Acme Audits",
        "role": "ADMIN",
    }


@pytest.fixture
def register(sample_user_data):
    """Register (and thereby log in) a user on the given client."""
    async def _register(client: AsyncClient, **overrides) -> dict[str, Any]:
        payload = {**sample_user_data, **overrides}
        response = await client.post("/api/v1/auth/register", json=payload)
        assert response.status_code == 201, response.text
        return response.json()["data"]

    return _register


@pytest.fixture
def sample_audit_payload() -> dict[str, Any]:
    """Two categories; the first has a full question, the second a short one."""
    return {
        "title": "Sales Readiness",
        "categories": [
            {
                "name": "Sales",
                "icon": "chart",
                "questions": [
                    {
                        "text": "How consistent is your pipeline review?",
                        "options": [
                            {"text": "Poor", "points": 1},
                            {"text": "Fair", "points": 2},
                            {"text": "Good", "points": 3},
                            {"text": "Great", "points": 4},
                            {"text": "Excellent", "points": 5},
                        ],
                    },
                ],
            },
            {
                "name": "Marketing",
                "questions": [
                    {
                        "text": "Do you track campaign attribution?",
                        "options": [
                            {"text": "Never", "points": 1},
                            {"text": "Sometimes", "points": 3},
                        ],
                    },
                ],
            },
        ],
    }


@pytest.fixture
def create_audit(sample_audit_payload):
    """Create an audit through the API and return the nested presentation."""
    async def _create(client: AsyncClient, payload: dict[str, Any] | None = None) -> dict[str, Any]:
        response = await client.post("/api/v1/audits", json=payload or sample_audit_payload)
        assert response.status_code == 201, response.text
        return response.json()["data"]

    return _create


def option_by_text(presentation: dict[str, Any], text: str) -> dict[str, Any]:
    for category in presentation["categories"]:
        for question in category["questions"]:
            for option in question["options"]:
                if option["text"] == text:
                    return option
    raise KeyError(text)


@pytest.fixture
def find_option():
    return option_by_text
