"""
Pytest configuration and fixtures for testing.
"""
import os

# Settings are read at import time; pin a local, broker-free setup first
os.environ.setdefault("SECRET_KEY", "test-secret-key")
os.environ.setdefault("ENVIRONMENT", "test")
os.environ.setdefault("CACHE_ENABLED", "false")
os.environ.setdefault("EVENTS_ENABLED", "false")
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///./test_rsvphub.db")

import pytest
import pytest_asyncio
from types import SimpleNamespace
from typing import AsyncGenerator, Optional
from httpx import AsyncClient, ASGITransport
from sqlalchemy.ext.asyncio import AsyncSession, create_async_engine, async_sessionmaker
from sqlalchemy.pool import NullPool

from rsvphub.main import app
from rsvphub.db.session import Base, get_session
from rsvphub.core.security import create_access_token
from rsvphub.db.models import Adult, Youth, CaregiverLink, Event, RoleEnum
from rsvphub.api.v1.routes import public_rsvps as public_rsvps_routes


# Test database URL - point at Postgres with TEST_DATABASE_URL (see create_test_db.py)
TEST_DATABASE_URL = os.getenv(
    "TEST_DATABASE_URL",
    "sqlite+aiosqlite:///./test_rsvphub.db"
)

# Create test engine
test_engine = create_async_engine(
    TEST_DATABASE_URL,
    poolclass=NullPool,  # Disable connection pooling for tests
    echo=False,
)

# Create test session factory
TestSessionLocal = async_sessionmaker(
    test_engine,
    class_=AsyncSession,
    expire_on_commit=False,
)


@pytest_asyncio.fixture(scope="function")
async def db_session() -> AsyncGenerator[AsyncSession, None]:
    """
    Create a fresh database session for each test.
    The schema is dropped and recreated around every test.
    """
    async with test_engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
        await conn.run_sync(Base.metadata.create_all)

    async with TestSessionLocal() as session:
        try:
            yield session
        finally:
            await session.close()

    async with test_engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)


@pytest_asyncio.fixture(scope="function")
async def client(db_session: AsyncSession) -> AsyncGenerator[AsyncClient, None]:
    """
    Create an async HTTP client for testing API endpoints.
    Overrides the database session dependency.
    """
    async def override_get_session():
        yield db_session

    app.dependency_overrides[get_session] = override_get_session

    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac

    app.dependency_overrides.clear()


async def add_adult(db: AsyncSession, first: str, last: str, role: RoleEnum = RoleEnum.member) -> int:
    adult = Adult(first_name=first, last_name=last, email=f"{first}.{last}@example.com".lower(), role=role)
    db.add(adult)
    await db.flush()
    return adult.id


async def add_youth(db: AsyncSession, first: str, last: str) -> int:
    youth = Youth(first_name=first, last_name=last)
    db.add(youth)
    await db.flush()
    return youth.id


async def link(db: AsyncSession, adult_id: int, youth_id: int) -> None:
    db.add(CaregiverLink(adult_id=adult_id, youth_id=youth_id))
    await db.flush()


async def add_event(db: AsyncSession, title: str = "Campout", capacity: Optional[int] = None) -> int:
    event = Event(title=title, capacity=capacity)
    db.add(event)
    await db.flush()
    return event.id


@pytest_asyncio.fixture
async def household(db_session: AsyncSession) -> SimpleNamespace:
    """
    Two co-parents (a, b) sharing y1 and y2; c is an unrelated single parent of y3.
    Also an admin with no dependents.

    Only ids are returned: a rollback inside a test expires ORM instances.
    """
    a = await add_adult(db_session, "Alice", "Anders")
    b = await add_adult(db_session, "Bob", "Anders")
    c = await add_adult(db_session, "Cara", "Cole")
    admin = await add_adult(db_session, "Dana", "Admin", role=RoleEnum.admin)
    y1 = await add_youth(db_session, "Yara", "Anders")
    y2 = await add_youth(db_session, "Yuri", "Anders")
    y3 = await add_youth(db_session, "Zed", "Cole")
    await link(db_session, a, y1)
    await link(db_session, a, y2)
    await link(db_session, b, y1)
    await link(db_session, b, y2)
    await link(db_session, c, y3)
    await db_session.commit()
    return SimpleNamespace(a=a, b=b, c=c, admin=admin, y1=y1, y2=y2, y3=y3)


@pytest.fixture
def make_event(db_session: AsyncSession):
    """Factory creating a committed event and returning its id."""
    async def _make(title: str = "Campout", capacity: Optional[int] = None) -> int:
        event_id = await add_event(db_session, title, capacity)
        await db_session.commit()
        return event_id
    return _make


def token_for(adult_id: int) -> str:
    """Generate a valid access token for an adult."""
    return create_access_token({"sub": str(adult_id)})


def auth_header(adult_id: int) -> dict:
    return {"Authorization": f"Bearer {token_for(adult_id)}"}


@pytest.fixture(autouse=True)
def disable_rate_limiting(monkeypatch):
    """Disable rate limiting for all tests."""
    monkeypatch.setattr(public_rsvps_routes.limiter, "enabled", False)


@pytest.fixture
def mock_publish_event(monkeypatch):
    """
    Capture published messages instead of talking to RabbitMQ.

    Publishing is switched on for the test; the returned list collects
    (routing_key, payload) pairs.
    """
    from rsvphub.core.config import settings
    from rsvphub.events import publisher

    published = []

    async def mock_publish(routing_key, payload):
        published.append((routing_key, payload))

    monkeypatch.setattr(settings, "EVENTS_ENABLED", True)
    monkeypatch.setattr(publisher, "publish_event", mock_publish)
    return published
