"""
Pytest fixtures for test database, client, and authentication.

Each test gets a fresh SQLite file database. Requests get their own session
(like production) so concurrent requests really run in parallel
transactions. Set TEST_DATABASE_URL to run against PostgreSQL instead.
"""

import os
from typing import AsyncGenerator

import pytest
import pytest_asyncio
from httpx import AsyncClient, ASGITransport
from sqlalchemy import event
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import NullPool

from hotel_booking.main import app
from hotel_booking.db.base import Base
from hotel_booking.db.session import get_db
from hotel_booking.core.security import create_access_token
from hotel_booking.services.interfaces.local_room_lock import LocalRoomLock
from hotel_booking.services.strategy_factory import get_room_lock
from hotel_booking.models import Room, User
from tests import factories


def _enable_wal(dbapi_connection, connection_record):
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA journal_mode=WAL")
    cursor.execute("PRAGMA busy_timeout=5000")
    cursor.close()


@pytest_asyncio.fixture(scope="function")
async def session_factory(tmp_path) -> AsyncGenerator[async_sessionmaker, None]:
    """Create tables, yield a session factory, then drop tables."""
    url = os.environ.get("TEST_DATABASE_URL", f"sqlite+aiosqlite:///{tmp_path / 'test.db'}")
    test_engine = create_async_engine(url, echo=False, poolclass=NullPool)
    if url.startswith("sqlite"):
        event.listen(test_engine.sync_engine, "connect", _enable_wal)

    async with test_engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield async_sessionmaker(test_engine, class_=AsyncSession, expire_on_commit=False)

    async with test_engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
    await test_engine.dispose()


@pytest_asyncio.fixture(scope="function")
async def db_session(session_factory) -> AsyncGenerator[AsyncSession, None]:
    """Session for seeding and inspecting data."""
    async with session_factory() as session:
        yield session


@pytest.fixture
def room_lock() -> LocalRoomLock:
    return LocalRoomLock(timeout=5.0)


@pytest_asyncio.fixture(scope="function")
async def client(session_factory, room_lock) -> AsyncGenerator[AsyncClient, None]:
    """HTTP client with the DB and room lock dependencies overridden."""

    async def override_get_db():
        async with session_factory() as session:
            yield session

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_room_lock] = lambda: room_lock

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac

    app.dependency_overrides.clear()


@pytest_asyncio.fixture
async def eligible_user(db_session: AsyncSession) -> User:
    """User with an enrollment and a paid, in-person ticket that includes the hotel."""
    return await factories.create_eligible_user(db_session)


@pytest_asyncio.fixture
async def auth_headers(eligible_user: User) -> dict:
    return auth_headers_for(eligible_user)


@pytest_asyncio.fixture
async def test_room(db_session: AsyncSession) -> Room:
    """Room with 3 beds."""
    hotel = await factories.create_hotel(db_session)
    return await factories.create_room(db_session, hotel, capacity=3)


def auth_headers_for(user: User) -> dict:
    """Authorization headers with Bearer token."""
    token = create_access_token(data={"sub": str(user.id)})
    return {"Authorization": f"Bearer {token}"}
