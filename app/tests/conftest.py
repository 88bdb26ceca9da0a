# app/tests/conftest.py
"""
Shared fixtures: a throwaway SQLite database per test, a few registered users
and a matchmaking queue driven by a fake clock.
"""
import pytest
from typing import AsyncGenerator
from sqlalchemy.ext.asyncio import AsyncSession, create_async_engine, async_sessionmaker
from sqlalchemy.pool import NullPool
from infrastructure.postgres_connection import Base
from models.registered_user import RegisteredUser
from services.matchmaking_service import MatchmakingQueue
from test_helpers import FakeClock
import models  # noqa: F401


@pytest.fixture
async def db_engine(tmp_path):
    engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'test.db'}", poolclass=NullPool)

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    await engine.dispose()


@pytest.fixture
def session_factory(db_engine) -> async_sessionmaker[AsyncSession]:
    return async_sessionmaker(db_engine, class_=AsyncSession, expire_on_commit=False)


@pytest.fixture
async def db_session(session_factory) -> AsyncGenerator[AsyncSession, None]:
    async with session_factory() as session:
        yield session


async def _register(session: AsyncSession, number: int, rating: int, is_active: bool = True) -> RegisteredUser:
    user = RegisteredUser(
        email=f"user{number}@example.com",
        hashed_password="not-a-real-hash",
        name=f"TestUser{number}",
        rating=rating,
        is_active=is_active,
        is_superuser=False,
        is_verified=True,
    )
    session.add(user)
    await session.commit()
    await session.refresh(user)
    return user


@pytest.fixture
async def test_user_1(db_session) -> RegisteredUser:
    """Rating 1000"""
    return await _register(db_session, 1, 1000)


@pytest.fixture
async def test_user_2(db_session) -> RegisteredUser:
    """Rating 1050"""
    return await _register(db_session, 2, 1050)


@pytest.fixture
async def test_user_3(db_session) -> RegisteredUser:
    """Rating 1400"""
    return await _register(db_session, 3, 1400)


@pytest.fixture
async def inactive_user(db_session) -> RegisteredUser:
    return await _register(db_session, 4, 1000, is_active=False)


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def queue(clock) -> MatchmakingQueue:
    return MatchmakingQueue(clock=clock)
