# app/infrastructure/postgres_connection.py

from typing import AsyncGenerator, Optional
from sqlalchemy import text
from sqlalchemy.ext.asyncio import create_async_engine, AsyncEngine, AsyncSession, async_sessionmaker
from sqlalchemy.orm import DeclarativeBase
from config.settings import settings
import logging

logger = logging.getLogger(__name__)


class Base(DeclarativeBase):
    """Declarative base shared by every table"""


class PostgresConnection:
    """
    Owns the async engine and the session factory.

    `connect()` is called once from the application lifespan; until then any
    attempt to open a session fails loudly.
    """

    def __init__(self, url: Optional[str] = None):
        self.url = url or settings.DATABASE_URL
        self.engine: Optional[AsyncEngine] = None
        self.session_factory: Optional[async_sessionmaker[AsyncSession]] = None

    @property
    def is_connected(self) -> bool:
        return self.engine is not None

    async def connect(self):
        if self.is_connected:
            return

        engine = create_async_engine(
            self.url,
            echo=settings.DEBUG,
            pool_pre_ping=True,
            pool_size=settings.DATABASE_POOL_SIZE,
            max_overflow=settings.DATABASE_MAX_OVERFLOW,
        )

        try:
            async with engine.connect() as conn:
                await conn.execute(text("SELECT 1"))
        except Exception as e:
            logger.error(f"Database at {settings.POSTGRES_HOST}:{settings.POSTGRES_PORT} is unreachable: {e}")
            await engine.dispose()
            raise

        self.engine = engine
        self.session_factory = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)
        logger.info(f"Connected to database {settings.POSTGRES_DB} at {settings.POSTGRES_HOST}:{settings.POSTGRES_PORT}")

    async def create_tables(self):
        """Create missing tables for every model"""
        import models  # noqa: F401

        async with self.get_engine().begin() as conn:
            await conn.run_sync(Base.metadata.create_all)
        logger.info(f"Database schema ready ({len(Base.metadata.tables)} tables)")

    async def disconnect(self):
        if not self.is_connected:
            return

        await self.engine.dispose()
        self.engine = None
        self.session_factory = None
        logger.info("Database connection closed")

    def get_engine(self) -> AsyncEngine:
        if not self.is_connected:
            raise RuntimeError("Database is not connected, call connect() first")
        return self.engine

    def get_session_factory(self) -> async_sessionmaker[AsyncSession]:
        if self.session_factory is None:
            raise RuntimeError("Database is not connected, call connect() first")
        return self.session_factory


postgres_connection = PostgresConnection()


def get_session_factory() -> async_sessionmaker[AsyncSession]:
    return postgres_connection.get_session_factory()


async def get_db_session() -> AsyncGenerator[AsyncSession, None]:
    """
    Request-scoped session: committed when the route returns, rolled back if it raises.

        @router.get("/games/{game_id}")
        async def get_game(game_id: str, session: AsyncSession = Depends(get_db_session)):
            ...
    """
    async with get_session_factory()() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise
