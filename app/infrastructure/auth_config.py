# app/infrastructure/auth_config.py

from typing import AsyncGenerator
from fastapi import Depends
from fastapi_users.authentication import AuthenticationBackend, BearerTransport, JWTStrategy
from fastapi_users_db_sqlalchemy import SQLAlchemyUserDatabase
from sqlalchemy.ext.asyncio import AsyncSession
from models.registered_user import RegisteredUser
from infrastructure.postgres_connection import get_db_session
from config.settings import settings


async def get_user_db(session: AsyncSession = Depends(get_db_session)) -> AsyncGenerator[SQLAlchemyUserDatabase, None]:
    yield SQLAlchemyUserDatabase(session, RegisteredUser)


def get_jwt_strategy() -> JWTStrategy:
    return JWTStrategy(secret=settings.SECRET_KEY, lifetime_seconds=settings.JWT_LIFETIME_SECONDS)


# Tokens travel as "Authorization: Bearer <jwt>"; the same JWT authenticates Socket.IO connections
auth_backend = AuthenticationBackend(
    name="jwt-bearer",
    transport=BearerTransport(tokenUrl="v1/auth/login"),
    get_strategy=get_jwt_strategy,
)
