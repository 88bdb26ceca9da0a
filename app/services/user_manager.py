# app/services/user_manager.py

from typing import Optional
from fastapi import Depends, Request
from fastapi_users import BaseUserManager, IntegerIDMixin
from sqlalchemy import select, func
from models.registered_user import RegisteredUser
from infrastructure.auth_config import get_user_db
from config.settings import settings
from schemas.user_schema import UserCreate, UserUpdate
from services.stats_service import StatsService
from exceptions.domain_exceptions import ConflictException
import logging

logger = logging.getLogger(__name__)


class UserManager(IntegerIDMixin, BaseUserManager[RegisteredUser, int]):
    """
    fastapi-users manager for RegisteredUser.

    Email clashes surface as ConflictException (409) rather than the library's
    own error, and every new account is seeded with default game statistics.
    """

    reset_password_token_secret = settings.SECRET_KEY
    verification_token_secret = settings.SECRET_KEY

    async def validate_email_unique(self, email: str, exclude_user_id: Optional[int] = None):
        query = select(func.count()).select_from(RegisteredUser).where(RegisteredUser.email == email)
        if exclude_user_id is not None:
            query = query.where(RegisteredUser.id != exclude_user_id)

        taken = await self.user_db.session.scalar(query)
        if taken:
            raise ConflictException(
                message="User with this email already exists",
                details={"field": "email"}
            )

    async def create(self, user_create: UserCreate, safe: bool = False, request: Optional[Request] = None) -> RegisteredUser:
        await self.validate_email_unique(user_create.email)
        return await super().create(user_create, safe=safe, request=request)

    async def update(
        self,
        user_update: UserUpdate,
        user: RegisteredUser,
        safe: bool = False,
        request: Optional[Request] = None,
    ) -> RegisteredUser:
        if user_update.email is not None and user_update.email != user.email:
            await self.validate_email_unique(user_update.email, exclude_user_id=user.id)
        return await super().update(user_update, user, safe=safe, request=request)

    async def on_after_register(self, user: RegisteredUser, request: Optional[Request] = None):
        logger.info(f"Registered user {user.id} <{user.email}>")
        try:
            await StatsService.initialize_user_game_stats(self.user_db.session, user.id)
        except Exception as e:
            # Missing rows read back as default stats
            logger.error(f"Could not seed game statistics for user {user.id}: {e}", exc_info=True)

    async def on_after_login(self, user: RegisteredUser, request: Optional[Request] = None, response=None):
        logger.info(f"User {user.id} logged in")


async def get_user_manager(user_db=Depends(get_user_db)):
    yield UserManager(user_db)
