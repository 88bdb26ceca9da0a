# app/services/profile_service.py

from typing import Optional
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from models.registered_user import RegisteredUser
from schemas.user_schema import ProfileRead
from services.stats_service import StatsService
from exceptions.domain_exceptions import NotFoundException, BadRequestException


class ProfileService:
    """Service for reading and editing a user's own profile"""

    @staticmethod
    async def _get_user(session: AsyncSession, user_id: int) -> RegisteredUser:
        result = await session.execute(
            select(RegisteredUser)
            .where(RegisteredUser.id == user_id)
            .execution_options(populate_existing=True)
        )
        user = result.scalar_one_or_none()

        if not user:
            raise NotFoundException(
                message="User not found",
                details={"user_id": user_id}
            )

        return user

    @staticmethod
    async def get_profile(session: AsyncSession, user_id: int) -> ProfileRead:
        """
        Get the user's profile with their stored game statistics.

        Raises:
            NotFoundException: If the user does not exist
        """
        user = await ProfileService._get_user(session, user_id)
        return ProfileRead(
            id=user.id,
            email=user.email,
            name=user.name,
            battle_bonus=user.battle_bonus,
            level_reward=user.level_reward,
            rating=user.rating,
            created_at=user.created_at,
            updated_at=user.updated_at,
            game_stats=[StatsService.to_read(stats) for stats in user.game_stats],
        )

    @staticmethod
    async def update_profile(
        session: AsyncSession,
        user_id: int,
        name: Optional[str] = None,
        battle_bonus: Optional[int] = None,
        level_reward: Optional[int] = None,
        rating: Optional[int] = None,
    ) -> ProfileRead:
        """
        Update the provided profile fields.

        Raises:
            BadRequestException: If no field was provided
            NotFoundException: If the user does not exist
        """
        update_data = {
            field: value
            for field, value in (
                ("name", name.strip() if name is not None else None),
                ("battle_bonus", battle_bonus),
                ("level_reward", level_reward),
                ("rating", rating),
            )
            if value is not None
        }

        if not update_data:
            raise BadRequestException(message="No profile fields provided for update")

        user = await ProfileService._get_user(session, user_id)
        for field, value in update_data.items():
            setattr(user, field, value)

        await session.commit()
        return await ProfileService.get_profile(session, user_id)
