# app/tests/test_user_manager.py
"""
Unit tests for UserManager

Tests cover:
- Email uniqueness validation (create and update)
- Registration hook seeding default game statistics
- Login hook
"""
import pytest
from unittest.mock import Mock, patch, AsyncMock
from sqlalchemy import select
from models.game_stats import GameStats
from services.user_manager import UserManager
from services.stats_service import DEFAULT_GAMES
from schemas.user_schema import UserCreate
from exceptions.domain_exceptions import ConflictException


@pytest.fixture
def user_manager(db_session) -> UserManager:
    """UserManager over a stub user database that only exposes the session"""
    return UserManager(Mock(session=db_session))


@pytest.mark.unit
class TestEmailUniqueness:
    """Test cases for validate_email_unique and the create/update overrides"""

    async def test_free_email_passes(self, user_manager):
        await user_manager.validate_email_unique("new_email@example.com")

    async def test_taken_email_conflicts(self, user_manager, test_user_1):
        with pytest.raises(ConflictException) as exc_info:
            await user_manager.validate_email_unique(test_user_1.email)

        assert exc_info.value.status_code == 409
        assert exc_info.value.details == {"field": "email"}

    async def test_own_email_is_ignored_on_update(self, user_manager, test_user_1):
        await user_manager.validate_email_unique(test_user_1.email, exclude_user_id=test_user_1.id)

    async def test_excluding_another_user_still_conflicts(self, user_manager, test_user_1, test_user_2):
        with pytest.raises(ConflictException):
            await user_manager.validate_email_unique(test_user_1.email, exclude_user_id=test_user_2.id)

    async def test_create_with_taken_email_conflicts(self, user_manager, test_user_1):
        with pytest.raises(ConflictException):
            await user_manager.create(UserCreate(email=test_user_1.email, password="secret123"))


@pytest.mark.unit
class TestOnAfterRegister:
    """Test cases for on_after_register hook"""

    async def test_seeds_default_stats(self, user_manager, db_session, test_user_1):
        # Act
        await user_manager.on_after_register(test_user_1)

        # Assert
        result = await db_session.execute(select(GameStats).where(GameStats.user_id == test_user_1.id))
        rows = result.scalars().all()
        assert {row.game_id for row in rows} == {game["id"] for game in DEFAULT_GAMES}
        assert all(row.wins == 0 and row.rating == 1000 for row in rows)

    async def test_seeding_failure_is_logged_not_raised(self, user_manager, db_session, test_user_1):
        # Arrange
        failing_init = AsyncMock(side_effect=RuntimeError("db down"))

        # Act
        with patch('services.user_manager.StatsService.initialize_user_game_stats', new=failing_init), \
                patch('services.user_manager.logger') as mock_logger:
            await user_manager.on_after_register(test_user_1)

        # Assert
        failing_init.assert_awaited_once_with(db_session, test_user_1.id)
        mock_logger.error.assert_called_once()


@pytest.mark.unit
class TestOnAfterLogin:
    """Test cases for on_after_login hook"""

    async def test_logs_the_login(self, user_manager, test_user_1):
        with patch('services.user_manager.logger') as mock_logger:
            await user_manager.on_after_login(test_user_1)

        mock_logger.info.assert_called_once_with(f"User {test_user_1.id} logged in")
