# app/tests/test_matchmaking_backend.py
"""
Tests for DatabaseMatchmakingBackend, and for MatchmakingQueue running
against the real database backend
"""
import pytest
from datetime import datetime, UTC, timedelta
from services.matchmaking_backend import DatabaseMatchmakingBackend, PlayerRating
from services.matchmaking_service import MatchmakingQueue, MatchmakingResult
from models.game import GameStatus
from exceptions.domain_exceptions import PlayerNotFoundException


@pytest.mark.asyncio
class TestDatabaseMatchmakingBackend:
    """Test the database collaborators used by the queue"""

    async def test_get_player_rating(self, db_session, test_user_2):
        backend = DatabaseMatchmakingBackend(db_session)

        player = await backend.get_player_rating(test_user_2.id)

        assert player == PlayerRating(id=test_user_2.id, rating=1050)

    async def test_get_unknown_player_rating(self, db_session):
        backend = DatabaseMatchmakingBackend(db_session)

        assert await backend.get_player_rating(9999) is None

    async def test_inactive_player_is_not_found(self, db_session, inactive_user):
        backend = DatabaseMatchmakingBackend(db_session)

        assert await backend.get_player_rating(inactive_user.id) is None

    async def test_create_match(self, db_session, test_user_1, test_user_2):
        backend = DatabaseMatchmakingBackend(db_session)

        game = await backend.create_match(test_user_1.id, test_user_2.id, "whot")

        assert game.game_type == "whot"
        assert game.player1_id == test_user_1.id
        assert game.player2_id == test_user_2.id
        assert game.current_turn == test_user_1.id
        assert game.status == GameStatus.IN_PROGRESS.value

    async def test_find_recent_match(self, db_session, test_user_1, test_user_2):
        backend = DatabaseMatchmakingBackend(db_session)
        game = await backend.create_match(test_user_1.id, test_user_2.id, "whot")

        found = await backend.find_recent_match(
            test_user_2.id, "whot", datetime.now(UTC) - timedelta(seconds=30)
        )

        assert found.id == game.id


@pytest.mark.asyncio
class TestMatchmakingWithDatabase:
    """End-to-end matchmaking flow against the database backend"""

    async def test_match_then_poll(self, db_session, test_user_1, test_user_2):
        """A (1000) waits, B (1050) matches, A's next poll returns the same game"""
        queue = MatchmakingQueue()
        backend = DatabaseMatchmakingBackend(db_session)

        waiting = await queue.enqueue_or_match(backend, test_user_1.id, "chess")
        matched = await queue.enqueue_or_match(backend, test_user_2.id, "chess")
        polled = await queue.check_status(backend, test_user_1.id, "chess")

        assert waiting.status == MatchmakingResult.WAITING
        assert matched.status == MatchmakingResult.MATCHED
        assert matched.game.player1_id == test_user_1.id
        assert matched.game.player2_id == test_user_2.id
        assert matched.game.current_turn == test_user_1.id
        assert polled.status == MatchmakingResult.MATCHED
        assert polled.game.id == matched.game.id
        assert len(queue) == 0

    async def test_unknown_player_rejected(self, db_session, test_user_1):
        queue = MatchmakingQueue()
        backend = DatabaseMatchmakingBackend(db_session)
        await queue.enqueue_or_match(backend, test_user_1.id, "chess")

        with pytest.raises(PlayerNotFoundException):
            await queue.enqueue_or_match(backend, 9999, "chess")

        assert len(queue) == 1

    async def test_inactive_player_rejected(self, db_session, inactive_user):
        queue = MatchmakingQueue()
        backend = DatabaseMatchmakingBackend(db_session)

        with pytest.raises(PlayerNotFoundException):
            await queue.enqueue_or_match(backend, inactive_user.id, "chess")

        assert len(queue) == 0
