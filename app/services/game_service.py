# app/services/game_service.py

from typing import Any, List, Optional
from datetime import datetime, UTC
from sqlalchemy import select, or_
from sqlalchemy.ext.asyncio import AsyncSession
from models.game import Game, GameStatus
from exceptions.domain_exceptions import (
    NotFoundException,
    BadRequestException,
    ForbiddenException,
)
import logging

logger = logging.getLogger(__name__)

# Sentinel for "field not provided" so that explicit None can still be written
_UNSET: Any = object()


class GameService:
    """Service for managing persisted game sessions"""

    @staticmethod
    async def create_game(session: AsyncSession, player_id: int, game_type: str) -> Game:
        """
        Open a new game that waits for a second player.

        Args:
            session: Database session
            player_id: ID of the creating user (becomes player 1)
            game_type: Type of game (e.g., 'chess')

        Returns:
            Created game
        """
        game = Game(
            game_type=game_type,
            player1_id=player_id,
            status=GameStatus.WAITING.value,
        )
        session.add(game)
        await session.commit()

        logger.info(f"Game {game.id} ({game_type}) created by user {player_id}")
        return await GameService.get_game(session, game.id)

    @staticmethod
    async def join_game(session: AsyncSession, game_id: str, player_id: int) -> Game:
        """
        Join a waiting game as player 2.

        Raises:
            NotFoundException: If the game does not exist
            BadRequestException: If the game is not waiting or the user created it
        """
        game = await GameService.get_game(session, game_id)

        if game.status != GameStatus.WAITING.value:
            raise BadRequestException(
                message="Game is not available to join",
                details={"game_id": game_id, "status": game.status}
            )

        if game.player1_id == player_id:
            raise BadRequestException(
                message="Cannot join your own game",
                details={"game_id": game_id}
            )

        game.player2_id = player_id
        game.status = GameStatus.IN_PROGRESS.value
        game.started_at = datetime.now(UTC)
        await session.commit()

        logger.info(f"User {player_id} joined game {game_id}")
        return await GameService.get_game(session, game_id)

    @staticmethod
    async def get_available_games(session: AsyncSession) -> List[Game]:
        """Get waiting games that still need a second player, newest first"""
        query = (
            select(Game)
            .where(Game.status == GameStatus.WAITING.value, Game.player2_id.is_(None))
            .order_by(Game.created_at.desc())
        )
        result = await session.execute(query)
        return list(result.scalars().all())

    @staticmethod
    async def get_game(session: AsyncSession, game_id: str) -> Game:
        """
        Get a game by ID.

        Raises:
            NotFoundException: If the game does not exist
        """
        # populate_existing so player profiles are loaded for freshly created games too
        query = select(Game).where(Game.id == game_id).execution_options(populate_existing=True)
        result = await session.execute(query)
        game = result.scalar_one_or_none()

        if not game:
            raise NotFoundException(
                message="Game not found",
                details={"game_id": game_id}
            )

        return game

    @staticmethod
    async def update_game_state(
        session: AsyncSession,
        game_id: str,
        player_id: int,
        board: Any = _UNSET,
        current_turn: Any = _UNSET,
        winner_id: Any = _UNSET,
        status: Any = _UNSET,
    ) -> Game:
        """
        Update a game's state. Only fields that are passed are changed.

        Raises:
            NotFoundException: If the game does not exist
            ForbiddenException: If the user is not a participant
        """
        game = await GameService.get_game(session, game_id)

        if player_id not in (game.player1_id, game.player2_id):
            raise ForbiddenException(
                message="Not authorized to update this game",
                details={"game_id": game_id, "user_id": player_id}
            )

        if board is not _UNSET:
            game.board = board
        if current_turn is not _UNSET:
            game.current_turn = current_turn
        if winner_id is not _UNSET:
            game.winner_id = winner_id
        if status is not _UNSET:
            status_value = status.value if isinstance(status, GameStatus) else status
            game.status = status_value
            if status_value == GameStatus.COMPLETED.value:
                game.ended_at = datetime.now(UTC)

        await session.commit()
        return await GameService.get_game(session, game_id)

    # ------------------------------------------------------------------
    # Matchmaking queries
    # ------------------------------------------------------------------

    @staticmethod
    async def create_match_game(
        session: AsyncSession,
        first_player_id: int,
        second_player_id: int,
        game_type: str,
    ) -> Game:
        """
        Persist a matched game that starts immediately.

        The first player is player 1 and moves first.
        """
        game = Game(
            game_type=game_type,
            player1_id=first_player_id,
            player2_id=second_player_id,
            status=GameStatus.IN_PROGRESS.value,
            current_turn=first_player_id,
            started_at=datetime.now(UTC),
        )
        session.add(game)
        await session.commit()

        logger.info(f"Matched game {game.id} ({game_type}): {first_player_id} vs {second_player_id}")
        return await GameService.get_game(session, game.id)

    @staticmethod
    async def find_recent_match(
        session: AsyncSession,
        player_id: int,
        game_type: str,
        since: datetime,
    ) -> Optional[Game]:
        """Most recent in-progress game of this type involving the player, started at or after `since`"""
        query = (
            select(Game)
            .where(
                or_(Game.player1_id == player_id, Game.player2_id == player_id),
                Game.game_type == game_type,
                Game.status == GameStatus.IN_PROGRESS.value,
                Game.started_at >= since,
            )
            .order_by(Game.started_at.desc())
            .limit(1)
        )
        result = await session.execute(query)
        return result.scalar_one_or_none()
