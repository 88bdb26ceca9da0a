# app/services/stats_service.py

from typing import Dict, List, Optional
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from config.settings import settings
from models.game_stats import GameStats
from schemas.user_schema import GameStatsRead, AllGameStatsResponse
from exceptions.domain_exceptions import NotFoundException
import logging

logger = logging.getLogger(__name__)


# Games every new account gets a statistics row for
DEFAULT_GAMES: List[Dict[str, str]] = [
    {"id": "chess", "title": "Chess"},
    {"id": "ayo", "title": "Ayo"},
    {"id": "whot", "title": "Whot"},
    {"id": "ludo", "title": "Ludo"},
    {"id": "draughts", "title": "Draughts"},
]


class StatsService:
    """Service for per-game player statistics"""

    @staticmethod
    def get_default_game(game_id: str) -> Optional[Dict[str, str]]:
        return next((game for game in DEFAULT_GAMES if game["id"] == game_id), None)

    @staticmethod
    def _default_stats(game: Dict[str, str]) -> GameStatsRead:
        return GameStatsRead(
            game_id=game["id"],
            title=game["title"],
            wins=0,
            losses=0,
            draws=0,
            rating=settings.DEFAULT_RATING,
            has_existing_stats=False,
        )

    @staticmethod
    def to_read(stats: GameStats) -> GameStatsRead:
        game = StatsService.get_default_game(stats.game_id)
        return GameStatsRead(
            game_id=stats.game_id,
            title=game["title"] if game else None,
            wins=stats.wins,
            losses=stats.losses,
            draws=stats.draws,
            rating=stats.rating,
            has_existing_stats=True,
        )

    @staticmethod
    async def initialize_user_game_stats(session: AsyncSession, user_id: int) -> List[GameStats]:
        """
        Create rookie statistics for every default game the user has no row for yet.

        Args:
            session: Database session
            user_id: ID of the (newly registered) user

        Returns:
            The rows that were created
        """
        result = await session.execute(
            select(GameStats.game_id).where(GameStats.user_id == user_id)
        )
        existing = set(result.scalars().all())

        created = [
            GameStats(
                user_id=user_id,
                game_id=game["id"],
                wins=0,
                losses=0,
                draws=0,
                rating=settings.DEFAULT_RATING,
            )
            for game in DEFAULT_GAMES
            if game["id"] not in existing
        ]

        if created:
            session.add_all(created)
            await session.commit()
            logger.info(f"Initialized {len(created)} game statistics rows for user {user_id}")

        return created

    @staticmethod
    async def _get_row(session: AsyncSession, user_id: int, game_id: str) -> Optional[GameStats]:
        result = await session.execute(
            select(GameStats).where(GameStats.user_id == user_id, GameStats.game_id == game_id)
        )
        return result.scalar_one_or_none()

    @staticmethod
    async def get_game_stats(session: AsyncSession, user_id: int, game_id: str) -> GameStatsRead:
        """
        Get the user's statistics for one game.

        Falls back to default statistics for a known game without a stored row.

        Raises:
            NotFoundException: If there is no row and game_id is not a known game
        """
        stats = await StatsService._get_row(session, user_id, game_id)
        if stats:
            return StatsService.to_read(stats)

        game = StatsService.get_default_game(game_id)
        if not game:
            raise NotFoundException(
                message="Invalid game ID",
                details={"game_id": game_id}
            )

        return StatsService._default_stats(game)

    @staticmethod
    async def get_all_game_stats(session: AsyncSession, user_id: int) -> AllGameStatsResponse:
        """Stats for every default game, using stored rows where they exist"""
        result = await session.execute(select(GameStats).where(GameStats.user_id == user_id))
        existing = {stats.game_id: stats for stats in result.scalars().all()}

        all_stats = [
            StatsService.to_read(existing[game["id"]]) if game["id"] in existing
            else StatsService._default_stats(game)
            for game in DEFAULT_GAMES
        ]

        return AllGameStatsResponse(
            all_game_stats=all_stats,
            total_games=len(all_stats),
            games_with_stats=len(existing),
        )

    @staticmethod
    async def update_game_stats(
        session: AsyncSession,
        user_id: int,
        game_id: str,
        wins: Optional[int] = None,
        losses: Optional[int] = None,
        draws: Optional[int] = None,
        rating: Optional[int] = None,
    ) -> GameStatsRead:
        """
        Upsert the user's statistics for one game.

        Fields left as None keep their stored value (or the default on insert).
        """
        stats = await StatsService._get_row(session, user_id, game_id)

        if stats is None:
            stats = GameStats(
                user_id=user_id,
                game_id=game_id,
                wins=wins or 0,
                losses=losses or 0,
                draws=draws or 0,
                rating=rating if rating is not None else settings.DEFAULT_RATING,
            )
            session.add(stats)
        else:
            if wins is not None:
                stats.wins = wins
            if losses is not None:
                stats.losses = losses
            if draws is not None:
                stats.draws = draws
            if rating is not None:
                stats.rating = rating

        await session.commit()
        await session.refresh(stats)

        logger.info(f"Updated {game_id} statistics for user {user_id}")
        return StatsService.to_read(stats)
