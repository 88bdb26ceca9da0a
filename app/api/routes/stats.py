# app/api/routes/stats.py

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession
from api.routes.auth import current_active_user
from infrastructure.postgres_connection import get_db_session
from models.registered_user import RegisteredUser
from services.stats_service import StatsService
from schemas.user_schema import GameStatsRead, GameStatsUpdate, AllGameStatsResponse

router = APIRouter(prefix="/stats", tags=["stats"])


@router.get("", response_model=AllGameStatsResponse)
async def get_all_game_stats(
    current_user: RegisteredUser = Depends(current_active_user),
    session: AsyncSession = Depends(get_db_session),
):
    """Statistics for every game, with defaults for games the user has not played"""
    return await StatsService.get_all_game_stats(session, current_user.id)


@router.get("/{game_id}", response_model=GameStatsRead)
async def get_game_stats(
    game_id: str,
    current_user: RegisteredUser = Depends(current_active_user),
    session: AsyncSession = Depends(get_db_session),
):
    """
    Statistics for one game

    - **game_id**: e.g. 'chess', 'ayo'
    """
    return await StatsService.get_game_stats(session, current_user.id, game_id)


@router.put("/{game_id}", response_model=GameStatsRead)
async def update_game_stats(
    game_id: str,
    request: GameStatsUpdate,
    current_user: RegisteredUser = Depends(current_active_user),
    session: AsyncSession = Depends(get_db_session),
):
    """Create or update the statistics for one game; omitted fields are kept"""
    return await StatsService.update_game_stats(
        session,
        current_user.id,
        game_id,
        wins=request.wins,
        losses=request.losses,
        draws=request.draws,
        rating=request.rating,
    )
