# app/api/routes/game.py

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession
from api.routes.auth import current_active_user
from infrastructure.postgres_connection import get_db_session
from models.registered_user import RegisteredUser
from services.game_service import GameService
from schemas.game_schema import (
    CreateGameRequest,
    UpdateGameStateRequest,
    GameResponse,
    AvailableGamesResponse,
)

router = APIRouter(prefix="/games", tags=["game"])


@router.post("", response_model=GameResponse, status_code=status.HTTP_201_CREATED)
async def create_game(
    request: CreateGameRequest,
    current_user: RegisteredUser = Depends(current_active_user),
    session: AsyncSession = Depends(get_db_session),
):
    """
    Open a new game and wait for an opponent to join

    - **game_type**: type of game (e.g., 'chess')
    """
    return await GameService.create_game(session, current_user.id, request.game_type)


@router.get("/available", response_model=AvailableGamesResponse)
async def get_available_games(
    current_user: RegisteredUser = Depends(current_active_user),
    session: AsyncSession = Depends(get_db_session),
):
    """Games waiting for a second player, newest first"""
    games = await GameService.get_available_games(session)
    return AvailableGamesResponse(
        games=[GameResponse.model_validate(game) for game in games],
        total=len(games)
    )


@router.get("/{game_id}", response_model=GameResponse)
async def get_game(
    game_id: str,
    current_user: RegisteredUser = Depends(current_active_user),
    session: AsyncSession = Depends(get_db_session),
):
    """Get a game by ID"""
    return await GameService.get_game(session, game_id)


@router.post("/{game_id}/join", response_model=GameResponse)
async def join_game(
    game_id: str,
    current_user: RegisteredUser = Depends(current_active_user),
    session: AsyncSession = Depends(get_db_session),
):
    """Join a waiting game as the second player; the game starts immediately"""
    return await GameService.join_game(session, game_id, current_user.id)


@router.put("/{game_id}/state", response_model=GameResponse)
async def update_game_state(
    game_id: str,
    request: UpdateGameStateRequest,
    current_user: RegisteredUser = Depends(current_active_user),
    session: AsyncSession = Depends(get_db_session),
):
    """
    Update board, turn, winner or status of a game you are playing in.

    Only fields present in the request body are changed.
    """
    return await GameService.update_game_state(
        session,
        game_id,
        current_user.id,
        **request.model_dump(exclude_unset=True),
    )
