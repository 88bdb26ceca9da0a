# app/api/routes/matchmaking.py

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.ext.asyncio import AsyncSession
from api.routes.auth import current_active_user
from infrastructure.postgres_connection import get_db_session
from models.registered_user import RegisteredUser
from services.matchmaking_backend import DatabaseMatchmakingBackend
from services.matchmaking_service import MatchmakingQueue, MatchmakingResult, matchmaking_queue
from schemas.game_schema import GameResponse
from schemas.matchmaking_schema import (
    StartMatchmakingRequest,
    MatchmakingResponse,
    CancelMatchmakingResponse,
)
from exceptions.domain_exceptions import DomainException, NotInQueueException
import logging

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/matchmaking", tags=["matchmaking"])


def get_matchmaking_queue() -> MatchmakingQueue:
    """Dependency returning the process-wide matchmaking queue"""
    return matchmaking_queue


def _to_response(result: MatchmakingResult) -> MatchmakingResponse:
    if result.matched:
        message = "Match found!"
    elif result.in_queue:
        message = "Searching for opponent..."
    else:
        message = "Not in queue"

    return MatchmakingResponse(
        status=result.status,
        matched=result.matched,
        in_queue=result.in_queue,
        game=GameResponse.model_validate(result.game) if result.game is not None else None,
        queue_size=result.queue_size,
        message=message,
    )


@router.post("/start", response_model=MatchmakingResponse)
async def start_matchmaking(
    request: StartMatchmakingRequest,
    current_user: RegisteredUser = Depends(current_active_user),
    session: AsyncSession = Depends(get_db_session),
    queue: MatchmakingQueue = Depends(get_matchmaking_queue),
):
    """
    Join the matchmaking queue, or get matched straight away with the
    closest-rated player already waiting for the same game type.

    - **game_type**: type of game to matchmake for
    """
    try:
        result = await queue.enqueue_or_match(
            DatabaseMatchmakingBackend(session),
            current_user.id,
            request.game_type,
        )
        return _to_response(result)
    except DomainException:
        raise
    except Exception as e:
        logger.error(f"Matchmaking error for user {current_user.id}: {str(e)}", exc_info=True)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail={"message": "Matchmaking failed"}
        )


@router.post("/cancel", response_model=CancelMatchmakingResponse)
async def cancel_matchmaking(
    current_user: RegisteredUser = Depends(current_active_user),
    queue: MatchmakingQueue = Depends(get_matchmaking_queue),
):
    """Leave the matchmaking queue"""
    if not queue.cancel(current_user.id):
        raise NotInQueueException(current_user.id)

    return CancelMatchmakingResponse()


@router.get("/status", response_model=MatchmakingResponse)
async def check_matchmaking_status(
    game_type: str = Query(..., min_length=1, max_length=50, description="Type of game"),
    current_user: RegisteredUser = Depends(current_active_user),
    session: AsyncSession = Depends(get_db_session),
    queue: MatchmakingQueue = Depends(get_matchmaking_queue),
):
    """
    Poll for a match.

    Returns the game if another player matched you since the last poll, a new
    match if a compatible player has arrived, or the current waiting count.
    """
    try:
        result = await queue.check_status(
            DatabaseMatchmakingBackend(session),
            current_user.id,
            game_type,
        )
        return _to_response(result)
    except DomainException:
        raise
    except Exception as e:
        logger.error(f"Check matchmaking status error for user {current_user.id}: {str(e)}", exc_info=True)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail={"message": "Failed to check matchmaking status"}
        )
