# app/schemas/matchmaking_schema.py

from pydantic import BaseModel, Field, ConfigDict
from typing import Optional, Literal
from schemas.game_schema import GameResponse


class StartMatchmakingRequest(BaseModel):
    """Request to join the matchmaking queue"""
    game_type: str = Field(..., min_length=1, max_length=50, description="Type of game to matchmake for")

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "game_type": "ayo"
            }
        }
    )


class MatchmakingResponse(BaseModel):
    """Outcome of a start or status call"""
    status: Literal["matched", "waiting", "not_in_queue"]
    matched: bool
    in_queue: bool
    game: Optional[GameResponse] = None
    queue_size: Optional[int] = Field(None, description="Players waiting for this game type (not a FIFO position)")
    message: str


class CancelMatchmakingResponse(BaseModel):
    """Response after leaving the queue"""
    success: bool = True
    message: str = "Matchmaking cancelled"
