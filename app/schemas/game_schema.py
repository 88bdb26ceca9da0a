# app/schemas/game_schema.py

from pydantic import BaseModel, ConfigDict, Field
from typing import Optional, Any, List
from datetime import datetime
from models.game import GameStatus
from schemas.user_schema import PlayerSummary


# Request schemas
class CreateGameRequest(BaseModel):
    """Request to open a new game and wait for an opponent"""
    game_type: str = Field(..., min_length=1, max_length=50, description="Type of game (e.g., 'chess', 'ayo')")


class UpdateGameStateRequest(BaseModel):
    """Partial game state update sent by a participant"""
    board: Optional[Any] = Field(None, description="Game-specific board representation")
    current_turn: Optional[int] = Field(None, description="User ID of the player to move")
    winner_id: Optional[int] = Field(None, description="User ID of the winner")
    status: Optional[GameStatus] = Field(None, description="New game status")


# Response schemas
class GameResponse(BaseModel):
    """A game session with both players' public profiles"""
    model_config = ConfigDict(from_attributes=True)

    id: str
    game_type: str
    status: GameStatus
    player1_id: int
    player2_id: Optional[int] = None
    player1: Optional[PlayerSummary] = None
    player2: Optional[PlayerSummary] = None
    board: Optional[Any] = None
    current_turn: Optional[int] = None
    winner_id: Optional[int] = None
    created_at: datetime
    started_at: Optional[datetime] = None
    ended_at: Optional[datetime] = None


class AvailableGamesResponse(BaseModel):
    """Response with games waiting for a second player"""
    games: List[GameResponse]
    total: int


# Event schemas (for Socket.IO relay)
class JoinGameRoomRequest(BaseModel):
    """Request to join or leave a game's room"""
    game_id: str = Field(..., min_length=1)


class GameMoveRequest(BaseModel):
    """A move to forward to the other players in the room"""
    game_id: str = Field(..., min_length=1)
    move: Any


class OpponentMoveEvent(BaseModel):
    """Event broadcast to the rest of the room when a player moves"""
    game_id: str
    player_id: int
    move: Any


class GameErrorResponse(BaseModel):
    """Error response for game operations"""
    error: str
    details: Optional[dict] = None
