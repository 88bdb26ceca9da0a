# app/services/matchmaking_backend.py

from dataclasses import dataclass
from datetime import datetime
from typing import Optional, Protocol
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from models.game import Game
from models.registered_user import RegisteredUser
from services.game_service import GameService


@dataclass(frozen=True)
class PlayerRating:
    """Result of a player lookup"""
    id: int
    rating: int


class MatchmakingBackend(Protocol):
    """Storage collaborators used by the matchmaking queue"""

    async def get_player_rating(self, player_id: int) -> Optional[PlayerRating]:
        ...

    async def create_match(self, first_player_id: int, second_player_id: int, game_type: str) -> Game:
        ...

    async def find_recent_match(self, player_id: int, game_type: str, since: datetime) -> Optional[Game]:
        ...


class DatabaseMatchmakingBackend:
    """MatchmakingBackend bound to a single request's database session"""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def get_player_rating(self, player_id: int) -> Optional[PlayerRating]:
        query = select(RegisteredUser.id, RegisteredUser.rating).where(
            RegisteredUser.id == player_id,
            RegisteredUser.is_active == True
        )
        result = await self.session.execute(query)
        row = result.one_or_none()
        if row is None:
            return None
        return PlayerRating(id=row.id, rating=row.rating)

    async def create_match(self, first_player_id: int, second_player_id: int, game_type: str) -> Game:
        return await GameService.create_match_game(
            self.session,
            first_player_id=first_player_id,
            second_player_id=second_player_id,
            game_type=game_type,
        )

    async def find_recent_match(self, player_id: int, game_type: str, since: datetime) -> Optional[Game]:
        return await GameService.find_recent_match(
            self.session,
            player_id=player_id,
            game_type=game_type,
            since=since,
        )
