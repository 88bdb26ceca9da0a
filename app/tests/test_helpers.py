# app/tests/test_helpers.py
"""
Helpers shared by the matchmaking tests
"""
import asyncio
from datetime import datetime, timedelta, UTC
from types import SimpleNamespace
from typing import Dict, List, Optional
from services.matchmaking_backend import PlayerRating


class FakeClock:
    """Callable clock whose time only moves when advanced"""

    def __init__(self, start: Optional[datetime] = None):
        self.now = start or datetime(2025, 1, 1, 12, 0, tzinfo=UTC)

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs):
        self.now += timedelta(**kwargs)


class FakeMatchmakingBackend:
    """
    In-memory MatchmakingBackend.

    create_match yields to the event loop before recording the game so that
    concurrent callers interleave the way they would against a real database.
    """

    def __init__(self, ratings: Optional[Dict[int, int]] = None, fail_create: bool = False):
        self.ratings = dict(ratings or {})
        self.fail_create = fail_create
        # When set, create_match waits on this event before finishing
        self.create_gate: Optional[asyncio.Event] = None
        self.created: List[SimpleNamespace] = []
        self.recent_matches: Dict[tuple, SimpleNamespace] = {}
        self.recent_lookups: List[tuple] = []

    async def get_player_rating(self, player_id: int) -> Optional[PlayerRating]:
        await asyncio.sleep(0)
        if player_id not in self.ratings:
            return None
        return PlayerRating(id=player_id, rating=self.ratings[player_id])

    async def create_match(self, first_player_id: int, second_player_id: int, game_type: str):
        await asyncio.sleep(0)
        if self.create_gate is not None:
            await self.create_gate.wait()
        if self.fail_create:
            raise RuntimeError("database unavailable")

        game = SimpleNamespace(
            id=f"game-{len(self.created) + 1}",
            game_type=game_type,
            player1_id=first_player_id,
            player2_id=second_player_id,
            current_turn=first_player_id,
        )
        self.created.append(game)
        return game

    async def find_recent_match(self, player_id: int, game_type: str, since: datetime):
        self.recent_lookups.append((player_id, game_type, since))
        return self.recent_matches.get((player_id, game_type))
