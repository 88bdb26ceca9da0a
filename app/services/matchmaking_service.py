# app/services/matchmaking_service.py

import asyncio
import logging
from dataclasses import dataclass
from datetime import datetime, timedelta, UTC
from typing import Callable, Dict, List, Optional
from config.settings import settings
from exceptions.domain_exceptions import BadRequestException, PlayerNotFoundException
from models.game import Game
from services.matchmaking_backend import MatchmakingBackend

logger = logging.getLogger(__name__)


@dataclass
class QueueEntry:
    """A player waiting for an opponent"""
    player_id: int
    rating: int
    game_type: str
    enqueued_at: datetime


@dataclass
class MatchmakingResult:
    """Outcome of enqueue_or_match / check_status"""
    status: str
    game: Optional[Game] = None
    queue_size: Optional[int] = None

    MATCHED = "matched"
    WAITING = "waiting"
    NOT_IN_QUEUE = "not_in_queue"

    @property
    def matched(self) -> bool:
        return self.status == self.MATCHED

    @property
    def in_queue(self) -> bool:
        return self.status == self.WAITING


class MatchmakingQueue:
    """
    In-memory, rating-proximity matchmaking queue.

    Entries are keyed by player id and partitioned by game type. Every
    read-modify-write on a partition runs under that partition's lock, and the
    lock is held from candidate selection until the game has been created, so a
    waiting player can only ever be handed to one opponent.

    Stale entries are removed by a background sweeper started with `start()`
    and stopped with `stop()`.
    """

    def __init__(
        self,
        stale_after: timedelta = timedelta(seconds=settings.MATCHMAKING_STALE_AFTER_SECONDS),
        sweep_interval: float = settings.MATCHMAKING_SWEEP_INTERVAL_SECONDS,
        recent_match_window: timedelta = timedelta(seconds=settings.MATCHMAKING_RECENT_MATCH_SECONDS),
        clock: Optional[Callable[[], datetime]] = None,
    ):
        self.stale_after = stale_after
        self.sweep_interval = sweep_interval
        self.recent_match_window = recent_match_window
        self._clock = clock or (lambda: datetime.now(UTC))
        self._entries: Dict[int, QueueEntry] = {}
        # Entries taken out for a game that is still being created
        self._in_flight: Dict[int, QueueEntry] = {}
        self._locks: Dict[str, asyncio.Lock] = {}
        self._stop_event = asyncio.Event()
        self.is_running = False

    # ------------------------------------------------------------------
    # Inspection
    # ------------------------------------------------------------------

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, player_id: int) -> bool:
        return player_id in self._entries

    def get_entry(self, player_id: int) -> Optional[QueueEntry]:
        return self._entries.get(player_id)

    def partition_size(self, game_type: str) -> int:
        """Number of players waiting for this game type"""
        return sum(1 for entry in self._entries.values() if entry.game_type == game_type)

    # ------------------------------------------------------------------
    # Operations
    # ------------------------------------------------------------------

    async def enqueue_or_match(
        self,
        backend: MatchmakingBackend,
        player_id: int,
        game_type: str,
    ) -> MatchmakingResult:
        """
        Match the player with the closest-rated waiting player of the same game
        type, or queue them if nobody compatible is waiting.

        The waiting player takes the first slot and moves first.

        Raises:
            BadRequestException: If game_type is empty
            PlayerNotFoundException: If the player cannot be resolved
        """
        self._validate_game_type(game_type)

        player = await backend.get_player_rating(player_id)
        if player is None:
            raise PlayerNotFoundException(player_id)

        async with self._partition_lock(game_type):
            if self._entries.pop(player_id, None) is not None:
                logger.info(f"User {player_id} already in queue, replacing old entry")

            candidate = self._find_best_match(player_id, player.rating, game_type)

            if candidate is None:
                self._entries[player_id] = QueueEntry(
                    player_id=player_id,
                    rating=player.rating,
                    game_type=game_type,
                    enqueued_at=self._clock(),
                )
                queue_size = self.partition_size(game_type)
                logger.info(f"User {player_id} (rating {player.rating}) queued for {game_type}, {queue_size} waiting")
                return MatchmakingResult(status=MatchmakingResult.WAITING, queue_size=queue_size)

            game = await self._create_match(backend, candidate.player_id, player_id, game_type, removed=[candidate])

        logger.info(
            f"Matched user {player_id} (rating {player.rating}) with waiting user "
            f"{candidate.player_id} (rating {candidate.rating}) for {game_type}"
        )
        return MatchmakingResult(status=MatchmakingResult.MATCHED, game=game)

    def cancel(self, player_id: int) -> bool:
        """
        Remove the player's entry. Returns False if they were not queued.

        A player whose game is being created counts as queued; cancelling keeps
        them out of the queue if that creation fails.
        """
        queued = self._entries.pop(player_id, None)
        in_flight = self._in_flight.pop(player_id, None)
        entry = queued or in_flight
        if entry is None:
            return False

        logger.info(f"User {player_id} left the {entry.game_type} queue")
        return True

    async def check_status(
        self,
        backend: MatchmakingBackend,
        player_id: int,
        game_type: str,
    ) -> MatchmakingResult:
        """
        Poll for a match.

        A player who is still queued gets a fresh search and, on a hit, takes
        the first slot. A player who is not queued for this game type may have
        been matched by another player moments ago, so recent games are looked
        up outside the partition lock.
        """
        self._validate_game_type(game_type)

        async with self._partition_lock(game_type):
            entry = self._entries.get(player_id)

            if entry is not None and entry.game_type == game_type:
                candidate = self._find_best_match(player_id, entry.rating, game_type)
                if candidate is None:
                    return MatchmakingResult(
                        status=MatchmakingResult.WAITING,
                        queue_size=self.partition_size(game_type),
                    )

                game = await self._create_match(backend, player_id, candidate.player_id, game_type, removed=[entry, candidate])
                logger.info(f"Status poll matched user {player_id} with user {candidate.player_id} for {game_type}")
                return MatchmakingResult(status=MatchmakingResult.MATCHED, game=game)

        since = self._clock() - self.recent_match_window
        recent_game = await backend.find_recent_match(player_id, game_type, since)
        if recent_game is not None:
            return MatchmakingResult(status=MatchmakingResult.MATCHED, game=recent_game)
        return MatchmakingResult(status=MatchmakingResult.NOT_IN_QUEUE)

    def evict_stale(self, now: Optional[datetime] = None) -> List[int]:
        """Remove entries waiting for at least `stale_after`. Returns evicted player ids."""
        cutoff = (now or self._clock()) - self.stale_after
        evicted = [
            player_id
            for player_id, entry in self._entries.items()
            if entry.enqueued_at <= cutoff
        ]

        for player_id in evicted:
            del self._entries[player_id]
            logger.info(f"Removed user {player_id} from matchmaking queue due to timeout")

        return evicted

    # ------------------------------------------------------------------
    # Background sweeper
    # ------------------------------------------------------------------

    async def start(self):
        """Run the eviction pass every `sweep_interval` seconds until stop() is called"""
        if self.is_running:
            logger.warning("Matchmaking sweeper is already running")
            return

        self.is_running = True
        self._stop_event.clear()
        logger.info(f"Matchmaking sweeper started (every {self.sweep_interval}s, stale after {self.stale_after})")

        try:
            while self.is_running:
                try:
                    await asyncio.wait_for(self._stop_event.wait(), timeout=self.sweep_interval)
                except asyncio.TimeoutError:
                    pass

                if not self.is_running:
                    break

                try:
                    evicted = self.evict_stale()
                    if evicted:
                        logger.info(f"Evicted {len(evicted)} stale matchmaking entries")
                except Exception as e:
                    logger.error(f"Error evicting stale matchmaking entries: {e}", exc_info=True)
        finally:
            self.is_running = False

    def stop(self):
        """Stop the background sweeper"""
        self.is_running = False
        self._stop_event.set()
        logger.info("Matchmaking sweeper stopped")

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    @staticmethod
    def _validate_game_type(game_type: str):
        if not game_type or not game_type.strip():
            raise BadRequestException(
                message="Game type is required",
                details={"game_type": game_type}
            )

    def _partition_lock(self, game_type: str) -> asyncio.Lock:
        lock = self._locks.get(game_type)
        if lock is None:
            lock = self._locks[game_type] = asyncio.Lock()
        return lock

    def _find_best_match(self, player_id: int, rating: int, game_type: str) -> Optional[QueueEntry]:
        """Closest-rated entry of the same game type, excluding the player; first wins on ties"""
        best_match = None
        smallest_difference = None

        for entry in self._entries.values():
            if entry.player_id == player_id or entry.game_type != game_type:
                continue

            difference = abs(entry.rating - rating)
            if smallest_difference is None or difference < smallest_difference:
                smallest_difference = difference
                best_match = entry

        return best_match

    async def _create_match(
        self,
        backend: MatchmakingBackend,
        first_player_id: int,
        second_player_id: int,
        game_type: str,
        removed: List[QueueEntry],
    ) -> Game:
        """
        Take the entries out of the queue and create the game.

        On failure the entries go back with their original timestamps, except
        for players who cancelled while the game was being created.
        """
        for entry in removed:
            del self._entries[entry.player_id]
            self._in_flight[entry.player_id] = entry

        try:
            return await backend.create_match(first_player_id, second_player_id, game_type)
        except Exception:
            restored = [entry for entry in removed if self._in_flight.get(entry.player_id) is entry]
            logger.error(
                f"Failed to create {game_type} game for users {first_player_id} and {second_player_id}, "
                f"restoring {[entry.player_id for entry in restored]} to the queue",
                exc_info=True
            )
            for entry in restored:
                self._entries.setdefault(entry.player_id, entry)
            raise
        finally:
            for entry in removed:
                if self._in_flight.get(entry.player_id) is entry:
                    del self._in_flight[entry.player_id]


# Shared instance for the application's lifetime
matchmaking_queue = MatchmakingQueue()
