# app/api/socketio/game_namespace.py

from infrastructure.socketio_manager import sio, manager, AuthNamespace
from infrastructure.postgres_connection import get_session_factory
from services.game_service import GameService
from models.registered_user import RegisteredUser
from schemas.game_schema import (
    JoinGameRoomRequest,
    GameMoveRequest,
    OpponentMoveEvent,
    GameErrorResponse,
)
from pydantic import ValidationError
from exceptions.domain_exceptions import DomainException, ForbiddenException
import logging

logger = logging.getLogger(__name__)


class GameNamespace(AuthNamespace):
    """
    Socket.IO namespace relaying in-game moves.

    Each game has a room named after its id. The server does not validate
    moves; it forwards them to the other players in the room.
    """

    async def handle_connect(self, sid, environ, user: RegisteredUser):
        logger.info(f"Client connected to /game: {sid} (User: {user.id})")

    async def handle_disconnect(self, sid):
        logger.info(f"Client disconnected from /game: {sid}")

    async def _emit_error(self, sid, error: str, details: dict = None):
        error_response = GameErrorResponse(error=error, details=details)
        await self.emit("game_error", error_response.model_dump(mode='json'), room=sid)

    async def _ensure_participant(self, game_id: str, user_id: int):
        async with get_session_factory()() as session:
            game = await GameService.get_game(session, game_id)

        if user_id not in (game.player1_id, game.player2_id):
            raise ForbiddenException(
                message="You are not a player in this game",
                details={"game_id": game_id}
            )

    async def on_join_game(self, sid, data):
        """
        Join a game's room.

        Event: join_game
        Data: {game_id: str}
        """
        user_id = manager.get_user_id(sid)
        if not user_id:
            await self._emit_error(sid, "Not authenticated", {"message": "Authentication required"})
            return

        try:
            request = JoinGameRoomRequest(**(data or {}))
            await self._ensure_participant(request.game_id, user_id)
        except ValidationError as e:
            await self._emit_error(sid, "Invalid request", {"message": str(e)})
            return
        except DomainException as e:
            await self._emit_error(sid, e.message, e.details)
            return

        await self.enter_room(sid, request.game_id)
        logger.info(f"User {user_id} joined game room {request.game_id}")
        await self.emit("joined_game", {"game_id": request.game_id}, room=sid)

    async def on_leave_game(self, sid, data):
        """
        Leave a game's room.

        Event: leave_game
        Data: {game_id: str}
        """
        try:
            request = JoinGameRoomRequest(**(data or {}))
        except ValidationError as e:
            await self._emit_error(sid, "Invalid request", {"message": str(e)})
            return

        await self.leave_room(sid, request.game_id)
        logger.info(f"User {manager.get_user_id(sid)} left game room {request.game_id}")
        await self.emit("left_game", {"game_id": request.game_id}, room=sid)

    async def on_game_move(self, sid, data):
        """
        Forward a move to everyone else in the game's room.

        Event: game_move
        Data: {game_id: str, move: any}
        Emits: opponent_move to the room (excluding the sender)
        """
        user_id = manager.get_user_id(sid)
        if not user_id:
            await self._emit_error(sid, "Not authenticated", {"message": "Authentication required"})
            return

        try:
            request = GameMoveRequest(**(data or {}))
        except ValidationError as e:
            await self._emit_error(sid, "Invalid request", {"message": str(e)})
            return

        if request.game_id not in self.rooms(sid):
            await self._emit_error(sid, "Not in game room", {"game_id": request.game_id})
            return

        event = OpponentMoveEvent(game_id=request.game_id, player_id=user_id, move=request.move)
        await self.emit(
            "opponent_move",
            event.model_dump(mode='json'),
            room=request.game_id,
            skip_sid=sid
        )


sio.register_namespace(GameNamespace('/game'))
