# app/infrastructure/socketio_manager.py

import socketio
from typing import Dict, Optional
from urllib.parse import parse_qs
from jose import jwt, JWTError
from sqlalchemy import select
from models.registered_user import RegisteredUser
from config.settings import settings
from infrastructure.postgres_connection import get_session_factory
import logging

logger = logging.getLogger(__name__)

# Audience fastapi-users writes into its JWTs
JWT_AUDIENCE = "fastapi-users:auth"


class ConnectionManager:
    """Tracks which user owns each Socket.IO session"""

    def __init__(self):
        self.sid_to_user: Dict[str, int] = {}

    def connect(self, sid: str, user_id: int, namespace: Optional[str] = None):
        self.sid_to_user[sid] = user_id
        logger.info(f"User {user_id} connected to {namespace} as {sid}")

    def disconnect(self, sid: str):
        user_id = self.sid_to_user.pop(sid, None)
        if user_id is not None:
            logger.info(f"User {user_id} disconnected ({sid})")

    def get_user_id(self, sid: str) -> Optional[int]:
        return self.sid_to_user.get(sid)


def extract_token_from_environ(environ: dict) -> Optional[str]:
    """
    Read the JWT from the `token` query parameter, falling back to an
    `Authorization: Bearer ...` header.
    """
    query = parse_qs(environ.get('QUERY_STRING', ''))
    token = query.get('token', [None])[0]
    if token:
        return token

    scheme, _, credentials = environ.get('HTTP_AUTHORIZATION', '').partition(' ')
    if scheme.lower() == 'bearer' and credentials.strip():
        return credentials.strip()

    return None


async def authenticate_user(token: str) -> Optional[RegisteredUser]:
    """Resolve an access token to an active user, or None if it is invalid"""
    try:
        payload = jwt.decode(token, settings.SECRET_KEY, algorithms=["HS256"], audience=JWT_AUDIENCE)
    except JWTError as e:
        logger.warning(f"Rejected socket token: {e}")
        return None

    user_id = payload.get("sub")
    if not user_id:
        logger.warning("Socket token has no 'sub' claim")
        return None

    async with get_session_factory()() as session:
        result = await session.execute(
            select(RegisteredUser).where(
                RegisteredUser.id == int(user_id),
                RegisteredUser.is_active == True
            )
        )
        user = result.scalar_one_or_none()

    if user is None:
        logger.warning(f"Socket token refers to unknown or inactive user {user_id}")
    return user


sio = socketio.AsyncServer(
    async_mode='asgi',
    cors_allowed_origins=settings.CORS_ORIGINS,
    logger=settings.DEBUG,
    engineio_logger=settings.DEBUG,
    ping_timeout=60,
    ping_interval=25
)

manager = ConnectionManager()


class AuthNamespace(socketio.AsyncNamespace):
    """
    Namespace that only accepts connections carrying a valid access token.

    Subclasses may define `handle_connect(sid, environ, user)` and
    `handle_disconnect(sid)`; both run after the connection bookkeeping.
    """

    async def on_connect(self, sid, environ):
        token = extract_token_from_environ(environ)
        user = await authenticate_user(token) if token else None

        if user is None:
            message = 'Invalid or expired token' if token else 'Authentication required'
            logger.warning(f"Refused connection {sid} to {self.namespace}: {message}")
            await self.emit('error', {'message': message}, room=sid)
            return False

        manager.connect(sid, user.id, namespace=self.namespace)

        if hasattr(self, 'handle_connect'):
            try:
                await self.handle_connect(sid, environ, user)
            except Exception:
                logger.exception(f"handle_connect failed for {sid} on {self.namespace}")

    async def on_disconnect(self, sid, reason=None):
        if hasattr(self, 'handle_disconnect'):
            try:
                await self.handle_disconnect(sid)
            except Exception:
                logger.exception(f"handle_disconnect failed for {sid} on {self.namespace}")

        manager.disconnect(sid)
