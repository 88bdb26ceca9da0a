# app/main.py

from contextlib import asynccontextmanager
from datetime import datetime, UTC
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from config.settings import settings
from api.routes import auth, stats, game, matchmaking
from api.exception_handlers import register_exception_handlers
from api.socketio import sio
from infrastructure.postgres_connection import postgres_connection
from services.matchmaking_service import matchmaking_queue
import socketio
import asyncio
import logging

logging.basicConfig(
    level=logging.DEBUG if settings.DEBUG else logging.INFO,
    format="%(asctime)s %(levelname)s [%(name)s] %(message)s"
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    await postgres_connection.connect()
    await postgres_connection.create_tables()

    sweeper = asyncio.create_task(matchmaking_queue.start(), name="matchmaking-sweeper")
    logger.info(f"{settings.APP_NAME} started")

    try:
        yield
    finally:
        matchmaking_queue.stop()
        try:
            await asyncio.wait_for(sweeper, timeout=5.0)
        except asyncio.TimeoutError:
            logger.warning("Matchmaking sweeper did not stop within 5s")
        await postgres_connection.disconnect()
        logger.info(f"{settings.APP_NAME} stopped")


fastapi_app = FastAPI(title=settings.APP_NAME, lifespan=lifespan)
register_exception_handlers(fastapi_app)

# Credentials are allowed, so origins must be listed explicitly
fastapi_app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

for router in (auth.auth_router, auth.users_router, stats.router, game.router, matchmaking.router):
    fastapi_app.include_router(router, prefix="/v1")


@fastapi_app.get("/health")
async def health_check():
    return {
        "status": "healthy",
        "queued_players": len(matchmaking_queue),
        "timestamp": datetime.now(UTC).isoformat()
    }


# Socket.IO serves /socket.io/*, everything else falls through to FastAPI
app = socketio.ASGIApp(sio, fastapi_app)
