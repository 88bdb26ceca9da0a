# app/tests/test_matchmaking_api.py
"""
Route tests for /v1/matchmaking

The FastAPI app is driven through httpx with the authenticated user, the
database session and the matchmaking queue replaced by test dependencies.
"""
import pytest
from types import SimpleNamespace
from httpx import AsyncClient, ASGITransport
from main import fastapi_app
from api.routes.auth import current_active_user
from api.routes.matchmaking import get_matchmaking_queue
from infrastructure.postgres_connection import get_db_session
from services.matchmaking_service import MatchmakingQueue


@pytest.fixture
def current_user():
    """Mutable holder for the user the requests are authenticated as"""
    return SimpleNamespace(user=None)


@pytest.fixture
async def client(db_session, current_user):
    queue = MatchmakingQueue()

    async def override_get_db_session():
        yield db_session

    fastapi_app.dependency_overrides[current_active_user] = lambda: current_user.user
    fastapi_app.dependency_overrides[get_db_session] = override_get_db_session
    fastapi_app.dependency_overrides[get_matchmaking_queue] = lambda: queue

    async with AsyncClient(transport=ASGITransport(app=fastapi_app), base_url="http://test") as test_client:
        test_client.queue = queue
        yield test_client

    fastapi_app.dependency_overrides.clear()


@pytest.mark.asyncio
class TestMatchmakingAPI:
    """Tests for the matchmaking HTTP endpoints"""

    async def test_start_waits_then_matches(self, client, current_user, test_user_1, test_user_2):
        # Arrange
        current_user.user = test_user_1

        # Act
        first = await client.post("/v1/matchmaking/start", json={"game_type": "chess"})
        current_user.user = test_user_2
        second = await client.post("/v1/matchmaking/start", json={"game_type": "chess"})

        # Assert
        assert first.status_code == 200
        assert first.json()["status"] == "waiting"
        assert first.json()["in_queue"] is True
        assert first.json()["queue_size"] == 1
        assert first.json()["message"] == "Searching for opponent..."

        body = second.json()
        assert second.status_code == 200
        assert body["status"] == "matched"
        assert body["matched"] is True
        assert body["message"] == "Match found!"
        assert body["game"]["player1_id"] == test_user_1.id
        assert body["game"]["player2_id"] == test_user_2.id
        assert body["game"]["current_turn"] == test_user_1.id
        assert body["game"]["player1"]["rating"] == 1000
        assert len(client.queue) == 0

    async def test_status_after_being_matched(self, client, current_user, test_user_1, test_user_2):
        current_user.user = test_user_1
        await client.post("/v1/matchmaking/start", json={"game_type": "ayo"})
        current_user.user = test_user_2
        matched = await client.post("/v1/matchmaking/start", json={"game_type": "ayo"})

        current_user.user = test_user_1
        response = await client.get("/v1/matchmaking/status", params={"game_type": "ayo"})

        assert response.status_code == 200
        assert response.json()["status"] == "matched"
        assert response.json()["game"]["id"] == matched.json()["game"]["id"]

    async def test_status_when_not_queued(self, client, current_user, test_user_1):
        current_user.user = test_user_1

        response = await client.get("/v1/matchmaking/status", params={"game_type": "chess"})

        assert response.status_code == 200
        assert response.json()["status"] == "not_in_queue"
        assert response.json()["in_queue"] is False
        assert response.json()["game"] is None

    async def test_status_requires_game_type(self, client, current_user, test_user_1):
        current_user.user = test_user_1

        response = await client.get("/v1/matchmaking/status")

        assert response.status_code == 422

    async def test_start_rejects_empty_game_type(self, client, current_user, test_user_1):
        current_user.user = test_user_1

        response = await client.post("/v1/matchmaking/start", json={"game_type": ""})

        assert response.status_code == 422
        assert len(client.queue) == 0

    async def test_start_unknown_player(self, client, current_user):
        current_user.user = SimpleNamespace(id=9999)

        response = await client.post("/v1/matchmaking/start", json={"game_type": "chess"})

        assert response.status_code == 404
        assert response.json()["error"] == "PlayerNotFoundException"
        assert response.json()["message"] == "User not found"

    async def test_cancel(self, client, current_user, test_user_1):
        current_user.user = test_user_1
        await client.post("/v1/matchmaking/start", json={"game_type": "whot"})

        response = await client.post("/v1/matchmaking/cancel")

        assert response.status_code == 200
        assert response.json() == {"success": True, "message": "Matchmaking cancelled"}
        assert test_user_1.id not in client.queue

    async def test_cancel_when_not_queued(self, client, current_user, test_user_1):
        current_user.user = test_user_1

        response = await client.post("/v1/matchmaking/cancel")

        assert response.status_code == 400
        assert response.json()["error"] == "NotInQueueException"
