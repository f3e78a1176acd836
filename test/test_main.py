import pytest
import pytest_asyncio
from typing import AsyncGenerator
from unittest.mock import MagicMock

from httpx import AsyncClient, ASGITransport

# --- App Imports ---
from main import app
from app.models.notification import UserProfile
from app.services.dispatcher import NotificationDispatcher, get_dispatcher
from app.services.firebase_auth import get_current_uid

MESSAGE_ID = "projects/flip/messages/0:1700000000"


# --- Pytest Fixtures ---

@pytest.fixture
def profile_store():
    store = MagicMock()
    store.get.return_value = UserProfile(fcmToken="ABC")
    return store


@pytest.fixture
def push_gateway():
    gateway = MagicMock()
    gateway.send.return_value = MESSAGE_ID
    return gateway


@pytest_asyncio.fixture(scope="function")
async def client(profile_store, push_gateway) -> AsyncGenerator[AsyncClient, None]:
    dispatcher = NotificationDispatcher(profile_store, push_gateway)
    app.dependency_overrides[get_dispatcher] = lambda: dispatcher
    app.dependency_overrides[get_current_uid] = lambda: "admin-uid"

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac
    app.dependency_overrides.clear()


def event_payload(**data):
    record = {"type": "comment", "message": "hi", "silent": False}
    record.update(data)
    return {"userId": "u1", "notificationId": "n1", "data": record}


# =================================================================================
# --- TEST CASES ---
# =================================================================================

@pytest.mark.asyncio
async def test_utc_001_health_check(client: AsyncClient):
    response = await client.get("/")
    assert response.status_code == 200
    assert response.json() == {"message": "Push notification service is running"}


@pytest.mark.asyncio
async def test_utc_002_event_dispatches_push(client: AsyncClient, push_gateway):
    response = await client.post("/api/notifications/events", json=event_payload())

    assert response.status_code == 200
    assert response.json() == {"dispatched": True, "message_id": MESSAGE_ID}
    push = push_gateway.send.call_args.args[0]
    assert push.token == "ABC"
    assert push.title == "New Comment"
    assert push.body == "hi"
    assert push.data == {"type": "comment", "notificationId": "n1"}


@pytest.mark.asyncio
async def test_utc_003_silent_event_is_skipped(client: AsyncClient, push_gateway):
    response = await client.post("/api/notifications/events", json=event_payload(silent=True))

    assert response.status_code == 200
    assert response.json() == {"dispatched": False, "message_id": None}
    push_gateway.send.assert_not_called()


@pytest.mark.asyncio
async def test_utc_004_event_failures_still_answer_200(client: AsyncClient, profile_store, push_gateway):
    profile_store.get.return_value = None
    response = await client.post("/api/notifications/events", json=event_payload())
    assert response.status_code == 200
    assert response.json()["dispatched"] is False

    profile_store.get.return_value = UserProfile(fcmToken="ABC")
    push_gateway.send.side_effect = RuntimeError("FCM down")
    response = await client.post("/api/notifications/events", json=event_payload())
    assert response.status_code == 200
    assert response.json() == {"dispatched": False, "message_id": None}


@pytest.mark.asyncio
async def test_utc_005_event_without_path_params_is_rejected(client: AsyncClient, push_gateway):
    response = await client.post("/api/notifications/events", json={"data": {"type": "comment"}})
    assert response.status_code == 422
    push_gateway.send.assert_not_called()


@pytest.mark.asyncio
async def test_utc_006_manual_send_success(client: AsyncClient, push_gateway):
    response = await client.post("/send-notification",
                                 json={"userId": "u1", "message": "Test push", "type": "session_invitation"})

    assert response.status_code == 200
    assert response.json() == {"success": True, "response": MESSAGE_ID}
    push = push_gateway.send.call_args.args[0]
    assert push.title == "Session Invitation"
    assert push.data == {"type": "session_invitation", "notificationId": "manual-test"}


@pytest.mark.asyncio
@pytest.mark.parametrize("body", [
    {"message": "hi", "type": "comment"},
    {"userId": "u1", "type": "comment"},
    {"userId": "u1", "message": "hi", "type": ""},
])
async def test_utc_007_manual_send_missing_fields(client: AsyncClient, push_gateway, body):
    response = await client.post("/send-notification", json=body)
    assert response.status_code == 400
    assert response.json()["detail"] == "Missing required fields"
    push_gateway.send.assert_not_called()


@pytest.mark.asyncio
async def test_utc_008_manual_send_unknown_user(client: AsyncClient, profile_store):
    profile_store.get.return_value = None
    response = await client.post("/send-notification", json={"userId": "u2", "message": "hi", "type": "comment"})
    assert response.status_code == 404
    assert response.json()["detail"] == "User u2 not found"


@pytest.mark.asyncio
async def test_utc_009_manual_send_without_token(client: AsyncClient, profile_store):
    profile_store.get.return_value = UserProfile()
    response = await client.post("/send-notification", json={"userId": "u1", "message": "hi", "type": "comment"})
    assert response.status_code == 400
    assert response.json()["detail"] == "No FCM token found for user u1"


@pytest.mark.asyncio
async def test_utc_010_manual_send_gateway_error(client: AsyncClient, push_gateway):
    push_gateway.send.side_effect = RuntimeError("Requested entity was not found.")
    response = await client.post("/send-notification", json={"userId": "u1", "message": "hi", "type": "comment"})
    assert response.status_code == 500
    assert response.json()["detail"] == "Error: Requested entity was not found."


@pytest.mark.asyncio
async def test_utc_011_manual_send_requires_auth(client: AsyncClient, push_gateway):
    del app.dependency_overrides[get_current_uid]
    response = await client.post("/send-notification", json={"userId": "u1", "message": "hi", "type": "comment"})
    assert response.status_code == 401
    push_gateway.send.assert_not_called()
