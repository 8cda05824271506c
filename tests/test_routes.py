"""HTTP surface tests."""
from __future__ import annotations

from unittest.mock import AsyncMock

import pytest
from httpx import ASGITransport, AsyncClient

from leasing_api.core.config import Settings
from leasing_api.core.container import AppServices
from leasing_api.main import create_app
from leasing_api.schemas.chat import ChatAction, ChatResponse
from leasing_api.services.bookings import BookingManager
from leasing_api.services.domain import DomainQueryService, StorageUnavailableError, format_timestamp

from conftest import COMMUNITY_ID, frozen_clock

VALID_INQUIRY = {
    "lead": {"name": "Ada", "email": "ada@example.com"},
    "message": "Do you allow dogs?",
    "preferences": {"bedrooms": 2, "move_in": "2030-02-01"},
    "community_id": COMMUNITY_ID,
}


def _client(services: AppServices) -> AsyncClient:
    app = create_app(Settings(cors_allow_origins=[]), services=services)
    return AsyncClient(transport=ASGITransport(app=app), base_url="http://testserver")


@pytest.fixture
def agent() -> AsyncMock:
    stub = AsyncMock()
    stub.process_message.return_value = ChatResponse(
        reply="Dogs are welcome with a $100 fee.",
        action=ChatAction.ASK_CLARIFICATION,
    )
    return stub


@pytest.fixture
def services(session_factory, agent) -> AppServices:
    return AppServices(
        session_factory=session_factory,
        domain=DomainQueryService(session_factory, clock=frozen_clock),
        bookings=BookingManager(session_factory, clock=frozen_clock),
        agent=agent,
    )


@pytest.mark.asyncio
async def test_health_endpoint(services) -> None:
    async with _client(services) as client:
        response = await client.get("/api/health")

    assert response.status_code == 200
    body = response.json()
    assert body["status"] == "ok"
    assert body["service"] == "leasing-assistant-api"
    assert body["timestamp"].endswith("Z")


@pytest.mark.asyncio
async def test_reply_returns_agent_response_with_request_id(services, agent) -> None:
    async with _client(services) as client:
        response = await client.post("/api/reply", json=VALID_INQUIRY)

    assert response.status_code == 200
    assert response.json() == {"reply": "Dogs are welcome with a $100 fee.", "action": "ask_clarification"}
    request_id = response.headers["X-Request-ID"]
    payload, passed_id = agent.process_message.await_args.args
    assert passed_id == request_id
    assert payload.preferences.bedrooms == 2


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "patch",
    [
        {"lead": {"name": "", "email": "ada@example.com"}},
        {"lead": {"name": "Ada"}},
        {"message": "   "},
        {"community_id": ""},
    ],
)
async def test_reply_rejects_invalid_inquiries(services, agent, patch) -> None:
    async with _client(services) as client:
        response = await client.post("/api/reply", json={**VALID_INQUIRY, **patch})

    assert response.status_code == 400
    assert set(response.json()) == {"error", "request_id"}
    agent.process_message.assert_not_awaited()


@pytest.mark.asyncio
async def test_book_and_cancel_flow(services, slot_times) -> None:
    booking_request = {
        "community_id": COMMUNITY_ID,
        "slot_time": format_timestamp(slot_times[0]),
        "lead_name": "Ada",
        "lead_email": "ada@example.com",
    }
    async with _client(services) as client:
        booked = await client.post("/api/book-tour", json=booking_request)
        booking_id = booked.json()["booking_id"]
        detail = await client.get(f"/api/bookings/{booking_id}")
        listing = await client.get("/api/bookings", params={"community_id": COMMUNITY_ID})
        cancelled = await client.post(f"/api/bookings/{booking_id}/cancel")
        cancelled_again = await client.post(f"/api/bookings/{booking_id}/cancel")

    assert booked.status_code == 200
    assert booked.json()["success"] is True
    assert detail.status_code == 200
    assert detail.json()["booking"]["status"] == "confirmed"
    assert detail.json()["booking"]["current_bookings"] == 1
    assert listing.json()["total"] == 1
    assert cancelled.status_code == 200
    assert cancelled.json()["success"] is True
    assert cancelled_again.status_code == 400
    assert cancelled_again.json()["success"] is False


@pytest.mark.asyncio
async def test_book_unknown_slot_conflicts(services) -> None:
    async with _client(services) as client:
        response = await client.post(
            "/api/book-tour",
            json={
                "community_id": COMMUNITY_ID,
                "slot_time": "2031-06-01T09:00:00Z",
                "lead_name": "Ada",
                "lead_email": "ada@example.com",
            },
        )

    assert response.status_code == 409
    assert response.json()["error"] == "slot not available"
    assert "request_id" in response.json()


@pytest.mark.asyncio
async def test_missing_booking_is_404(services) -> None:
    async with _client(services) as client:
        response = await client.get("/api/bookings/booking_missing")

    assert response.status_code == 404
    assert response.json()["error"] == "Booking not found"
    assert "request_id" in response.json()


@pytest.mark.asyncio
async def test_storage_outage_on_booking_is_503(services) -> None:
    services.bookings = AsyncMock()
    services.bookings.list_bookings.side_effect = StorageUnavailableError("list_bookings timed out")

    async with _client(services) as client:
        response = await client.get("/api/bookings")

    assert response.status_code == 503
    assert set(response.json()) == {"error", "request_id"}
