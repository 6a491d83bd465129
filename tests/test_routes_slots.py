"""Tests for /v1/slots routes."""

from datetime import date

from conftest import SESSION_DATE
from practice_booking.config import Settings
from practice_booking.domain.slots.service import SlotService, flatten_available_slots


class TestSlotSearchRoutes:
    def test_search_returns_available_slots(self, client):
        response = client.get(
            "/v1/slots", params={"practiceId": "P1", "from": SESSION_DATE, "to": SESSION_DATE}
        )
        assert response.status_code == 200
        data = response.json()
        assert data["count"] == 2
        assert [s["start"] for s in data["slots"]] == [
            f"{SESSION_DATE}T09:00:00.000Z",
            f"{SESSION_DATE}T09:15:00.000Z",
        ]
        assert data["slots"][0]["slotId"] == f"sess_P1_prov_1_{SESSION_DATE}_09:00"
        assert data["slots"][1]["apptTypeCode"] == "standard"
        assert data["searchParams"] == {
            "practiceId": "P1",
            "providerId": None,
            "from": SESSION_DATE,
            "to": SESSION_DATE,
        }

    def test_booked_slot_drops_out_of_search(self, client, payload):
        client.post("/v1/bookings", json=payload)
        response = client.get(
            "/v1/slots", params={"practiceId": "P1", "from": SESSION_DATE, "to": SESSION_DATE}
        )
        assert response.json()["count"] == 1

    def test_provider_filter(self, client):
        response = client.get(
            "/v1/slots",
            params={"practiceId": "P1", "providerId": "prov_other", "from": SESSION_DATE},
        )
        assert response.status_code == 200
        assert response.json()["count"] == 0

    def test_practice_required(self, client):
        response = client.get("/v1/slots")
        assert response.status_code == 400
        assert response.json() == {"error": "practiceId is required"}

    def test_bad_date(self, client):
        response = client.get("/v1/slots", params={"practiceId": "P1", "from": "10-03-2025"})
        assert response.status_code == 400
        assert response.json()["error"] == "Validation failed"

    def test_from_after_to(self, client):
        response = client.get(
            "/v1/slots", params={"practiceId": "P1", "from": "2025-03-12", "to": "2025-03-10"}
        )
        assert response.status_code == 400


class TestSlotService:
    def test_default_window(self, session_repo):
        service = SlotService(Settings(slot_search_days=7), session_repo)
        result = service.search_slots("P1", today=date(2025, 3, 5))
        assert result["searchParams"]["from"] == "2025-03-05"
        assert result["searchParams"]["to"] == "2025-03-12"
        assert result["count"] == 2

    def test_flatten_skips_unavailable_and_empty(self):
        session = {"sessionId": "s1", "providerId": "p", "practiceId": "P1", "date": "2025-03-10"}
        assert flatten_available_slots(session) == []
        session["slots"] = [{"start": "10:00", "end": "10:20", "available": False}]
        assert flatten_available_slots(session) == []
