"""Tests for /v1/practices routes."""

from conftest import SESSION_DATE

TENANT = {"x-tenant-id": "tenant_1", "x-user-id": "user_1"}


def practice_payload(**overrides):
    payload = {
        "name": "Harbour Medical",
        "abn": "12345678901",
        "address": {
            "line1": "1 George St",
            "suburb": "Sydney",
            "state": "NSW",
            "postcode": "2000",
        },
        "services": ["general", "vaccinations"],
        "hours": [{"dayOfWeek": 1, "openTime": "08:00", "closeTime": "17:00"}],
    }
    payload.update(overrides)
    return payload


class TestCreatePractice:
    """Tests for POST /v1/practices."""

    def test_create_practice(self, client, practice_repo):
        response = client.post("/v1/practices", json=practice_payload(), headers=TENANT)
        assert response.status_code == 201
        data = response.json()
        assert data["practiceId"].startswith("prac_")
        assert data["tenantId"] == "tenant_1"
        assert data["address"]["country"] == "AU"
        assert data["createdAt"] == data["updatedAt"]
        assert "pk" not in data
        assert practice_repo.items[data["practiceId"]]["sk"] == "meta"

    def test_requires_identity(self, client, practice_repo):
        response = client.post("/v1/practices", json=practice_payload())
        assert response.status_code == 401
        assert practice_repo.items == {}

    def test_tenant_cannot_be_supplied(self, client):
        response = client.post(
            "/v1/practices", json=practice_payload(tenantId="someone_else"), headers=TENANT
        )
        assert response.status_code == 400

    def test_missing_address_fails_validation(self, client):
        payload = practice_payload()
        del payload["address"]
        response = client.post("/v1/practices", json=payload, headers=TENANT)
        assert response.status_code == 400
        assert response.json()["error"] == "Validation failed"

    def test_bad_opening_hours_fail_validation(self, client):
        payload = practice_payload(hours=[{"dayOfWeek": 7, "openTime": "08:00", "closeTime": "17:00"}])
        assert client.post("/v1/practices", json=payload, headers=TENANT).status_code == 400

        payload = practice_payload(hours=[{"dayOfWeek": 1, "openTime": "17:00", "closeTime": "08:00"}])
        assert client.post("/v1/practices", json=payload, headers=TENANT).status_code == 400


class TestGetPractice:
    """Tests for GET /v1/practices/{practice_id}."""

    def test_get_practice_is_public(self, client):
        created = client.post("/v1/practices", json=practice_payload(), headers=TENANT).json()
        response = client.get(f"/v1/practices/{created['practiceId']}")
        assert response.status_code == 200
        assert response.json()["name"] == "Harbour Medical"
        assert "sk" not in response.json()

    def test_unknown_practice(self, client):
        response = client.get("/v1/practices/prac_missing")
        assert response.status_code == 404
        assert response.json() == {"error": "Practice not found"}

    def test_bookings_listing_still_routed(self, client):
        """The practice record route does not shadow the practice bookings listing."""
        response = client.get(
            "/v1/practices/P1/bookings", params={"to": SESSION_DATE}, headers={"x-tenant-id": "P1"}
        )
        assert response.status_code == 200
        assert response.json() == {"bookings": [], "count": 0}
