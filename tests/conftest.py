"""Shared fixtures: in-memory stores honouring the conditional-write contract."""

import copy
import itertools

import pytest
from fastapi.testclient import TestClient

from practice_booking.config import Settings
from practice_booking.domain.bookings.repository import (
    BookingRepository,
    booking_key,
    practice_partition,
)
from practice_booking.domain.practices.repository import PracticeRepository
from practice_booking.domain.providers.repository import ProviderRepository
from practice_booking.domain.slots.repository import SessionRepository
from practice_booking.errors import ConditionFailed
from practice_booking.events import EventPublisher
from practice_booking.main import create_app
from practice_booking.shared.validators import to_utc_iso

SESSION_DATE = "2025-03-10"


class InMemoryBookingRepository(BookingRepository):
    """Booking store keyed by booking ID; same conditions as the DynamoDB one."""

    def __init__(self):
        super().__init__(table=None)
        self.items = {}

    def get_booking(self, booking_id):
        item = self.items.get(booking_id)
        return copy.deepcopy(item) if item else None

    def create_booking(self, booking, idempotency_key):
        if booking["bookingId"] in self.items:
            raise ConditionFailed("attribute_not_exists(pk)")
        item = {
            **booking_key(booking["bookingId"]),
            "idempotencyKey": idempotency_key,
            **copy.deepcopy(booking),
            "gsi1pk": practice_partition(booking["slotRef"]["practiceId"]),
            "gsi1sk": to_utc_iso(booking["slotRef"]["start"]),
        }
        self.items[booking["bookingId"]] = item
        return copy.deepcopy(item)

    def confirm_booking(self, booking_id, now):
        item = self.items.get(booking_id)
        if not item or item["status"] != "PENDING":
            raise ConditionFailed("#status = :pending")
        item["status"] = "CONFIRMED"
        item["updatedAt"] = now
        return copy.deepcopy(item)

    def list_practice_bookings(self, practice_id, start_from=None, start_to=None, status=None):
        results = []
        for item in self.items.values():
            if item["gsi1pk"] != practice_partition(practice_id):
                continue
            if start_from and item["gsi1sk"] < start_from:
                continue
            if start_to and item["gsi1sk"] > start_to:
                continue
            if status and item["status"] != status:
                continue
            results.append(copy.deepcopy(item))
        return results


class InMemorySessionRepository(SessionRepository):
    """Session store keyed by (practice, date)."""

    def __init__(self):
        super().__init__(table=None)
        self.sessions = {}

    def add_session(self, practice_id, session_date, provider_id="prov_1", slots=None):
        self.sessions[(practice_id, session_date)] = {
            "sessionId": f"sess_{practice_id}_{provider_id}_{session_date}",
            "tenantId": practice_id,
            "providerId": provider_id,
            "practiceId": practice_id,
            "date": session_date,
            "slots": slots if slots is not None else [],
        }

    def get_session(self, practice_id, session_date):
        session = self.sessions.get((practice_id, session_date))
        return copy.deepcopy(session) if session else None

    def query_sessions(self, practice_id, date_from, date_to, provider_id=None):
        return [
            copy.deepcopy(session)
            for (practice, session_date), session in sorted(self.sessions.items())
            if practice == practice_id
            and date_from <= session_date <= date_to
            and (not provider_id or session["providerId"] == provider_id)
        ]

    def reserve_slot(self, practice_id, session_date, index, slot_start, provider_id, booking_id, now):
        session = self.sessions.get((practice_id, session_date))
        slots = session["slots"] if session and session["providerId"] == provider_id else []
        if index >= len(slots) or not slots[index]["available"] or slots[index]["start"] != slot_start:
            raise ConditionFailed("slot no longer available")
        slots[index]["available"] = False
        slots[index]["bookingId"] = booking_id
        session["updatedAt"] = now
        return copy.deepcopy(session)

    def release_slot(self, practice_id, session_date, index, booking_id, now):
        session = self.sessions.get((practice_id, session_date))
        slots = session["slots"] if session else []
        if index >= len(slots) or slots[index].get("bookingId") != booking_id:
            raise ConditionFailed("slot held by another booking")
        slots[index]["available"] = True
        slots[index].pop("bookingId")
        session["updatedAt"] = now
        return copy.deepcopy(session)


class InMemoryPracticeRepository(PracticeRepository):
    def __init__(self):
        super().__init__(table=None)
        self.items = {}

    def get_practice(self, practice_id):
        item = self.items.get(practice_id)
        return copy.deepcopy(item) if item else None

    def create_practice(self, practice):
        if practice["practiceId"] in self.items:
            raise ConditionFailed("attribute_not_exists(pk)")
        item = {"pk": f"PRACTICE#{practice['practiceId']}", "sk": "meta", **copy.deepcopy(practice)}
        self.items[practice["practiceId"]] = item
        return copy.deepcopy(item)


class InMemoryProviderRepository(ProviderRepository):
    def __init__(self):
        super().__init__(table=None)
        self.items = {}

    def get_provider(self, provider_id):
        item = self.items.get(provider_id)
        return copy.deepcopy(item) if item else None

    def create_provider(self, provider):
        if provider["providerId"] in self.items:
            raise ConditionFailed("attribute_not_exists(pk)")
        item = {"pk": f"PROVIDER#{provider['providerId']}", "sk": "meta", **copy.deepcopy(provider)}
        self.items[provider["providerId"]] = item
        return copy.deepcopy(item)

    def list_providers(self, practice_id=None):
        return [
            copy.deepcopy(item)
            for item in self.items.values()
            if not practice_id or item["practiceId"] == practice_id
        ]


class RecordingPublisher(EventPublisher):
    def __init__(self):
        self.events = []

    def publish(self, event):
        self.events.append(event)


def make_slots():
    return [
        {"start": "09:00", "end": "09:15", "available": True, "apptTypeCode": "standard"},
        {"start": "09:15", "end": "09:30", "available": True},
        {"start": "09:30", "end": "09:45", "available": False},
    ]


def make_payload(practice_id="P1", start="09:00", end="09:15", **overrides):
    payload = {
        "contact": {
            "firstName": "Alex",
            "lastName": "Nguyen",
            "email": "alex.nguyen@example.com",
            "phone": "+61 412 345 678",
            "preferredChannel": "sms",
        },
        "slotRef": {
            "slotId": f"sess_{practice_id}_prov_1_{SESSION_DATE}_{start}",
            "providerId": "prov_1",
            "practiceId": practice_id,
            "start": f"{SESSION_DATE}T{start}:00.000Z",
            "end": f"{SESSION_DATE}T{end}:00.000Z",
        },
    }
    payload.update(overrides)
    return payload


@pytest.fixture
def settings():
    return Settings(rate_limit_enabled=False, reserve_slots=True)


@pytest.fixture
def booking_repo():
    return InMemoryBookingRepository()


@pytest.fixture
def session_repo():
    repo = InMemorySessionRepository()
    repo.add_session("P1", SESSION_DATE, slots=make_slots())
    return repo


@pytest.fixture
def practice_repo():
    return InMemoryPracticeRepository()


@pytest.fixture
def provider_repo():
    return InMemoryProviderRepository()


@pytest.fixture
def publisher():
    return RecordingPublisher()


@pytest.fixture
def sequential_clock():
    counter = itertools.count()
    return lambda: f"2025-03-01T00:00:{next(counter) % 60:02d}.000Z"


@pytest.fixture
def app(settings, booking_repo, session_repo, practice_repo, provider_repo, publisher):
    return create_app(
        settings=settings,
        booking_repo=booking_repo,
        session_repo=session_repo,
        practice_repo=practice_repo,
        provider_repo=provider_repo,
        publisher=publisher,
    )


@pytest.fixture
def client(app):
    return TestClient(app)


@pytest.fixture
def payload():
    return make_payload()
