"""Booking service - Business logic for the booking lifecycle"""

import logging
import secrets
from datetime import timezone
from typing import Callable, Optional

from ...config import Settings
from ...errors import (
    ConditionFailed,
    DuplicateKey,
    InvalidConfirmationCode,
    InvalidState,
    MissingParameter,
    NotFound,
    SlotUnavailable,
    StoreError,
    ValidationFailed,
)
from ...events import BOOKING_CONFIRMED, BOOKING_CREATED, EventPublisher, build_event
from ...identity import Identity
from ...shared.validators import (
    generate_confirmation_code,
    generate_id,
    parse_iso_date,
    parse_iso_datetime,
    to_utc_iso,
    utc_now_iso,
)
from ..slots.repository import SessionRepository
from ..slots.service import locate_slot, slot_id
from .repository import BookingRepository, strip_internal_fields
from .schemas import BookingCreate, BookingStatus

logger = logging.getLogger(__name__)


class BookingService:
    """Service layer for booking creation, retrieval and confirmation"""

    def __init__(
        self,
        settings: Settings,
        bookings: BookingRepository,
        sessions: SessionRepository,
        publisher: EventPublisher,
        id_factory: Callable[[str], str] = generate_id,
        code_factory: Callable[[], str] = generate_confirmation_code,
        clock: Callable[[], str] = utc_now_iso,
    ):
        self.settings = settings
        self.bookings = bookings
        self.sessions = sessions
        self.publisher = publisher
        self.id_factory = id_factory
        self.code_factory = code_factory
        self.clock = clock

    def create_booking(self, data: BookingCreate, idempotency_key: Optional[str] = None) -> dict:
        """Create a PENDING booking for an available slot"""
        booking_id = self.id_factory("book")
        idempotency_key = idempotency_key or self.id_factory("idem")
        now = self.clock()
        slot_ref = data.slotRef

        booking = {
            "bookingId": booking_id,
            "tenantId": slot_ref.practiceId or self.settings.default_tenant_id,
            "patientId": data.patientId,
            "contact": data.contact.model_dump(mode="json"),
            "slotRef": slot_ref.model_dump(mode="json"),
            "status": BookingStatus.PENDING.value,
            "confirmationCode": self.code_factory(),
            "notes": data.notes,
            "createdAt": now,
            "updatedAt": now,
        }
        booking = {k: v for k, v in booking.items() if v is not None}

        start = parse_iso_datetime(slot_ref.start)
        session_date = start.astimezone(timezone.utc).date().isoformat()

        session = self.sessions.get_session(slot_ref.practiceId, session_date)
        if not session:
            logger.warning(
                f"⚠️ No session for practice {slot_ref.practiceId} on {session_date}, "
                f"rejecting booking for slot {slot_ref.slotId}"
            )
            raise SlotUnavailable()

        slot_index = None
        if self.settings.reserve_slots:
            slot_index = self._reserve_slot(session, slot_ref, start, session_date, booking_id, now)

        try:
            self.bookings.create_booking(booking, idempotency_key)
        except ConditionFailed as e:
            logger.error(f"❌ Booking ID collision on {booking_id}")
            self._release_slot(slot_ref.practiceId, session_date, slot_index, booking_id)
            raise DuplicateKey() from e
        except Exception:
            self._release_slot(slot_ref.practiceId, session_date, slot_index, booking_id)
            raise

        logger.info(
            f"✅ Booking created: {booking_id} practice={slot_ref.practiceId} "
            f"provider={slot_ref.providerId} slot={slot_ref.start}"
        )
        self._publish(BOOKING_CREATED, booking)
        return strip_internal_fields(booking)

    def get_booking(self, booking_id: Optional[str]) -> dict:
        """Get a booking by ID; no tenant scoping (public read path)"""
        booking = self._get_existing(booking_id)
        logger.info(f"📖 Booking retrieved: {booking_id}")
        return strip_internal_fields(booking)

    def confirm_booking(self, booking_id: Optional[str], confirmation_code: Optional[str] = None) -> dict:
        """Transition a booking PENDING -> CONFIRMED"""
        current = self._get_existing(booking_id)

        if confirmation_code:
            stored_code = current.get("confirmationCode") or ""
            if not secrets.compare_digest(confirmation_code.encode(), stored_code.encode()):
                logger.warning(f"⚠️ Invalid confirmation code for booking {booking_id}")
                raise InvalidConfirmationCode()
        elif self.settings.require_confirmation_code:
            logger.warning(f"⚠️ Confirmation without code rejected for booking {booking_id}")
            raise InvalidConfirmationCode("Confirmation code is required")

        try:
            updated = self.bookings.confirm_booking(booking_id, self.clock())
        except ConditionFailed as e:
            logger.warning(
                f"⚠️ Booking {booking_id} not confirmed: status is {current.get('status')}, not PENDING"
            )
            raise InvalidState() from e

        logger.info(f"✅ Booking confirmed: {booking_id}")
        self._publish(BOOKING_CONFIRMED, updated)
        return strip_internal_fields(updated)

    def list_practice_bookings(
        self,
        practice_id: str,
        identity: Identity,
        start_from: Optional[str] = None,
        start_to: Optional[str] = None,
        status: Optional[str] = None,
    ) -> list[dict]:
        """Get bookings for a practice the caller belongs to"""
        identity.require_tenant(practice_id)

        errors = []
        if status and status not in BookingStatus.__members__:
            errors.append({"loc": ["query", "status"], "msg": f"Unknown booking status {status}"})
        start_from = self._range_bound(start_from, "from", errors, end_of_day=False)
        start_to = self._range_bound(start_to, "to", errors, end_of_day=True)
        if errors:
            raise ValidationFailed(details=errors)

        items = self.bookings.list_practice_bookings(practice_id, start_from, start_to, status)
        items.sort(key=lambda b: b.get("gsi1sk") or (b.get("slotRef") or {}).get("start", ""))

        logger.info(f"📋 Listed {len(items)} bookings for practice {practice_id}")
        return [strip_internal_fields(item) for item in items]

    def _get_existing(self, booking_id: Optional[str]) -> dict:
        if not booking_id or not booking_id.strip():
            raise MissingParameter("Booking ID is required")

        booking = self.bookings.get_booking(booking_id)
        if not booking:
            logger.warning(f"⚠️ Booking not found: {booking_id}")
            raise NotFound("Booking not found")
        return booking

    def _reserve_slot(self, session, slot_ref, start, session_date, booking_id, now) -> int:
        index = locate_slot(session, start)
        if index is None:
            logger.warning(
                f"⚠️ Slot {slot_ref.slotId} ({slot_ref.start}) not in session "
                f"{session.get('sessionId')}"
            )
            raise SlotUnavailable()

        slot = session["slots"][index]
        if session.get("providerId") != slot_ref.providerId:
            logger.warning(
                f"⚠️ Slot {slot_ref.slotId} requested for provider {slot_ref.providerId}, "
                f"session {session.get('sessionId')} belongs to {session.get('providerId')}"
            )
            raise SlotUnavailable()
        if slot_ref.slotId != slot_id(session, slot):
            logger.warning(
                f"⚠️ Slot {slot_ref.slotId} does not match {slot_id(session, slot)} at {slot_ref.start}"
            )
            raise SlotUnavailable()
        if not slot.get("available"):
            logger.warning(f"⚠️ Slot {slot_ref.slotId} already taken")
            raise SlotUnavailable()

        try:
            self.sessions.reserve_slot(
                slot_ref.practiceId,
                session_date,
                index,
                slot["start"],
                slot_ref.providerId,
                booking_id,
                now,
            )
        except ConditionFailed as e:
            logger.warning(f"⚠️ Slot {slot_ref.slotId} taken by a concurrent booking")
            raise SlotUnavailable() from e

        logger.info(f"🔒 Slot {slot_ref.slotId} reserved for booking {booking_id}")
        return index

    def _release_slot(self, practice_id, session_date, index, booking_id) -> None:
        if index is None:
            return
        try:
            self.sessions.release_slot(practice_id, session_date, index, booking_id, self.clock())
            logger.info(f"🔓 Slot released after failed booking {booking_id}")
        except StoreError as e:
            # Original failure is re-raised by the caller
            logger.error(
                f"❌ Could not release slot {session_date}[{index}] held by {booking_id}: {e}"
            )

    def _range_bound(self, value, name, errors, end_of_day) -> Optional[str]:
        if not value:
            return None
        try:
            return to_utc_iso(value)
        except ValueError:
            pass
        try:
            parse_iso_date(value)
        except ValueError:
            errors.append({"loc": ["query", name], "msg": "Expected YYYY-MM-DD or ISO-8601 timestamp"})
            return None
        return f"{value}T23:59:59.999Z" if end_of_day else value

    def _publish(self, event_type: str, booking: dict) -> None:
        try:
            self.publisher.publish(build_event(event_type, booking))
        except Exception as e:
            # Booking is already committed at this point
            logger.exception(f"❌ Failed to publish {event_type} for {booking.get('bookingId')}: {e}")
