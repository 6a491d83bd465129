"""Booking repository - DynamoDB operations for bookings"""

from typing import Optional

from boto3.dynamodb.conditions import Attr, Key

from ...shared.validators import to_utc_iso
from ...storage import DynamoTable
from .schemas import BookingStatus

# Storage-only attributes; never returned to callers
INTERNAL_FIELDS = frozenset({"pk", "sk", "gsi1pk", "gsi1sk", "idempotencyKey"})


def booking_key(booking_id: str) -> dict:
    return {"pk": f"BOOKING#{booking_id}", "sk": "meta"}


def practice_partition(practice_id: str) -> str:
    return f"PRACTICE#{practice_id}"


def strip_internal_fields(item: dict) -> dict:
    return {k: v for k, v in item.items() if k not in INTERNAL_FIELDS}


class BookingRepository:
    """Repository for booking database operations"""

    def __init__(self, table: DynamoTable, practice_index: str = "GSI1"):
        self.table = table
        self.practice_index = practice_index

    def get_booking(self, booking_id: str) -> Optional[dict]:
        """Get a booking by ID (raw stored item)"""
        return self.table.get(booking_key(booking_id))

    def create_booking(self, booking: dict, idempotency_key: str) -> dict:
        """
        Write a new booking.

        Raises ConditionFailed if an item with the same booking ID already exists;
        an existing booking is never overwritten.
        """
        practice_id = booking["slotRef"]["practiceId"]
        item = {
            **booking_key(booking["bookingId"]),
            "idempotencyKey": idempotency_key,
            **booking,
            "gsi1pk": practice_partition(practice_id),
            "gsi1sk": to_utc_iso(booking["slotRef"]["start"]),
        }
        self.table.put(item, condition="attribute_not_exists(pk)")
        return item

    def confirm_booking(self, booking_id: str, now: str) -> dict:
        """
        Move a booking from PENDING to CONFIRMED.

        Raises ConditionFailed when the stored status is not PENDING.
        """
        return self.table.update(
            booking_key(booking_id),
            "SET #status = :confirmed, updatedAt = :now",
            names={"#status": "status"},
            values={
                ":confirmed": BookingStatus.CONFIRMED.value,
                ":pending": BookingStatus.PENDING.value,
                ":now": now,
            },
            condition="#status = :pending",
        )

    def list_practice_bookings(
        self,
        practice_id: str,
        start_from: Optional[str] = None,
        start_to: Optional[str] = None,
        status: Optional[str] = None,
    ) -> list[dict]:
        """Get bookings for a practice ordered by slot start

        Range bounds are compared against the UTC slot start, so callers pass
        them in the same Z-suffixed form.
        """
        key_condition = Key("gsi1pk").eq(practice_partition(practice_id))
        if start_from and start_to:
            key_condition = key_condition & Key("gsi1sk").between(start_from, start_to)
        elif start_from:
            key_condition = key_condition & Key("gsi1sk").gte(start_from)
        elif start_to:
            key_condition = key_condition & Key("gsi1sk").lte(start_to)

        kwargs = {"IndexName": self.practice_index, "KeyConditionExpression": key_condition}
        if status:
            kwargs["FilterExpression"] = Attr("status").eq(status)
        return self.table.query(**kwargs)
