"""
Booking domain events.

The booking service publishes BookingCreated / BookingConfirmed after the
store write has committed. Reminder scheduling and patient notifications
subscribe to these downstream; nothing in this service delivers them.
"""

import json
import logging
from typing import Optional

import boto3

from .config import Settings
from .shared.validators import utc_now_iso

logger = logging.getLogger(__name__)

BOOKING_CREATED = "BookingCreated"
BOOKING_CONFIRMED = "BookingConfirmed"


def build_event(event_type: str, booking: dict, occurred_at: Optional[str] = None) -> dict:
    """Event payload; carries identifiers only, no contact details or codes"""
    slot_ref = booking.get("slotRef") or {}
    return {
        "type": event_type,
        "bookingId": booking.get("bookingId"),
        "tenantId": booking.get("tenantId"),
        "practiceId": slot_ref.get("practiceId"),
        "providerId": slot_ref.get("providerId"),
        "slotStart": slot_ref.get("start"),
        "status": booking.get("status"),
        "occurredAt": occurred_at or utc_now_iso(),
    }


class EventPublisher:
    def publish(self, event: dict) -> None:
        raise NotImplementedError


class LoggingEventPublisher(EventPublisher):
    """Default publisher: records the event in the application log"""

    def publish(self, event: dict) -> None:
        logger.info(f"📣 {event['type']} for booking {event['bookingId']}: {json.dumps(event)}")


class EventBridgePublisher(EventPublisher):
    """Publishes events to an EventBridge bus"""

    def __init__(self, client, bus_name: str, source: str):
        self.client = client
        self.bus_name = bus_name
        self.source = source

    def publish(self, event: dict) -> None:
        response = self.client.put_events(
            Entries=[
                {
                    "Source": self.source,
                    "DetailType": event["type"],
                    "Detail": json.dumps(event),
                    "EventBusName": self.bus_name,
                }
            ]
        )
        if response.get("FailedEntryCount"):
            entry = (response.get("Entries") or [{}])[0]
            raise RuntimeError(
                f"EventBridge rejected {event['type']}: "
                f"{entry.get('ErrorCode')} {entry.get('ErrorMessage')}"
            )
        logger.info(f"📣 {event['type']} sent to {self.bus_name} for booking {event['bookingId']}")


def get_event_publisher(settings: Settings) -> EventPublisher:
    if settings.event_bus_name:
        client = boto3.client("events", region_name=settings.aws_region)
        logger.info(f"EventBridge publishing enabled (bus: {settings.event_bus_name})")
        return EventBridgePublisher(client, settings.event_bus_name, settings.event_source)
    return LoggingEventPublisher()
