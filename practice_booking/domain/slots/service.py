"""Slot service - availability search over session documents"""

import logging
from datetime import date, datetime, timedelta, timezone
from typing import Optional

from ...config import Settings
from ...errors import MissingParameter, ValidationFailed
from ...shared.validators import parse_iso_date
from .repository import SessionRepository

logger = logging.getLogger(__name__)


def slot_time(start: datetime) -> str:
    """HH:MM key used by session slot entries"""
    return start.astimezone(timezone.utc).strftime("%H:%M")


def locate_slot(session: dict, start: datetime) -> Optional[int]:
    """Index of the session slot that starts at `start`, or None"""
    wanted = slot_time(start)
    for index, slot in enumerate(session.get("slots") or []):
        if slot.get("start") == wanted:
            return index
    return None


def slot_id(session: dict, slot: dict) -> str:
    """Public slot identifier: {sessionId}_{HH:MM}"""
    return f"{session.get('sessionId')}_{slot['start']}"


def flatten_available_slots(session: dict) -> list[dict]:
    """Expand a session document into one entry per available slot"""
    slots = []
    for slot in session.get("slots") or []:
        if not slot.get("available"):
            continue
        slots.append(
            {
                "slotId": slot_id(session, slot),
                "providerId": session.get("providerId"),
                "practiceId": session.get("practiceId"),
                "start": f"{session.get('date')}T{slot['start']}:00.000Z",
                "end": f"{session.get('date')}T{slot['end']}:00.000Z",
                "apptTypeCode": slot.get("apptTypeCode") or "standard",
                "available": True,
            }
        )
    return slots


class SlotService:
    """Service layer for slot availability"""

    def __init__(self, settings: Settings, sessions: SessionRepository):
        self.settings = settings
        self.sessions = sessions

    def search_slots(
        self,
        practice_id: Optional[str],
        provider_id: Optional[str] = None,
        date_from: Optional[str] = None,
        date_to: Optional[str] = None,
        today: Optional[date] = None,
    ) -> dict:
        """Available slots for a practice (optionally one provider) in a date range"""
        if not practice_id or not practice_id.strip():
            raise MissingParameter("practiceId is required")

        today = today or datetime.now(timezone.utc).date()
        try:
            start_date = parse_iso_date(date_from) if date_from else today
            end_date = (
                parse_iso_date(date_to)
                if date_to
                else start_date + timedelta(days=self.settings.slot_search_days)
            )
        except ValueError as e:
            raise ValidationFailed(details=[{"loc": ["query"], "msg": str(e)}]) from e

        if start_date > end_date:
            raise ValidationFailed(
                details=[{"loc": ["query", "from"], "msg": "from must not be after to"}]
            )

        sessions = self.sessions.query_sessions(
            practice_id, start_date.isoformat(), end_date.isoformat(), provider_id
        )

        slots = []
        for session in sessions:
            slots.extend(flatten_available_slots(session))
        slots.sort(key=lambda s: (s["start"], s["providerId"] or ""))

        logger.info(
            f"📅 Slots retrieved for practice {practice_id} provider={provider_id} "
            f"{start_date}..{end_date}: {len(slots)} available"
        )

        return {
            "slots": slots,
            "count": len(slots),
            "searchParams": {
                "practiceId": practice_id,
                "providerId": provider_id,
                "from": start_date.isoformat(),
                "to": end_date.isoformat(),
            },
        }
