"""Session repository - DynamoDB operations for per-practice daily sessions"""

from typing import Optional

from boto3.dynamodb.conditions import Attr, Key

from ...storage import DynamoTable


def session_partition(practice_id: str) -> str:
    return f"PRACTICE#{practice_id}#SESSIONS"


class SessionRepository:
    """Repository for session (slot availability) documents"""

    def __init__(self, table: DynamoTable):
        self.table = table

    def get_session(self, practice_id: str, session_date: str) -> Optional[dict]:
        """Get the session document for a practice on a YYYY-MM-DD date"""
        return self.table.get({"pk": session_partition(practice_id), "sk": session_date})

    def query_sessions(
        self,
        practice_id: str,
        date_from: str,
        date_to: str,
        provider_id: Optional[str] = None,
    ) -> list[dict]:
        """Get session documents for a practice between two dates (inclusive)"""
        kwargs = {
            "KeyConditionExpression": Key("pk").eq(session_partition(practice_id))
            & Key("sk").between(date_from, date_to),
        }
        if provider_id:
            kwargs["FilterExpression"] = Attr("providerId").eq(provider_id)
        return self.table.query(**kwargs)

    def reserve_slot(
        self,
        practice_id: str,
        session_date: str,
        index: int,
        slot_start: str,
        provider_id: str,
        booking_id: str,
        now: str,
    ) -> dict:
        """
        Mark one slot unavailable and record the booking holding it.

        Single conditional write: fails with ConditionFailed unless the session
        belongs to `provider_id` and the slot at `index` still starts at
        `slot_start` and is still available.
        """
        slot_path = f"#slots[{index}]"
        return self.table.update(
            {"pk": session_partition(practice_id), "sk": session_date},
            f"SET {slot_path}.#available = :unavailable, "
            f"{slot_path}.#bookingId = :booking_id, #updatedAt = :now",
            names={
                "#slots": "slots",
                "#available": "available",
                "#bookingId": "bookingId",
                "#start": "start",
                "#providerId": "providerId",
                "#updatedAt": "updatedAt",
            },
            values={
                ":unavailable": False,
                ":available": True,
                ":booking_id": booking_id,
                ":slot_start": slot_start,
                ":provider_id": provider_id,
                ":now": now,
            },
            condition=(
                f"#providerId = :provider_id AND {slot_path}.#available = :available "
                f"AND {slot_path}.#start = :slot_start"
            ),
        )

    def release_slot(
        self,
        practice_id: str,
        session_date: str,
        index: int,
        booking_id: str,
        now: str,
    ) -> dict:
        """Undo reserve_slot, only if the slot is still held by `booking_id`"""
        slot_path = f"#slots[{index}]"
        return self.table.update(
            {"pk": session_partition(practice_id), "sk": session_date},
            f"SET {slot_path}.#available = :available, #updatedAt = :now "
            f"REMOVE {slot_path}.#bookingId",
            names={
                "#slots": "slots",
                "#available": "available",
                "#bookingId": "bookingId",
                "#updatedAt": "updatedAt",
            },
            values={":available": True, ":booking_id": booking_id, ":now": now},
            condition=f"{slot_path}.#bookingId = :booking_id",
        )
