"""Shared validation and identifier utilities"""

import re
import secrets
import string
import time
from datetime import date, datetime, timezone
from typing import Optional

CONFIRMATION_CODE_ALPHABET = string.ascii_uppercase + string.digits
CONFIRMATION_CODE_LENGTH = 6


def generate_id(prefix: str) -> str:
    """
    Generate a prefixed, roughly time-ordered identifier.

    Format: {prefix}_{millis as hex}{8 random hex chars}
    """
    timestamp = format(int(time.time() * 1000), "x")
    return f"{prefix}_{timestamp}{secrets.token_hex(4)}"


def generate_confirmation_code() -> str:
    """Random 6-character uppercase alphanumeric code"""
    return "".join(
        secrets.choice(CONFIRMATION_CODE_ALPHABET) for _ in range(CONFIRMATION_CODE_LENGTH)
    )


def utc_now_iso() -> str:
    """Current UTC time as ISO-8601 with millisecond precision and a Z suffix"""
    now = datetime.now(timezone.utc)
    return now.strftime("%Y-%m-%dT%H:%M:%S.") + f"{now.microsecond // 1000:03d}Z"


def parse_iso_datetime(value: str) -> datetime:
    """
    Parse an ISO-8601 timestamp that carries a timezone.

    Args:
        value: Timestamp such as 2025-01-20T09:00:00.000Z or 2025-01-20T19:00:00+10:00

    Returns:
        Timezone-aware datetime

    Raises:
        ValueError: If the value is not ISO-8601 or has no offset
    """
    if not isinstance(value, str) or "T" not in value:
        raise ValueError("Timestamp must be ISO-8601 (YYYY-MM-DDTHH:MM:SSZ)")

    try:
        parsed = datetime.fromisoformat(value)
    except ValueError as e:
        raise ValueError("Timestamp must be ISO-8601 (YYYY-MM-DDTHH:MM:SSZ)") from e

    if parsed.tzinfo is None:
        raise ValueError("Timestamp must include a timezone offset or Z")

    return parsed


def to_utc_iso(value: str) -> str:
    """Re-render an offset timestamp in UTC with millisecond precision and a Z suffix"""
    parsed = parse_iso_datetime(value).astimezone(timezone.utc)
    return parsed.strftime("%Y-%m-%dT%H:%M:%S.") + f"{parsed.microsecond // 1000:03d}Z"


def parse_iso_date(value: str) -> date:
    """Parse a YYYY-MM-DD calendar date"""
    if not re.fullmatch(r"\d{4}-\d{2}-\d{2}", value or ""):
        raise ValueError("Date must be formatted YYYY-MM-DD")
    return date.fromisoformat(value)


def validate_phone(phone: Optional[str]) -> Optional[str]:
    """
    Validate and normalize a phone number.

    Accepts national or international formats with spaces, dashes, dots or
    parentheses. Returns the digits, keeping a leading + if one was given.

    Raises:
        ValueError: If phone number is invalid
    """
    if not phone:
        return phone

    phone = phone.strip()
    if re.search(r"[^\d\s().+-]", phone):
        raise ValueError("Phone number contains invalid characters")

    digits = re.sub(r"\D", "", phone)
    if not 8 <= len(digits) <= 15:
        raise ValueError("Phone number must have between 8 and 15 digits")

    return f"+{digits}" if phone.startswith("+") else digits
