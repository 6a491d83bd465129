import os
from dataclasses import dataclass, field
from functools import lru_cache
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv

# Load .env from project root
env_path = Path(__file__).resolve().parent.parent / ".env"
load_dotenv(dotenv_path=env_path)


def _env_bool(name: str, default: str) -> bool:
    return os.getenv(name, default).lower() == "true"


def _env_list(name: str, default: str) -> list[str]:
    return [item.strip() for item in os.getenv(name, default).split(",") if item.strip()]


@dataclass(frozen=True)
class Settings:
    """Process-wide configuration, read once at startup and passed to components"""

    environment: str = "development"

    # DynamoDB
    aws_region: str = "ap-southeast-2"
    dynamodb_endpoint_url: Optional[str] = None
    bookings_table: str = "practice-booking-bookings-dev"
    sessions_table: str = "practice-booking-sessions-dev"
    practices_table: str = "practice-booking-practices-dev"
    providers_table: str = "practice-booking-providers-dev"
    bookings_practice_index: str = "GSI1"

    # Booking rules
    default_tenant_id: str = "public"
    reserve_slots: bool = True
    require_confirmation_code: bool = False
    slot_search_days: int = 7

    # Domain events (EventBridge is only used when a bus name is set)
    event_bus_name: Optional[str] = None
    event_source: str = "practice-booking.core-api"

    # Rate limiting for public booking creation
    rate_limit_enabled: bool = True
    booking_rate_limit: int = 20
    booking_rate_window_seconds: int = 60
    redis_url: Optional[str] = None

    # HTTP
    allowed_origins: list[str] = field(
        default_factory=lambda: ["http://localhost:5173", "http://localhost:3000"]
    )
    security_headers_enabled: bool = True
    log_level: str = "INFO"

    @property
    def is_production(self) -> bool:
        return self.environment.lower() == "production"

    @classmethod
    def from_env(cls) -> "Settings":
        return cls(
            environment=os.getenv("ENVIRONMENT", "development"),
            aws_region=os.getenv("AWS_REGION", "ap-southeast-2"),
            dynamodb_endpoint_url=os.getenv("DYNAMODB_ENDPOINT_URL") or None,
            bookings_table=os.getenv("BOOKINGS_TABLE", "practice-booking-bookings-dev"),
            sessions_table=os.getenv("SESSIONS_TABLE", "practice-booking-sessions-dev"),
            practices_table=os.getenv("PRACTICES_TABLE", "practice-booking-practices-dev"),
            providers_table=os.getenv("PROVIDERS_TABLE", "practice-booking-providers-dev"),
            bookings_practice_index=os.getenv("BOOKINGS_PRACTICE_INDEX", "GSI1"),
            default_tenant_id=os.getenv("DEFAULT_TENANT_ID", "public"),
            # Set RESERVE_SLOTS=false to fall back to the existence-only slot check
            reserve_slots=_env_bool("RESERVE_SLOTS", "true"),
            require_confirmation_code=_env_bool("REQUIRE_CONFIRMATION_CODE", "false"),
            slot_search_days=int(os.getenv("SLOT_SEARCH_DAYS", "7")),
            event_bus_name=os.getenv("EVENT_BUS_NAME") or None,
            event_source=os.getenv("EVENT_SOURCE", "practice-booking.core-api"),
            rate_limit_enabled=_env_bool("RATE_LIMIT_ENABLED", "true"),
            booking_rate_limit=int(os.getenv("BOOKING_RATE_LIMIT", "20")),
            booking_rate_window_seconds=int(os.getenv("BOOKING_RATE_WINDOW_SECONDS", "60")),
            redis_url=os.getenv("REDIS_URL") or None,
            allowed_origins=_env_list(
                "ALLOWED_ORIGINS", "http://localhost:5173,http://localhost:3000"
            ),
            security_headers_enabled=_env_bool("SECURITY_HEADERS_ENABLED", "true"),
            log_level=os.getenv("LOG_LEVEL", "INFO").upper(),
        )


@lru_cache
def get_settings() -> Settings:
    return Settings.from_env()
