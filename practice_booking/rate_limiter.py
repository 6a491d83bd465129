"""
Redis-backed rate limiting for public endpoints.

Fixed-window counters (INCR + EXPIRE) shared by every worker. When Redis is
not configured or unreachable, requests are allowed and a warning is logged
(fail-open mode).
"""

import logging
from typing import Optional

import redis
from fastapi import Request

from .config import Settings
from .errors import RateLimitExceeded

logger = logging.getLogger(__name__)


def get_redis_client(settings: Settings) -> Optional[redis.Redis]:
    """Create a Redis client from REDIS_URL, or None when rate limiting has no backend"""
    if not settings.rate_limit_enabled:
        logger.info("Rate limiting disabled")
        return None

    if not settings.redis_url:
        logger.warning("⚠️ REDIS_URL not set - rate limiting will operate in fail-open mode")
        return None

    # Mask password in URL for logging
    if "@" in settings.redis_url:
        protocol = settings.redis_url.split(":")[0]
        masked_url = f"{protocol}:****@{settings.redis_url.split('@')[1]}"
    else:
        masked_url = "****"
    logger.info(f"📡 Using Redis URL connection: {masked_url}")

    return redis.from_url(
        settings.redis_url,
        decode_responses=True,
        socket_connect_timeout=5,
        socket_timeout=5,
        health_check_interval=30,
        max_connections=20,
    )


def check_rate_limit(
    key: str, limit: int, window_seconds: int, redis_client: redis.Redis
) -> tuple[bool, int, int]:
    """Count this request against `key` and report whether it is within `limit`

    Args:
        key: Redis key for this rate limit
        limit: Maximum number of requests allowed
        window_seconds: Time window in seconds
        redis_client: Redis client instance

    Returns:
        Tuple of (is_allowed, current_count, ttl_seconds)
    """
    current_count = int(redis_client.incr(key))
    if current_count == 1:
        redis_client.expire(key, window_seconds)

    ttl = redis_client.ttl(key)
    if ttl is None or ttl < 0:
        # Counter lost its expiry (e.g. crash between INCR and EXPIRE)
        redis_client.expire(key, window_seconds)
        ttl = window_seconds

    return current_count <= limit, current_count, int(ttl)


def client_ip(request: Request) -> str:
    forwarded = request.headers.get("X-Forwarded-For")
    if forwarded:
        return forwarded.split(",")[0].strip()
    return request.client.host if request.client else "unknown"


async def limit_booking_creation(request: Request) -> None:
    """FastAPI dependency limiting booking creation per client IP"""
    settings: Settings = request.app.state.settings
    redis_client: Optional[redis.Redis] = request.app.state.redis

    if redis_client is None:
        return

    limit = settings.booking_rate_limit
    window_seconds = settings.booking_rate_window_seconds
    key = f"rate_limit:create_booking:{client_ip(request)}"

    try:
        is_allowed, current_count, ttl = check_rate_limit(key, limit, window_seconds, redis_client)
    except redis.RedisError as e:
        logger.warning(f"⚠️ Rate limit check failed, allowing request (fail-open mode): {e}")
        return

    if not is_allowed:
        logger.warning(f"🚫 Rate limit EXCEEDED for {key} - {current_count}/{limit} requests used")
        raise RateLimitExceeded(
            f"Rate limit exceeded. Maximum {limit} requests per {window_seconds} seconds.",
            retry_after=ttl,
        )
