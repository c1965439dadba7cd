"""
Optional per-client rate limiting.

Uses Redis when RATE_LIMIT_PER_MINUTE is set.
If not set or Redis unavailable, no limit is applied.
"""

from __future__ import annotations

import logging
from typing import Optional

import redis

from eventchat.config import Settings

logger = logging.getLogger(__name__)


def build_redis_client(settings: Settings) -> Optional[redis.Redis]:
    """Redis client for rate limiting, or None when limiting is off."""
    if not settings.rate_limit_per_minute:
        return None
    return redis.Redis(
        host=settings.redis_host,
        port=settings.redis_port,
        socket_timeout=0.5,
        socket_connect_timeout=0.5,
    )


def check_rate_limit(
    client_key: str,
    redis_client: Optional[object],
    limit_per_minute: Optional[int],
) -> bool:
    """
    Check if client_key is within rate limit.
    Returns True if allowed, False if rate limited.
    If redis_client or limit_per_minute is None, always returns True.
    """
    if redis_client is None or limit_per_minute is None or limit_per_minute <= 0:
        return True
    key = f"eventchat:ratelimit:{client_key}"
    try:
        pipe = redis_client.pipeline()
        pipe.incr(key)
        pipe.expire(key, 60)
        results = pipe.execute()
        count = results[0] if results else 0
        return count <= limit_per_minute
    except Exception as e:
        logger.warning("Rate limit check failed, allowing request: %s", e)
        return True
