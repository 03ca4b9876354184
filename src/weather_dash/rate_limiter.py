"""Per-client rate limiting for the proxy service."""

import logging
import time
from typing import Optional

import redis.asyncio as redis

from weather_dash.config import (
    REDIS_URL,
    RATE_LIMIT_REQUESTS_PER_SECOND,
    RATE_LIMIT_REDIS_KEY_PREFIX
)

logger = logging.getLogger(__name__)


class RateLimiter:
    """Sliding one-second window per client, kept in a Redis sorted set.

    The proxy spends the provider credential on behalf of every caller, so
    each client address gets its own quota. Requests are allowed when
    Redis is unavailable.
    """

    window_size = 1.0

    def __init__(
        self,
        redis_client: Optional[redis.Redis] = None,
        max_requests: int = RATE_LIMIT_REQUESTS_PER_SECOND,
        key_prefix: str = RATE_LIMIT_REDIS_KEY_PREFIX
    ):
        """Initialize rate limiter.

        Args:
            redis_client: Optional Redis client. If None, creates new client.
            max_requests: Requests allowed per client per window
            key_prefix: Prefix of the per-client sorted set keys
        """
        self.redis_client = redis_client or redis.from_url(REDIS_URL)
        self.max_requests = max_requests
        self.key_prefix = key_prefix

    def key_for(self, client_id: str) -> str:
        return f"{self.key_prefix}:{client_id}"

    async def is_allowed(self, client_id: str) -> tuple[bool, int]:
        """Record a request from `client_id` and check it against the quota.

        Returns:
            Tuple of (is_allowed, retry_after_seconds)
        """
        key = self.key_for(client_id)
        try:
            now_us = int(time.time() * 1_000_000)
            window_start = now_us - int(self.window_size * 1_000_000)

            pipe = self.redis_client.pipeline()
            pipe.zadd(key, {str(now_us): now_us})
            pipe.zremrangebyscore(key, 0, window_start)
            pipe.zcard(key)
            pipe.expire(key, int(self.window_size * 2))
            _, _, request_count, _ = await pipe.execute()
        except Exception as e:
            logger.error(f"Rate limiter error, allowing request: {e}")
            return True, 0

        if request_count > self.max_requests:
            retry_after = max(1, int(self.window_size))
            logger.debug(f"Rate limited {client_id}: count={request_count}, max={self.max_requests}")
            return False, retry_after
        return True, 0

    async def close(self):
        """Close Redis connection."""
        if self.redis_client:
            await self.redis_client.close()
