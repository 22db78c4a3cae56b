"""Rate limit store backends.

Both backends implement the same fixed-window algorithm:

1. No record, or the window has ended: start a new window with count 1, allow.
2. ``count >= limit``: deny, leave the count unchanged.
3. Otherwise increment and allow.

The check-and-increment is atomic per key: under an asyncio lock in memory,
inside a Lua script in Redis.
"""

import asyncio
import time
from abc import ABC, abstractmethod
from typing import Any, Callable, Dict, Optional

import redis
import redis.asyncio as aioredis

from briefgate.app.core.config import settings
from briefgate.app.core.logging import get_logger
from briefgate.app.exceptions import StoreUnavailable
from briefgate.app.middleware.rate_limit.models import RateLimitDecision, RateLimitRecord

logger = get_logger(__name__)

Clock = Callable[[], float]


class RateLimitStore(ABC):
    """Keyed fixed-window counter store."""

    @abstractmethod
    async def hit(self, key: str, limit: int, window_seconds: float) -> RateLimitDecision:
        """Record one request against ``key`` and decide allow/deny.

        Args:
            key: Namespaced client key
            limit: Maximum requests per window
            window_seconds: Window length in seconds

        Returns:
            RateLimitDecision for this request
        """

    @abstractmethod
    async def cleanup(self) -> int:
        """Remove expired records. Returns the number removed."""

    async def ping(self) -> bool:
        """Whether the store is reachable."""
        return True

    async def close(self) -> None:
        """Release any connections held by the store."""


class InMemoryRateLimitStore(RateLimitStore):
    """Process-local store for single-instance deployments.

    Every process keeps its own counters, so running N workers multiplies the
    effective limit by N. Counters are lost on restart. Use the Redis store
    when either matters.
    """

    def __init__(self, clock: Clock = time.time):
        self._clock = clock
        self._records: Dict[str, RateLimitRecord] = {}
        self._lock = asyncio.Lock()

    def __len__(self) -> int:
        return len(self._records)

    async def hit(self, key: str, limit: int, window_seconds: float) -> RateLimitDecision:
        async with self._lock:
            now = self._clock()
            record = self._records.get(key)

            if record is None or record.is_expired(now):
                record = RateLimitRecord(count=1, window_end=now + window_seconds)
                self._records[key] = record
                return RateLimitDecision(
                    allowed=True,
                    limit=limit,
                    remaining=max(0, limit - 1),
                    reset_at=record.window_end,
                )

            if record.count >= limit:
                return RateLimitDecision(
                    allowed=False,
                    limit=limit,
                    remaining=0,
                    reset_at=record.window_end,
                )

            record.count += 1
            return RateLimitDecision(
                allowed=True,
                limit=limit,
                remaining=limit - record.count,
                reset_at=record.window_end,
            )

    async def cleanup(self) -> int:
        async with self._lock:
            now = self._clock()
            expired = [
                key for key, record in self._records.items()
                if record.is_expired(now)
            ]
            for key in expired:
                del self._records[key]
        return len(expired)


# KEYS[1] = counter key
# ARGV[1] = limit, ARGV[2] = window length in milliseconds
# Returns {allowed (0|1), count, ttl_ms}
FIXED_WINDOW_SCRIPT = """
    local key = KEYS[1]
    local limit = tonumber(ARGV[1])
    local window_ms = tonumber(ARGV[2])

    local current = redis.call('GET', key)
    local ttl = redis.call('PTTL', key)

    -- Missing key, or a counter that somehow lost its expiry: new window
    if current == false or ttl < 0 then
        redis.call('SET', key, 1, 'PX', window_ms)
        return {1, 1, window_ms}
    end

    current = tonumber(current)
    if current >= limit then
        return {0, current, ttl}
    end

    current = redis.call('INCR', key)
    return {1, current, ttl}
"""


class RedisRateLimitStore(RateLimitStore):
    """Redis-backed store shared by every instance.

    The whole read-modify-write runs in one Lua script, so concurrent
    requests from any number of processes see a single counter. Windows
    expire through the key TTL.

    A store error or timeout raises StoreUnavailable. There is no retry and
    no fail-open path.
    """

    def __init__(
        self,
        redis_client: Optional[Any] = None,
        redis_url: Optional[str] = None,
        timeout: Optional[float] = None,
        clock: Clock = time.time,
    ):
        self._redis = redis_client
        self._redis_url = redis_url or settings.redis_url
        self._timeout = timeout if timeout is not None else settings.redis_timeout_seconds
        self._clock = clock

    def _get_redis(self) -> Any:
        """Get or create the Redis client."""
        if self._redis is None:
            self._redis = aioredis.from_url(self._redis_url)
        return self._redis

    async def hit(self, key: str, limit: int, window_seconds: float) -> RateLimitDecision:
        window_ms = max(1, int(window_seconds * 1000))
        try:
            client = self._get_redis()
            result = await asyncio.wait_for(
                client.eval(FIXED_WINDOW_SCRIPT, 1, key, limit, window_ms),
                timeout=self._timeout,
            )
        except asyncio.TimeoutError as e:
            logger.error(f"Rate limit store timed out after {self._timeout}s")
            raise StoreUnavailable("Rate limit store timed out") from e
        except redis.RedisError as e:
            logger.error(f"Rate limit store error: {e}")
            raise StoreUnavailable() from e

        allowed = bool(int(result[0]))
        count = int(result[1])
        ttl_ms = int(result[2])
        reset_at = self._clock() + ttl_ms / 1000

        return RateLimitDecision(
            allowed=allowed,
            limit=limit,
            remaining=max(0, limit - count) if allowed else 0,
            reset_at=reset_at,
        )

    async def cleanup(self) -> int:
        """No-op: Redis expires keys itself."""
        return 0

    async def ping(self) -> bool:
        try:
            return bool(
                await asyncio.wait_for(self._get_redis().ping(), timeout=self._timeout)
            )
        except (asyncio.TimeoutError, redis.RedisError) as e:
            logger.warning(f"Rate limit store ping failed: {e}")
            return False

    async def close(self) -> None:
        if self._redis is not None:
            try:
                await self._redis.aclose()
            except redis.RedisError as e:
                logger.warning(f"Error closing Redis connection: {e}")
            self._redis = None
