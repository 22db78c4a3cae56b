"""Per-client rate limiting.

Fixed-window quotas keyed by namespace and hashed client identity, backed
by an in-memory store or Redis. Exposed to routes as a FastAPI dependency
that runs after the admission gate.
"""

import asyncio
from typing import Any, Awaitable, Callable, Optional

from fastapi import Depends, Request

from briefgate.app.core.config import settings
from briefgate.app.core.identity import get_client_identity
from briefgate.app.core.logging import get_log_context, get_logger
from briefgate.app.exceptions import RateLimited
from briefgate.app.middleware.admission import require_first_party

# Re-export models
from briefgate.app.middleware.rate_limit.models import (
    RateLimitDecision,
    RateLimitRecord,
)

# Re-export backends
from briefgate.app.middleware.rate_limit.backends import (
    FIXED_WINDOW_SCRIPT,
    InMemoryRateLimitStore,
    RateLimitStore,
    RedisRateLimitStore,
)

logger = get_logger(__name__)

__all__ = [
    # Models
    "RateLimitDecision",
    "RateLimitRecord",
    # Backends
    "FIXED_WINDOW_SCRIPT",
    "RateLimitStore",
    "InMemoryRateLimitStore",
    "RedisRateLimitStore",
    # Main classes
    "RateLimiter",
    "enforce_rate_limit",
    "get_rate_limiter",
    "reset_rate_limiter",
]


class RateLimiter:
    """Namespaced quota checks over a single owned store.

    All reads and writes of rate-limit records go through ``allow()``.
    """

    def __init__(
        self,
        store: Optional[RateLimitStore] = None,
        use_redis: Optional[bool] = None,
        cleanup_interval: Optional[float] = None,
    ):
        """Initialize the limiter.

        Args:
            store: Explicit store; skips backend selection when given
            use_redis: Force Redis usage (None = auto-detect from settings)
            cleanup_interval: Seconds between expiry sweeps
        """
        if store is None:
            should_use_redis = use_redis if use_redis is not None else settings.redis_enabled
            if should_use_redis:
                store = RedisRateLimitStore()
                logger.info("Using Redis rate limit store")
            else:
                store = InMemoryRateLimitStore()
                logger.info("Using in-memory rate limit store")
        self._store = store
        self._cleanup_interval = (
            cleanup_interval
            if cleanup_interval is not None
            else settings.rate_limit_cleanup_interval_seconds
        )
        self._cleanup_task: Optional[asyncio.Task] = None
        self._shutdown_event = asyncio.Event()

    @property
    def store(self) -> RateLimitStore:
        return self._store

    @staticmethod
    def make_key(namespace: str, identity: str) -> str:
        return f"ratelimit:{namespace}:{identity}"

    async def allow(
        self,
        namespace: str,
        identity: str,
        limit: int,
        window_seconds: float,
    ) -> RateLimitDecision:
        """Count one request for ``identity`` in ``namespace``.

        Namespaces never share counters.

        Raises:
            StoreUnavailable: If the backing store fails
        """
        if limit < 1:
            raise ValueError("limit must be at least 1")
        if window_seconds <= 0:
            raise ValueError("window_seconds must be positive")
        return await self._store.hit(self.make_key(namespace, identity), limit, window_seconds)

    async def cleanup(self) -> int:
        """Remove expired records from the store."""
        return await self._store.cleanup()

    async def start_cleanup_task(self) -> None:
        """Start the periodic expiry sweep."""
        if self._cleanup_task is not None:
            return
        self._shutdown_event.clear()
        self._cleanup_task = asyncio.create_task(self._cleanup_loop())
        logger.info("Started rate limit cleanup task")

    async def stop_cleanup_task(self) -> None:
        """Stop the periodic expiry sweep."""
        if self._cleanup_task is None:
            return
        self._shutdown_event.set()
        try:
            await asyncio.wait_for(self._cleanup_task, timeout=5.0)
        except asyncio.TimeoutError:
            self._cleanup_task.cancel()
            try:
                await self._cleanup_task
            except asyncio.CancelledError:
                pass
        self._cleanup_task = None
        logger.info("Stopped rate limit cleanup task")

    async def _cleanup_loop(self) -> None:
        """Background loop sweeping expired records."""
        while not self._shutdown_event.is_set():
            try:
                await asyncio.wait_for(
                    self._shutdown_event.wait(),
                    timeout=self._cleanup_interval,
                )
            except asyncio.TimeoutError:
                pass
            if self._shutdown_event.is_set():
                break
            try:
                removed = await self.cleanup()
                if removed:
                    logger.debug(f"Removed {removed} expired rate limit records")
            except Exception as e:
                logger.error(f"Error during rate limit cleanup: {e}")

    async def close(self) -> None:
        await self.stop_cleanup_task()
        await self._store.close()


_rate_limiter: Optional[RateLimiter] = None


def get_rate_limiter() -> RateLimiter:
    """Get the process-wide rate limiter."""
    global _rate_limiter
    if _rate_limiter is None:
        _rate_limiter = RateLimiter()
    return _rate_limiter


def reset_rate_limiter(limiter: Optional[RateLimiter] = None) -> None:
    """Replace (or clear) the process-wide rate limiter."""
    global _rate_limiter
    _rate_limiter = limiter


def enforce_rate_limit(namespace: str) -> Callable[..., Awaitable[RateLimitDecision]]:
    """Build a route dependency enforcing the quota for ``namespace``.

    The dependency itself depends on the admission gate, so a rejected
    request never reaches the limiter. The decision is stored on
    ``request.state.rate_limit`` for response headers.

    Raises:
        KeyError: If ``namespace`` has no configured quota
    """
    settings.rate_limit_policy(namespace)

    async def dependency(
        request: Request,
        _admitted: Any = Depends(require_first_party),
    ) -> RateLimitDecision:
        policy = settings.rate_limit_policy(namespace)
        identity = get_client_identity(request)
        decision = await get_rate_limiter().allow(
            namespace, identity, policy.limit, policy.window_seconds
        )
        request.state.rate_limit = decision

        if not decision.allowed:
            logger.warning(
                "Rate limit exceeded",
                extra=get_log_context(
                    request_id=getattr(request.state, "request_id", None),
                    client_id=identity,
                    namespace=namespace,
                ),
            )
            raise RateLimited(
                reset_at=decision.reset_at,
                limit=decision.limit,
                namespace=namespace,
            )
        return decision

    return dependency
