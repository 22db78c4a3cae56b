"""Rate limiting data models.

This module contains dataclasses for rate limit state and results.
"""

from dataclasses import dataclass


@dataclass
class RateLimitRecord:
    """Fixed-window state for one (namespace, client) key.

    ``count`` is only incremented while the window is open; once
    ``window_end`` has passed the record is replaced, not incremented.
    """
    count: int
    window_end: float

    def is_expired(self, now: float) -> bool:
        return now >= self.window_end


@dataclass
class RateLimitDecision:
    """Result of a rate limit check."""
    allowed: bool
    limit: int
    remaining: int
    reset_at: float

    def headers(self) -> dict[str, str]:
        return {
            "X-RateLimit-Limit": str(self.limit),
            "X-RateLimit-Remaining": str(self.remaining),
            "X-RateLimit-Reset": str(int(self.reset_at)),
        }
