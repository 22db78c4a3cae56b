"""Middleware and request dependencies for briefgate."""

from briefgate.app.middleware.admission import require_first_party
from briefgate.app.middleware.rate_limit import enforce_rate_limit, get_rate_limiter
from briefgate.app.middleware.request_id import RequestIdMiddleware, get_request_id

__all__ = [
    "require_first_party",
    "enforce_rate_limit",
    "get_rate_limiter",
    "RequestIdMiddleware",
    "get_request_id",
]
