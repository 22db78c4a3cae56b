"""Custom exceptions for briefgate."""

import math
import time


class GatewayException(Exception):
    """Base class for exceptions that map onto an HTTP response.

    Subclasses define ``status_code`` and a stable ``error`` code; the
    handler in main.py turns them into ``{"error": ..., "message": ...}``.
    """
    status_code: int = 500
    error: str = "internal_error"

    def __init__(self, message: str = "Gateway error"):
        self.message = message
        super().__init__(message)

    def to_response(self) -> dict:
        return {"error": self.error, "message": self.message}


# ============================================
# Admission gate
# ============================================


class AdmissionRejected(GatewayException):
    """Request did not come from the first-party application.

    Maps to HTTP 403 Forbidden.
    """
    status_code = 403
    error = "forbidden"
    reason = "admission_rejected"

    def __init__(self, message: str = "Forbidden"):
        super().__init__(message)


class OriginRejected(AdmissionRejected):
    """Origin header present but not the canonical application URL."""
    reason = "origin_not_allowed"


class RefererRejected(AdmissionRejected):
    """Referer header present but not under the canonical application URL."""
    reason = "referer_not_allowed"


class TokenRejected(GatewayException):
    """Shared-secret token check failed.

    Every subclass carries its own ``reason`` for logs, but the caller only
    ever sees HTTP 401 Unauthorized.
    """
    status_code = 401
    error = "unauthorized"
    reason = "token_rejected"

    def __init__(self, message: str = "Unauthorized"):
        super().__init__(message)


class TokenMissing(TokenRejected):
    reason = "missing_app_token"


class TokenInvalid(TokenRejected):
    reason = "invalid_app_token"


class TokenNotConfigured(TokenRejected):
    """The server has no shared secret configured."""
    reason = "shared_secret_not_configured"


# ============================================
# Rate limiting
# ============================================


class RateLimited(GatewayException):
    """Client exhausted its quota for the current window.

    Maps to HTTP 429 Too Many Requests. Never retried by the gateway.
    """
    status_code = 429
    error = "rate_limited"

    def __init__(
        self,
        reset_at: float,
        limit: int,
        namespace: str | None = None,
        detail: str | None = None,
    ):
        self.reset_at = reset_at
        self.limit = limit
        self.namespace = namespace
        # Whole seconds until the window resets
        self.retry_after = max(0, math.ceil(reset_at - time.time()))
        message = detail or (
            f"Limit reached ({limit} requests per window). "
            f"Resets in {_format_wait(self.retry_after)}."
        )
        super().__init__(message)

    def to_response(self) -> dict:
        return {
            "error": self.error,
            "message": self.message,
            "limit": self.limit,
            "reset_at": int(self.reset_at),
            "retry_after": self.retry_after,
        }


class StoreUnavailable(GatewayException):
    """The rate-limit store could not be reached or timed out.

    Maps to HTTP 503. The request is denied; quota checks never fail open.
    """
    status_code = 503
    error = "rate_limit_store_unavailable"

    def __init__(self, message: str = "Rate limit store unavailable"):
        super().__init__(message)


# ============================================
# Upstream model and brief output
# ============================================


class UpstreamError(GatewayException):
    """Upstream model call failed or returned nothing usable."""
    status_code = 503
    error = "upstream_unavailable"

    def __init__(self, message: str = "AI service unavailable"):
        super().__init__(message)


class ParseProducedNoSections(GatewayException):
    """Model output contained no recognizable section heading.

    Raised by callers of the parser, never by the parser itself.
    """
    status_code = 502
    error = "brief_unparseable"

    def __init__(self, message: str = "Brief could not be parsed"):
        super().__init__(message)


class BriefValidationError(GatewayException):
    """Model output is missing one or more required headings."""
    status_code = 502
    error = "brief_validation_failed"

    def __init__(self, missing: list[str]):
        self.missing = list(missing)
        super().__init__("Brief validation failed")

    def to_response(self) -> dict:
        return {"error": self.error, "message": self.message, "missing": self.missing}


def _format_wait(seconds: int) -> str:
    if seconds >= 3600:
        hours = math.ceil(seconds / 3600)
        return f"{hours} hour{'s' if hours != 1 else ''}"
    minutes = max(1, math.ceil(seconds / 60))
    return f"{minutes} minute{'s' if minutes != 1 else ''}"
