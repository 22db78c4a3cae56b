"""First-party admission checks.

These run before the rate limiter so that traffic which is not from the
application never consumes quota.
"""

import hmac
from typing import Mapping, Optional

from briefgate.app.exceptions import (
    OriginRejected,
    RefererRejected,
    TokenInvalid,
    TokenMissing,
    TokenNotConfigured,
)


DEFAULT_TOKEN_HEADER = "x-app-token"


def constant_time_equals(provided: str, expected: str) -> bool:
    """Compare two secrets without leaking where they first differ.

    Runs ``hmac.compare_digest`` even on a length mismatch so the
    comparison is always performed.
    """
    a = provided.encode("utf-8")
    b = expected.encode("utf-8")
    same_length = len(a) == len(b)
    # compare_digest leaks length only, never the position of a mismatch
    matches = hmac.compare_digest(a, b)
    return same_length and matches


def check_origin(headers: Mapping[str, str], app_url: str) -> None:
    """Reject requests whose Origin or Referer points elsewhere.

    - Origin, when present, must equal ``app_url`` exactly.
    - Referer, when present, must start with ``app_url``.
    - A request carrying neither header passes. Some legitimate clients
      omit both, so this stage is not a guarantee on its own.

    Raises:
        OriginRejected: Origin header does not match
        RefererRejected: Referer header does not match
    """
    origin = headers.get("origin")
    if origin and origin != app_url:
        raise OriginRejected()

    referer = headers.get("referer")
    if referer and not referer.startswith(app_url):
        raise RefererRejected()


def check_token(
    headers: Mapping[str, str],
    secret: Optional[str],
    header_name: str = DEFAULT_TOKEN_HEADER,
) -> None:
    """Require the shared-secret token header.

    Raises:
        TokenMissing: Header absent or empty
        TokenNotConfigured: No shared secret configured on the server
        TokenInvalid: Header does not match the secret
    """
    token = headers.get(header_name)
    if not token:
        raise TokenMissing()

    if not secret:
        raise TokenNotConfigured()

    if not constant_time_equals(token, secret):
        raise TokenInvalid()
