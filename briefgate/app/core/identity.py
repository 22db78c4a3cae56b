"""Client identity resolution for rate limiting.

The identity is a truncated SHA-256 of the client address so raw IPs are
never kept in memory, in Redis, or in logs.
"""

import hashlib
from typing import Mapping, Optional, Sequence

from fastapi import Request


# Checked in order; the first header present wins
FORWARDED_ADDRESS_HEADERS: tuple[str, ...] = (
    "x-vercel-forwarded-for",
    "x-forwarded-for",
    "x-real-ip",
)

UNKNOWN_CLIENT = "unknown"

# 32 hex chars (128 bits) for collision resistance
IDENTITY_HEX_LENGTH = 32


def hash_identifier(value: str) -> str:
    """One-way hash of a client identifier."""
    return hashlib.sha256(value.encode("utf-8")).hexdigest()[:IDENTITY_HEX_LENGTH]


def resolve_client_address(
    headers: Mapping[str, str],
    peer_host: Optional[str] = None,
    header_names: Sequence[str] = FORWARDED_ADDRESS_HEADERS,
) -> str:
    """Pick the client address from forwarding headers.

    Takes the first non-blank comma-separated value of the first forwarding
    header present. A header holding only blanks is skipped. Falls back to
    the socket peer, then ``"unknown"``.
    """
    for name in header_names:
        forwarded = headers.get(name)
        if not forwarded:
            continue
        for value in forwarded.split(","):
            address = value.strip()
            if address:
                return address
    return peer_host or UNKNOWN_CLIENT


def get_client_identity(request: Request) -> str:
    """Derive the hashed client identity for a request."""
    peer_host = request.client.host if request.client else None
    return hash_identifier(resolve_client_address(request.headers, peer_host))
