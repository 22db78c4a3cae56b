"""Core utilities for briefgate."""

from briefgate.app.core.config import settings
from briefgate.app.core.logging import get_logger, setup_logging

__all__ = [
    "settings",
    "get_logger",
    "setup_logging",
]
