"""Upstream model providers."""

from briefgate.app.providers.base import BaseProvider, extract_message_content
from briefgate.app.providers.factory import create_provider, get_provider, reset_provider
from briefgate.app.providers.mock import MockProvider
from briefgate.app.providers.openrouter import OpenRouterProvider

__all__ = [
    "BaseProvider",
    "extract_message_content",
    "create_provider",
    "get_provider",
    "reset_provider",
    "MockProvider",
    "OpenRouterProvider",
]
