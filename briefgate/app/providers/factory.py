"""Provider selection from settings."""

from typing import Optional

import httpx

from briefgate.app.core.config import settings
from briefgate.app.core.http_client import get_http_client
from briefgate.app.core.logging import get_logger
from briefgate.app.providers.base import BaseProvider
from briefgate.app.providers.mock import MockProvider
from briefgate.app.providers.openrouter import OpenRouterProvider

logger = get_logger(__name__)

_provider: Optional[BaseProvider] = None


def create_provider(http_client: Optional[httpx.AsyncClient] = None) -> BaseProvider:
    """Build the provider described by settings."""
    if settings.mock_provider:
        logger.info("Using mock upstream provider")
        return MockProvider()
    if not settings.openrouter_api_key:
        logger.warning("OPENROUTER_API_KEY not configured; upstream calls will fail")
    return OpenRouterProvider(
        base_url=settings.openrouter_base_url,
        api_key=settings.openrouter_api_key,
        referer=settings.app_url,
        title=settings.openrouter_app_title,
        http_client=http_client,
        timeout=settings.openrouter_timeout,
    )


def get_provider() -> BaseProvider:
    """FastAPI dependency returning the process-wide provider."""
    global _provider
    if _provider is None:
        try:
            http_client = get_http_client()
        except RuntimeError:
            # Lifespan not running (e.g. scripts); provider opens its own clients
            http_client = None
        _provider = create_provider(http_client)
    return _provider


def reset_provider() -> None:
    """Forget the process-wide provider (shutdown and tests)."""
    global _provider
    _provider = None
