"""Shared fixtures for briefgate tests."""

import pytest

from briefgate.app.core.config import settings
from briefgate.app.middleware.rate_limit import reset_rate_limiter
from briefgate.app.providers.factory import reset_provider

APP_URL = "https://example.com"
SHARED_SECRET = "abc123"


class FakeClock:
    """Manually advanced clock for window arithmetic."""

    def __init__(self, start: float = 1_700_000_000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture(autouse=True)
def reset_globals():
    """Fresh rate limiter and provider for every test."""
    reset_rate_limiter()
    reset_provider()
    yield
    reset_rate_limiter()
    reset_provider()


@pytest.fixture
def gate_settings(monkeypatch):
    """Admission settings pointing at a test origin and secret."""
    monkeypatch.setattr(settings, "app_url", APP_URL)
    monkeypatch.setattr(settings, "api_shared_secret", SHARED_SECRET)
    monkeypatch.setattr(settings, "app_token_header", "x-app-token")
    return settings


@pytest.fixture
def clock():
    return FakeClock()
