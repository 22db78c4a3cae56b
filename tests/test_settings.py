"""Tests for settings parsing and validation."""

import pytest
from pydantic import ValidationError

from briefgate.app.core.config import DEFAULT_APP_URL, RateLimitPolicy, Settings


def test_defaults(monkeypatch) -> None:
    for name in ("APP_URL", "CHAT_RATE_LIMIT", "FOLLOWUP_RATE_LIMIT", "CORS_ORIGINS"):
        monkeypatch.delenv(name, raising=False)

    settings = Settings(_env_file=None)

    assert settings.app_url == DEFAULT_APP_URL
    assert settings.app_token_header == "x-app-token"
    assert settings.rate_limit_policy("chat") == RateLimitPolicy(limit=10, window_seconds=86400)
    assert settings.rate_limit_policy("followup") == RateLimitPolicy(limit=20, window_seconds=86400)
    assert settings.cors_origins == [DEFAULT_APP_URL]


def test_unknown_namespace() -> None:
    with pytest.raises(KeyError):
        Settings(_env_file=None).rate_limit_policy("upload")


@pytest.mark.parametrize("url", ["https://example.com/", "example.com"])
def test_app_url_rejected(monkeypatch, url: str) -> None:
    monkeypatch.setenv("APP_URL", url)

    with pytest.raises(ValidationError):
        Settings(_env_file=None)


@pytest.mark.parametrize("name", ["CHAT_RATE_LIMIT", "FOLLOWUP_RATE_WINDOW_SECONDS"])
def test_rate_limit_values_must_be_positive(monkeypatch, name: str) -> None:
    monkeypatch.setenv(name, "0")

    with pytest.raises(ValidationError):
        Settings(_env_file=None)


def test_cors_origins_accepts_bare_list(monkeypatch) -> None:
    monkeypatch.setenv("CORS_ORIGINS", "https://a.example, https://b.example/")

    settings = Settings(_env_file=None)
    assert settings.cors_origins == ["https://a.example", "https://b.example"]


@pytest.mark.parametrize(
    ("raw", "expected"),
    [
        ('["http://localhost:5173"]', ["http://localhost:5173"]),
        ("*", ["*"]),
        ("[]", []),
        ("", []),
    ],
)
def test_cors_origins_parsing_variants(monkeypatch, raw: str, expected: list[str]) -> None:
    monkeypatch.setenv("CORS_ORIGINS", raw)

    settings = Settings(_env_file=None)
    assert settings.cors_origins == expected
