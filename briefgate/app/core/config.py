import json
import re
from dataclasses import dataclass
from typing import Annotated, Any

from pydantic import field_validator
from pydantic_settings import BaseSettings, NoDecode, SettingsConfigDict


DEFAULT_APP_URL = "https://decision-brief-ai.vercel.app"


@dataclass(frozen=True)
class RateLimitPolicy:
    """Quota for one rate-limit namespace."""
    limit: int
    window_seconds: int


def _parse_cors_origins(raw: Any) -> list[str]:
    if raw is None:
        return []
    if isinstance(raw, list):
        items = [str(v).strip() for v in raw]
        return [v for v in items if v]

    raw = str(raw).strip()
    if not raw or raw == "[]":
        return []
    if raw == "*":
        return ["*"]

    # JSON list is the documented format; fall back to comma/space separated.
    if raw.startswith(("[", '"', "'")):
        try:
            parsed = json.loads(raw)
        except json.JSONDecodeError:
            parsed = None
        if isinstance(parsed, list):
            items = [str(v).strip() for v in parsed]
            return [v for v in items if v]
        if isinstance(parsed, str):
            raw = parsed.strip()

    origins: list[str] = []
    for part in re.split(r"[,\s]+", raw):
        if not part or part in origins:
            continue
        if part == "*":
            return ["*"]
        origins.append(part.rstrip("/"))
    return origins


class Settings(BaseSettings):
    """Application settings loaded from environment variables.

    All settings can be configured via environment variables or .env file.
    """

    # Debug mode - enables detailed error responses
    debug: bool = False

    # Admission gate
    # Canonical application URL, scheme + host, no trailing slash
    app_url: str = DEFAULT_APP_URL
    # Shared secret clients send in app_token_header; empty rejects every request
    api_shared_secret: str = ""
    app_token_header: str = "x-app-token"

    # Rate limiting (fixed window, per namespace)
    chat_rate_limit: int = 10
    chat_rate_window_seconds: int = 60 * 60 * 24
    followup_rate_limit: int = 20
    followup_rate_window_seconds: int = 60 * 60 * 24
    rate_limit_cleanup_interval_seconds: int = 3600

    # Redis settings (optional, required for multi-instance deployments)
    redis_enabled: bool = False
    redis_url: str = "redis://localhost:6379/0"
    redis_timeout_seconds: float = 2.0

    # Upstream model (OpenRouter, OpenAI-compatible)
    openrouter_api_key: str = ""
    openrouter_base_url: str = "https://openrouter.ai/api/v1"
    openrouter_model: str = "openai/gpt-4o-mini"
    openrouter_timeout: float = 60.0
    openrouter_app_title: str = "Decision Brief AI"
    mock_provider: bool = False

    # HTTP Client connection pool settings
    httpx_connect_timeout: float = 10.0
    httpx_read_timeout: float = 60.0
    httpx_write_timeout: float = 10.0
    httpx_pool_timeout: float = 5.0
    httpx_keepalive_expiry: float = 30.0
    httpx_max_connections: int = 100
    httpx_max_keepalive_connections: int = 20

    # Input limits
    max_content_length: int = 50000
    max_notes_length: int = 10000
    max_question_length: int = 2000

    # Logging settings
    log_level: str = "INFO"
    log_format: str = "text"  # text | structured | json

    # CORS settings
    # NoDecode so a bare host list doesn't crash JSON parsing at startup.
    cors_origins: Annotated[list[str], NoDecode] = [DEFAULT_APP_URL]

    @field_validator("cors_origins", mode="before")
    @classmethod
    def decode_cors_origins(cls, v: Any) -> list[str]:
        return _parse_cors_origins(v)

    @field_validator("app_url")
    @classmethod
    def validate_app_url(cls, v: str) -> str:
        """Origin checks compare byte-for-byte, so a trailing slash never matches."""
        v = v.strip()
        if "://" not in v:
            raise ValueError("app_url must include a scheme, e.g. https://example.com")
        if v.endswith("/"):
            raise ValueError("app_url must not end with a slash")
        return v

    @field_validator(
        "chat_rate_limit",
        "chat_rate_window_seconds",
        "followup_rate_limit",
        "followup_rate_window_seconds",
        "rate_limit_cleanup_interval_seconds",
    )
    @classmethod
    def validate_rate_limit_positive(cls, v: int) -> int:
        """Validate rate limit values are positive."""
        if v < 1:
            raise ValueError("Rate limit values must be at least 1")
        return v

    @field_validator(
        "redis_timeout_seconds",
        "openrouter_timeout",
        "httpx_connect_timeout",
        "httpx_read_timeout",
    )
    @classmethod
    def validate_timeout_positive(cls, v: float) -> float:
        """Validate timeout values are positive."""
        if v <= 0:
            raise ValueError("Timeout values must be positive")
        return v

    def rate_limit_policy(self, namespace: str) -> RateLimitPolicy:
        """Return the configured quota for a rate-limit namespace.

        Raises:
            KeyError: If the namespace has no configured quota
        """
        policies = {
            "chat": RateLimitPolicy(self.chat_rate_limit, self.chat_rate_window_seconds),
            "followup": RateLimitPolicy(
                self.followup_rate_limit, self.followup_rate_window_seconds
            ),
        }
        return policies[namespace]

    model_config = SettingsConfigDict(env_file=".env", extra="ignore")


# Global settings instance
settings = Settings()
