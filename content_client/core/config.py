"""Client configuration using Pydantic Settings v2.

Loads configuration from ``CONTENT_CLIENT_*`` environment variables with
.env file support. Per-request retry behaviour lives in
:class:`RequestSettings`, which callers can override for a single request.
"""

from __future__ import annotations

import functools
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_RETRYABLE_STATUS_CODES = frozenset({408, 500, 502, 503, 504})


class RequestSettings(BaseModel):
    """Timeout and retry policy applied to a single content request."""

    model_config = ConfigDict(frozen=True)

    timeout_seconds: float = Field(default=4.0, gt=0)
    number_of_retries: int = Field(default=3, ge=0)
    retry_interval_seconds: float = Field(default=0.5, ge=0)
    # Each retry waits retry_interval * (modifier * attempt).
    retry_interval_modifier: int = Field(default=2, ge=0)
    retryable_status_codes: frozenset[int] = DEFAULT_RETRYABLE_STATUS_CODES
    retry_transport_errors: bool = False
    cache_expiration_seconds: float | None = Field(default=None, gt=0)

    @field_validator("retryable_status_codes", mode="before")
    @classmethod
    def parse_status_codes(cls, v: Any) -> Any:
        """Accept a comma-separated string as well as any iterable of codes."""
        if isinstance(v, str):
            return frozenset(int(code.strip()) for code in v.split(",") if code.strip())
        return v


class Settings(BaseSettings):
    """Content client settings.

    Configuration is loaded from environment variables prefixed with
    ``CONTENT_CLIENT_``. A .env file in the working directory is also read
    if present.
    """

    model_config = SettingsConfigDict(
        env_prefix="CONTENT_CLIENT_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # ── Endpoints ────────────────────────────────────────────────
    primary_url: str | None = None
    primary_ping_path: str | None = None
    secondary_url: str | None = None
    secondary_ping_path: str | None = None

    # ── HTTP ─────────────────────────────────────────────────────
    api_key: str | None = None
    api_key_header: str = "X-ApiKey"
    global_request_timeout_seconds: float = Field(default=10.0, gt=0)

    # ── Health checks ────────────────────────────────────────────
    primary_ping_interval_seconds: float = Field(default=10.0, gt=0)
    secondary_ping_interval_seconds: float = Field(default=20.0, gt=0)
    ping_exception_retry_seconds: float = Field(default=5.0, gt=0)

    # ── Requests ─────────────────────────────────────────────────
    request_timeout_seconds: float = Field(default=4.0, gt=0)
    request_number_of_retries: int = Field(default=3, ge=0)
    request_retry_interval_seconds: float = Field(default=0.5, ge=0)
    request_retry_interval_modifier: int = Field(default=2, ge=0)
    request_retryable_status_codes: str = "408,500,502,503,504"

    # ── Cache ────────────────────────────────────────────────────
    redis_url: str | None = None
    cache_expiration_seconds: float | None = Field(default=None, gt=0)

    log_level: str = "INFO"

    @field_validator("primary_url", "secondary_url", "redis_url", mode="before")
    @classmethod
    def blank_to_none(cls, v: Any) -> Any:
        """Treat empty environment values as unset."""
        if isinstance(v, str) and not v.strip():
            return None
        return v

    @model_validator(mode="after")
    def check_ping_intervals(self) -> Settings:
        """The primary carries more traffic so it is probed at least as often."""
        if self.primary_ping_interval_seconds > self.secondary_ping_interval_seconds:
            msg = "primary_ping_interval_seconds must not exceed secondary_ping_interval_seconds"
            raise ValueError(msg)
        return self

    def request_settings(self) -> RequestSettings:
        """Build the default per-request policy from these settings."""
        return RequestSettings(
            timeout_seconds=self.request_timeout_seconds,
            number_of_retries=self.request_number_of_retries,
            retry_interval_seconds=self.request_retry_interval_seconds,
            retry_interval_modifier=self.request_retry_interval_modifier,
            retryable_status_codes=self.request_retryable_status_codes,
            cache_expiration_seconds=self.cache_expiration_seconds,
        )


@functools.lru_cache
def get_settings() -> Settings:
    """Return cached client settings instance."""
    return Settings()
