"""
Application configuration via pydantic-settings, plus the immutable
TurnstileConfig value object consumed by the gate.

Settings are loaded from environment variables (and .env file). The gate never
reads the environment itself: AppSettings resolves a TurnstileConfig once at
startup and the middleware only ever sees that value.
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from typing import Optional

from pydantic import model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_HEADER_NAME = "CF-Turnstile-Token"
DEFAULT_VERIFY_URL = "https://challenges.cloudflare.com/turnstile/v0/siteverify"


@dataclass(frozen=True)
class TurnstileConfig:
    """Resolved gate configuration.

    Builders return modified copies; an instance is never mutated, so one
    config can be shared by every concurrent request.
    """

    secret: str = field(repr=False)
    header_name: str = DEFAULT_HEADER_NAME
    verify_url: str = DEFAULT_VERIFY_URL
    forward_remote_ip: bool = False

    def __post_init__(self) -> None:
        if not self.header_name:
            raise ValueError("header_name must not be empty")
        if not self.verify_url:
            raise ValueError("verify_url must not be empty")

    @classmethod
    def from_secret(cls, secret: str) -> "TurnstileConfig":
        return cls(secret=secret)

    @classmethod
    def from_settings(cls, settings: "TurnstileSettings") -> "TurnstileConfig":
        return cls(
            secret=settings.turnstile_secret,
            header_name=settings.turnstile_header_name,
            verify_url=settings.turnstile_verify_url,
            forward_remote_ip=settings.turnstile_forward_remote_ip,
        )

    def with_header_name(self, name: str) -> "TurnstileConfig":
        return replace(self, header_name=name)

    def with_verify_url(self, url: str) -> "TurnstileConfig":
        return replace(self, verify_url=url)

    def with_remote_ip_forwarding(self, enabled: bool = True) -> "TurnstileConfig":
        return replace(self, forward_remote_ip=enabled)


class TurnstileSettings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    turnstile_secret: str
    turnstile_header_name: str = DEFAULT_HEADER_NAME
    turnstile_verify_url: str = DEFAULT_VERIFY_URL
    turnstile_timeout_seconds: float = 5.0
    turnstile_forward_remote_ip: bool = False


class LoggingSettings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    # Unset means the ENV-based default in utils/logging_config.py:
    # json + INFO in production, console + DEBUG otherwise
    log_level: Optional[str] = None
    log_format: Optional[str] = None


class SentrySettings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    sentry_dsn: str = ""
    sentry_send_pii: bool = False
    sentry_traces_sample_rate: float = 0.1
    sentry_profile_sample_rate: float = 0.05


class AppSettings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    env: str = "development"
    app_name: str = "turnstile-gate"

    # CORS: browser clients must be able to send the token header
    cors_origins: list[str] = ["*"]

    # OpenAPI docs URL (None disables the docs UI in production)
    docs_url: Optional[str] = "/docs"

    # Sub-configs (composed via model_validator below)
    turnstile: Optional[TurnstileSettings] = None
    logging: Optional[LoggingSettings] = None
    sentry: Optional[SentrySettings] = None

    @model_validator(mode="after")
    def _populate_sub_configs(self) -> "AppSettings":
        # Populate sub-configs from the same env/dotenv source
        if self.turnstile is None:
            self.turnstile = TurnstileSettings()
        if self.logging is None:
            self.logging = LoggingSettings()
        if self.sentry is None:
            self.sentry = SentrySettings()
        return self

    @property
    def is_production(self) -> bool:
        return self.env == "production"

    def turnstile_config(self) -> TurnstileConfig:
        """Resolve the immutable gate config from the loaded settings."""
        return TurnstileConfig.from_settings(self.turnstile)
