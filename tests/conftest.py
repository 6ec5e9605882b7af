"""
Shared test configuration.

Patches dotenv so pydantic-settings never reads the project's real .env file
during tests, and provides a deterministic stand-in for the Cloudflare
verifier so gate behaviour can be exercised without network access.
"""

from typing import Iterable, Optional

import pytest

from config import TurnstileConfig

SECRET = "test-secret-value"


class FakeVerifier:
    """TokenVerifier that accepts a fixed set of tokens, or always raises."""

    def __init__(
        self, accepted: Iterable[str] = (), error: Optional[Exception] = None
    ) -> None:
        self.accepted = set(accepted)
        self.error = error
        self.calls: list[tuple[str, TurnstileConfig, Optional[str]]] = []

    async def verify(
        self, token: str, config: TurnstileConfig, remote_ip: Optional[str] = None
    ) -> bool:
        self.calls.append((token, config, remote_ip))
        if self.error is not None:
            raise self.error
        return token in self.accepted


@pytest.fixture(autouse=True)
def disable_dotenv_loading(monkeypatch):
    """Prevent pydantic-settings from loading .env files in all tests."""
    import pydantic_settings.sources.providers.dotenv as ps_dotenv

    monkeypatch.setattr(ps_dotenv, "dotenv_values", lambda *a, **kw: {})


@pytest.fixture
def turnstile_config() -> TurnstileConfig:
    return TurnstileConfig(secret=SECRET)
