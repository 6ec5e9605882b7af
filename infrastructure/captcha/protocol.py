"""TokenVerifier protocol: the gate depends on this, not the concrete implementation."""

from typing import Optional, Protocol

from config import TurnstileConfig


class TokenVerifier(Protocol):
    async def verify(
        self, token: str, config: TurnstileConfig, remote_ip: Optional[str] = None
    ) -> bool:
        """Return the service's verdict, or raise VerificationError."""
        ...
