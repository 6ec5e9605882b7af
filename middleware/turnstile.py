"""
Turnstile verification gate as pure ASGI middleware.

Per HTTP request:
1. read the token from ``config.header_name``
   → missing or not visible ASCII: 400 ``Missing Turnstile token``
2. ask the verifier about it
   → False: 403 ``Turnstile verification failed``
   → raised: logged server-side, 500 ``Verification error``
   → True: VerifiedTurnstile is stored in ``scope["state"]`` and the wrapped
     app runs with the request untouched; its response is returned as-is

Lifespan and websocket scopes pass straight through. The middleware keeps no
state between requests beyond the immutable config and the verifier.
"""

from __future__ import annotations

from typing import Optional

from starlette.requests import Request
from starlette.responses import PlainTextResponse
from starlette.types import ASGIApp, Receive, Scope, Send

from config import TurnstileConfig
from errors import (
    AppError,
    MissingTokenError,
    VerificationError,
    VerificationRejectedError,
)
from infrastructure.captcha.protocol import TokenVerifier
from infrastructure.captcha.turnstile import TurnstileVerifier
from infrastructure.http_client import HttpClient
from schemas.verification import VERIFIED_STATE_KEY, VerifiedTurnstile
from shared.ip_utils import get_client_ip
from shared.logging import get_logger, hash_ip

log = get_logger(__name__)


def read_token(scope: Scope, header_name: str) -> Optional[str]:
    """Return the first value of ``header_name``, or None if unusable.

    ASGI headers arrive as raw bytes; a value counts as a string only if it
    is visible ASCII (tab allowed). An empty value is still a string and
    goes to the verifier like any other token.
    """
    wanted = header_name.lower().encode("latin-1")
    for name, value in scope.get("headers") or ():
        if name.lower() != wanted:
            continue
        if any(b != 0x09 and not 0x20 <= b <= 0x7E for b in value):
            return None
        return value.decode("ascii")
    return None


class TurnstileMiddleware:
    def __init__(
        self,
        app: ASGIApp,
        *,
        config: TurnstileConfig,
        verifier: Optional[TokenVerifier] = None,
        http_client: Optional[HttpClient] = None,
    ) -> None:
        """Without ``verifier``, a TurnstileVerifier is built over ``http_client``.

        A client passed in stays owned by the caller. When neither is given the
        middleware creates its own client, which ``aclose()`` releases.
        """
        self.app = app
        self.config = config
        self._owned_client: Optional[HttpClient] = None
        if verifier is None:
            if http_client is None:
                http_client = self._owned_client = HttpClient()
            verifier = TurnstileVerifier(http_client)
        self.verifier = verifier

    @classmethod
    def from_secret(
        cls,
        app: ASGIApp,
        secret: str,
        http_client: Optional[HttpClient] = None,
    ) -> "TurnstileMiddleware":
        return cls(
            app, config=TurnstileConfig.from_secret(secret), http_client=http_client
        )

    async def aclose(self) -> None:
        """Close the HTTP client this middleware created for itself, if any."""
        if self._owned_client is not None:
            await self._owned_client.aclose()

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] != "http":
            await self.app(scope, receive, send)
            return

        try:
            await self._verify(scope)
        except AppError as exc:
            response = PlainTextResponse(exc.message, status_code=exc.status_code)
            await response(scope, receive, send)
            return

        await self.app(scope, receive, send)

    async def _verify(self, scope: Scope) -> None:
        """Raise the AppError describing the short-circuit, or mark the scope."""
        client_ip = get_client_ip(Request(scope))
        request_log = log.bind(path=scope.get("path"), ip_hash=hash_ip(client_ip))

        token = read_token(scope, self.config.header_name)
        if token is None:
            request_log.info("turnstile_token_missing", header=self.config.header_name)
            raise MissingTokenError("Missing Turnstile token")

        try:
            verified = await self.verifier.verify(token, self.config, client_ip)
        except Exception as exc:
            cause = exc.cause if isinstance(exc, VerificationError) else exc
            request_log.error(
                "turnstile_verification_error",
                error=str(exc),
                error_type=type(exc).__name__,
                cause_type=type(cause).__name__ if cause is not None else None,
            )
            raise VerificationError() from exc

        if not verified:
            request_log.info("turnstile_verification_rejected")
            raise VerificationRejectedError("Turnstile verification failed")

        scope.setdefault("state", {})[VERIFIED_STATE_KEY] = VerifiedTurnstile()
        request_log.debug("turnstile_verified")
