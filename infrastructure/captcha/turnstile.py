"""Cloudflare Turnstile implementation of TokenVerifier.

Speaks the siteverify protocol: JSON POST of {secret, response} to the
configured verify URL, JSON answer of {success, error-codes}.

Outcome classification:
- well-formed answer → its ``success`` flag, error codes are log-only
- network failure, timeout, non-2xx status → TransportError
- body that is not JSON or not a siteverify result → ProtocolError

No retries and no caching; the timeout is whatever HttpClient was built with.
"""

from __future__ import annotations

from typing import Optional

import httpx
from pydantic import ValidationError as PydanticValidationError

from config import TurnstileConfig
from errors import ProtocolError, TransportError
from infrastructure.http_client import HttpClient
from schemas.dto.siteverify import SiteverifyRequest, SiteverifyResponse
from shared.logging import get_logger, hash_ip

log = get_logger(__name__)


class TurnstileVerifier:
    def __init__(self, http_client: HttpClient) -> None:
        self._http = http_client

    async def verify(
        self, token: str, config: TurnstileConfig, remote_ip: Optional[str] = None
    ) -> bool:
        request = SiteverifyRequest(
            secret=config.secret,
            response=token,
            remoteip=(remote_ip or None) if config.forward_remote_ip else None,
        )

        try:
            response = await self._http.post_json(
                config.verify_url, request.to_payload()
            )
            response.raise_for_status()
        except httpx.HTTPStatusError as e:
            raise TransportError(
                f"verification service returned HTTP {e.response.status_code}",
                cause=e,
            ) from e
        except httpx.HTTPError as e:
            raise TransportError(
                f"verification request failed: {type(e).__name__}", cause=e
            ) from e

        try:
            result = SiteverifyResponse.model_validate_json(response.content)
        except PydanticValidationError as e:
            raise ProtocolError(
                "verification service returned an unreadable body", cause=e
            ) from e

        if not result.success:
            log.warning(
                "turnstile_verification_failed",
                error_codes=result.error_codes or [],
                ip_hash=hash_ip(remote_ip),
            )
        return result.success
