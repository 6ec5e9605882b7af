"""
Wire DTOs for the Turnstile siteverify protocol.

SiteverifyRequest  : JSON body POSTed to the verification service
SiteverifyResponse : JSON body the service answers with
"""

from __future__ import annotations

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, StrictBool


class SiteverifyRequest(BaseModel):
    """Outbound verification request."""

    model_config = ConfigDict(populate_by_name=True)

    secret: str
    response: str
    remoteip: Optional[str] = None

    def to_payload(self) -> dict:
        """Serialize for the wire; ``remoteip`` is only sent when known."""
        return self.model_dump(exclude_none=True)


class SiteverifyResponse(BaseModel):
    """Inbound verification result.

    ``error_codes`` is only meaningful when ``success`` is false, and the
    service may omit it even then. ``success`` must be a JSON boolean; a
    body like ``{"success": 1}`` is rejected rather than read as a pass.
    Extra fields such as ``challenge_ts`` or ``hostname`` are ignored.
    """

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    success: StrictBool
    error_codes: Optional[list[str]] = Field(default=None, alias="error-codes")
