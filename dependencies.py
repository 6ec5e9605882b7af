"""
FastAPI dependency providers.

All injectable dependencies are defined here as plain functions used with
FastAPI's Depends() system.
"""

from __future__ import annotations

from typing import Annotated

from fastapi import Depends, Request

from errors import NotVerifiedError
from schemas.verification import VERIFIED_STATE_KEY, VerifiedTurnstile


def get_verified_marker(request: Request) -> VerifiedTurnstile:
    """Return the marker the turnstile gate attached to this request.

    Fails closed with NotVerifiedError (401) when the marker is missing,
    e.g. because the route was mounted outside the gated middleware stack.
    """
    marker = request.scope.get("state", {}).get(VERIFIED_STATE_KEY)
    if not isinstance(marker, VerifiedTurnstile):
        raise NotVerifiedError("Request was not verified")
    return marker


VerifiedDep = Annotated[VerifiedTurnstile, Depends(get_verified_marker)]
