"""
Example gated endpoint.

POST /api/protected: only reachable through the turnstile gate. The
VerifiedDep parameter re-asserts that inside the handler, so mounting this
router on an ungated app yields 401 instead of silently serving.
"""

from __future__ import annotations

from fastapi import APIRouter

from dependencies import VerifiedDep
from schemas.dto.responses import ErrorResponse, MessageResponse

router = APIRouter(tags=["protected"])


@router.post(
    "/protected",
    response_model=MessageResponse,
    responses={401: {"model": ErrorResponse}},
)
async def protected(verified: VerifiedDep) -> MessageResponse:
    return MessageResponse(success=True, message="Turnstile token verified.")
