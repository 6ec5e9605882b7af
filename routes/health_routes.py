"""
Health check endpoint.

GET /health: liveness for the gate process. Mounted outside the gated
sub-application, so it never requires a Turnstile token.
Rules:
- verification HTTP client closed → "unhealthy" (503), every gated request
  would answer 500.
"""

from __future__ import annotations

from fastapi import APIRouter, Request
from fastapi.responses import JSONResponse

from schemas.dto.responses import HealthResponse

router = APIRouter(tags=["health"])


@router.get("/health", response_model=HealthResponse)
async def health_check(request: Request) -> JSONResponse:
    checks: dict[str, str] = {}
    overall = "healthy"

    http_client = getattr(request.app.state, "http_client", None)
    if http_client is None:
        checks["verifier_client"] = "not_configured"
        overall = "unhealthy"
    elif http_client.is_closed:
        checks["verifier_client"] = "closed"
        overall = "unhealthy"
    else:
        checks["verifier_client"] = "ok"

    status_code = 503 if overall == "unhealthy" else 200
    return JSONResponse(
        status_code=status_code,
        content={"status": overall, "checks": checks},
    )
