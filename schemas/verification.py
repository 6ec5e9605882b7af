"""
Per-request verification marker.

VerifiedTurnstile is stored in the ASGI scope's ``state`` mapping under
VERIFIED_STATE_KEY by the gate, and read back by the extractor in
dependencies.py. It carries no data: its presence is the fact.
"""

from __future__ import annotations

from dataclasses import dataclass

VERIFIED_STATE_KEY = "turnstile_verified"


@dataclass(frozen=True)
class VerifiedTurnstile:
    """Proof that the gate verified the current request."""
