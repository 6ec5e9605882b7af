"""
Client IP resolution for the turnstile gate.

The resolved address is only used for two things: the optional ``remoteip``
field of a siteverify request, and the (hashed) ``ip_hash`` log field. It is
never used for an access decision, so trusting proxy headers is acceptable.
"""

from __future__ import annotations

from starlette.requests import HTTPConnection

# Checked in order; Cloudflare's own header first since Turnstile traffic
# normally arrives through Cloudflare.
PROXY_IP_HEADERS: tuple[str, ...] = (
    "CF-Connecting-IP",
    "True-Client-IP",
    "X-Forwarded-For",
    "X-Real-IP",
)


def get_client_ip(connection: HTTPConnection) -> str:
    """Return the client IP for ``connection``, or ``""`` if unknown.

    For multi-hop headers such as ``X-Forwarded-For`` the first entry wins.
    """
    for header in PROXY_IP_HEADERS:
        value = connection.headers.get(header)
        if value:
            first = value.split(",")[0].strip()
            if first:
                return first

    return connection.client.host if connection.client else ""
