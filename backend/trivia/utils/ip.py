from __future__ import annotations

from flask import Request


def get_client_ip(request: Request, trust_headers: bool = True) -> str | None:
    """Best guess at the peer address, for connection logs only."""
    if trust_headers:
        for header in ("CF-Connecting-IP", "X-Real-IP"):
            value = request.headers.get(header)
            if value:
                return value.strip()

        forwarded = [p.strip() for p in request.headers.get("X-Forwarded-For", "").split(",") if p.strip()]
        if forwarded:
            return forwarded[0]

    return request.remote_addr or None
