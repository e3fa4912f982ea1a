"""
View tracking helpers.

Extracts the viewer metadata that is filled in on the server side rather than
trusted from the client.
"""

from __future__ import annotations

import ipaddress

from fastapi import Request


def _valid_ip(candidate: str) -> str | None:
    try:
        return str(ipaddress.ip_address(candidate.strip()))
    except ValueError:
        return None


def get_client_ip(request: Request) -> str | None:
    """
    Extract client IP address from request, handling proxies.

    Checks X-Forwarded-For header first (for reverse proxy setups),
    then X-Real-IP, then falls back to direct client IP.

    Returns:
        IP address string, or None when nothing parseable is available
        (the ``post_views.viewer_ip`` column is an inet on PostgreSQL)
    """
    # X-Forwarded-For can contain multiple IPs; take the first one
    forwarded_for = request.headers.get("X-Forwarded-For")
    if forwarded_for:
        ip = _valid_ip(forwarded_for.split(",")[0])
        if ip:
            return ip

    real_ip = request.headers.get("X-Real-IP")
    if real_ip:
        ip = _valid_ip(real_ip)
        if ip:
            return ip

    if request.client:
        return _valid_ip(request.client.host)

    return None
