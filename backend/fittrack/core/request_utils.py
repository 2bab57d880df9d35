"""Request utility functions for handling common request operations."""

import ipaddress
import logging
from collections.abc import Collection

from fastapi import Request

logger = logging.getLogger(__name__)


def _is_valid_ip(ip_str: str) -> bool:
    """Check if a string is a valid IP address."""
    try:
        ipaddress.ip_address(ip_str)
        return True
    except ValueError:
        return False


def get_client_ip(request: Request, trusted_proxies: Collection[str] = ()) -> str:
    """Get the client IP address used to key rate-limit counters.

    Priority order:
    1. X-Forwarded-For (first hop), only when the peer is a trusted proxy
    2. X-Real-IP, only when the peer is a trusted proxy
    3. Direct client connection

    Forwarded headers from any other peer are ignored since clients can
    set them freely to dodge per-IP limits.

    Returns:
        Client IP address, or "unknown" when the ASGI server gives no peer.
    """
    direct_ip = request.client.host if request.client else None

    if direct_ip and direct_ip in trusted_proxies:
        forwarded = request.headers.get("X-Forwarded-For")
        if forwarded:
            ip = forwarded.split(",")[0].strip()
            if _is_valid_ip(ip):
                return ip
            logger.warning(f"Invalid IP in X-Forwarded-For header: {ip}")

        real_ip = request.headers.get("X-Real-IP")
        if real_ip:
            ip = real_ip.strip()
            if _is_valid_ip(ip):
                return ip
            logger.warning(f"Invalid X-Real-IP: {real_ip}")
    elif request.headers.get("X-Forwarded-For"):
        logger.debug(f"Ignoring X-Forwarded-For from untrusted source: {direct_ip}")

    if direct_ip:
        return direct_ip

    return "unknown"
