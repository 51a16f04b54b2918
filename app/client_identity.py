"""Derive the rate-limit identifier for a request from proxy headers."""
import logging
from typing import Mapping

logger = logging.getLogger(__name__)

UNKNOWN_CLIENT = "unknown"


def resolve_client_identifier(headers: Mapping[str, str] | None) -> str:
    """Return the client address to rate limit on.

    Order: first X-Forwarded-For entry (the original client in a proxy
    chain), then X-Real-IP verbatim, then ``"unknown"``. Header contents are
    not validated and can be spoofed when the service is not behind a proxy
    that overwrites them. Every client without either header shares the
    ``"unknown"`` bucket.
    """
    try:
        if not headers:
            return UNKNOWN_CLIENT
        forwarded = _get(headers, "X-Forwarded-For")
        if forwarded:
            first = forwarded.split(",")[0].strip()
            if first:
                return first
        real_ip = _get(headers, "X-Real-IP")
        if real_ip:
            return real_ip
    except Exception:
        logger.warning("Could not read client address headers", exc_info=True)
    return UNKNOWN_CLIENT


def _get(headers: Mapping[str, str], name: str) -> str | None:
    # starlette Headers are case-insensitive; plain dicts are not
    value = headers.get(name)
    if value is None:
        value = headers.get(name.lower())
    return value
