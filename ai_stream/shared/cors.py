"""
Cross-origin helpers for the stream endpoint.
"""

from typing import Dict, Optional, Sequence, Tuple

ALLOW_METHODS = "POST, OPTIONS"
ALLOW_HEADERS = "Content-Type"
PREFLIGHT_MAX_AGE = 86400


def parse_allow_origins(raw: Optional[str]) -> Tuple[str, ...]:
    """Split a comma-separated ALLOW_ORIGINS value, dropping blanks."""
    if not raw:
        return ()
    return tuple(origin.strip() for origin in raw.split(",") if origin.strip())


def resolve_allow_origin(origin: Optional[str], allow_origins: Sequence[str]) -> str:
    """
    Compute the Access-Control-Allow-Origin value for a request.

    No Origin header gives "*". An empty allow-list reflects any origin
    (development mode). Otherwise the origin is echoed only when listed,
    else the literal "null".
    """
    if not origin:
        return "*"
    if not allow_origins:
        return origin
    return origin if origin in allow_origins else "null"


def preflight_headers(allow_origin: str) -> Dict[str, str]:
    return {
        "Access-Control-Allow-Origin": allow_origin,
        "Access-Control-Allow-Methods": ALLOW_METHODS,
        "Access-Control-Allow-Headers": ALLOW_HEADERS,
        "Access-Control-Max-Age": str(PREFLIGHT_MAX_AGE),
    }
