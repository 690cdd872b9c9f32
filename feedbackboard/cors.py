from typing import Dict, Iterable
from urllib.parse import urlsplit

ALLOW_METHODS = "POST, OPTIONS"
ALLOW_HEADERS = "Content-Type, Authorization"


def origin_allowed(origin: str, patterns: Iterable[str]) -> bool:
    """
    Match an Origin header against exact origins ("https://acme.com") or
    wildcard hosts ("*.acme.com", "https://*.acme.com"). A wildcard matches
    subdomains only, never the bare domain.
    """
    if not origin:
        return False
    parts = urlsplit(origin)
    host = (parts.hostname or "").lower()
    if not host:
        return False
    for raw in patterns:
        pattern = (raw or "").strip().lower().rstrip("/")
        if not pattern:
            continue
        if "*." not in pattern:
            if origin.lower().rstrip("/") == pattern:
                return True
            continue
        scheme = None
        if "://" in pattern:
            scheme, pattern = pattern.split("://", 1)
        if scheme and scheme != parts.scheme:
            continue
        suffix = pattern[1:]  # ".acme.com"
        if host.endswith(suffix) and len(host) > len(suffix):
            return True
    return False


def cors_headers(origin: str, config) -> Dict[str, str]:
    """Headers for the public submission endpoint (preflight and actual)."""
    if config.get("CORS_ALLOW_ALL"):
        return {
            "Access-Control-Allow-Origin": "*",
            "Access-Control-Allow-Methods": ALLOW_METHODS,
            "Access-Control-Allow-Headers": ALLOW_HEADERS,
        }
    headers = {
        "Access-Control-Allow-Methods": ALLOW_METHODS,
        "Access-Control-Allow-Headers": ALLOW_HEADERS,
        "Vary": "Origin",
    }
    if origin_allowed(origin, config.get("CORS_ALLOWED_ORIGINS") or []):
        headers["Access-Control-Allow-Origin"] = origin
        headers["Access-Control-Allow-Credentials"] = "true"
    return headers
