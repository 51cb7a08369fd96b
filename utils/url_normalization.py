"""
URL normalization for guest blog site listings.

Rules:
- No scheme given: default to https://
- http:// or https:// given explicitly: preserved
- Hostname must be present and contain at least one dot

Examples:
    "example.com"          -> "https://example.com/"
    "http://example.com"   -> "http://example.com/"
    "www.Example.com/path" -> "https://www.example.com/path"
"""

import re
from typing import Optional
from urllib.parse import urlsplit, urlunsplit

from exceptions import InvalidURLError

_SCHEME_PATTERN = re.compile(r"^https?://", re.IGNORECASE)
_DEFAULT_PORTS = {"http": 80, "https": 443}


def normalize_url(value: Optional[str]) -> str:
    """
    Normalize a raw URL string into an absolute http(s) URL.

    Args:
        value: URL as typed by a publisher or found in an upload

    Returns:
        Canonical URL string (lowercase scheme and host, "/" for an empty path)

    Raises:
        InvalidURLError: If the input is empty or has no dotted hostname
    """
    if not isinstance(value, str):
        raise InvalidURLError(value, "Invalid URL input")

    trimmed = value.strip()
    if not trimmed:
        raise InvalidURLError(value, "URL cannot be empty")

    candidate = trimmed if _SCHEME_PATTERN.match(trimmed) else f"https://{trimmed}"

    try:
        parts = urlsplit(candidate)
        hostname = parts.hostname
        port = parts.port
    except ValueError as e:
        raise InvalidURLError(value, str(e)) from e

    if not hostname or any(ch.isspace() for ch in hostname):
        raise InvalidURLError(value, "Invalid hostname")

    if "." not in hostname:
        raise InvalidURLError(value, "Invalid domain format")

    scheme = parts.scheme.lower()
    netloc = hostname
    if port is not None and port != _DEFAULT_PORTS.get(scheme):
        netloc = f"{hostname}:{port}"

    userinfo = parts.netloc.rpartition("@")[0]
    if userinfo:
        netloc = f"{userinfo}@{netloc}"

    return urlunsplit((scheme, netloc, parts.path or "/", parts.query, parts.fragment))
