"""
Shared validators for input sanitization.

Validators raise ValueError; services translate that into ValidationError
with the offending field attached.
"""

import re
from typing import Optional
from urllib.parse import urlparse

from shared.config.constants import Limits

HEX_COLOR_PATTERN = re.compile(r"^#([A-Fa-f0-9]{6}|[A-Fa-f0-9]{3})$")

# Internal hosts that should never appear in stored image or logo URLs
BLOCKED_HOSTS = [
    "localhost",
    "127.0.0.1",
    "0.0.0.0",
    "169.254.",
    "10.",
    "192.168.",
]

BLOCKED_SCHEMES = {"javascript", "data", "file", "ftp", "mailto", "tel"}


def validate_hex_color(color: str) -> str:
    """
    Validate a CSS hex color (#rgb or #rrggbb).

    Raises:
        ValueError: If the color is not in hex format
    """
    if not HEX_COLOR_PATTERN.match(color):
        raise ValueError(f"Invalid color format '{color}'. Use hex format (e.g., #9333ea)")
    return color


def validate_image_url(url: Optional[str]) -> Optional[str]:
    """
    Validate and sanitize an image/logo URL.

    Returns:
        The stripped URL, or None when empty

    Raises:
        ValueError: If the URL is invalid or points at an internal host
    """
    if url is None:
        return None

    url = url.strip()
    if not url:
        return None

    if len(url) > Limits.MAX_URL_LENGTH:
        raise ValueError(f"URL too long (max {Limits.MAX_URL_LENGTH} characters)")

    parsed = urlparse(url)

    scheme = parsed.scheme.lower()
    if scheme in BLOCKED_SCHEMES:
        raise ValueError(f"URL scheme not allowed: {scheme}")
    if scheme not in ("http", "https"):
        raise ValueError("Only HTTP/HTTPS URLs are allowed")

    host = parsed.netloc.lower()
    if not host:
        raise ValueError("URL has no host")

    for blocked in BLOCKED_HOSTS:
        if host.startswith(blocked):
            raise ValueError("Internal URLs are not allowed")

    return url


def validate_name(name: Optional[str], field: str = "name") -> str:
    """
    Strip a display name and check it is non-blank and not too long.

    Raises:
        ValueError: If the name is blank or exceeds the length limit
    """
    if name is None or not name.strip():
        raise ValueError(f"{field} is required")
    name = name.strip()
    if len(name) > Limits.MAX_NAME_LENGTH:
        raise ValueError(f"{field} is too long (max {Limits.MAX_NAME_LENGTH} characters)")
    return name
