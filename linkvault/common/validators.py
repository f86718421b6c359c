"""Validation utilities for link creation."""

import re
from urllib.parse import urlparse
from typing import Tuple


MAX_URL_LENGTH = 2048

PIN_PATTERN = re.compile(r"[0-9]{4}")

# Schemes that never lead to a page and are refused outright
BLOCKED_SCHEMES = frozenset({"javascript", "data", "vbscript"})

# Schemes whose URLs must name a host
HOST_SCHEMES = frozenset({"http", "https", "ftp", "ws", "wss"})

# Characters that can never appear in a host name
INVALID_HOST_CHARS = re.compile(r"[\s\x00-\x1f\x7f#%/<>?@\\^|\[\]]")


def is_valid_url(url: str) -> Tuple[bool, str]:
    """Validate a long URL.

    Any absolute URL with a scheme is accepted, except the blocked script
    and data schemes. Hosts, where present, must be well formed.

    Args:
        url: The URL to validate

    Returns:
        Tuple of (is_valid, error_message)
    """
    if not url or not isinstance(url, str):
        return False, "long_url is required."

    if len(url) > MAX_URL_LENGTH:
        return False, "long_url must be a valid URL."

    try:
        result = urlparse(url)
        hostname = result.hostname
        # Raises ValueError on a malformed port
        result.port
    except ValueError:
        return False, "long_url must be a valid URL."

    scheme = result.scheme.lower()
    if not scheme or scheme in BLOCKED_SCHEMES:
        return False, "long_url must be a valid URL."

    if scheme in HOST_SCHEMES and not hostname:
        return False, "long_url must be a valid URL."

    if result.netloc:
        host = result.netloc.rpartition("@")[2]
        if not host.startswith("["):
            host = host.rpartition(":")[0] if ":" in host else host
            if not host or INVALID_HOST_CHARS.search(host):
                return False, "long_url must be a valid URL."

    return True, ""


def is_valid_pin(pin: str) -> Tuple[bool, str]:
    """Validate a link PIN (exactly four ASCII digits).

    Args:
        pin: The PIN to validate

    Returns:
        Tuple of (is_valid, error_message)
    """
    if not isinstance(pin, str) or not PIN_PATTERN.fullmatch(pin):
        return False, "PIN must be exactly 4 digits."

    return True, ""
