"""Request header helpers: public base URL and client identity."""

from typing import Dict, Mapping, Optional


def _lower_keys(headers: Mapping[str, str]) -> Dict[str, str]:
    return {k.lower(): v for k, v in headers.items()}


def extract_forwarded_headers(headers: Mapping[str, str]) -> Dict[str, Optional[str]]:
    """Extract X-Forwarded-* headers set by a reverse proxy.

    Args:
        headers: Request headers

    Returns:
        Dictionary with forwarded_proto, forwarded_host, forwarded_for
    """
    headers_lower = _lower_keys(headers)

    return {
        "forwarded_proto": headers_lower.get("x-forwarded-proto"),
        "forwarded_host": headers_lower.get("x-forwarded-host"),
        "forwarded_for": headers_lower.get("x-forwarded-for"),
    }


def build_base_url(
    headers: Mapping[str, str],
    fallback_base_url: str,
    request_scheme: Optional[str] = None,
    request_host: Optional[str] = None,
) -> str:
    """Work out the public base URL that short links are built on.

    Priority:
    1. X-Forwarded-Proto + X-Forwarded-Host
    2. Request scheme + Host header
    3. Configured base URL

    Returns:
        Base URL without trailing slash (e.g., https://example.com)
    """
    forwarded = extract_forwarded_headers(headers)

    if forwarded["forwarded_proto"] and forwarded["forwarded_host"]:
        return f"{forwarded['forwarded_proto']}://{forwarded['forwarded_host']}"

    if request_scheme and request_host:
        return f"{request_scheme}://{request_host}"

    return fallback_base_url.rstrip("/")


def resolve_client_id(
    headers: Mapping[str, str],
    peer_host: Optional[str],
    trust_forwarded_for: bool = False,
) -> str:
    """Identify the client a request is rate limited as.

    The first X-Forwarded-For hop is used only when the service sits behind
    a proxy that sets it (``trust_forwarded_for``); otherwise clients could
    pick their own identity.

    Args:
        headers: Request headers
        peer_host: Address of the socket peer, if known
        trust_forwarded_for: Whether to honour X-Forwarded-For

    Returns:
        Client identifier, "unknown" if nothing is available
    """
    if trust_forwarded_for:
        forwarded_for = extract_forwarded_headers(headers)["forwarded_for"]
        if forwarded_for:
            first_hop = forwarded_for.split(",")[0].strip()
            if first_hop:
                return first_hop

    return peer_host or "unknown"
