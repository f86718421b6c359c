"""Common utilities for LinkVault."""

from .validators import is_valid_url, is_valid_pin
from .headers import extract_forwarded_headers, build_base_url, resolve_client_id
from .url_builder import build_short_url
from .logging_config import setup_logging, get_logger

__all__ = [
    "is_valid_url",
    "is_valid_pin",
    "extract_forwarded_headers",
    "build_base_url",
    "resolve_client_id",
    "build_short_url",
    "setup_logging",
    "get_logger",
]
