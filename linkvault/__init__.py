"""Core link store for LinkVault."""

from .shortcode import ShortCodeGenerator
from .rate_limit import RateLimiter
from .store import LinkStore

__all__ = ["ShortCodeGenerator", "RateLimiter", "LinkStore"]
