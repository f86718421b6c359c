"""Middleware for the LinkVault web app."""

from .headers import ClientIdentityMiddleware
from .logging import LoggingMiddleware

__all__ = ["ClientIdentityMiddleware", "LoggingMiddleware"]
