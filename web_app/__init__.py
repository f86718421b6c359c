"""FastAPI web layer for LinkVault."""

from .app_factory import create_app

__all__ = ["create_app"]
