"""Persistence layer for LinkVault."""

from .base import LinkBackendBase
from .json_file import JSONFileBackend
from .models import LinkRecord, LinkDescription
from .writer import PersistenceWriter

__all__ = [
    "LinkBackendBase",
    "JSONFileBackend",
    "LinkRecord",
    "LinkDescription",
    "PersistenceWriter",
]
