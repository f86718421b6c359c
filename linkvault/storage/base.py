"""Abstract base class for link store backends."""

from abc import ABC, abstractmethod
from typing import List

from .models import LinkRecord


class LinkBackendBase(ABC):
    """Durable storage for the full set of link records.

    Backends are read once at startup and rewritten wholesale on every flush.
    Both methods are blocking; the persistence writer calls ``save`` from a
    worker thread.
    """

    @abstractmethod
    def load(self) -> List[LinkRecord]:
        """Read every stored record.

        Returns:
            Stored records, or an empty list if nothing has been stored yet

        Raises:
            PersistenceError: If the stored data cannot be read or parsed
        """
        pass

    @abstractmethod
    def save(self, records: List[LinkRecord]) -> None:
        """Replace the stored data with ``records``.

        Args:
            records: Complete snapshot of the store

        Raises:
            PersistenceError: If the data cannot be written
        """
        pass
