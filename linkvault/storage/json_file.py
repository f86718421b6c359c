"""JSON file backend for the link store."""

import json
import logging
import os
import tempfile
from typing import List, Optional

from .base import LinkBackendBase
from .models import LinkRecord
from ..errors import PersistenceError


class JSONFileBackend(LinkBackendBase):
    """Store all link records as one JSON array in a single file.

    Writes go to a temporary file next to the target and are moved into
    place with ``os.replace``, so readers only ever see a complete file.
    """

    def __init__(self, path: str, logger: Optional[logging.Logger] = None):
        """Initialize backend.

        Args:
            path: Path of the JSON file
            logger: Optional logger instance
        """
        self.path = path
        self.logger = logger or logging.getLogger(__name__)

    def load(self) -> List[LinkRecord]:
        try:
            with open(self.path, "r", encoding="utf-8") as f:
                raw = json.load(f)
        except FileNotFoundError:
            return []
        except (OSError, ValueError) as e:
            raise PersistenceError(f"Failed to read {self.path}: {e}") from e

        if not isinstance(raw, list):
            raise PersistenceError(f"Failed to read {self.path}: expected a JSON array")

        try:
            return [LinkRecord.from_dict(item) for item in raw]
        except (KeyError, TypeError, ValueError, AttributeError) as e:
            raise PersistenceError(f"Failed to read {self.path}: malformed record ({e})") from e

    def save(self, records: List[LinkRecord]) -> None:
        payload = json.dumps([record.to_dict() for record in records], indent=2)
        directory = os.path.dirname(os.path.abspath(self.path))

        tmp_path = None
        try:
            fd, tmp_path = tempfile.mkstemp(prefix=".links-", suffix=".tmp", dir=directory)
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                f.write(payload)
            os.replace(tmp_path, self.path)
        except OSError as e:
            if tmp_path and os.path.exists(tmp_path):
                os.unlink(tmp_path)
            raise PersistenceError(f"Failed to save {self.path}: {e}") from e

        self.logger.debug(f"Saved {len(records)} links to {self.path}")
