"""In-memory link store: the single source of truth for short links."""

import asyncio
import logging
from dataclasses import replace
from datetime import datetime, timedelta
from typing import Callable, Dict, List, Optional, Union

from .common.validators import is_valid_url, is_valid_pin
from .errors import (
    IncorrectPinError,
    LinkExpiredError,
    LinkNotFoundError,
    PersistenceError,
    PinRequiredError,
    ValidationError,
)
from .shortcode import ShortCodeGenerator
from .storage.base import LinkBackendBase
from .storage.models import LinkDescription, LinkRecord, utc_now
from .storage.writer import PersistenceWriter


DEFAULT_LINK_TTL = timedelta(days=30)


class LinkStore:
    """Map short codes to link records.

    All reads and writes of the mapping happen under one ``asyncio.Lock``.
    Expiry is enforced lazily: an expired record is removed the first time
    any operation touches it. Every mutation asks the persistence writer for
    a (debounced) flush.
    """

    def __init__(
        self,
        short_code_generator: Optional[ShortCodeGenerator] = None,
        writer: Optional[PersistenceWriter] = None,
        backend: Optional[LinkBackendBase] = None,
        link_ttl: timedelta = DEFAULT_LINK_TTL,
        clock: Callable[[], datetime] = utc_now,
        logger: Optional[logging.Logger] = None,
    ):
        """Initialize link store.

        Args:
            short_code_generator: Optional short code generator
            writer: Optional persistence writer notified on every mutation
            backend: Optional backend the store is hydrated from by ``load``
            link_ttl: Lifetime of a link from its creation
            clock: Returns the current aware UTC datetime
            logger: Optional logger
        """
        self.generator = short_code_generator or ShortCodeGenerator()
        self.writer = writer
        self.backend = backend
        self.link_ttl = link_ttl
        self.clock = clock
        self.logger = logger or logging.getLogger(__name__)
        self._links: Dict[str, LinkRecord] = {}
        self._lock = asyncio.Lock()

    @classmethod
    def with_backend(
        cls,
        backend: LinkBackendBase,
        flush_delay_seconds: float = 0.3,
        **kwargs,
    ) -> "LinkStore":
        """Build a store persisted to ``backend`` through a debounced writer."""
        store = cls(backend=backend, **kwargs)
        store.writer = PersistenceWriter(
            backend=backend,
            snapshot=store.snapshot,
            delay_seconds=flush_delay_seconds,
            logger=kwargs.get("logger"),
        )
        return store

    async def load(self) -> int:
        """Hydrate the store from the backend.

        A missing or unreadable file leaves the store empty; the problem is
        logged, never raised.

        Returns:
            Number of links loaded
        """
        if self.backend is None:
            return 0

        try:
            records = await asyncio.to_thread(self.backend.load)
        except PersistenceError as e:
            self.logger.error(f"Could not load links, starting empty: {e}")
            records = []

        async with self._lock:
            self._links = {record.id: record for record in records}

        if records:
            self.logger.info(f"Loaded {len(records)} links")
        else:
            self.logger.info("No existing links found, starting fresh")
        return len(records)

    async def create(
        self,
        long_url: Optional[str],
        pin: Optional[Union[str, int]] = None,
    ) -> LinkRecord:
        """Create a new link.

        Args:
            long_url: Absolute http(s) URL to shorten
            pin: Optional 4-digit PIN protecting the link

        Returns:
            Copy of the stored record

        Raises:
            ValidationError: If the URL or PIN is malformed
        """
        is_valid, error = is_valid_url(long_url)
        if not is_valid:
            raise ValidationError(error)

        pin = self._normalize_pin(pin)

        async with self._lock:
            short_code = self._generate_unique_short_code()
            created = self.clock()
            record = LinkRecord(
                id=short_code,
                long_url=long_url,
                pin=pin,
                clicked=0,
                created=created,
                expires=created + self.link_ttl,
            )
            self._links[short_code] = record
            self._schedule_flush()

        self.logger.info(f"Created link {short_code} (pin={'yes' if pin else 'no'})")
        return replace(record)

    async def get(self, short_code: str) -> LinkRecord:
        """Return a copy of the live record for ``short_code``.

        Raises:
            LinkNotFoundError: If there is no such link
            LinkExpiredError: If the link has expired (it is removed)
        """
        async with self._lock:
            return replace(self._get_live(short_code))

    async def describe(self, short_code: str) -> LinkDescription:
        """Tell a caller whether to prompt for a PIN.

        The long URL is only included for unprotected links.

        Raises:
            LinkNotFoundError: If there is no such link
            LinkExpiredError: If the link has expired (it is removed)
        """
        async with self._lock:
            record = self._get_live(short_code)
            return LinkDescription(
                id=record.id,
                requires_pin=record.requires_pin,
                long_url=None if record.requires_pin else record.long_url,
            )

    async def verify(self, short_code: str, candidate_pin: Optional[Union[str, int]]) -> str:
        """Check a PIN and count the click.

        Args:
            short_code: The short code
            candidate_pin: PIN supplied by the client

        Returns:
            The long URL

        Raises:
            LinkNotFoundError: If there is no such link
            LinkExpiredError: If the link has expired (it is removed)
            PinRequiredError: If no PIN was supplied
            IncorrectPinError: If the PIN does not match
        """
        async with self._lock:
            record = self._get_live(short_code)

            if not candidate_pin:
                raise PinRequiredError()

            # Plain string comparison; unprotected links accept any PIN
            if record.pin is not None and str(candidate_pin) != record.pin:
                self.logger.info(f"Incorrect PIN for {short_code}")
                raise IncorrectPinError()

            record.clicked += 1
            self._schedule_flush()
            return record.long_url

    async def snapshot(self) -> List[LinkRecord]:
        """Consistent copy of every record, for persistence."""
        async with self._lock:
            return [replace(record) for record in self._links.values()]

    async def count(self) -> int:
        async with self._lock:
            return len(self._links)

    def _get_live(self, short_code: str) -> LinkRecord:
        """Look up a record, removing it if expired. Caller must hold self._lock."""
        record = self._links.get(short_code)
        if record is None:
            raise LinkNotFoundError(short_code)

        if record.is_expired(self.clock()):
            del self._links[short_code]
            self._schedule_flush()
            self.logger.info(f"Link {short_code} expired and was removed")
            raise LinkExpiredError(short_code)

        return record

    def _generate_unique_short_code(self) -> str:
        """Generate codes until one is unused. Caller must hold self._lock."""
        attempts = 1
        code = self.generator.generate()
        while code in self._links:
            self.logger.debug(f"Short code collision on {code} (attempt {attempts})")
            attempts += 1
            code = self.generator.generate()
        return code

    @staticmethod
    def _normalize_pin(pin: Optional[Union[str, int]]) -> Optional[str]:
        if pin is None or pin == "":
            return None

        pin = str(pin)
        is_valid, error = is_valid_pin(pin)
        if not is_valid:
            raise ValidationError(error)
        return pin

    def _schedule_flush(self) -> None:
        if self.writer is not None:
            self.writer.schedule_flush()
