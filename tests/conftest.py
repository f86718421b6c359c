"""Pytest configuration and fixtures."""

import pytest
from datetime import datetime, timedelta, timezone
from typing import AsyncGenerator, List

from httpx import ASGITransport, AsyncClient

from config import Config
from linkvault.errors import PersistenceError
from linkvault.rate_limit import RateLimiter
from linkvault.shortcode import ShortCodeGenerator
from linkvault.store import LinkStore
from linkvault.storage.base import LinkBackendBase
from linkvault.storage.models import LinkRecord
from linkvault.common.logging_config import setup_logging
from web_app import create_app


class FakeClock:
    """Controllable replacement for ``utc_now``."""

    def __init__(self, start: datetime = datetime(2025, 1, 1, 12, 0, tzinfo=timezone.utc)):
        self.now = start

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> None:
        self.now += timedelta(**kwargs)


class FakeMonotonic:
    """Controllable replacement for ``time.monotonic``."""

    def __init__(self, start: float = 1000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class RecordingBackend(LinkBackendBase):
    """Backend that keeps every saved snapshot in memory."""

    def __init__(self, records: List[LinkRecord] = None, fail: bool = False):
        self.records = list(records or [])
        self.fail = fail
        self.saves: List[List[dict]] = []

    def load(self) -> List[LinkRecord]:
        return list(self.records)

    def save(self, records: List[LinkRecord]) -> None:
        if self.fail:
            raise PersistenceError("disk full")
        self.saves.append([record.to_dict() for record in records])


class SequenceGenerator(ShortCodeGenerator):
    """Generator that hands out a fixed sequence of codes."""

    def __init__(self, codes: List[str]):
        super().__init__(default_length=6)
        self._codes = iter(codes)

    def generate(self, length=None) -> str:
        return next(self._codes)


@pytest.fixture
def logger():
    """Create test logger."""
    return setup_logging(level="DEBUG")


@pytest.fixture
def short_code_generator():
    """Create short code generator."""
    return ShortCodeGenerator(default_length=6)


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def backend():
    return RecordingBackend()


@pytest.fixture
async def store(backend, short_code_generator, clock, logger) -> AsyncGenerator[LinkStore, None]:
    """Create a store persisted to a recording backend with a short debounce."""
    store = LinkStore.with_backend(
        backend,
        flush_delay_seconds=0.05,
        short_code_generator=short_code_generator,
        clock=clock,
        logger=logger,
    )

    yield store

    await store.writer.close()


@pytest.fixture
def rate_limiter():
    return RateLimiter(limit=10, window_seconds=60)


@pytest.fixture
def config():
    return Config(base_url="http://testserver")


@pytest.fixture
def app(store, rate_limiter, config):
    """Create test FastAPI app."""
    return create_app(
        store_instance=store,
        rate_limiter_instance=rate_limiter,
        config=config,
    )


@pytest.fixture
async def client(app):
    """Create test client."""
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://testserver") as ac:
        yield ac


@pytest.fixture
def sample_urls():
    """Sample URLs for testing."""
    return [
        "https://example.com/test",
        "https://github.com/user/repo",
        "https://stackoverflow.com/questions/123456",
    ]
