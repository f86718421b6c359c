"""Tests for the persistence writer and the JSON file backend."""

import asyncio
import json
import logging
import os
import time

import pytest

from linkvault.errors import LinkExpiredError, PersistenceError
from linkvault.store import LinkStore
from linkvault.storage.json_file import JSONFileBackend
from linkvault.storage.models import LinkRecord, parse_timestamp
from linkvault.storage.writer import PersistenceWriter
from conftest import RecordingBackend


DEBOUNCE = 0.05


async def wait_for_debounce():
    await asyncio.sleep(DEBOUNCE * 4)


@pytest.fixture
def links_file(tmp_path):
    return str(tmp_path / "links.json")


class TestPersistenceWriter:
    """Test debounced flushing."""

    @pytest.mark.asyncio
    async def test_burst_coalesces_into_one_write(self, store, backend):
        """Five creates inside the debounce window produce one write with all five."""
        created = [await store.create(f"https://example.com/{i}") for i in range(5)]

        assert backend.saves == []
        await wait_for_debounce()

        assert len(backend.saves) == 1
        assert sorted(item["id"] for item in backend.saves[0]) == sorted(r.id for r in created)
        assert store.writer.flush_count == 1

    @pytest.mark.asyncio
    async def test_each_call_restarts_the_delay(self, backend):
        snapshots = []

        async def snapshot():
            snapshots.append(True)
            return []

        writer = PersistenceWriter(backend, snapshot, delay_seconds=0.2)

        for _ in range(4):
            writer.schedule_flush()
            await asyncio.sleep(0.05)

        # Never quiet for a full delay yet
        assert backend.saves == []
        assert writer.pending

        await asyncio.sleep(0.4)
        assert len(backend.saves) == 1
        assert len(snapshots) == 1
        assert not writer.pending

    @pytest.mark.asyncio
    async def test_separate_bursts_write_separately(self, store, backend):
        await store.create("https://example.com/1")
        await wait_for_debounce()
        await store.create("https://example.com/2")
        await wait_for_debounce()

        assert [len(save) for save in backend.saves] == [1, 2]

    @pytest.mark.asyncio
    async def test_flushes_never_overlap(self):
        active = 0
        peak = 0

        class SlowBackend(RecordingBackend):
            def save(self, records):
                nonlocal active, peak
                active += 1
                peak = max(peak, active)
                time.sleep(0.02)
                active -= 1
                super().save(records)

        async def snapshot():
            return []

        writer = PersistenceWriter(SlowBackend(), snapshot, delay_seconds=DEBOUNCE)

        results = await asyncio.gather(*[writer.flush() for _ in range(5)])

        assert all(results)
        assert peak == 1
        assert writer.flush_count == 5

    @pytest.mark.asyncio
    async def test_write_failure_is_logged_and_kept_in_memory(self, clock, caplog):
        backend = RecordingBackend(fail=True)
        store = LinkStore.with_backend(backend, flush_delay_seconds=DEBOUNCE, clock=clock)

        with caplog.at_level(logging.ERROR):
            record = await store.create("https://example.com")
            await wait_for_debounce()

        assert "Failed to persist links" in caplog.text
        assert store.writer.flush_count == 0
        assert (await store.get(record.id)).long_url == "https://example.com"

    @pytest.mark.asyncio
    async def test_close_flushes_pending_changes(self, backend, clock):
        store = LinkStore.with_backend(backend, flush_delay_seconds=10, clock=clock)
        await store.create("https://example.com")

        await store.writer.close()

        assert len(backend.saves) == 1
        assert not store.writer.pending

    @pytest.mark.asyncio
    async def test_close_without_changes_does_not_write(self, backend, clock):
        store = LinkStore.with_backend(backend, flush_delay_seconds=DEBOUNCE, clock=clock)

        await store.writer.close()

        assert backend.saves == []

    @pytest.mark.asyncio
    async def test_expiry_removal_is_persisted(self, store, backend, clock):
        keep = await store.create("https://example.com/keep")
        clock.advance(days=10)
        await store.create("https://example.com/gone")
        await wait_for_debounce()

        clock.advance(days=21)  # first link is now 31 days old
        with pytest.raises(LinkExpiredError):
            await store.get(keep.id)
        await wait_for_debounce()

        assert [item["long_url"] for item in backend.saves[-1]] == ["https://example.com/gone"]


class TestJSONFileBackend:
    """Test the JSON file backend."""

    def test_load_missing_file(self, links_file):
        assert JSONFileBackend(links_file).load() == []

    def test_save_writes_json_array(self, links_file, clock):
        now = clock()
        record = LinkRecord(
            id="abc123",
            long_url="https://example.com",
            pin="1234",
            clicked=2,
            created=now,
            expires=now,
        )

        JSONFileBackend(links_file).save([record])

        with open(links_file, encoding="utf-8") as f:
            data = json.load(f)
        assert data == [{
            "id": "abc123",
            "long_url": "https://example.com",
            "pin": "1234",
            "clicked": 2,
            "created": "2025-01-01T12:00:00Z",
            "expires": "2025-01-01T12:00:00Z",
        }]

    def test_save_overwrites(self, links_file, clock):
        backend = JSONFileBackend(links_file)
        now = clock()
        first = LinkRecord(id="aaaaaa", long_url="https://a.example", created=now, expires=now)
        second = LinkRecord(id="bbbbbb", long_url="https://b.example", created=now, expires=now)

        backend.save([first, second])
        backend.save([second])

        assert [r.id for r in backend.load()] == ["bbbbbb"]
        # No temp files left behind
        assert os.listdir(os.path.dirname(links_file)) == ["links.json"]

    def test_load_millisecond_timestamps(self, links_file):
        with open(links_file, "w", encoding="utf-8") as f:
            json.dump([{
                "id": "Xy12Ab",
                "long_url": "https://example.com",
                "pin": None,
                "clicked": 0,
                "created": "2025-01-01T12:00:00.123Z",
                "expires": "2025-01-31T12:00:00.123Z",
            }], f)

        [record] = JSONFileBackend(links_file).load()

        assert record.id == "Xy12Ab"
        assert record.pin is None
        assert record.created == parse_timestamp("2025-01-01T12:00:00.123+00:00")
        assert record.expires.tzinfo is not None

    @pytest.mark.parametrize("content", ["not json", "{\"id\": \"abc\"}", "[{\"id\": \"abc\"}]"])
    def test_load_corrupt_file(self, links_file, content):
        with open(links_file, "w", encoding="utf-8") as f:
            f.write(content)

        with pytest.raises(PersistenceError):
            JSONFileBackend(links_file).load()

    def test_save_failure_raises_persistence_error(self, tmp_path):
        backend = JSONFileBackend(str(tmp_path / "missing-dir" / "links.json"))

        with pytest.raises(PersistenceError):
            backend.save([])


class TestHydration:
    """Test loading the store from disk."""

    @pytest.mark.asyncio
    async def test_round_trip(self, links_file, clock):
        """Saving and reloading reproduces the same live records."""
        backend = JSONFileBackend(links_file)
        original = LinkStore.with_backend(backend, flush_delay_seconds=DEBOUNCE, clock=clock)
        protected = await original.create("https://example.com/secret", pin="1234")
        await original.create("https://example.com/open")
        await original.verify(protected.id, "1234")
        await original.writer.close()

        reloaded = LinkStore.with_backend(backend, flush_delay_seconds=DEBOUNCE, clock=clock)
        assert await reloaded.load() == 2

        def by_id(records):
            return sorted((r.to_dict() for r in records), key=lambda d: d["id"])

        assert by_id(await reloaded.snapshot()) == by_id(await original.snapshot())
        assert await reloaded.verify(protected.id, "1234") == "https://example.com/secret"
        assert (await reloaded.get(protected.id)).clicked == 2

    @pytest.mark.asyncio
    async def test_expired_records_stay_expired_after_reload(self, links_file, clock):
        backend = JSONFileBackend(links_file)
        original = LinkStore.with_backend(backend, flush_delay_seconds=DEBOUNCE, clock=clock)
        record = await original.create("https://example.com")
        await original.writer.close()

        clock.advance(days=31)
        reloaded = LinkStore.with_backend(backend, flush_delay_seconds=DEBOUNCE, clock=clock)
        await reloaded.load()

        with pytest.raises(LinkExpiredError):
            await reloaded.get(record.id)
        await reloaded.writer.close()

    @pytest.mark.asyncio
    async def test_missing_file_starts_empty(self, links_file):
        store = LinkStore.with_backend(JSONFileBackend(links_file))

        assert await store.load() == 0
        assert await store.count() == 0

    @pytest.mark.asyncio
    async def test_corrupt_file_starts_empty(self, links_file, caplog):
        with open(links_file, "w", encoding="utf-8") as f:
            f.write("{{{ definitely not json")

        store = LinkStore.with_backend(JSONFileBackend(links_file))

        with caplog.at_level(logging.ERROR):
            assert await store.load() == 0

        assert await store.count() == 0
        assert "starting empty" in caplog.text
