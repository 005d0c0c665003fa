"""
Local Index Store Unit Tests
"""

import asyncio
import json
from datetime import datetime, timezone
from unittest.mock import AsyncMock

import pytest

from picbed.features.upload.schemas import IndexRecord
from picbed.infrastructure.storage.index_store import (
    FileKeyValueStore,
    LocalIndexStore,
    MemoryKeyValueStore,
)
from picbed.infrastructure.storage.telegram import TelegramStorageService

NAMESPACE = "telegram_upload_index"


def _record(key: str, day: int = 1) -> IndexRecord:
    return IndexRecord(
        key=key,
        url=f"https://example.com/{key}",
        file_id=f"id-{key}",
        file_path=f"photos/{key}",
        last_modified=datetime(2024, 3, day, tzinfo=timezone.utc),
        size=42,
    )


class TestLocalIndexStore:
    @pytest.mark.asyncio
    async def test_empty_store_reads_empty(self, index_store):
        assert await index_store.read_all() == []

    @pytest.mark.asyncio
    async def test_append_and_remove(self, index_store):
        await index_store.append(_record("a.png"))
        await index_store.append(_record("b.png"))

        removed = await index_store.remove_by_key("a.png")

        assert removed == 1
        assert [r.key for r in await index_store.read_all()] == ["b.png"]

    @pytest.mark.asyncio
    async def test_remove_missing_key_returns_zero(self, index_store):
        await index_store.append(_record("a.png"))

        assert await index_store.remove_by_key("nope.png") == 0
        assert len(await index_store.read_all()) == 1

    @pytest.mark.asyncio
    async def test_remove_drops_every_matching_entry(self, index_store):
        await index_store.append(_record("dup.png", 1))
        await index_store.append(_record("dup.png", 2))

        assert await index_store.remove_by_key("dup.png") == 2

    @pytest.mark.asyncio
    async def test_concurrent_appends_are_not_lost(self, index_store):
        await asyncio.gather(*(index_store.append(_record(f"{i}.png")) for i in range(20)))

        keys = {r.key for r in await index_store.read_all()}
        assert keys == {f"{i}.png" for i in range(20)}

    @pytest.mark.asyncio
    async def test_stored_layout_uses_camel_case(self):
        kv = MemoryKeyValueStore()
        store = LocalIndexStore(kv, NAMESPACE)

        await store.append(_record("a.png"))

        [entry] = json.loads(await kv.load(NAMESPACE))
        assert set(entry) == {"key", "url", "fileId", "filePath", "lastModified", "size"}
        assert entry["fileId"] == "id-a.png"

    @pytest.mark.asyncio
    @pytest.mark.parametrize("raw", ["{not json", '{"key": "a"}', "null"])
    async def test_corrupt_data_reads_empty(self, raw):
        store = LocalIndexStore(MemoryKeyValueStore({NAMESPACE: raw}), NAMESPACE)

        assert await store.read_all() == []

    @pytest.mark.asyncio
    async def test_malformed_entries_are_skipped(self):
        raw = json.dumps([
            {"key": "ok.png", "url": "u", "fileId": "f", "filePath": "p", "lastModified": "2024-03-01T00:00:00"},
            {"key": "broken.png"},
        ])
        store = LocalIndexStore(MemoryKeyValueStore({NAMESPACE: raw}), NAMESPACE)

        records = await store.read_all()

        assert [r.key for r in records] == ["ok.png"]
        assert records[0].last_modified.tzinfo == timezone.utc

    @pytest.mark.asyncio
    async def test_save_failure_is_logged_not_raised(self):
        kv = MemoryKeyValueStore()
        kv.save = AsyncMock(side_effect=OSError("disk full"))
        store = LocalIndexStore(kv, NAMESPACE)

        await store.append(_record("a.png"))

        kv.save.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_load_failure_reads_empty(self):
        kv = MemoryKeyValueStore()
        kv.load = AsyncMock(side_effect=OSError("permission denied"))

        assert await LocalIndexStore(kv, NAMESPACE).read_all() == []


class TestFileKeyValueStore:
    @pytest.mark.asyncio
    async def test_persists_across_instances(self, tmp_path):
        base = tmp_path / "index"
        await LocalIndexStore(FileKeyValueStore(str(base)), NAMESPACE).append(_record("a.png"))

        reopened = LocalIndexStore(FileKeyValueStore(str(base)), NAMESPACE)

        assert [r.key for r in await reopened.read_all()] == ["a.png"]
        assert (base / f"{NAMESPACE}.json").exists()
        assert not (base / f"{NAMESPACE}.json.tmp").exists()

    @pytest.mark.asyncio
    async def test_undecodable_file_reads_empty(self, tmp_path):
        (tmp_path / f"{NAMESPACE}.json").write_bytes(b"\xff\xfe[garbage")
        store = LocalIndexStore(FileKeyValueStore(str(tmp_path)), NAMESPACE)

        assert await store.read_all() == []

        await store.append(_record("a.png"))
        assert [r.key for r in await store.read_all()] == ["a.png"]

    @pytest.mark.asyncio
    async def test_undecodable_file_lists_empty_for_telegram(self, tmp_path, file_manager):
        (tmp_path / f"{NAMESPACE}.json").write_bytes(b"\xff\xfe[garbage")
        service = TelegramStorageService(
            file_manager,
            bot_token="1:abc",
            chat_id="-100",
            index_store=LocalIndexStore(FileKeyValueStore(str(tmp_path)), NAMESPACE),
        )

        assert await service.list_objects() == []
        await service.delete("a.png")

    @pytest.mark.asyncio
    async def test_missing_file_loads_none(self, tmp_path):
        assert await FileKeyValueStore(str(tmp_path)).load("absent") is None
