import asyncio

import pytest

from resomate.sync.records import CacheRecord, EntityKind
from resomate.sync.store import LocalStore, LocalStoreError


def _store(tmp_path) -> LocalStore:
    return LocalStore(str(tmp_path / "offline" / "cache.db"))


def test_put_and_get_roundtrip_creates_directory(tmp_path) -> None:
    store = _store(tmp_path)
    record = CacheRecord(id="r1", payload={"title": "Água", "country": "Brazil"}, last_modified=5.0)

    async def scenario():
        await store.put(EntityKind.RESOLUTIONS, record)
        return await store.get(EntityKind.RESOLUTIONS, "r1")

    loaded = asyncio.run(scenario())
    assert loaded == record
    assert (tmp_path / "offline" / "cache.db").exists()


def test_kinds_are_isolated_and_missing_ids_return_none(tmp_path) -> None:
    store = _store(tmp_path)

    async def scenario():
        await store.put(EntityKind.NOTES, CacheRecord(id="same", payload={"content": "note"}, last_modified=1.0))
        await store.put(EntityKind.SPEECHES, CacheRecord(id="same", payload={"content": "speech"}, last_modified=1.0))
        return (
            await store.get(EntityKind.NOTES, "same"),
            await store.get(EntityKind.SPEECHES, "same"),
            await store.get(EntityKind.TEMPLATES, "same"),
        )

    note, speech, template = asyncio.run(scenario())
    assert note.payload == {"content": "note"}
    assert speech.payload == {"content": "speech"}
    assert template is None


def test_list_records_is_newest_first(tmp_path) -> None:
    store = _store(tmp_path)

    async def scenario():
        for record_id, modified in [("old", 1.0), ("new", 3.0), ("mid", 2.0)]:
            await store.put(EntityKind.TEMPLATES, CacheRecord(id=record_id, payload={}, last_modified=modified))
        return await store.list_records(EntityKind.TEMPLATES)

    assert [record.id for record in asyncio.run(scenario())] == ["new", "mid", "old"]


def test_mark_synced_is_conditional_on_version(tmp_path) -> None:
    store = _store(tmp_path)

    async def scenario():
        await store.put(EntityKind.NOTES, CacheRecord(id="n", payload={}, last_modified=2.0))
        stale = await store.mark_synced(EntityKind.NOTES, "n", last_modified=1.0)
        current = await store.mark_synced(EntityKind.NOTES, "n", last_modified=2.0, remote_id="remote-n")
        return stale, current, await store.get(EntityKind.NOTES, "n"), await store.list_unsynced(EntityKind.NOTES)

    stale, current, record, unsynced = asyncio.run(scenario())
    assert stale is False
    assert current is True
    assert record.synced is True
    assert record.remote_id == "remote-n"
    assert unsynced == []


def test_overwrite_keeps_known_remote_id(tmp_path) -> None:
    store = _store(tmp_path)

    async def scenario():
        await store.put(EntityKind.NOTES, CacheRecord(id="n", payload={"v": 1}, last_modified=1.0, synced=True, remote_id="x"))
        await store.put(EntityKind.NOTES, CacheRecord(id="n", payload={"v": 2}, last_modified=2.0))
        return await store.get(EntityKind.NOTES, "n")

    record = asyncio.run(scenario())
    assert record.payload == {"v": 2}
    assert record.synced is False
    assert record.remote_id == "x"


def test_delete_and_clear_all(tmp_path) -> None:
    store = _store(tmp_path)

    async def scenario():
        await store.put(EntityKind.NOTES, CacheRecord(id="a", payload={}, last_modified=1.0))
        await store.put(EntityKind.SPEECHES, CacheRecord(id="b", payload={}, last_modified=1.0))
        deleted = await store.delete(EntityKind.NOTES, "a")
        missing = await store.delete(EntityKind.NOTES, "a")
        await store.clear_all()
        return deleted, missing, await store.list_records(EntityKind.SPEECHES)

    deleted, missing, speeches = asyncio.run(scenario())
    assert deleted is True
    assert missing is False
    assert speeches == []


def test_unusable_path_is_fatal(tmp_path) -> None:
    store = LocalStore(str(tmp_path))

    with pytest.raises(LocalStoreError):
        asyncio.run(store.put(EntityKind.NOTES, CacheRecord(id="a", payload={}, last_modified=1.0)))
