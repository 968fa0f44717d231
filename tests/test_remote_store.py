import asyncio
import json

import httpx
import pytest

from resomate.config import Settings
from resomate.providers.remote.store import RemoteStoreClient, RemoteStoreError
from resomate.sync.connectivity import ConnectivityMonitor
from resomate.sync.reconciler import SyncReconciler
from resomate.sync.records import CacheRecord, EntityKind
from resomate.sync.store import LocalStore


def _settings(url: str = "https://store.test/api/") -> Settings:
    return Settings(REMOTE_STORE_URL=url, REMOTE_STORE_TOKEN="secret-token")


class _Recorder:
    def __init__(self, responses: dict[tuple[str, str], httpx.Response]) -> None:
        self.responses = responses
        self.requests: list[httpx.Request] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        return self.responses.get((request.method, request.url.path), httpx.Response(404))


def test_create_sends_auth_and_returns_remote_id() -> None:
    recorder = _Recorder({("POST", "/api/resolutions"): httpx.Response(201, json={"_id": "res_123"})})
    client = RemoteStoreClient(_settings(), transport=httpx.MockTransport(recorder))

    entity_id = asyncio.run(client.create(EntityKind.RESOLUTIONS, {"title": "Food Security"}))

    assert entity_id == "res_123"
    request = recorder.requests[0]
    assert request.headers["Authorization"] == "Bearer secret-token"
    assert json.loads(request.content) == {"title": "Food Security"}


def test_list_maps_entities_and_millisecond_timestamps() -> None:
    recorder = _Recorder(
        {
            ("GET", "/api/templates"): httpx.Response(
                200,
                json=[
                    {"_id": "t1", "name": "GSL opener", "_creationTime": 1700000000000},
                    {"id": "t2", "name": "Working paper", "lastModified": 1700000100.5},
                ],
            )
        }
    )
    client = RemoteStoreClient(_settings(), transport=httpx.MockTransport(recorder))

    entities = asyncio.run(client.list(EntityKind.TEMPLATES))

    assert [entity.id for entity in entities] == ["t1", "t2"]
    assert entities[0].payload == {"name": "GSL opener", "_creationTime": 1700000000000}
    assert entities[0].last_modified == pytest.approx(1700000000.0)
    assert entities[1].last_modified == pytest.approx(1700000100.5)


def test_get_missing_returns_none_and_errors_raise() -> None:
    recorder = _Recorder({("PATCH", "/api/notes/n1"): httpx.Response(500)})
    client = RemoteStoreClient(_settings(), transport=httpx.MockTransport(recorder))

    assert asyncio.run(client.get(EntityKind.NOTES, "missing")) is None
    with pytest.raises(httpx.HTTPStatusError):
        asyncio.run(client.patch(EntityKind.NOTES, "n1", {"title": "x"}))


def test_delete_accepts_empty_body() -> None:
    recorder = _Recorder({("DELETE", "/api/speeches/s1"): httpx.Response(204)})
    client = RemoteStoreClient(_settings(), transport=httpx.MockTransport(recorder))

    asyncio.run(client.delete(EntityKind.SPEECHES, "s1"))
    assert recorder.requests[0].method == "DELETE"


def test_unconfigured_client_refuses_requests() -> None:
    client = RemoteStoreClient(_settings(url=""))

    assert client.enabled is False
    with pytest.raises(RemoteStoreError):
        asyncio.run(client.create(EntityKind.NOTES, {}))


def test_writer_and_reader_plug_into_reconciler(tmp_path) -> None:
    recorder = _Recorder(
        {
            ("POST", "/api/notes"): httpx.Response(201, json={"id": "remote-note"}),
            ("GET", "/api/notes"): httpx.Response(200, json={"items": [{"id": "remote-note", "title": "from server"}]}),
        }
    )
    client = RemoteStoreClient(_settings(), transport=httpx.MockTransport(recorder))
    reconciler = SyncReconciler(LocalStore(str(tmp_path / "cache.db")), ConnectivityMonitor())

    async def scenario():
        saved = await reconciler.save_and_push(
            EntityKind.NOTES,
            CacheRecord(id="local-1", payload={"title": "draft"}),
            client.writer(EntityKind.NOTES),
        )
        pulled = await reconciler.pull({EntityKind.NOTES: client.reader(EntityKind.NOTES)})
        return saved, pulled, await reconciler.list_records(EntityKind.NOTES)

    saved, pulled, notes = asyncio.run(scenario())
    assert saved.synced is True
    assert pulled == {EntityKind.NOTES: 1}
    assert {note.id: note.remote_id for note in notes} == {"local-1": "remote-note", "remote-note": "remote-note"}
