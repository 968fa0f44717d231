import logging
from typing import Any

import httpx

from resomate.config import Settings
from resomate.sync.records import EntityKind, RemoteEntity, RemoteReader, RemoteWriter

logger = logging.getLogger(__name__)


class RemoteStoreError(RuntimeError):
    pass


class RemoteStoreClient:
    """Authenticated CRUD client for the hosted document store."""

    def __init__(self, settings: Settings, transport: httpx.AsyncBaseTransport | None = None) -> None:
        self.settings = settings
        self.base_url = settings.remote_store_url
        self.timeout = settings.remote_timeout_seconds
        self.transport = transport

    @property
    def enabled(self) -> bool:
        return bool(self.base_url)

    async def create(self, kind: EntityKind, payload: dict[str, Any]) -> str:
        data = await self._request("POST", f"/{kind.value}", json=payload)
        entity_id = self._entity_id(data)
        logger.info("remote.created kind=%s id=%s", kind.value, entity_id)
        return entity_id

    async def list(self, kind: EntityKind) -> list[RemoteEntity]:
        data = await self._request("GET", f"/{kind.value}")
        items = data.get("items", []) if isinstance(data, dict) else data
        entities = [self._to_entity(item) for item in items or []]
        logger.info("remote.listed kind=%s count=%d", kind.value, len(entities))
        return entities

    async def get(self, kind: EntityKind, entity_id: str) -> RemoteEntity | None:
        try:
            data = await self._request("GET", f"/{kind.value}/{entity_id}")
        except httpx.HTTPStatusError as exc:
            if exc.response.status_code == 404:
                return None
            raise
        return self._to_entity(data)

    async def patch(self, kind: EntityKind, entity_id: str, fields: dict[str, Any]) -> None:
        await self._request("PATCH", f"/{kind.value}/{entity_id}", json=fields)
        logger.info("remote.patched kind=%s id=%s fields=%s", kind.value, entity_id, sorted(fields))

    async def delete(self, kind: EntityKind, entity_id: str) -> None:
        await self._request("DELETE", f"/{kind.value}/{entity_id}")
        logger.info("remote.deleted kind=%s id=%s", kind.value, entity_id)

    def writer(self, kind: EntityKind) -> RemoteWriter:
        async def write(payload: dict[str, Any]) -> str:
            return await self.create(kind, payload)

        return write

    def reader(self, kind: EntityKind) -> RemoteReader:
        async def read() -> list[RemoteEntity]:
            return await self.list(kind)

        return read

    def writers(self) -> dict[EntityKind, RemoteWriter]:
        return {kind: self.writer(kind) for kind in EntityKind}

    def readers(self) -> dict[EntityKind, RemoteReader]:
        return {kind: self.reader(kind) for kind in EntityKind}

    async def _request(self, method: str, path: str, json: Any = None) -> Any:
        if not self.enabled:
            raise RemoteStoreError("remote store is not configured")
        headers = {}
        if self.settings.remote_store_token:
            headers["Authorization"] = f"Bearer {self.settings.remote_store_token}"
        async with httpx.AsyncClient(
            base_url=self.base_url,
            timeout=self.timeout,
            transport=self.transport,
        ) as client:
            http_response = await client.request(method, path, json=json, headers=headers)
            http_response.raise_for_status()
            if not http_response.content:
                return {}
            return http_response.json()

    @staticmethod
    def _entity_id(data: Any) -> str:
        if isinstance(data, str):
            return data
        if isinstance(data, dict):
            entity_id = data.get("id") or data.get("_id")
            if entity_id:
                return str(entity_id)
        raise RemoteStoreError(f"remote store response has no id: {data!r}")

    @classmethod
    def _to_entity(cls, item: dict[str, Any]) -> RemoteEntity:
        payload = {key: value for key, value in item.items() if key not in {"id", "_id"}}
        last_modified = item.get("lastModified", item.get("_creationTime"))
        if last_modified is not None:
            # millisecond epoch timestamps from the store
            last_modified = float(last_modified)
            if last_modified > 1e11:
                last_modified /= 1000.0
        return RemoteEntity(id=cls._entity_id(item), payload=payload, last_modified=last_modified)
