import logging
import time
from collections.abc import Callable, Mapping
from dataclasses import replace

from resomate.sync.connectivity import ConnectivityMonitor
from resomate.sync.records import (
    CacheRecord,
    EntityKind,
    RemoteReader,
    RemoteWriter,
    SyncReport,
)
from resomate.sync.store import LocalStore
from resomate.utils.errors import extract_error_detail

logger = logging.getLogger(__name__)


class SyncReconciler:
    """Offline-first writes against ``LocalStore`` with best-effort remote sync.

    Local writes always happen first and their failures propagate. Remote
    failures are logged and leave the record queued as unsynced. Conflicts
    are resolved last-writer-wins: ``save`` overwrites the local copy and
    ``pull`` overwrites it again with the remote copy, with no merge.
    Concurrent writes to the same id are not guarded; callers are assumed to
    have a single active editor per document.
    """

    def __init__(
        self,
        store: LocalStore,
        connectivity: ConnectivityMonitor | None = None,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self.store = store
        self.connectivity = connectivity or ConnectivityMonitor()
        self.clock = clock
        self._reconcile_in_progress = False

    @property
    def reconcile_in_progress(self) -> bool:
        return self._reconcile_in_progress

    async def save(self, kind: EntityKind, record: CacheRecord) -> CacheRecord:
        existing = await self.store.get(kind, record.id)
        previous = max(record.last_modified, existing.last_modified if existing is not None else 0.0)
        stored = replace(record, last_modified=self._next_timestamp(previous), synced=False)
        await self.store.put(kind, stored)
        logger.info("sync.saved kind=%s id=%s", kind.value, stored.id)
        return stored

    async def push(self, kind: EntityKind, record: CacheRecord, remote_writer: RemoteWriter) -> bool:
        """Send the stored copy of ``record`` and flag that version synced.

        The stored row is the source of truth, so a caller may pass the
        object it handed to ``save``. An edit saved while the write is in
        flight stays unsynced.
        """
        stored = await self.store.get(kind, record.id)
        if stored is not None:
            record = stored
        try:
            ack = await remote_writer(record.payload)
        except Exception as exc:
            logger.warning(
                "sync.push_failed kind=%s id=%s type=%s detail=%s",
                kind.value,
                record.id,
                exc.__class__.__name__,
                extract_error_detail(exc),
            )
            return False
        remote_id = ack if isinstance(ack, str) and ack else None
        flagged = await self.store.mark_synced(
            kind,
            record.id,
            last_modified=record.last_modified,
            remote_id=remote_id,
        )
        if not flagged:
            logger.info("sync.push_superseded kind=%s id=%s", kind.value, record.id)
            return False
        logger.info("sync.pushed kind=%s id=%s remote_id=%s", kind.value, record.id, remote_id)
        return True

    async def save_and_push(
        self,
        kind: EntityKind,
        record: CacheRecord,
        remote_writer: RemoteWriter | None = None,
    ) -> CacheRecord:
        stored = await self.save(kind, record)
        if remote_writer is None or not self.connectivity.is_online:
            return stored
        if await self.push(kind, stored, remote_writer):
            return replace(stored, synced=True)
        return stored

    async def list_unsynced(self) -> dict[EntityKind, list[CacheRecord]]:
        return {kind: await self.store.list_unsynced(kind) for kind in EntityKind}

    async def pending_count(self) -> int:
        unsynced = await self.list_unsynced()
        return sum(len(records) for records in unsynced.values())

    async def reconcile_on_reconnect(self, remote_writers: Mapping[EntityKind, RemoteWriter]) -> SyncReport:
        if self._reconcile_in_progress:
            logger.info("sync.reconcile.skipped reason=in_progress")
            return SyncReport(skipped=True)
        self._reconcile_in_progress = True
        report = SyncReport()
        try:
            unsynced = await self.list_unsynced()
            for kind, records in unsynced.items():
                writer = remote_writers.get(kind)
                if writer is None:
                    if records:
                        logger.info("sync.reconcile.no_writer kind=%s queued=%d", kind.value, len(records))
                    continue
                for record in records:
                    report.attempted += 1
                    if await self.push(kind, record, writer):
                        report.synced += 1
                    else:
                        report.failed += 1
                        report.failed_ids.setdefault(kind.value, []).append(record.id)
        finally:
            self._reconcile_in_progress = False
        logger.info(
            "sync.reconcile.done attempted=%d synced=%d failed=%d",
            report.attempted,
            report.synced,
            report.failed,
        )
        return report

    async def pull(self, remote_readers: Mapping[EntityKind, RemoteReader]) -> dict[EntityKind, int]:
        """Overwrite local copies with remote entities sharing their id.

        Local unsynced edits to those ids are discarded.
        """
        pulled: dict[EntityKind, int] = {}
        for kind, reader in remote_readers.items():
            try:
                entities = list(await reader())
            except Exception as exc:
                logger.warning(
                    "sync.pull_failed kind=%s type=%s detail=%s",
                    kind.value,
                    exc.__class__.__name__,
                    extract_error_detail(exc),
                )
                continue
            for entity in entities:
                await self.store.put(
                    kind,
                    CacheRecord(
                        id=entity.id,
                        payload=dict(entity.payload),
                        last_modified=entity.last_modified if entity.last_modified is not None else self.clock(),
                        synced=True,
                        remote_id=entity.id,
                    ),
                )
            pulled[kind] = len(entities)
            logger.info("sync.pulled kind=%s count=%d", kind.value, len(entities))
        return pulled

    async def get(self, kind: EntityKind, record_id: str) -> CacheRecord | None:
        return await self.store.get(kind, record_id)

    async def list_records(self, kind: EntityKind) -> list[CacheRecord]:
        return await self.store.list_records(kind)

    async def delete(self, kind: EntityKind, record_id: str) -> bool:
        return await self.store.delete(kind, record_id)

    def _next_timestamp(self, previous: float) -> float:
        # strictly increasing per record so a pushed version is never confused with a newer save
        now = self.clock()
        return now if now > previous else previous + 1e-3
