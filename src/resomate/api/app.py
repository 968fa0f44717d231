import logging

from fastapi import BackgroundTasks, FastAPI, HTTPException

from resomate.api.schemas import (
    ConnectivityUpdate,
    DocumentBody,
    DocumentOut,
    GenerateResponse,
    ResolutionRequest,
    RhetoricRequest,
    SpeechRequest,
    SyncStatus,
)
from resomate.config import get_settings
from resomate.providers.remote.store import RemoteStoreClient
from resomate.service.generator import GenerateService
from resomate.sync.connectivity import ConnectivityMonitor
from resomate.sync.reconciler import SyncReconciler
from resomate.sync.records import CacheRecord, EntityKind
from resomate.sync.store import LocalStore

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s %(levelname)s %(name)s %(message)s",
)

settings = get_settings()
app = FastAPI(title="resomate", version="0.1.0")
service = GenerateService()
remote = RemoteStoreClient(settings)
reconciler = SyncReconciler(LocalStore(settings.local_store_path), ConnectivityMonitor())


def _to_out(record: CacheRecord) -> DocumentOut:
    return DocumentOut(
        id=record.id,
        payload=record.payload,
        last_modified=record.last_modified,
        synced=record.synced,
        remote_id=record.remote_id,
    )


@app.get("/healthz")
async def healthz() -> dict:
    return {"status": "ok"}


@app.post("/generate/resolution", response_model=GenerateResponse)
async def generate_resolution(req: ResolutionRequest) -> GenerateResponse:
    return GenerateResponse(**await service.generate(req.to_domain()))


@app.post("/generate/speech", response_model=GenerateResponse)
async def generate_speech(req: SpeechRequest) -> GenerateResponse:
    return GenerateResponse(**await service.generate(req.to_domain()))


@app.post("/generate/rhetoric", response_model=GenerateResponse)
async def generate_rhetoric(req: RhetoricRequest) -> GenerateResponse:
    return GenerateResponse(**await service.generate(req.to_domain()))


@app.get("/documents/{kind}", response_model=list[DocumentOut])
async def list_documents(kind: EntityKind) -> list[DocumentOut]:
    return [_to_out(record) for record in await reconciler.list_records(kind)]


@app.get("/documents/{kind}/{record_id}", response_model=DocumentOut)
async def get_document(kind: EntityKind, record_id: str) -> DocumentOut:
    record = await reconciler.get(kind, record_id)
    if record is None:
        raise HTTPException(status_code=404, detail="document not found")
    return _to_out(record)


@app.put("/documents/{kind}/{record_id}", response_model=DocumentOut)
async def save_document(kind: EntityKind, record_id: str, body: DocumentBody) -> DocumentOut:
    writer = remote.writer(kind) if remote.enabled else None
    record = await reconciler.save_and_push(kind, CacheRecord(id=record_id, payload=body.payload), writer)
    return _to_out(record)


@app.delete("/documents/{kind}/{record_id}")
async def delete_document(kind: EntityKind, record_id: str) -> dict:
    if not await reconciler.delete(kind, record_id):
        raise HTTPException(status_code=404, detail="document not found")
    return {"deleted": record_id}


@app.get("/sync/status", response_model=SyncStatus)
async def sync_status() -> SyncStatus:
    unsynced = await reconciler.list_unsynced()
    pending = {kind.value: len(records) for kind, records in unsynced.items()}
    return SyncStatus(
        online=reconciler.connectivity.is_online,
        reconcile_in_progress=reconciler.reconcile_in_progress,
        pending=pending,
        pending_total=sum(pending.values()),
    )


@app.post("/sync/connectivity")
async def update_connectivity(update: ConnectivityUpdate, background_tasks: BackgroundTasks) -> dict:
    reconnected = reconciler.connectivity.set_online(update.online)
    scheduled = reconnected and remote.enabled
    if scheduled:
        background_tasks.add_task(reconciler.reconcile_on_reconnect, remote.writers())
    return {"online": update.online, "reconnected": reconnected, "reconcile_scheduled": scheduled}


@app.post("/sync/pull")
async def pull_documents() -> dict:
    if not remote.enabled:
        raise HTTPException(status_code=503, detail="remote store is not configured")
    pulled = await reconciler.pull(remote.readers())
    return {"pulled": {kind.value: count for kind, count in pulled.items()}}
