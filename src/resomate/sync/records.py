from collections.abc import Awaitable, Callable, Iterable
from dataclasses import dataclass, field
from enum import Enum
from typing import Any


class EntityKind(str, Enum):
    RESOLUTIONS = "resolutions"
    TEMPLATES = "templates"
    NOTES = "notes"
    SPEECHES = "speeches"


@dataclass(frozen=True)
class CacheRecord:
    """Local copy of a user document plus its sync state.

    ``id`` is generated locally and need not match the remote identifier;
    ``remote_id`` is filled once a push has been acknowledged.
    """

    id: str
    payload: dict[str, Any]
    last_modified: float = 0.0
    synced: bool = False
    remote_id: str | None = None


@dataclass(frozen=True)
class RemoteEntity:
    id: str
    payload: dict[str, Any]
    last_modified: float | None = None


@dataclass
class SyncReport:
    attempted: int = 0
    synced: int = 0
    failed: int = 0
    skipped: bool = False
    failed_ids: dict[str, list[str]] = field(default_factory=dict)

    def as_meta(self) -> dict:
        return {
            "sync_attempted": self.attempted,
            "sync_synced": self.synced,
            "sync_failed": self.failed,
            "sync_skipped": self.skipped,
            "sync_failed_ids": self.failed_ids,
        }


RemoteWriter = Callable[[dict[str, Any]], Awaitable[Any]]
RemoteReader = Callable[[], Awaitable[Iterable[RemoteEntity]]]
