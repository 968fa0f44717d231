from typing import Any

from pydantic import BaseModel, Field

from resomate.generation.models import DocumentKind, Focus, GenerationRequest, Length, Tone, Urgency


class ResolutionRequest(BaseModel):
    title: str = Field(..., min_length=1)
    committee: str = Field(..., min_length=1)
    topic: str = Field(..., min_length=1)
    country: str = Field(..., min_length=1)
    urgency: Urgency = "medium"
    focus: Focus = "general"
    tone: Tone = "diplomatic"
    length: Length = "medium"
    include_statistics: bool = False
    include_citations: bool = False
    custom_instructions: str | None = None

    def to_domain(self) -> GenerationRequest:
        return GenerationRequest(kind=DocumentKind.RESOLUTION, **self.model_dump())


class SpeechRequest(BaseModel):
    title: str = Field(..., min_length=1)
    committee: str = Field(..., min_length=1)
    topic: str = Field(..., min_length=1)
    country: str = Field(..., min_length=1)

    def to_domain(self) -> GenerationRequest:
        return GenerationRequest(kind=DocumentKind.SPEECH, **self.model_dump())


class RhetoricRequest(BaseModel):
    topic: str = Field(..., min_length=1, description="Debate topic the devices should target.")

    def to_domain(self) -> GenerationRequest:
        return GenerationRequest(kind=DocumentKind.RHETORIC, topic=self.topic)


class GenerateResponse(BaseModel):
    kind: str
    content: Any = None
    meta: dict


class DocumentBody(BaseModel):
    payload: dict[str, Any]


class DocumentOut(BaseModel):
    id: str
    payload: dict[str, Any]
    last_modified: float
    synced: bool
    remote_id: str | None = None


class ConnectivityUpdate(BaseModel):
    online: bool


class SyncStatus(BaseModel):
    online: bool
    reconcile_in_progress: bool
    pending: dict[str, int]
    pending_total: int
