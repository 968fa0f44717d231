from dataclasses import dataclass
from enum import Enum
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field


class DocumentKind(str, Enum):
    RESOLUTION = "resolution"
    SPEECH = "speech"
    RHETORIC = "rhetoric-devices"


Urgency = Literal["low", "medium", "high"]
Focus = Literal["general", "economic", "security", "humanitarian", "environmental"]
Tone = Literal["diplomatic", "assertive", "collaborative"]
Length = Literal["short", "medium", "long"]


@dataclass(frozen=True)
class GenerationRequest:
    kind: DocumentKind
    topic: str
    title: str = ""
    country: str = ""
    committee: str = ""
    urgency: Urgency = "medium"
    focus: Focus = "general"
    tone: Tone = "diplomatic"
    length: Length = "medium"
    include_statistics: bool = False
    include_citations: bool = False
    custom_instructions: str | None = None


class _Content(BaseModel):
    model_config = ConfigDict(populate_by_name=True, str_strip_whitespace=True)


class PreambleClause(_Content):
    type: Literal["clause", "citation"] = "clause"
    text: str = Field(..., min_length=1)
    citation: str | None = None


class SubClause(_Content):
    letter: str = Field(..., min_length=1, max_length=3)
    text: str = Field(..., min_length=1)


class OperativeClause(_Content):
    number: int = Field(..., ge=1)
    text: str = Field(..., min_length=1)
    sub_clauses: list[SubClause] = Field(default_factory=list, alias="subClauses")


class ResolutionContent(_Content):
    preamble: list[PreambleClause] = Field(..., min_length=1)
    operative: list[OperativeClause] = Field(..., min_length=1)


class RhetoricDevice(_Content):
    category: str = Field(default="general", alias="type")
    headline: str = Field(..., min_length=1)
    examples: list[str] = Field(..., min_length=1)


class RhetoricContent(_Content):
    devices: list[RhetoricDevice] = Field(..., min_length=1)


class SpeechContent(_Content):
    title: str = Field(..., min_length=1)
    body: str = Field(..., min_length=1)
    rhetoric_inserts: list[RhetoricDevice] = Field(default_factory=list, alias="rhetoricInserts")


Content = ResolutionContent | SpeechContent | RhetoricContent


class FailureKind(str, Enum):
    SERVICE_TIMEOUT = "service_timeout"
    RATE_LIMITED = "rate_limited"
    EMPTY_CONTENT = "empty_content"
    GENERAL_ERROR = "general_error"


USER_MESSAGES: dict[FailureKind, str] = {
    FailureKind.SERVICE_TIMEOUT: "Generation timed out. Please try again.",
    FailureKind.RATE_LIMITED: "Too many requests. Please wait a moment and try again.",
    FailureKind.EMPTY_CONTENT: "AI didn't generate content. Please try again.",
    FailureKind.GENERAL_ERROR: "Generation failed. Please try again.",
}


@dataclass(frozen=True)
class Success:
    content: Content
    tier: str
    attempts: int = 1

    ok = True


@dataclass(frozen=True)
class Failure:
    kind: FailureKind
    message: str

    ok = False

    @property
    def user_message(self) -> str:
        return USER_MESSAGES[self.kind]


GenerationResult = Success | Failure


class EmptyContentError(RuntimeError):
    """The service answered without any text to parse."""
