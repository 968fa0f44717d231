import json
import re
from typing import Any

from resomate.generation.models import (
    EmptyContentError,
    ResolutionContent,
    RhetoricContent,
    SpeechContent,
)

_FENCE = re.compile(r"^```[a-zA-Z]*\s*\n?(.*?)\n?```$", re.DOTALL)


class ContentFormatError(ValueError):
    """Model text was not JSON of the expected shape."""


def load_json(text: str) -> Any:
    stripped = text.strip()
    if not stripped:
        raise EmptyContentError("No content generated")
    fenced = _FENCE.match(stripped)
    if fenced:
        stripped = fenced.group(1).strip()
    try:
        return json.loads(stripped)
    except json.JSONDecodeError as exc:
        raise ContentFormatError(f"Invalid JSON response: {exc.msg}") from exc


def parse_resolution(text: str) -> ResolutionContent:
    data = load_json(text)
    if not isinstance(data, dict):
        raise ContentFormatError("resolution must be a JSON object")
    return ResolutionContent.model_validate(data)


def parse_speech(text: str) -> SpeechContent:
    data = load_json(text)
    if not isinstance(data, dict):
        raise ContentFormatError("speech must be a JSON object")
    # {"draftSpeech": {...}} is accepted as an envelope
    if isinstance(data.get("draftSpeech"), dict):
        data = data["draftSpeech"]
    return SpeechContent.model_validate(data)


def parse_rhetoric(text: str) -> RhetoricContent:
    data = load_json(text)
    if isinstance(data, list):
        data = {"devices": data}
    if not isinstance(data, dict):
        raise ContentFormatError("rhetoric devices must be a JSON list")
    return RhetoricContent.model_validate(data)

