from resomate.generation.fallback import fallback_resolution, fallback_rhetoric, fallback_speech
from resomate.generation.models import DocumentKind, GenerationRequest


def _request(kind: DocumentKind, **overrides) -> GenerationRequest:
    params = {
        "title": "Clean Water for All",
        "country": "Bolivia",
        "topic": "Water Scarcity",
        "committee": "UNEP",
        "focus": "environmental",
    }
    params.update(overrides)
    return GenerationRequest(kind=kind, **params)


def test_fallback_resolution_is_deterministic() -> None:
    request = _request(DocumentKind.RESOLUTION)
    assert fallback_resolution(request) == fallback_resolution(request)


def test_fallback_resolution_substitutes_request_fields() -> None:
    content = fallback_resolution(_request(DocumentKind.RESOLUTION))

    preamble = " ".join(clause.text for clause in content.preamble)
    assert "Water Scarcity" in preamble
    assert "Bolivia" in preamble
    assert "UNEP" in preamble
    assert "climate resilience" in preamble
    assert all(clause.type == "clause" for clause in content.preamble)
    assert [clause.number for clause in content.operative] == [1, 2, 3, 4, 5]
    assert "Water Scarcity" in content.operative[0].text


def test_fallback_resolution_tolerates_blank_fields() -> None:
    content = fallback_resolution(_request(DocumentKind.RESOLUTION, country="", topic=" ", committee=""))

    assert content.preamble
    assert content.operative
    assert "the matter under discussion" in content.preamble[0].text


def test_fallback_speech_has_title_body_and_inserts() -> None:
    content = fallback_speech(_request(DocumentKind.SPEECH))

    assert content.title == "Bolivia's Position on Water Scarcity"
    assert content.body.startswith("Honorable Chair, distinguished delegates,")
    assert content.body.rstrip().endswith("Thank you, Chair.")
    assert "UNEP" in content.body
    assert len(content.rhetoric_inserts) == 4


def test_fallback_rhetoric_covers_four_categories() -> None:
    content = fallback_rhetoric(_request(DocumentKind.RHETORIC))

    assert [device.category for device in content.devices] == ["question", "repetition", "emotive", "contrast"]
    assert all(device.examples for device in content.devices)
