import pytest
from pydantic import ValidationError

from resomate.generation.models import EmptyContentError
from resomate.generation.parsing import ContentFormatError, load_json, parse_resolution, parse_rhetoric, parse_speech


def test_load_json_strips_code_fence() -> None:
    assert load_json('```json\n{"a": 1}\n```') == {"a": 1}
    assert load_json("```\n[1, 2]\n```") == [1, 2]


def test_load_json_rejects_prose() -> None:
    with pytest.raises(ContentFormatError):
        load_json("Honorable Chair, this is a plain speech without any JSON.")


def test_load_json_blank_is_empty_content() -> None:
    with pytest.raises(EmptyContentError):
        load_json("   \n")


def test_parse_resolution_reads_camel_case_sub_clauses() -> None:
    content = parse_resolution(
        '{"preamble": [{"type": "citation", "text": "Recalling resolution 70/1", "citation": "A/RES/70/1"}],'
        ' "operative": [{"number": 1, "text": "Decides", "subClauses": [{"letter": "a", "text": "to act"}]}]}'
    )

    assert content.preamble[0].citation == "A/RES/70/1"
    assert content.operative[0].sub_clauses[0].text == "to act"


def test_parse_resolution_rejects_bad_shapes() -> None:
    with pytest.raises(ContentFormatError):
        parse_resolution("[1, 2, 3]")
    with pytest.raises(ValidationError):
        parse_resolution('{"preamble": [{"text": "Noting"}], "operative": [{"number": 0, "text": "Decides"}]}')
    with pytest.raises(ValidationError):
        parse_resolution('{"preamble": [{"text": "   "}], "operative": [{"number": 1, "text": "Decides"}]}')


def test_parse_speech_accepts_envelope() -> None:
    content = parse_speech('{"draftSpeech": {"title": "T", "body": "B"}}')
    assert (content.title, content.body) == ("T", "B")


def test_parse_rhetoric_accepts_bare_list_and_object() -> None:
    listed = parse_rhetoric('[{"type": "question", "headline": "H", "examples": ["E"]}]')
    wrapped = parse_rhetoric('{"devices": [{"category": "contrast", "headline": "H", "examples": ["E"]}]}')

    assert listed.devices[0].category == "question"
    assert wrapped.devices[0].category == "contrast"
    with pytest.raises(ValidationError):
        parse_rhetoric('[{"headline": "H", "examples": []}]')
