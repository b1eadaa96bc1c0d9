import json

import pytest

from ocrbench.domain.exceptions import EmptyResponseError, MalformedResponseError, SafetyBlockedError
from ocrbench.infrastructure.vision.vision_response_parser import (
    DelimitedResponseParser,
    ModelResponse,
    StructuredResponseParser,
    get_response_parser,
)


def _response(text, finish_reason="stop"):
    return ModelResponse(text=text, finish_reason=finish_reason)


# ----------------------------------------------------------------------
# Structured (JSON) mode
# ----------------------------------------------------------------------


def test_structured_ocr():
    parser = StructuredResponseParser()
    result = parser.parse_ocr(_response(json.dumps({"text": "Hello World", "confidence": 95})))
    assert result.text == "Hello World"
    assert result.confidence.value == 95


def test_structured_ocr_strips_markdown_fences():
    parser = StructuredResponseParser()
    raw = "```json\n{\"text\": \"fenced\", \"confidence\": 80}\n```"
    assert parser.parse_ocr(_response(raw)).text == "fenced"


def test_structured_ocr_missing_confidence_defaults_to_90():
    parser = StructuredResponseParser()
    assert parser.parse_ocr(_response('{"text": "abc"}')).confidence.value == 90


def test_structured_ocr_invalid_json_keeps_raw_text():
    parser = StructuredResponseParser()
    with pytest.raises(MalformedResponseError) as excinfo:
        parser.parse_ocr(_response("{not json"))
    assert excinfo.value.raw_text == "{not json"
    assert "{not json" in excinfo.value.message


def test_structured_ocr_rejects_non_object():
    with pytest.raises(MalformedResponseError):
        StructuredResponseParser().parse_ocr(_response("[1, 2]"))


def test_structured_qac():
    parser = StructuredResponseParser()
    payload = {
        "correctedText": "Hello, World!",
        "fixes": [
            {"original": "World", "corrected": "World!", "type": "Punctuation", "description": "added exclamation"},
            "not a fix",
        ],
    }
    result = parser.parse_qac(_response(json.dumps(payload)), "Hello World")
    assert result.corrected_text == "Hello, World!"
    assert len(result.fixes) == 1
    assert result.fixes[0].type == "Punctuation"


def test_structured_qac_falls_back_to_original_text():
    result = StructuredResponseParser().parse_qac(_response('{"fixes": null}'), "original")
    assert result.corrected_text == "original"
    assert result.fixes == ()


def test_structured_regions_filter_small_and_malformed():
    payload = {
        "images": [
            {"x": 10, "y": 20, "width": 30, "height": 15, "description": "chart"},
            {"x": 0, "y": 0, "width": 4, "height": 50, "description": "thin rule"},
            {"x": "left", "y": 0, "width": 50, "height": 50},
        ]
    }
    regions = StructuredResponseParser().parse_regions(_response(json.dumps(payload)))
    assert len(regions) == 1
    assert regions[0].bounding_box.to_absolute(1000, 800) == (100, 160, 300, 120)
    assert regions[0].description == "chart"


def test_structured_regions_accept_bare_list():
    raw = json.dumps([{"x": 1, "y": 1, "width": 50, "height": 50}])
    assert len(StructuredResponseParser().parse_regions(_response(raw))) == 1


# ----------------------------------------------------------------------
# Delimited (labelled text) mode
# ----------------------------------------------------------------------


def test_delimited_ocr():
    parser = DelimitedResponseParser()
    result = parser.parse_ocr(_response("TEXT: Hello World\nSecond line\n---\nCONFIDENCE: 95"))
    assert result.text == "Hello World\nSecond line"
    assert result.confidence.value == 95


def test_delimited_ocr_without_labels_uses_whole_text():
    result = DelimitedResponseParser().parse_ocr(_response("  just some text  "))
    assert result.text == "just some text"
    assert result.confidence.value == 90


def test_delimited_qac_drops_malformed_rows():
    raw = (
        "CORRECTED_TEXT: Hello, World!\n---\n"
        "FIXES:\n"
        "- World | World! | Punctuation | added exclamation\n"
        "- broken row without pipes\n"
        "Helo | Hello | Spelling | typo\n"
    )
    result = DelimitedResponseParser().parse_qac(_response(raw), "Helo World")
    assert result.corrected_text == "Hello, World!"
    assert [fix.original for fix in result.fixes] == ["World", "Helo"]


def test_delimited_qac_none_means_no_fixes():
    result = DelimitedResponseParser().parse_qac(_response("CORRECTED_TEXT: same\n---\nFIXES: None"), "same")
    assert result.fixes == ()


def test_delimited_qac_missing_corrected_text_keeps_original():
    result = DelimitedResponseParser().parse_qac(_response("FIXES: None"), "untouched")
    assert result.corrected_text == "untouched"


def test_delimited_regions():
    raw = (
        "COORDINATES:\n10%, 20%, 30%, 15%, a chart, with a comma\n"
        "bad, row\nabc, 20, 30, 40, chart\n1, 1, 2, 2, tiny"
    )
    regions = DelimitedResponseParser().parse_regions(_response(raw))
    assert len(regions) == 1
    assert regions[0].bounding_box.x == 10.0
    assert regions[0].description == "a chart, with a comma"


def test_delimited_regions_none():
    assert DelimitedResponseParser().parse_regions(_response("COORDINATES: None")) == []


# ----------------------------------------------------------------------
# Shared behaviour
# ----------------------------------------------------------------------


@pytest.mark.parametrize("parser", [StructuredResponseParser(), DelimitedResponseParser()])
def test_empty_response_raises(parser):
    with pytest.raises(EmptyResponseError) as excinfo:
        parser.parse_ocr(_response("   "))
    assert not isinstance(excinfo.value, SafetyBlockedError)


@pytest.mark.parametrize("parser", [StructuredResponseParser(), DelimitedResponseParser()])
def test_safety_finish_reason_raises_safety_blocked(parser):
    with pytest.raises(SafetyBlockedError):
        parser.parse_ocr(_response(None, finish_reason="content_filter"))


def test_qac_empty_response_message():
    with pytest.raises(EmptyResponseError) as excinfo:
        StructuredResponseParser().parse_qac(_response(None), "x")
    assert "QAC" in excinfo.value.message


def test_get_response_parser():
    assert isinstance(get_response_parser("structured"), StructuredResponseParser)
    assert isinstance(get_response_parser("delimited", default_confidence=70), DelimitedResponseParser)
    with pytest.raises(ValueError):
        get_response_parser("xml")


def test_custom_default_confidence():
    parser = get_response_parser("delimited", default_confidence=70)
    assert parser.parse_ocr(_response("TEXT: a")).confidence.value == 70
