"""
Unit tests for the ExtractText workflow.
"""
import asyncio
import base64
import json

import cv2
import numpy as np
import pytest

from conftest import response
from ocrbench.application.commands.extract_text import ExtractTextCommand, ExtractTextHandler
from ocrbench.application.commands.navigate_document import ChangePageCommand, ChangePageHandler
from ocrbench.domain.exceptions import (
    DomainException,
    InvalidCredentialError,
    MalformedResponseError,
    PreconditionError,
    RetryExhaustedError,
)
from ocrbench.domain.value_objects.crop_rect import CropRect
from ocrbench.infrastructure.vision.vision_response_parser import StructuredResponseParser


def _decode(payload: str) -> np.ndarray:
    return cv2.imdecode(np.frombuffer(base64.b64decode(payload), dtype=np.uint8), cv2.IMREAD_COLOR)


def _ocr(text="Hello World", confidence=95):
    return response(json.dumps({"text": text, "confidence": confidence}))


@pytest.fixture
def handler(loaded_session, retry):
    return ExtractTextHandler(loaded_session, StructuredResponseParser(), retry)


def test_extract_creates_active_record(handler, loaded_session, vision_client):
    vision_client.ocr_responses.append(_ocr())
    progress = []

    record = asyncio.run(handler.handle(ExtractTextCommand(), lambda p, s: progress.append((p, s))))

    assert record.text == "Hello World"
    assert record.confidence.value == 95
    assert record.page_number == 1
    assert record.file_name == "sample.pdf"
    assert record.file_type == "pdf"
    assert record.is_qac_processed is False
    assert record.detected_images == ()
    assert loaded_session.history.get_active() == record
    assert loaded_session.history.list()[0] == record
    assert progress[0] == (10, "Preparing for text extraction...")
    assert progress[-1] == (100, "Text extraction completed successfully!")
    assert loaded_session.progress.percent == 100


def test_extract_submits_displayed_crop_then_restores(handler, loaded_session, vision_client):
    loaded_session.canvas.apply_crop(CropRect(10, 10, 50, 40))
    vision_client.ocr_responses.append(_ocr())

    asyncio.run(handler.handle(ExtractTextCommand()))

    submitted = _decode(vision_client.calls_named("ocr")[0][1])
    assert submitted.shape == (40, 50, 3)
    assert not loaded_session.canvas.surface.is_cropped


def test_detected_images_are_cropped_from_original(handler, loaded_session, vision_client):
    loaded_session.canvas.apply_crop(CropRect(0, 0, 60, 60))
    vision_client.ocr_responses.append(_ocr())
    vision_client.detect_responses.append(
        response(json.dumps({"images": [
            {"x": 10, "y": 20, "width": 30, "height": 50, "description": "logo"},
            {"x": 0, "y": 0, "width": 2, "height": 2, "description": "speck"},
        ]}))
    )

    record = asyncio.run(handler.handle(ExtractTextCommand(detect_images=True)))

    detect_payload = _decode(vision_client.calls_named("detect")[0][1])
    assert detect_payload.shape == (100, 200, 3)
    assert len(record.detected_images) == 1
    image = record.detected_images[0]
    assert image.description == "logo"
    cropped = _decode(image.base64)
    assert cropped.shape == (50, 60, 3)
    assert np.array_equal(cropped, loaded_session.canvas.surface.original[20:70, 20:80])


def test_detection_failure_keeps_ocr_result(handler, vision_client):
    vision_client.ocr_responses.append(_ocr())
    vision_client.detect_responses.append(response("not json"))

    record = asyncio.run(handler.handle(ExtractTextCommand(detect_images=True)))

    assert record.text == "Hello World"
    assert record.detected_images == ()


def test_malformed_ocr_fails_without_history(handler, loaded_session, vision_client):
    vision_client.ocr_responses.append(response("{broken"))
    loaded_session.canvas.apply_crop(CropRect(0, 0, 50, 50))

    with pytest.raises(MalformedResponseError):
        asyncio.run(handler.handle(ExtractTextCommand()))

    assert loaded_session.history.count() == 0
    assert loaded_session.progress.failed
    assert not loaded_session.canvas.surface.is_cropped


def test_transient_failures_exhaust_retries(handler, loaded_session, vision_client):
    vision_client.ocr_responses.extend([RuntimeError("503 unavailable")] * 3)

    with pytest.raises(RetryExhaustedError):
        asyncio.run(handler.handle(ExtractTextCommand()))

    assert len(vision_client.calls_named("ocr")) == 3
    assert loaded_session.history.count() == 0


def test_invalid_credential_invalidates_session(handler, loaded_session, vision_client):
    vision_client.ocr_responses.append(RuntimeError("Incorrect API key provided"))

    with pytest.raises(InvalidCredentialError):
        asyncio.run(handler.handle(ExtractTextCommand()))

    assert not loaded_session.credentials.has_credential()


def test_unexpected_errors_are_classified(handler, loaded_session, vision_client, monkeypatch):
    vision_client.ocr_responses.append(_ocr())
    monkeypatch.setattr(handler._parser, "parse_ocr", lambda response: 1 / 0)

    with pytest.raises(DomainException) as excinfo:
        asyncio.run(handler.handle(ExtractTextCommand()))

    assert isinstance(excinfo.value.__cause__, ZeroDivisionError)


def test_stale_result_is_dropped(handler, loaded_session, vision_client):
    class NavigatingClient:
        async def ocr(self, image_base64):
            ChangePageHandler(loaded_session).handle(ChangePageCommand(2))
            return _ocr()

    loaded_session._client = NavigatingClient()

    result = asyncio.run(handler.handle(ExtractTextCommand()))

    assert result is None
    assert loaded_session.history.count() == 0
    assert loaded_session.canvas.surface.source.page_number == 2


def test_requires_loaded_page(session, retry):
    handler = ExtractTextHandler(session, StructuredResponseParser(), retry)
    with pytest.raises(PreconditionError):
        asyncio.run(handler.handle(ExtractTextCommand()))
