"""Pytest configuration and shared fixtures for ocrbench tests.

Ensures the project root is on sys.path so ``ocrbench.*`` imports resolve
during collection, and provides synthetic documents, a scripted vision
client and a ready-made workbench session.
"""
from __future__ import annotations

import sys
from pathlib import Path
from typing import List, Optional
from unittest.mock import Mock

import numpy as np
import pytest

# Add repository root to sys.path for module resolution.
PROJECT_ROOT = Path(__file__).resolve().parents[2]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from ocrbench.application.session import LoadedDocument, WorkbenchSession
from ocrbench.config import Settings
from ocrbench.infrastructure.raster.canvas import CanvasGeometryManager
from ocrbench.infrastructure.raster.document_renderer import DocumentHandle
from ocrbench.infrastructure.raster.image_processor import scale_image
from ocrbench.infrastructure.vision.credentials import ApiKeyCredentialProvider
from ocrbench.infrastructure.vision.retry import RetryExecutor
from ocrbench.infrastructure.vision.vision_response_parser import ModelResponse


def make_page(width: int = 200, height: int = 100, value: int = 0) -> np.ndarray:
    """A BGR page whose pixel at (row, col) encodes its position."""
    page = np.zeros((height, width, 3), dtype=np.uint8)
    page[:, :, 0] = (np.arange(width) % 256)[None, :]
    page[:, :, 1] = (np.arange(height) % 256)[:, None]
    page[:, :, 2] = value
    return page


class FakeDocumentHandle(DocumentHandle):
    """In-memory multi-page document; page N is filled with red value N."""

    def __init__(self, pages: int = 2, width: int = 200, height: int = 100) -> None:
        self._pages = [make_page(width, height, value=index + 1) for index in range(pages)]
        self.closed = False
        self.render_calls: List[tuple] = []

    @property
    def page_count(self) -> int:
        return len(self._pages)

    def render_page(self, page_number: int, zoom: int) -> np.ndarray:
        self._check_page(page_number)
        self.render_calls.append((page_number, zoom))
        return scale_image(self._pages[page_number - 1], zoom)

    def close(self) -> None:
        self.closed = True


class ScriptedVisionClient:
    """Vision client double returning queued responses (or raising queued errors)."""

    def __init__(self) -> None:
        self.ocr_responses: List[object] = []
        self.qac_responses: List[object] = []
        self.detect_responses: List[object] = []
        self.enhance_responses: List[object] = []
        self.calls: List[tuple] = []

    async def ocr(self, image_base64: str) -> ModelResponse:
        self.calls.append(("ocr", image_base64))
        return self._next(self.ocr_responses)

    async def qac(self, original_text: str, image_base64: str) -> ModelResponse:
        self.calls.append(("qac", original_text, image_base64))
        return self._next(self.qac_responses)

    async def detect_images(self, image_base64: str) -> ModelResponse:
        self.calls.append(("detect", image_base64))
        return self._next(self.detect_responses)

    async def enhance_image(self, image_base64: str, colorize: bool):
        self.calls.append(("enhance", image_base64, colorize))
        return self._next(self.enhance_responses)

    def calls_named(self, name: str) -> List[tuple]:
        return [call for call in self.calls if call[0] == name]

    @staticmethod
    def _next(queue: List[object]):
        if not queue:
            raise AssertionError("No scripted response left")
        item = queue.pop(0)
        if isinstance(item, BaseException):
            raise item
        return item


async def _no_sleep(delay: float) -> None:
    return None


@pytest.fixture
def settings() -> Settings:
    return Settings(
        AZURE_OPENAI_ENDPOINT="https://example.openai.azure.com",
        OCRBENCH_RESPONSE_FORMAT="structured",
        OCRBENCH_DETECT_IMAGES=False,
    )


@pytest.fixture
def vision_client() -> ScriptedVisionClient:
    return ScriptedVisionClient()


@pytest.fixture
def client_factory(vision_client: ScriptedVisionClient) -> Mock:
    return Mock(return_value=vision_client)


@pytest.fixture
def session(settings: Settings, client_factory: Mock) -> WorkbenchSession:
    return WorkbenchSession(
        ApiKeyCredentialProvider("test-key"),
        canvas=CanvasGeometryManager(),
        client_factory=client_factory,
        settings=settings,
    )


@pytest.fixture
def fake_document() -> FakeDocumentHandle:
    return FakeDocumentHandle(pages=2)


@pytest.fixture
def loaded_session(session: WorkbenchSession, fake_document: FakeDocumentHandle) -> WorkbenchSession:
    """Session with a two-page PDF open on page 1 at 100%."""
    document = LoadedDocument(file_name="sample.pdf", file_type="pdf", handle=fake_document)
    session.canvas.render(fake_document, document.context(), document.zoom)
    session.open_document(document)
    return session


@pytest.fixture
def retry() -> RetryExecutor:
    return RetryExecutor(max_attempts=3, base_delay=0.0, max_jitter=0.0, sleep=_no_sleep, jitter=lambda: 0.0)


def response(text: Optional[str], finish_reason: Optional[str] = "stop") -> ModelResponse:
    return ModelResponse(text=text, finish_reason=finish_reason)
