"""Session-scoped state shared by every workflow.

One :class:`WorkbenchSession` exists per signed-in user. It owns the
credential provider, the extraction history, the canvas and the loaded
document; workflows receive it explicitly instead of reaching for globals.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Callable, Optional, Protocol
from uuid import uuid4

from ocrbench.config import Settings, get_settings
from ocrbench.constants import ZOOM_DEFAULT
from ocrbench.domain.repositories.history_repository import ExtractionHistoryRepository
from ocrbench.domain.services.credential_provider import Credential, CredentialProvider
from ocrbench.domain.value_objects.source_context import FileType, SourceContext
from ocrbench.infrastructure.persistence.in_memory_history import InMemoryExtractionHistory
from ocrbench.infrastructure.raster.canvas import CanvasGeometryManager
from ocrbench.infrastructure.raster.document_renderer import DocumentHandle, DocumentRenderer
from ocrbench.infrastructure.vision.azure_vision_client import AzureVisionClient, GeneratedImage
from ocrbench.infrastructure.vision.vision_response_parser import ModelResponse

from ocrbench.application.progress import ProgressSink, ProgressSnapshot, ProgressTracker

logger = logging.getLogger(__name__)


class VisionClient(Protocol):
    async def ocr(self, image_base64: str) -> ModelResponse: ...

    async def qac(self, original_text: str, image_base64: str) -> ModelResponse: ...

    async def detect_images(self, image_base64: str) -> ModelResponse: ...

    async def enhance_image(self, image_base64: str, colorize: bool) -> Optional[GeneratedImage]: ...


VisionClientFactory = Callable[[Credential], VisionClient]


@dataclass
class LoadedDocument:
    """The file currently open in the workbench."""

    file_name: str
    file_type: FileType
    handle: DocumentHandle
    current_page: int = 1
    zoom: int = ZOOM_DEFAULT
    document_id: str = field(default_factory=lambda: uuid4().hex)

    @property
    def total_pages(self) -> int:
        return self.handle.page_count

    def context(self, page_number: Optional[int] = None) -> SourceContext:
        return SourceContext(
            document_id=self.document_id,
            file_name=self.file_name,
            file_type=self.file_type,
            page_number=page_number or self.current_page,
        )


class WorkbenchSession:
    """Explicit session context handed to every command handler."""

    def __init__(
        self,
        credentials: CredentialProvider,
        *,
        history: Optional[ExtractionHistoryRepository] = None,
        canvas: Optional[CanvasGeometryManager] = None,
        renderer: Optional[DocumentRenderer] = None,
        client_factory: Optional[VisionClientFactory] = None,
        settings: Optional[Settings] = None,
    ) -> None:
        self.settings = settings or get_settings()
        self.credentials = credentials
        self.history = history or InMemoryExtractionHistory()
        self.canvas = canvas or CanvasGeometryManager()
        self.renderer = renderer or DocumentRenderer()
        self._client_factory = client_factory or (
            lambda credential: AzureVisionClient(credential, settings=self.settings)
        )
        self._client: Optional[VisionClient] = None
        self._document: Optional[LoadedDocument] = None
        self._tracker: Optional[ProgressTracker] = None

    # ------------------------------------------------------------------
    # Credentials
    # ------------------------------------------------------------------
    def vision_client(self) -> VisionClient:
        """Return the AI client, building it from the current credential."""
        credential = self.credentials.request_credential()
        if self._client is None:
            self._client = self._client_factory(credential)
        return self._client

    def reset_client(self) -> None:
        """Drop the cached client so the next request picks up a new credential."""
        self._client = None

    def invalidate_credential(self) -> None:
        logger.warning("Credential rejected by the AI service; sign-in required")
        self.credentials.invalidate()
        self._client = None

    def sign_out(self) -> None:
        self.credentials.invalidate()
        self._client = None
        self.close_document()
        self.history.clear()
        self.canvas.clear()
        self._tracker = None

    # ------------------------------------------------------------------
    # Document
    # ------------------------------------------------------------------
    @property
    def document(self) -> Optional[LoadedDocument]:
        return self._document

    def open_document(self, document: LoadedDocument) -> None:
        """Make ``document`` current; history belongs to the previous file and is cleared."""
        if self._document is not None and self._document.handle is not document.handle:
            self._document.handle.close()
        self._document = document
        self.history.clear()
        logger.info("Loaded %s (%s, %s pages)", document.file_name, document.file_type, document.total_pages)

    def close_document(self) -> None:
        if self._document is not None:
            self._document.handle.close()
        self._document = None

    def current_context(self) -> Optional[SourceContext]:
        surface = self.canvas.surface
        return surface.source if surface is not None else None

    def is_current(self, context: SourceContext) -> bool:
        return self.current_context() == context

    # ------------------------------------------------------------------
    # Progress
    # ------------------------------------------------------------------
    def start_progress(self, sink: Optional[ProgressSink] = None) -> ProgressTracker:
        self._tracker = ProgressTracker([sink])
        return self._tracker

    @property
    def progress(self) -> ProgressSnapshot:
        if self._tracker is None:
            return ProgressSnapshot(0, "")
        return self._tracker.snapshot
