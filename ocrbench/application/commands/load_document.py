"""Command handler for loading a new source file into the workbench."""
from __future__ import annotations

import logging
from dataclasses import dataclass

from ocrbench.constants import IMAGE_MEDIA_PREFIX, PDF_MEDIA_TYPE, ZOOM_DEFAULT
from ocrbench.domain.entities.raster_surface import RasterSurface
from ocrbench.domain.exceptions import RenderError, UnsupportedMediaTypeError
from ocrbench.domain.value_objects.source_context import FileType

from ocrbench.application.session import LoadedDocument, WorkbenchSession

logger = logging.getLogger(__name__)


def resolve_file_type(media_type: str) -> FileType:
    """Map a declared media type onto the workbench's file types."""
    normalized = (media_type or "").split(";", 1)[0].strip().lower()
    if normalized == PDF_MEDIA_TYPE:
        return "pdf"
    if normalized.startswith(IMAGE_MEDIA_PREFIX):
        return "image"
    raise UnsupportedMediaTypeError(media_type)


@dataclass(frozen=True)
class LoadDocumentCommand:
    """Command describing an uploaded file ready to be rendered."""

    file_name: str
    media_type: str
    data: bytes


class LoadDocumentHandler:
    """Opens the file, renders page 1 at 100% and makes it the session's document."""

    def __init__(self, session: WorkbenchSession):
        self._session = session

    def handle(self, command: LoadDocumentCommand) -> RasterSurface:
        file_type = resolve_file_type(command.media_type)
        if not command.data:
            raise RenderError("The uploaded file is empty.")

        handle = self._session.renderer.open(command.data, file_type)
        document = LoadedDocument(
            file_name=command.file_name,
            file_type=file_type,
            handle=handle,
            current_page=1,
            zoom=ZOOM_DEFAULT,
        )
        try:
            surface = self._session.canvas.render(handle, document.context(), document.zoom)
        except RenderError:
            handle.close()
            raise

        self._session.open_document(document)
        return surface
