"""Command handlers for page navigation and zoom."""
from __future__ import annotations

import logging
from dataclasses import dataclass

from ocrbench.constants import ZOOM_MAX, ZOOM_MIN, ZOOM_STEP
from ocrbench.domain.entities.raster_surface import RasterSurface
from ocrbench.domain.exceptions import PreconditionError

from ocrbench.application.session import LoadedDocument, WorkbenchSession

logger = logging.getLogger(__name__)


def clamp_zoom(zoom: int) -> int:
    return max(ZOOM_MIN, min(ZOOM_MAX, int(zoom)))


def _require_document(session: WorkbenchSession) -> LoadedDocument:
    document = session.document
    if document is None:
        raise PreconditionError("No file is loaded. Upload a file first.")
    return document


@dataclass(frozen=True)
class ChangePageCommand:
    page_number: int


class ChangePageHandler:
    """Re-renders the requested page with the already-open document handle."""

    def __init__(self, session: WorkbenchSession):
        self._session = session

    def handle(self, command: ChangePageCommand) -> RasterSurface:
        document = _require_document(self._session)
        current = self._session.canvas.require_surface()
        page_number = command.page_number
        if document.file_type != "pdf" or not 1 <= page_number <= document.total_pages:
            logger.debug("Ignoring navigation to page %s of %s", page_number, document.total_pages)
            return current
        if page_number == document.current_page:
            return current

        surface = self._session.canvas.render(document.handle, document.context(page_number), document.zoom)
        document.current_page = page_number
        return surface


@dataclass(frozen=True)
class ChangeZoomCommand:
    zoom: int


class ChangeZoomHandler:
    """Re-renders the current page at a new zoom level, clamped to the supported range."""

    def __init__(self, session: WorkbenchSession):
        self._session = session

    def handle(self, command: ChangeZoomCommand) -> RasterSurface:
        document = _require_document(self._session)
        zoom = clamp_zoom(command.zoom)
        surface = self._session.canvas.render(document.handle, document.context(), zoom)
        document.zoom = zoom
        return surface

    def zoom_in(self) -> RasterSurface:
        document = _require_document(self._session)
        return self.handle(ChangeZoomCommand(document.zoom + ZOOM_STEP))

    def zoom_out(self) -> RasterSurface:
        document = _require_document(self._session)
        return self.handle(ChangeZoomCommand(document.zoom - ZOOM_STEP))
