"""
GetSurfaceState Query - what the canvas currently shows.

Read-only: nothing here mutates the session.
"""
from dataclasses import dataclass

from ocrbench.application.dto.workbench_dto import SurfaceStateDTO
from ocrbench.application.session import WorkbenchSession
from ocrbench.domain.exceptions import PreconditionError
from ocrbench.infrastructure.raster.image_processor import encode_png


@dataclass(frozen=True)
class GetSurfaceStateQuery:
    """Query for the loaded file and displayed raster metadata."""


@dataclass(frozen=True)
class GetSurfaceImageQuery:
    """Query for the displayed (or original) raster as PNG bytes."""

    original: bool = False


class GetSurfaceStateHandler:
    """Handles GetSurfaceState and GetSurfaceImage queries."""

    def __init__(self, session: WorkbenchSession):
        self._session = session

    def handle(self, query: GetSurfaceStateQuery) -> SurfaceStateDTO:
        document = self._session.document
        if document is None:
            raise PreconditionError("No file is loaded. Upload a file first.")
        surface = self._session.canvas.require_surface()
        return SurfaceStateDTO(
            file_name=document.file_name,
            file_type=document.file_type,
            page_number=surface.source.page_number,
            total_pages=document.total_pages,
            zoom=surface.zoom,
            width=surface.width,
            height=surface.height,
            original_width=surface.original_width,
            original_height=surface.original_height,
            is_cropped=surface.is_cropped,
        )

    def image(self, query: GetSurfaceImageQuery) -> bytes:
        surface = self._session.canvas.require_surface()
        return encode_png(surface.original if query.original else surface.displayed)
