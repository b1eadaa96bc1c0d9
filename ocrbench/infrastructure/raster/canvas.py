"""Canvas geometry manager.

Owns the single raster surface of the session: rendering, the crop
selection gesture, crop/restore, and payload encoding.
"""
from __future__ import annotations

import logging
from typing import Optional, Tuple

from ocrbench.constants import MIN_SELECTION_SIZE
from ocrbench.domain.entities.raster_surface import RasterSurface
from ocrbench.domain.exceptions import PreconditionError, RenderError
from ocrbench.domain.value_objects.bounding_box import BoundingBox
from ocrbench.domain.value_objects.crop_rect import CropRect, Point
from ocrbench.domain.value_objects.source_context import SourceContext

from .document_renderer import DocumentHandle
from .image_processor import crop_percent, encode_base64

logger = logging.getLogger(__name__)

DisplaySize = Tuple[float, float]


class CanvasGeometryManager:
    """Source of truth for the displayed raster and its coordinate transforms."""

    def __init__(self, *, min_selection_size: float = MIN_SELECTION_SIZE) -> None:
        self._min_selection_size = min_selection_size
        self._surface: Optional[RasterSurface] = None
        self._selection_start: Optional[Point] = None
        self._selection: Optional[CropRect] = None

    # ------------------------------------------------------------------
    # State
    # ------------------------------------------------------------------
    @property
    def surface(self) -> Optional[RasterSurface]:
        return self._surface

    @property
    def selection(self) -> Optional[CropRect]:
        """The rectangle of the gesture in progress, if any."""
        return self._selection

    def require_surface(self) -> RasterSurface:
        if self._surface is None:
            raise PreconditionError("No page is loaded. Upload a file first.")
        return self._surface

    def clear(self) -> None:
        self._surface = None
        self.cancel_selection()

    # ------------------------------------------------------------------
    # Rendering
    # ------------------------------------------------------------------
    def render(self, document: DocumentHandle, source: SourceContext, zoom: int) -> RasterSurface:
        """Render ``source.page_number`` of ``document`` and replace the surface.

        On failure the previous surface stays in place and ``RenderError``
        propagates.
        """
        try:
            pixels = document.render_page(source.page_number, zoom)
        except RenderError:
            raise
        except Exception as exc:  # noqa: BLE001 - decoder failures of any kind are render errors
            logger.exception("Unexpected failure rendering page %s of %s", source.page_number, source.file_name)
            raise RenderError(cause=exc) from exc

        self._surface = RasterSurface.create(source, zoom, pixels)
        self.cancel_selection()
        logger.debug(
            "Rendered %s page %s at %s%% (%sx%s)",
            source.file_name,
            source.page_number,
            zoom,
            self._surface.width,
            self._surface.height,
        )
        return self._surface

    # ------------------------------------------------------------------
    # Selection gesture
    # ------------------------------------------------------------------
    def to_raster_point(self, point: Point, display_size: Optional[DisplaySize] = None) -> Point:
        """Scale a pointer position from display space into raster pixels.

        ``display_size`` is the on-screen (CSS) size of the canvas; the raster
        may be larger or smaller than that. Without it the point is assumed
        to already be in raster space.
        """
        surface = self.require_surface()
        if display_size is None:
            return point
        display_width, display_height = display_size
        if display_width <= 0 or display_height <= 0:
            raise ValueError("display size must be positive")
        return Point(
            x=point.x * (surface.width / display_width),
            y=point.y * (surface.height / display_height),
        )

    def begin_selection(self, point: Point, display_size: Optional[DisplaySize] = None) -> None:
        start = self.to_raster_point(point, display_size)
        self._selection_start = start
        self._selection = CropRect(start.x, start.y, 0, 0)

    def update_selection(self, point: Point, display_size: Optional[DisplaySize] = None) -> Optional[CropRect]:
        if self._selection_start is None:
            return None
        current = self.to_raster_point(point, display_size)
        self._selection = CropRect.from_points(self._selection_start, current)
        return self._selection

    def end_selection(self) -> Optional[CropRect]:
        """Finish the gesture; ``None`` means "no crop"."""
        rect = self._selection
        self.cancel_selection()
        if rect is None or not rect.is_usable(self._min_selection_size):
            return None
        return rect

    def cancel_selection(self) -> None:
        self._selection_start = None
        self._selection = None

    # ------------------------------------------------------------------
    # Crop / restore
    # ------------------------------------------------------------------
    def apply_crop(self, rect: Optional[CropRect]) -> RasterSurface:
        """Crop the displayed buffer; a ``None`` or zero-sized rect restores the original."""
        surface = self.require_surface()
        if rect is None or rect.is_reset():
            return self.restore_original()
        self._surface = surface.cropped(rect)
        return self._surface

    def restore_original(self) -> RasterSurface:
        surface = self.require_surface()
        self._surface = surface.restored()
        return self._surface

    # ------------------------------------------------------------------
    # Encoding
    # ------------------------------------------------------------------
    def encode(self) -> str:
        """Base64 PNG of the displayed buffer."""
        return encode_base64(self.require_surface().displayed)

    def encode_original(self) -> str:
        """Base64 PNG of the uncropped original buffer."""
        return encode_base64(self.require_surface().original)


def crop_original(surface: RasterSurface, box: BoundingBox) -> Optional[str]:
    """Base64 PNG of ``box`` resolved against the surface's original dimensions."""
    region = crop_percent(surface.original, box)
    if region is None:
        return None
    return encode_base64(region)
