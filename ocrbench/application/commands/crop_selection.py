"""Command handler for the crop selection gesture."""
from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Tuple

from ocrbench.domain.entities.raster_surface import RasterSurface
from ocrbench.domain.value_objects.crop_rect import CropRect, Point

from ocrbench.application.session import WorkbenchSession


@dataclass(frozen=True)
class PointerEvent:
    """A pointer position, optionally in display (CSS) space."""

    x: float
    y: float
    display_width: Optional[float] = None
    display_height: Optional[float] = None

    @property
    def point(self) -> Point:
        return Point(self.x, self.y)

    @property
    def display_size(self) -> Optional[Tuple[float, float]]:
        if self.display_width is None or self.display_height is None:
            return None
        return (self.display_width, self.display_height)


class CropSelectionHandler:
    """Drives begin/update/end of a selection and applies or discards the crop."""

    def __init__(self, session: WorkbenchSession):
        self._canvas = session.canvas

    def begin(self, event: PointerEvent) -> None:
        self._canvas.begin_selection(event.point, event.display_size)

    def update(self, event: PointerEvent) -> Optional[CropRect]:
        return self._canvas.update_selection(event.point, event.display_size)

    def end(self) -> Optional[CropRect]:
        return self._canvas.end_selection()

    def confirm(self) -> RasterSurface:
        """Finish the gesture; a selection too small to use means the full page."""
        return self._canvas.apply_crop(self._canvas.end_selection())

    def cancel(self) -> RasterSurface:
        self._canvas.cancel_selection()
        return self._canvas.restore_original()

    def apply(self, rect: Optional[CropRect]) -> RasterSurface:
        return self._canvas.apply_crop(rect)

    def reset(self) -> RasterSurface:
        return self._canvas.restore_original()
