"""
Domain Entity: RasterSurface

The pixel buffers of the page or image currently on the canvas.
"""
from __future__ import annotations

from dataclasses import dataclass, replace

import numpy as np

from ocrbench.domain.exceptions import InvalidCropError
from ocrbench.domain.value_objects.crop_rect import CropRect
from ocrbench.domain.value_objects.source_context import SourceContext


@dataclass(frozen=True, eq=False)
class RasterSurface:
    """
    A rendered page/image at a given zoom.

    Business rules:
    - ``original`` is the uncropped render at the current zoom and never
      changes for the life of the surface
    - ``displayed`` is what the user sees and what gets submitted; it is
      either ``original`` or a crop of a previous ``displayed`` buffer
    - A new render replaces the whole surface
    """

    source: SourceContext
    zoom: int
    original: np.ndarray
    displayed: np.ndarray

    def __post_init__(self):
        if self.original.ndim != 3 or self.displayed.ndim != 3:
            raise ValueError("Raster buffers must be HxWxC arrays")
        if self.zoom <= 0:
            raise ValueError("zoom must be > 0")

    @classmethod
    def create(cls, source: SourceContext, zoom: int, pixels: np.ndarray) -> "RasterSurface":
        """Snapshot ``pixels`` as the original buffer and display a copy of it."""
        original = np.ascontiguousarray(pixels).copy()
        original.setflags(write=False)
        return cls(source=source, zoom=zoom, original=original, displayed=original.copy())

    # ==================== Dimensions ====================

    @property
    def width(self) -> int:
        return int(self.displayed.shape[1])

    @property
    def height(self) -> int:
        return int(self.displayed.shape[0])

    @property
    def original_width(self) -> int:
        return int(self.original.shape[1])

    @property
    def original_height(self) -> int:
        return int(self.original.shape[0])

    @property
    def is_cropped(self) -> bool:
        return self.displayed.shape != self.original.shape or not np.array_equal(self.displayed, self.original)

    # ==================== Transformations ====================

    def cropped(self, rect: CropRect) -> "RasterSurface":
        """Return a surface whose displayed buffer is ``rect`` of the current displayed buffer."""
        x, y, width, height = rect.to_pixels(self.width, self.height)
        if width == 0 or height == 0:
            raise InvalidCropError(
                f"Crop {rect.to_dict()} lies outside the {self.width}x{self.height} surface",
                user_message="The selected area lies outside the page.",
            )
        region = self.displayed[y : y + height, x : x + width].copy()
        return replace(self, displayed=region)

    def restored(self) -> "RasterSurface":
        """Return a surface displaying a fresh copy of the original buffer."""
        return replace(self, displayed=self.original.copy())
