"""
CropRect value object

A rectangle in raster pixel coordinates, always normalized so that
width and height are non-negative.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict

from ocrbench.constants import MIN_SELECTION_SIZE


@dataclass(frozen=True)
class Point:
    """A position in raster pixel space."""

    x: float
    y: float


@dataclass(frozen=True)
class CropRect:
    """
    Immutable crop rectangle in raster pixels.

    A width or height of 0 is the "no crop" sentinel: applying it restores
    the full original surface.
    """
    x: float
    y: float
    width: float
    height: float

    def __post_init__(self):
        if self.width < 0 or self.height < 0:
            raise ValueError("CropRect width and height must be >= 0")

    @classmethod
    def from_points(cls, start: Point, end: Point) -> CropRect:
        """
        Build a normalized rectangle from two drag endpoints.

        Examples:
            >>> CropRect.from_points(Point(50, 40), Point(10, 80))
            CropRect(x=10, y=40, width=40, height=40)
        """
        return cls(
            x=min(start.x, end.x),
            y=min(start.y, end.y),
            width=abs(end.x - start.x),
            height=abs(end.y - start.y),
        )

    @classmethod
    def reset(cls) -> CropRect:
        return cls(0, 0, 0, 0)

    @classmethod
    def from_dict(cls, data: Dict[str, Any] | None) -> CropRect:
        if not data:
            return cls.reset()
        return cls(
            x=data.get("x", 0),
            y=data.get("y", 0),
            width=data.get("width", 0),
            height=data.get("height", 0),
        )

    def is_reset(self) -> bool:
        """True for the width/height == 0 sentinel."""
        return self.width == 0 or self.height == 0

    def is_usable(self, min_size: float = MIN_SELECTION_SIZE) -> bool:
        """True when both dimensions exceed the minimum selection size."""
        return self.width > min_size and self.height > min_size

    def to_pixels(self, surface_width: int, surface_height: int) -> tuple[int, int, int, int]:
        """
        Round to integer pixels and clip to the surface bounds.

        Returns:
            Tuple of (x, y, width, height); width/height may be 0 when the
            rectangle lies outside the surface.
        """
        x0 = max(0, min(surface_width, int(round(self.x))))
        y0 = max(0, min(surface_height, int(round(self.y))))
        x1 = max(x0, min(surface_width, int(round(self.x + self.width))))
        y1 = max(y0, min(surface_height, int(round(self.y + self.height))))
        return (x0, y0, x1 - x0, y1 - y0)

    def to_dict(self) -> Dict[str, float]:
        return {"x": self.x, "y": self.y, "width": self.width, "height": self.height}
