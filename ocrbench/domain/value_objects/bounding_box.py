"""
BoundingBox value object

Represents a rectangular region as percentages of a raster's width and
height. Coordinates are in the [0, 100] range.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Optional, Tuple

from ocrbench.constants import MIN_DETECTED_IMAGE_PERCENT


@dataclass(frozen=True)
class BoundingBox:
    """
    Immutable bounding box in percent of the owning raster.

    - x, y: top-left corner (percent)
    - width, height: dimensions (percent)
    """
    x: float
    y: float
    width: float
    height: float

    @classmethod
    def from_dict(cls, data: Dict[str, Any] | None) -> Optional[BoundingBox]:
        """
        Create a BoundingBox from a mapping, or None if any coordinate is
        missing or not numeric.

        Examples:
            >>> BoundingBox.from_dict({'x': 10, 'y': '20', 'width': 30, 'height': 15})
            BoundingBox(x=10.0, y=20.0, width=30.0, height=15.0)
            >>> BoundingBox.from_dict({'x': 'left', 'y': 0, 'width': 1, 'height': 1}) is None
            True
        """
        if not isinstance(data, dict):
            return None
        try:
            return cls(
                x=float(data["x"]),
                y=float(data["y"]),
                width=float(data["width"]),
                height=float(data["height"]),
            )
        except (KeyError, TypeError, ValueError):
            return None

    def is_significant(self, min_percent: float = MIN_DETECTED_IMAGE_PERCENT) -> bool:
        """Regions at or below ``min_percent`` in either dimension are noise."""
        return self.width > min_percent and self.height > min_percent

    def to_absolute(self, image_width: int, image_height: int) -> Tuple[int, int, int, int]:
        """
        Convert to absolute pixel coordinates.

        Args:
            image_width, image_height: Dimensions of the original raster

        Returns:
            Tuple of (x, y, width, height) in pixels

        Examples:
            >>> BoundingBox(10, 20, 30, 15).to_absolute(1000, 800)
            (100, 160, 300, 120)
        """
        return (
            int(round(self.x / 100.0 * image_width)),
            int(round(self.y / 100.0 * image_height)),
            int(round(self.width / 100.0 * image_width)),
            int(round(self.height / 100.0 * image_height)),
        )

    def to_dict(self) -> Dict[str, float]:
        return {
            'x': self.x,
            'y': self.y,
            'width': self.width,
            'height': self.height
        }

    def __str__(self) -> str:
        return f"BBox(x={self.x:.1f}%, y={self.y:.1f}%, w={self.width:.1f}%, h={self.height:.1f}%)"
