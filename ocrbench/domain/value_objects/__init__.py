"""
Domain Value Objects

Immutable value objects that encapsulate domain concepts with validation.
"""
from .confidence import Confidence
from .bounding_box import BoundingBox
from .crop_rect import CropRect, Point
from .source_context import FileType, SourceContext

__all__ = [
    'Confidence',
    'BoundingBox',
    'CropRect',
    'Point',
    'FileType',
    'SourceContext',
]
