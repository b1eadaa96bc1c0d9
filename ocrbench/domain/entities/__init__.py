"""Domain entities package"""

from .extraction_record import DetectedImage, ExtractionRecord, QacFix
from .raster_surface import RasterSurface

__all__ = ["DetectedImage", "ExtractionRecord", "QacFix", "RasterSurface"]
