"""
API Schemas - organized by domain
"""
from .common_schemas import (
    BoundingBoxSchema,
    CredentialRequestSchema,
    ErrorSchema,
    ProgressSchema,
    SessionStatusSchema,
)
from .document_schemas import (
    CropRequestSchema,
    PageRequestSchema,
    PointerSchema,
    SelectionSchema,
    SurfaceStateSchema,
    ZoomRequestSchema,
)
from .extraction_schemas import (
    ColorizeRequestSchema,
    DetectedImageSchema,
    EnhancedImageSchema,
    ExtractRequestSchema,
    ExtractResponseSchema,
    ExtractionRecordSchema,
    HistorySchema,
    ImagePayloadSchema,
    QacFixSchema,
    SelectRequestSchema,
    history_to_schema,
    record_to_schema,
)

__all__ = [
    # Common
    "BoundingBoxSchema",
    "CredentialRequestSchema",
    "ErrorSchema",
    "ProgressSchema",
    "SessionStatusSchema",
    # Document schemas
    "CropRequestSchema",
    "PageRequestSchema",
    "PointerSchema",
    "SelectionSchema",
    "SurfaceStateSchema",
    "ZoomRequestSchema",
    # Extraction schemas
    "ColorizeRequestSchema",
    "DetectedImageSchema",
    "EnhancedImageSchema",
    "ExtractRequestSchema",
    "ExtractResponseSchema",
    "ExtractionRecordSchema",
    "HistorySchema",
    "ImagePayloadSchema",
    "QacFixSchema",
    "SelectRequestSchema",
    "history_to_schema",
    "record_to_schema",
]
