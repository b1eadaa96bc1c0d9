"""
Domain Entity: ExtractionRecord

One OCR result in the session history, together with its QAC overlay and
the non-text images detected on the same raster.
"""
from __future__ import annotations

from dataclasses import dataclass, replace
from datetime import datetime
from typing import Any, Callable, Dict, Iterable, Optional
from uuid import uuid4

from ocrbench.domain.value_objects.bounding_box import BoundingBox
from ocrbench.domain.value_objects.confidence import Confidence
from ocrbench.domain.value_objects.source_context import FileType, SourceContext


@dataclass(frozen=True)
class QacFix:
    """A single correction made during quality assurance."""

    original: str
    corrected: str
    type: str
    description: str

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "QacFix":
        return cls(
            original=str(data.get("original") or ""),
            corrected=str(data.get("corrected") or ""),
            type=str(data.get("type") or ""),
            description=str(data.get("description") or ""),
        )

    def to_dict(self) -> Dict[str, str]:
        return {
            "original": self.original,
            "corrected": self.corrected,
            "type": self.type,
            "description": self.description,
        }


@dataclass(frozen=True)
class DetectedImage:
    """
    A non-text region of the page, cropped out of the original raster.

    ``base64`` is derived locally from the crop; ``enhanced_image_url`` is
    filled by a later enhancement request.
    """

    image_id: str
    bounding_box: BoundingBox
    base64: str
    mime_type: str = "image/png"
    enhanced_image_url: Optional[str] = None
    is_processing: bool = False
    description: Optional[str] = None
    colorize: bool = False

    @classmethod
    def create(
        cls,
        bounding_box: BoundingBox,
        base64: str,
        *,
        description: Optional[str] = None,
        mime_type: str = "image/png",
    ) -> "DetectedImage":
        return cls(
            image_id=f"img_{uuid4().hex}",
            bounding_box=bounding_box,
            base64=base64,
            mime_type=mime_type,
            description=description or None,
        )

    @property
    def data_url(self) -> str:
        return f"data:{self.mime_type};base64,{self.base64}"

    def mark_processing(self) -> "DetectedImage":
        return replace(self, is_processing=True)

    def with_enhanced(self, image_url: str) -> "DetectedImage":
        return replace(self, enhanced_image_url=image_url, is_processing=False)

    def clear_processing(self) -> "DetectedImage":
        return replace(self, is_processing=False)

    def with_colorize(self, colorize: bool) -> "DetectedImage":
        return replace(self, colorize=colorize)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.image_id,
            **self.bounding_box.to_dict(),
            "base64": self.base64,
            "mimeType": self.mime_type,
            "enhancedImageUrl": self.enhanced_image_url,
            "isProcessing": self.is_processing,
            "description": self.description,
            "colorize": self.colorize,
        }


@dataclass(frozen=True)
class ExtractionRecord:
    """
    The unit of extraction history.

    Business rules:
    - Created only by a successful OCR pass, with a fresh identity
    - Amendments (QAC, image state) produce a new value with the same identity
    - QAC fields stay unset until a QAC pass succeeds
    """

    record_id: str
    text: str
    confidence: Confidence
    file_name: str
    file_type: FileType
    page_number: int
    timestamp: datetime
    detected_images: tuple[DetectedImage, ...] = ()
    qac_text: Optional[str] = None
    qac_fixes: tuple[QacFix, ...] = ()
    is_qac_processed: bool = False
    extraction_method: str = "ai-ocr"

    def __post_init__(self):
        if self.page_number < 1:
            raise ValueError("Page number must be >= 1")
        if not isinstance(self.detected_images, tuple):
            object.__setattr__(self, 'detected_images', tuple(self.detected_images))
        if not isinstance(self.qac_fixes, tuple):
            object.__setattr__(self, 'qac_fixes', tuple(self.qac_fixes))

    # ==================== Factory Methods ====================

    @classmethod
    def create(
        cls,
        source: SourceContext,
        text: str,
        confidence: Confidence,
        detected_images: Iterable[DetectedImage] = (),
        *,
        timestamp: Optional[datetime] = None,
    ) -> "ExtractionRecord":
        """Create a new record for an OCR pass over ``source``."""
        return cls(
            record_id=f"ext_{uuid4().hex}",
            text=text,
            confidence=confidence,
            file_name=source.file_name,
            file_type=source.file_type,
            page_number=source.page_number,
            timestamp=timestamp or datetime.now(),
            detected_images=tuple(detected_images),
        )

    # ==================== Amendments ====================

    def with_qac(self, corrected_text: str, fixes: Iterable[QacFix]) -> "ExtractionRecord":
        return replace(
            self,
            qac_text=corrected_text,
            qac_fixes=tuple(fixes),
            is_qac_processed=True,
        )

    def update_image(
        self,
        image_id: str,
        updater: Callable[[DetectedImage], DetectedImage],
    ) -> "ExtractionRecord":
        """Apply ``updater`` to the image with ``image_id``; other images are untouched."""
        images = tuple(
            updater(image) if image.image_id == image_id else image
            for image in self.detected_images
        )
        return replace(self, detected_images=images)

    # ==================== Queries ====================

    def get_image(self, image_id: str) -> Optional[DetectedImage]:
        for image in self.detected_images:
            if image.image_id == image_id:
                return image
        return None

    @property
    def display_text(self) -> str:
        """The corrected text when QAC has run, otherwise the raw OCR text."""
        if self.is_qac_processed and self.qac_text:
            return self.qac_text
        return self.text

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.record_id,
            "text": self.text,
            "confidence": self.confidence.value,
            "fileName": self.file_name,
            "fileType": self.file_type,
            "pageNumber": self.page_number,
            "timestamp": self.timestamp.isoformat(),
            "qacText": self.qac_text,
            "qacFixes": [fix.to_dict() for fix in self.qac_fixes],
            "isQACProcessed": self.is_qac_processed,
            "extractionMethod": self.extraction_method,
            "detectedImages": [image.to_dict() for image in self.detected_images],
        }
