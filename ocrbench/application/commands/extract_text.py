"""ExtractText Command - OCR of the displayed raster plus sub-image detection.

Sequence: encode -> OCR request (with retry) -> parse -> optional detection
-> crop each detected region from the original raster -> prepend a new
record to history. The canvas is always restored to the full page
afterwards.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import List, Optional

from ocrbench.domain.entities.extraction_record import DetectedImage, ExtractionRecord
from ocrbench.domain.entities.raster_surface import RasterSurface
from ocrbench.domain.exceptions import (
    AIServiceError,
    DomainException,
    InvalidCredentialError,
    PreconditionError,
)
from ocrbench.infrastructure.raster.canvas import crop_original
from ocrbench.infrastructure.raster.image_processor import encode_base64
from ocrbench.infrastructure.vision.retry import RetryExecutor
from ocrbench.infrastructure.vision.vision_response_parser import VisionResponseParser

from ocrbench.application.progress import ProgressSink, ProgressTracker
from ocrbench.application.session import VisionClient, WorkbenchSession

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ExtractTextCommand:
    detect_images: Optional[bool] = None


class ExtractTextHandler:
    """Handles ExtractText commands."""

    def __init__(self, session: WorkbenchSession, parser: VisionResponseParser, retry: RetryExecutor):
        self._session = session
        self._parser = parser
        self._retry = retry

    async def handle(
        self,
        command: ExtractTextCommand,
        progress: Optional[ProgressSink] = None,
    ) -> Optional[ExtractionRecord]:
        """Run the workflow; returns ``None`` when the result arrived for a page no longer shown."""
        surface = self._session.canvas.surface
        if surface is None:
            raise PreconditionError("No page is loaded. Upload a file first.")
        client = self._session.vision_client()

        tracker = self._session.start_progress(progress)
        context = surface.source
        detect = self._session.settings.detect_images if command.detect_images is None else command.detect_images

        try:
            tracker.report(10, "Preparing for text extraction...")
            image_base64 = encode_base64(surface.displayed)

            tracker.report(30, "Connecting to the AI service for OCR...")
            response = await self._retry.run(lambda: client.ocr(image_base64), tracker.status)

            tracker.report(60, "Processing OCR response...")
            ocr = self._parser.parse_ocr(response)

            images: List[DetectedImage] = []
            if detect:
                tracker.report(70, "Detecting images...")
                images = await self._detect_images(client, surface, tracker)

            if not self._session.is_current(context):
                logger.info(
                    "Discarding OCR result for %s page %s; the view has changed",
                    context.file_name,
                    context.page_number,
                )
                tracker.fail("Discarded result for a page that is no longer displayed.")
                return None

            record = ExtractionRecord.create(context, ocr.text, ocr.confidence, images)
            self._session.history.add(record)
            tracker.complete("Text extraction completed successfully!")
            logger.info(
                "Extracted %s characters from %s page %s (confidence %s, %s images)",
                len(record.text),
                record.file_name,
                record.page_number,
                record.confidence.value,
                len(record.detected_images),
            )
            return record
        except InvalidCredentialError:
            self._session.invalidate_credential()
            tracker.fail("Extraction failed")
            raise
        except DomainException:
            tracker.fail("Extraction failed")
            raise
        except Exception as exc:  # noqa: BLE001 - never let an unclassified error escape
            logger.exception("Unexpected error extracting text")
            tracker.fail("Extraction failed")
            raise DomainException("Failed to extract text.") from exc
        finally:
            if self._session.is_current(context):
                self._session.canvas.restore_original()

    async def _detect_images(
        self,
        client: VisionClient,
        surface: RasterSurface,
        tracker: ProgressTracker,
    ) -> List[DetectedImage]:
        """Detect non-text regions on the full page and crop each from the original raster.

        Detection is best-effort: anything short of a credential failure leaves
        the OCR result intact with no images.
        """
        original_base64 = encode_base64(surface.original)
        try:
            response = await self._retry.run(lambda: client.detect_images(original_base64), tracker.status)
            regions = self._parser.parse_regions(response)
        except InvalidCredentialError:
            raise
        except AIServiceError as exc:
            logger.warning("Image detection failed; continuing without images: %s", exc)
            return []

        tracker.report(85, "Cropping detected images...")
        images: List[DetectedImage] = []
        for region in regions:
            payload = crop_original(surface, region.bounding_box)
            if payload is None:
                logger.debug("Detected region %s lies outside the page", region.bounding_box)
                continue
            images.append(DetectedImage.create(region.bounding_box, payload, description=region.description))
        return images
