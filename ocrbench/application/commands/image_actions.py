"""Per-image actions on detected images: enhance, colorize toggle, payload reveal.

Every mutation goes through the history's ``amend`` so concurrent actions on
different images of one record only ever touch their own image.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional

from ocrbench.constants import IMAGE_MEDIA_PREFIX
from ocrbench.domain.entities.extraction_record import DetectedImage, ExtractionRecord
from ocrbench.domain.exceptions import (
    DomainException,
    ImageActionError,
    InvalidCredentialError,
    PreconditionError,
    UnsupportedMediaTypeError,
)
from ocrbench.infrastructure.raster.image_processor import decode_image, encode_base64, ensure_bgr
from ocrbench.infrastructure.vision.azure_vision_client import GeneratedImage
from ocrbench.infrastructure.vision.retry import RetryExecutor

from ocrbench.application.session import WorkbenchSession

logger = logging.getLogger(__name__)

NO_IMAGE_MESSAGE = "Image enhancement failed to return an image."
STANDALONE_IMAGE_ID = "upload"


@dataclass(frozen=True)
class ImageActionCommand:
    image_id: str
    record_id: Optional[str] = None


@dataclass(frozen=True)
class ToggleColorizeCommand:
    image_id: str
    colorize: Optional[bool] = None
    record_id: Optional[str] = None


@dataclass(frozen=True)
class EnhanceUploadCommand:
    data: bytes
    media_type: str
    colorize: bool = False


@dataclass(frozen=True)
class ImagePayload:
    image_id: str
    mime_type: str
    base64: str
    data_url: str


class ImageActionsHandler:
    """Handles Workflow C actions scoped to a single detected image."""

    def __init__(self, session: WorkbenchSession, retry: RetryExecutor):
        self._session = session
        self._retry = retry

    # ------------------------------------------------------------------
    # Enhancement
    # ------------------------------------------------------------------
    async def enhance(self, command: ImageActionCommand) -> Optional[ExtractionRecord]:
        """Enhance one detected image; ``None`` when its extraction left history meanwhile."""
        record, image = self._locate(command.record_id, command.image_id)
        client = self._session.vision_client()

        history = self._session.history
        history.amend(record.record_id, lambda r: r.update_image(image.image_id, DetectedImage.mark_processing))
        try:
            generated = await self._retry.run(lambda: client.enhance_image(image.base64, image.colorize))
        except InvalidCredentialError as exc:
            self._clear_processing(record.record_id, image.image_id)
            self._session.invalidate_credential()
            raise ImageActionError(image.image_id, exc.user_message, cause=exc) from exc
        except DomainException as exc:
            self._clear_processing(record.record_id, image.image_id)
            raise ImageActionError(image.image_id, exc.message, cause=exc) from exc
        except Exception as exc:  # noqa: BLE001 - never let an unclassified error escape
            logger.exception("Unexpected error enhancing image %s", image.image_id)
            self._clear_processing(record.record_id, image.image_id)
            raise ImageActionError(image.image_id, "Failed to enhance image.", cause=exc) from exc

        if generated is None:
            self._clear_processing(record.record_id, image.image_id)
            raise ImageActionError(image.image_id, NO_IMAGE_MESSAGE)

        updated = history.amend(
            record.record_id,
            lambda r: r.update_image(image.image_id, lambda img: img.with_enhanced(generated.data_url)),
        )
        if updated is None:
            logger.info("Discarding enhanced image %s; its extraction is no longer in history", image.image_id)
            return None
        logger.info("Enhanced image %s of %s", image.image_id, record.record_id)
        return updated

    async def enhance_upload(self, command: EnhanceUploadCommand) -> GeneratedImage:
        """Enhance an arbitrary uploaded image; history is not touched."""
        media_type = (command.media_type or "").split(";", 1)[0].strip().lower()
        if not media_type.startswith(IMAGE_MEDIA_PREFIX):
            raise UnsupportedMediaTypeError(command.media_type)
        payload = encode_base64(ensure_bgr(decode_image(command.data)))
        client = self._session.vision_client()

        try:
            generated = await self._retry.run(lambda: client.enhance_image(payload, command.colorize))
        except InvalidCredentialError:
            self._session.invalidate_credential()
            raise
        if generated is None:
            raise ImageActionError(STANDALONE_IMAGE_ID, NO_IMAGE_MESSAGE)
        return generated

    # ------------------------------------------------------------------
    # Local actions
    # ------------------------------------------------------------------
    def toggle_colorize(self, command: ToggleColorizeCommand) -> ExtractionRecord:
        record, image = self._locate(command.record_id, command.image_id)
        colorize = (not image.colorize) if command.colorize is None else command.colorize
        updated = self._session.history.amend(
            record.record_id,
            lambda r: r.update_image(image.image_id, lambda img: img.with_colorize(colorize)),
        )
        return updated or record

    def reveal_payload(self, command: ImageActionCommand) -> ImagePayload:
        _, image = self._locate(command.record_id, command.image_id)
        return ImagePayload(
            image_id=image.image_id,
            mime_type=image.mime_type,
            base64=image.base64,
            data_url=image.data_url,
        )

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------
    def _locate(self, record_id: Optional[str], image_id: str) -> tuple[ExtractionRecord, DetectedImage]:
        history = self._session.history
        record = history.get(record_id) if record_id else history.get_active()
        if record is None:
            raise PreconditionError("No extraction is selected.")
        image = record.get_image(image_id)
        if image is None:
            raise PreconditionError(f"Image {image_id} was not found in the selected extraction.")
        return record, image

    def _clear_processing(self, record_id: str, image_id: str) -> None:
        self._session.history.amend(record_id, lambda r: r.update_image(image_id, DetectedImage.clear_processing))
