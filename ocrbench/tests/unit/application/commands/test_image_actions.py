"""
Unit tests for per-image actions (enhance, colorize, payload reveal).
"""
import asyncio

import pytest

from conftest import make_page
from ocrbench.application.commands.image_actions import (
    NO_IMAGE_MESSAGE,
    EnhanceUploadCommand,
    ImageActionCommand,
    ImageActionsHandler,
    ToggleColorizeCommand,
)
from ocrbench.domain.entities.extraction_record import DetectedImage, ExtractionRecord
from ocrbench.domain.exceptions import (
    CATEGORY_TRANSIENT,
    ImageActionError,
    PreconditionError,
    RenderError,
    UnsupportedMediaTypeError,
)
from ocrbench.domain.value_objects.bounding_box import BoundingBox
from ocrbench.domain.value_objects.confidence import Confidence
from ocrbench.infrastructure.raster.image_processor import encode_png
from ocrbench.infrastructure.vision.azure_vision_client import GeneratedImage


@pytest.fixture
def handler(loaded_session, retry):
    return ImageActionsHandler(loaded_session, retry)


@pytest.fixture
def record(loaded_session):
    images = [
        DetectedImage.create(BoundingBox(0, 0, 50, 50), "Zmlyc3Q="),
        DetectedImage.create(BoundingBox(50, 50, 50, 50), "c2Vjb25k"),
    ]
    record = ExtractionRecord.create(loaded_session.current_context(), "text", Confidence(90), images)
    loaded_session.history.add(record)
    return record


class TestEnhance:
    def test_success_stores_data_url_and_clears_processing(self, handler, loaded_session, vision_client, record):
        first = record.detected_images[0]
        vision_client.enhance_responses.append(GeneratedImage(base64="RU5I"))

        updated = asyncio.run(handler.enhance(ImageActionCommand(image_id=first.image_id)))

        image = updated.get_image(first.image_id)
        assert image.enhanced_image_url == "data:image/png;base64,RU5I"
        assert image.is_processing is False
        assert image.base64 == first.base64
        assert loaded_session.history.get_active() == updated
        assert vision_client.calls_named("enhance")[0] == ("enhance", first.base64, False)

    def test_processing_flag_set_while_in_flight(self, handler, loaded_session, record):
        first = record.detected_images[0]
        seen = {}

        class ObservingClient:
            async def enhance_image(self, image_base64, colorize):
                seen["processing"] = loaded_session.history.get_active().get_image(first.image_id).is_processing
                return GeneratedImage(base64="RU5I")

        loaded_session._client = ObservingClient()
        asyncio.run(handler.enhance(ImageActionCommand(image_id=first.image_id)))

        assert seen["processing"] is True

    def test_result_for_cleared_history_is_dropped(self, handler, loaded_session, record):
        first = record.detected_images[0]

        class ClearingClient:
            async def enhance_image(self, image_base64, colorize):
                loaded_session.history.clear()
                return GeneratedImage(base64="RU5I")

        loaded_session._client = ClearingClient()
        result = asyncio.run(handler.enhance(ImageActionCommand(image_id=first.image_id)))

        assert result is None
        assert loaded_session.history.count() == 0

    def test_colorize_flag_is_forwarded(self, handler, vision_client, record):
        first = record.detected_images[0]
        handler.toggle_colorize(ToggleColorizeCommand(image_id=first.image_id))
        vision_client.enhance_responses.append(GeneratedImage(base64="RU5I"))

        asyncio.run(handler.enhance(ImageActionCommand(image_id=first.image_id)))

        assert vision_client.calls_named("enhance")[0][2] is True

    def test_missing_image_data_fails_and_clears_processing(self, handler, loaded_session, vision_client, record):
        first = record.detected_images[0]
        vision_client.enhance_responses.append(None)

        with pytest.raises(ImageActionError) as excinfo:
            asyncio.run(handler.enhance(ImageActionCommand(image_id=first.image_id)))

        assert excinfo.value.message == NO_IMAGE_MESSAGE
        assert excinfo.value.image_id == first.image_id
        image = loaded_session.history.get_active().get_image(first.image_id)
        assert image.is_processing is False
        assert image.base64 == first.base64
        assert image.enhanced_image_url is None

    def test_service_failure_is_scoped_to_one_image(self, handler, loaded_session, vision_client, record):
        first, second = record.detected_images
        vision_client.enhance_responses.append(GeneratedImage(base64="T0s="))
        asyncio.run(handler.enhance(ImageActionCommand(image_id=second.image_id)))
        vision_client.enhance_responses.extend([RuntimeError("503 overloaded")] * 3)

        with pytest.raises(ImageActionError) as excinfo:
            asyncio.run(handler.enhance(ImageActionCommand(image_id=first.image_id)))

        assert excinfo.value.category == CATEGORY_TRANSIENT
        active = loaded_session.history.get_active()
        assert active.get_image(first.image_id).is_processing is False
        assert active.get_image(second.image_id).enhanced_image_url == "data:image/png;base64,T0s="
        assert active.text == "text"

    def test_invalid_credential_invalidates_session(self, handler, loaded_session, vision_client, record):
        vision_client.enhance_responses.append(RuntimeError("invalid api key"))

        with pytest.raises(ImageActionError):
            asyncio.run(handler.enhance(ImageActionCommand(image_id=record.detected_images[0].image_id)))

        assert not loaded_session.credentials.has_credential()

    def test_concurrent_enhancements_do_not_clobber(self, handler, loaded_session, record):
        first, second = record.detected_images

        class SlowClient:
            async def enhance_image(self, image_base64, colorize):
                await asyncio.sleep(0.01 if image_base64 == first.base64 else 0)
                return GeneratedImage(base64=f"enh-{image_base64}")

        loaded_session._client = SlowClient()

        async def run_both():
            await asyncio.gather(
                handler.enhance(ImageActionCommand(image_id=first.image_id)),
                handler.enhance(ImageActionCommand(image_id=second.image_id)),
            )

        asyncio.run(run_both())

        active = loaded_session.history.get_active()
        assert active.get_image(first.image_id).enhanced_image_url.endswith(f"enh-{first.base64}")
        assert active.get_image(second.image_id).enhanced_image_url.endswith(f"enh-{second.base64}")
        assert not any(image.is_processing for image in active.detected_images)

    def test_unknown_image(self, handler, record):
        with pytest.raises(PreconditionError):
            asyncio.run(handler.enhance(ImageActionCommand(image_id="img_missing")))

    def test_requires_active_record(self, handler):
        with pytest.raises(PreconditionError):
            asyncio.run(handler.enhance(ImageActionCommand(image_id="img_any")))


class TestLocalActions:
    def test_toggle_colorize_flips_and_sets(self, handler, loaded_session, record):
        first = record.detected_images[0]
        updated = handler.toggle_colorize(ToggleColorizeCommand(image_id=first.image_id))
        assert updated.get_image(first.image_id).colorize is True
        updated = handler.toggle_colorize(ToggleColorizeCommand(image_id=first.image_id, colorize=True))
        assert updated.get_image(first.image_id).colorize is True
        updated = handler.toggle_colorize(ToggleColorizeCommand(image_id=first.image_id))
        assert updated.get_image(first.image_id).colorize is False
        assert loaded_session.history.count() == 1

    def test_reveal_payload_is_local(self, handler, vision_client, record):
        first = record.detected_images[0]
        payload = handler.reveal_payload(ImageActionCommand(image_id=first.image_id))
        assert payload.base64 == "Zmlyc3Q="
        assert payload.data_url == "data:image/png;base64,Zmlyc3Q="
        assert vision_client.calls == []


class TestEnhanceUpload:
    def test_enhances_without_touching_history(self, handler, loaded_session, vision_client):
        vision_client.enhance_responses.append(GeneratedImage(base64="RU5I"))

        generated = asyncio.run(
            handler.enhance_upload(EnhanceUploadCommand(data=encode_png(make_page(8, 8)), media_type="image/png", colorize=True))
        )

        assert generated.data_url == "data:image/png;base64,RU5I"
        assert vision_client.calls_named("enhance")[0][2] is True
        assert loaded_session.history.count() == 0

    def test_rejects_non_images(self, handler):
        with pytest.raises(UnsupportedMediaTypeError):
            asyncio.run(handler.enhance_upload(EnhanceUploadCommand(data=b"%PDF", media_type="application/pdf")))

    def test_rejects_undecodable_images(self, handler):
        with pytest.raises(RenderError):
            asyncio.run(handler.enhance_upload(EnhanceUploadCommand(data=b"junk", media_type="image/png")))

    def test_no_image_returned(self, handler, vision_client):
        vision_client.enhance_responses.append(None)
        with pytest.raises(ImageActionError):
            asyncio.run(
                handler.enhance_upload(EnhanceUploadCommand(data=encode_png(make_page(8, 8)), media_type="image/png"))
            )
