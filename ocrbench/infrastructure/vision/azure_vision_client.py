"""Azure OpenAI vision client adapter."""
from __future__ import annotations

import base64
import logging
from dataclasses import dataclass
from typing import Any, Optional

from openai import AsyncAzureOpenAI, BadRequestError

from ocrbench.config import Settings, get_settings
from ocrbench.constants import PAYLOAD_MIME
from ocrbench.domain.services.credential_provider import Credential
from ocrbench.infrastructure.raster.image_processor import to_data_url

from .vision_prompt_builder import VisionPromptBuilder, VisionRequest, build_enhance_prompt
from .vision_response_parser import ModelResponse

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class GeneratedImage:
    """An image returned by the image model."""

    base64: str
    mime_type: str = PAYLOAD_MIME

    @property
    def data_url(self) -> str:
        return to_data_url(self.base64, self.mime_type)


class AzureVisionClient:
    """Issues OCR, QAC, detection and enhancement requests to Azure OpenAI.

    Each method performs exactly one request; retries and parsing are the
    caller's concern.
    """

    def __init__(
        self,
        credential: Credential,
        *,
        settings: Optional[Settings] = None,
        client: Optional[AsyncAzureOpenAI] = None,
        prompt_builder: Optional[VisionPromptBuilder] = None,
    ) -> None:
        settings = settings or get_settings()

        if client is not None:
            self._client = client
        else:
            endpoint = settings.ensure_endpoint()
            if not endpoint:
                raise RuntimeError("AZURE_OPENAI_ENDPOINT must be configured before using the vision client")
            if credential.api_key:
                self._client = AsyncAzureOpenAI(
                    api_key=credential.api_key,
                    api_version=settings.azure_openai_api_version,
                    azure_endpoint=endpoint,
                    max_retries=0,
                )
            else:
                self._client = AsyncAzureOpenAI(
                    api_version=settings.azure_openai_api_version,
                    azure_endpoint=endpoint,
                    azure_ad_token_provider=credential.token_provider,
                    max_retries=0,
                )

        self._ocr_model = settings.ocr_model
        self._image_model = settings.image_model
        self._max_output_tokens = settings.max_output_tokens
        self._temperature = settings.temperature
        self._prompts = prompt_builder or VisionPromptBuilder(settings.response_format)

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------
    async def ocr(self, image_base64: str) -> ModelResponse:
        return await self._complete(self._prompts.build_ocr_request(image_base64))

    async def qac(self, original_text: str, image_base64: str) -> ModelResponse:
        return await self._complete(self._prompts.build_qac_request(original_text, image_base64))

    async def detect_images(self, image_base64: str) -> ModelResponse:
        return await self._complete(self._prompts.build_detect_request(image_base64))

    async def enhance_image(self, image_base64: str, colorize: bool) -> Optional[GeneratedImage]:
        """Return the enhanced image, or ``None`` when the model produced no image data."""
        response = await self._client.images.edit(
            model=self._image_model,
            image=("image.png", base64.b64decode(image_base64), PAYLOAD_MIME),
            prompt=build_enhance_prompt(colorize),
        )
        data = getattr(response, "data", None) or []
        encoded = getattr(data[0], "b64_json", None) if data else None
        if not encoded:
            logger.warning("Image model returned no image data")
            return None
        output_format = getattr(response, "output_format", None)
        mime_type = f"image/{output_format}" if output_format else PAYLOAD_MIME
        return GeneratedImage(base64=encoded, mime_type=mime_type)

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------
    async def _complete(self, request: VisionRequest) -> ModelResponse:
        kwargs: dict[str, Any] = {
            "model": self._ocr_model,
            "messages": request.messages,
            "max_completion_tokens": self._max_output_tokens,
        }
        if self._temperature is not None:
            kwargs["temperature"] = self._temperature
        if request.response_format is not None:
            kwargs["response_format"] = request.response_format

        try:
            response = await self._client.chat.completions.create(**kwargs)
        except BadRequestError as exc:
            # Azure rejects filtered prompts up front instead of returning an empty choice.
            if getattr(exc, "code", None) == "content_filter":
                logger.warning("Vision request rejected by the content filter")
                return ModelResponse(text=None, finish_reason="content_filter")
            raise

        if not response.choices:
            return ModelResponse(text=None, finish_reason=None)
        choice = response.choices[0]
        return ModelResponse(text=choice.message.content or None, finish_reason=choice.finish_reason)
