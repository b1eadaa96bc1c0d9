"""Vision infrastructure adapters."""

from .azure_vision_client import AzureVisionClient, GeneratedImage
from .credentials import ApiKeyCredentialProvider, ManagedCredentialProvider, build_credential_provider
from .retry import RetryExecutor, is_invalid_credential, is_retryable, with_retry
from .vision_prompt_builder import VisionPromptBuilder, VisionRequest, build_enhance_prompt
from .vision_response_parser import (
    DelimitedResponseParser,
    ImageRegion,
    ModelResponse,
    OcrResult,
    QacResult,
    StructuredResponseParser,
    VisionResponseParser,
    get_response_parser,
)

__all__ = [
    "ApiKeyCredentialProvider",
    "AzureVisionClient",
    "DelimitedResponseParser",
    "GeneratedImage",
    "ImageRegion",
    "ManagedCredentialProvider",
    "ModelResponse",
    "OcrResult",
    "QacResult",
    "RetryExecutor",
    "StructuredResponseParser",
    "VisionPromptBuilder",
    "VisionRequest",
    "VisionResponseParser",
    "build_credential_provider",
    "build_enhance_prompt",
    "get_response_parser",
    "is_invalid_credential",
    "is_retryable",
    "with_retry",
]
