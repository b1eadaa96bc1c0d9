"""Domain exceptions.

Every error raised across a workflow boundary is a :class:`DomainException`
carrying a ``category`` the presentation layer uses to choose between
"sign in again", "try again later" and a plain failure message.
"""
from __future__ import annotations

from typing import Optional

CATEGORY_INPUT = "input"
CATEGORY_CREDENTIAL = "credential"
CATEGORY_TRANSIENT = "transient"
CATEGORY_FATAL = "fatal"


class DomainException(Exception):
    """Base exception for domain layer errors."""

    category = CATEGORY_FATAL

    def __init__(self, message: str, *, user_message: Optional[str] = None):
        super().__init__(message)
        self.message = message
        self.user_message = user_message or message


class RenderError(DomainException):
    """The source file could not be decoded into a raster."""

    category = CATEGORY_INPUT

    def __init__(self, message: str = "Failed to render the file. It might be corrupted or unsupported.", cause: Exception | None = None):
        super().__init__(message)
        self.cause = cause


class UnsupportedMediaTypeError(RenderError):
    """The declared media type is neither a PDF nor an image."""

    def __init__(self, media_type: str):
        super().__init__("Unsupported file type. Please upload a PDF or an image.")
        self.media_type = media_type


class PreconditionError(DomainException):
    """A workflow was invoked without the state it requires."""

    category = CATEGORY_INPUT


class InvalidCropError(DomainException):
    """A crop rectangle does not overlap the displayed surface."""

    category = CATEGORY_INPUT


class AIServiceError(DomainException):
    """The AI service call failed."""

    PREFIX = "The AI returned an error: "

    def __init__(self, message: str, *, user_message: Optional[str] = None, cause: Exception | None = None):
        super().__init__(message, user_message=user_message)
        self.cause = cause

    @classmethod
    def wrap(cls, exc: Exception) -> "AIServiceError":
        return cls(f"{cls.PREFIX}{exc}", cause=exc)


class TransientServiceError(AIServiceError):
    """The service is overloaded or unavailable."""

    category = CATEGORY_TRANSIENT


class RetryExhaustedError(TransientServiceError):
    """Every attempt failed with a transient error."""

    def __init__(self, attempts: int, last_error: Exception):
        super().__init__(
            "The AI service is still busy after multiple attempts. "
            f"Please try again later. Last error: {last_error}",
            cause=last_error,
        )
        self.attempts = attempts


class InvalidCredentialError(AIServiceError):
    """The service rejected the credential; the user must supply a new one."""

    category = CATEGORY_CREDENTIAL

    def __init__(self, message: str, *, cause: Exception | None = None):
        super().__init__(
            message,
            user_message="Your API key is not valid. Please enter a new key.",
            cause=cause,
        )


class ResponseError(AIServiceError):
    """The service answered but the answer is unusable."""

    def __init__(self, message: str, *, raw_text: str = "", user_message: Optional[str] = None):
        super().__init__(
            message,
            user_message=user_message or "There was an issue processing the AI's response. Please try again.",
        )
        self.raw_text = raw_text


class MalformedResponseError(ResponseError):
    """The response does not match the expected schema or grammar."""


class EmptyResponseError(ResponseError):
    """The service returned no text at all."""

    def __init__(self, message: str = "The AI returned an empty response. This could be due to a network issue or an issue with the file.", *, finish_reason: Optional[str] = None):
        super().__init__(message, user_message=message)
        self.finish_reason = finish_reason


class SafetyBlockedError(EmptyResponseError):
    """The service withheld its answer because of content-safety filters."""

    def __init__(self, message: str = "The request was blocked by the API's safety filters. Please try with a different image.", *, finish_reason: Optional[str] = None):
        super().__init__(message, finish_reason=finish_reason)


class ImageActionError(DomainException):
    """An action on a single detected image failed."""

    def __init__(self, image_id: str, message: str, *, cause: Exception | None = None):
        super().__init__(message)
        self.image_id = image_id
        self.cause = cause
        if isinstance(cause, DomainException):
            self.category = cause.category
