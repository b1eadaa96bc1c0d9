"""Bounded exponential-backoff retry for AI requests.

Only transient availability failures (overloaded / unavailable / 503) are
retried. Everything else is classified once and raised immediately.
"""
from __future__ import annotations

import asyncio
import logging
import random
from typing import Awaitable, Callable, Optional, TypeVar

from ocrbench.constants import INVALID_CREDENTIAL_PHRASES, RETRYABLE_ERROR_PHRASES
from ocrbench.domain.exceptions import (
    AIServiceError,
    DomainException,
    InvalidCredentialError,
    RetryExhaustedError,
)

logger = logging.getLogger(__name__)

T = TypeVar("T")
StatusSink = Callable[[str], None]


def _error_text(exc: BaseException) -> str:
    return (str(exc) or exc.__class__.__name__).lower()


def is_retryable(exc: BaseException) -> bool:
    """True when the error message signals transient service unavailability."""
    text = _error_text(exc)
    return any(phrase in text for phrase in RETRYABLE_ERROR_PHRASES)


def is_invalid_credential(exc: BaseException) -> bool:
    text = _error_text(exc)
    return any(phrase in text for phrase in INVALID_CREDENTIAL_PHRASES)


class RetryExecutor:
    """Runs a request function up to ``max_attempts`` times."""

    def __init__(
        self,
        *,
        max_attempts: int = 3,
        base_delay: float = 1.0,
        max_jitter: float = 1.0,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
        jitter: Callable[[], float] = random.random,
    ) -> None:
        if max_attempts < 1:
            raise ValueError("max_attempts must be >= 1")
        self._max_attempts = max_attempts
        self._base_delay = base_delay
        self._max_jitter = max_jitter
        self._sleep = sleep
        self._jitter = jitter

    @property
    def max_attempts(self) -> int:
        return self._max_attempts

    def backoff_delay(self, attempt: int) -> float:
        """Delay in seconds after the zero-based ``attempt`` failed."""
        return self._base_delay * (2 ** attempt) + self._jitter() * self._max_jitter

    async def run(
        self,
        request_fn: Callable[[], Awaitable[T]],
        on_status: Optional[StatusSink] = None,
    ) -> T:
        last_error: Optional[Exception] = None

        for attempt in range(self._max_attempts):
            try:
                return await request_fn()
            except DomainException:
                raise
            except Exception as exc:  # noqa: BLE001 - transport errors are classified below
                last_error = exc
                if not is_retryable(exc):
                    if is_invalid_credential(exc):
                        logger.error("AI service rejected the credential: %s", exc)
                        raise InvalidCredentialError(f"{AIServiceError.PREFIX}{exc}", cause=exc) from exc
                    logger.error("AI request failed with a non-retryable error: %s", exc)
                    raise AIServiceError.wrap(exc) from exc

                if attempt + 1 >= self._max_attempts:
                    break

                delay = self.backoff_delay(attempt)
                message = (
                    f"Model is busy. Retrying in {round(delay)}s... "
                    f"(Attempt {attempt + 1}/{self._max_attempts})"
                )
                logger.warning(message, extra={"attempt": attempt + 1, "delay": round(delay, 3)})
                if on_status is not None:
                    on_status(message)
                await self._sleep(delay)

        logger.error("AI service still unavailable after %s attempts: %s", self._max_attempts, last_error)
        raise RetryExhaustedError(self._max_attempts, last_error) from last_error


async def with_retry(
    request_fn: Callable[[], Awaitable[T]],
    on_status: Optional[StatusSink] = None,
    **kwargs,
) -> T:
    """Convenience wrapper around a one-off :class:`RetryExecutor`."""
    return await RetryExecutor(**kwargs).run(request_fn, on_status)
