"""Translate domain exceptions into HTTP responses."""
from __future__ import annotations

import logging

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from ocrbench.domain.exceptions import (
    CATEGORY_CREDENTIAL,
    CATEGORY_INPUT,
    CATEGORY_TRANSIENT,
    DomainException,
    PreconditionError,
)

logger = logging.getLogger(__name__)


def status_for(exc: DomainException) -> int:
    if isinstance(exc, PreconditionError):
        return 409
    if exc.category == CATEGORY_INPUT:
        return 400
    if exc.category == CATEGORY_CREDENTIAL:
        return 401
    if exc.category == CATEGORY_TRANSIENT:
        return 503
    return 502


async def domain_exception_handler(request: Request, exc: DomainException) -> JSONResponse:
    status_code = status_for(exc)
    logger.info(
        "%s %s failed with %s: %s",
        request.method,
        request.url.path,
        exc.__class__.__name__,
        exc.message,
        extra={"status_code": status_code, "category": exc.category},
    )
    return JSONResponse(
        status_code=status_code,
        content={"message": exc.user_message, "category": exc.category},
    )


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(DomainException, domain_exception_handler)
