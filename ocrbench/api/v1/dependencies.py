"""Shared FastAPI dependencies for v1 API routers.

The workbench serves one local user, so a single cached
:class:`WorkbenchSession` backs every request. Handlers are built per
request around that session; tests swap the session through
``app.dependency_overrides[get_session]``.
"""
from __future__ import annotations

from functools import lru_cache

from fastapi import Depends

from ocrbench.application.commands.crop_selection import CropSelectionHandler
from ocrbench.application.commands.extract_text import ExtractTextHandler
from ocrbench.application.commands.image_actions import ImageActionsHandler
from ocrbench.application.commands.load_document import LoadDocumentHandler
from ocrbench.application.commands.navigate_document import ChangePageHandler, ChangeZoomHandler
from ocrbench.application.commands.run_qac import RunQacHandler
from ocrbench.application.commands.select_extraction import SelectExtractionHandler
from ocrbench.application.queries.get_history import GetHistoryHandler
from ocrbench.application.queries.get_surface_state import GetSurfaceStateHandler
from ocrbench.application.session import WorkbenchSession
from ocrbench.config import get_settings
from ocrbench.infrastructure.vision.credentials import build_credential_provider
from ocrbench.infrastructure.vision.retry import RetryExecutor
from ocrbench.infrastructure.vision.vision_response_parser import VisionResponseParser, get_response_parser


@lru_cache()
def _session() -> WorkbenchSession:
    settings = get_settings()
    return WorkbenchSession(build_credential_provider(settings), settings=settings)


def get_session() -> WorkbenchSession:
    """Provide the singleton workbench session."""
    return _session()


@lru_cache()
def _response_parser() -> VisionResponseParser:
    settings = get_settings()
    return get_response_parser(settings.response_format, default_confidence=settings.default_confidence)


def get_parser() -> VisionResponseParser:
    """Provide the response parser matching the configured response format."""
    return _response_parser()


@lru_cache()
def _retry_executor() -> RetryExecutor:
    settings = get_settings()
    return RetryExecutor(
        max_attempts=settings.retry_max_attempts,
        base_delay=settings.retry_base_delay,
        max_jitter=settings.retry_max_jitter,
    )


def get_retry_executor() -> RetryExecutor:
    """Provide the retry executor configured from settings."""
    return _retry_executor()


def get_load_document_handler(session: WorkbenchSession = Depends(get_session)) -> LoadDocumentHandler:
    return LoadDocumentHandler(session)


def get_change_page_handler(session: WorkbenchSession = Depends(get_session)) -> ChangePageHandler:
    return ChangePageHandler(session)


def get_change_zoom_handler(session: WorkbenchSession = Depends(get_session)) -> ChangeZoomHandler:
    return ChangeZoomHandler(session)


def get_crop_selection_handler(session: WorkbenchSession = Depends(get_session)) -> CropSelectionHandler:
    return CropSelectionHandler(session)


def get_extract_text_handler(
    session: WorkbenchSession = Depends(get_session),
    parser: VisionResponseParser = Depends(get_parser),
    retry: RetryExecutor = Depends(get_retry_executor),
) -> ExtractTextHandler:
    return ExtractTextHandler(session, parser, retry)


def get_run_qac_handler(
    session: WorkbenchSession = Depends(get_session),
    parser: VisionResponseParser = Depends(get_parser),
    retry: RetryExecutor = Depends(get_retry_executor),
) -> RunQacHandler:
    return RunQacHandler(session, parser, retry)


def get_image_actions_handler(
    session: WorkbenchSession = Depends(get_session),
    retry: RetryExecutor = Depends(get_retry_executor),
) -> ImageActionsHandler:
    return ImageActionsHandler(session, retry)


def get_select_extraction_handler(session: WorkbenchSession = Depends(get_session)) -> SelectExtractionHandler:
    return SelectExtractionHandler(session)


def get_history_handler(session: WorkbenchSession = Depends(get_session)) -> GetHistoryHandler:
    return GetHistoryHandler(session)


def get_surface_state_handler(session: WorkbenchSession = Depends(get_session)) -> GetSurfaceStateHandler:
    return GetSurfaceStateHandler(session)
