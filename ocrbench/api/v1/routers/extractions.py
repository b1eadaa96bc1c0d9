"""Extraction endpoints: OCR, history, QAC and detected-image actions."""
from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends, HTTPException

from ocrbench.api.schemas import (
    ColorizeRequestSchema,
    ExtractRequestSchema,
    ExtractResponseSchema,
    ExtractionRecordSchema,
    HistorySchema,
    ImagePayloadSchema,
    SelectRequestSchema,
    history_to_schema,
    record_to_schema,
)
from ocrbench.api.v1.dependencies import (
    get_extract_text_handler,
    get_history_handler,
    get_image_actions_handler,
    get_run_qac_handler,
    get_select_extraction_handler,
)
from ocrbench.application.commands.extract_text import ExtractTextCommand, ExtractTextHandler
from ocrbench.application.commands.image_actions import (
    ImageActionCommand,
    ImageActionsHandler,
    ToggleColorizeCommand,
)
from ocrbench.application.commands.run_qac import RunQacCommand, RunQacHandler
from ocrbench.application.commands.select_extraction import (
    SelectExtractionCommand,
    SelectExtractionHandler,
)
from ocrbench.application.queries.get_history import GetHistoryHandler, GetHistoryQuery

router = APIRouter(prefix="/extractions", tags=["extractions"])


@router.post("", response_model=ExtractResponseSchema)
async def extract_text(
    payload: Optional[ExtractRequestSchema] = None,
    handler: ExtractTextHandler = Depends(get_extract_text_handler),
) -> ExtractResponseSchema:
    detect = payload.detectImages if payload is not None else None
    record = await handler.handle(ExtractTextCommand(detect_images=detect))
    if record is None:
        return ExtractResponseSchema(discarded=True)
    return ExtractResponseSchema(record=record_to_schema(record))


@router.get("", response_model=HistorySchema)
def get_history(handler: GetHistoryHandler = Depends(get_history_handler)) -> HistorySchema:
    return history_to_schema(handler.handle(GetHistoryQuery()))


@router.get("/active", response_model=Optional[ExtractionRecordSchema])
def get_active(handler: GetHistoryHandler = Depends(get_history_handler)) -> Optional[ExtractionRecordSchema]:
    view = handler.handle(GetHistoryQuery())
    return record_to_schema(view.active) if view.active is not None else None


@router.put("/active", response_model=ExtractionRecordSchema)
def set_active(
    payload: SelectRequestSchema,
    handler: SelectExtractionHandler = Depends(get_select_extraction_handler),
) -> ExtractionRecordSchema:
    record = handler.handle(SelectExtractionCommand(record_id=payload.id))
    if record is None:
        raise HTTPException(status_code=404, detail="Extraction not found")
    return record_to_schema(record)


@router.post("/{record_id}/qac", response_model=ExtractResponseSchema)
async def run_qac(
    record_id: str,
    handler: RunQacHandler = Depends(get_run_qac_handler),
) -> ExtractResponseSchema:
    record = await handler.handle(RunQacCommand(record_id=record_id))
    if record is None:
        return ExtractResponseSchema(discarded=True)
    return ExtractResponseSchema(record=record_to_schema(record))


@router.post("/{record_id}/images/{image_id}/enhance", response_model=ExtractResponseSchema)
async def enhance_image(
    record_id: str,
    image_id: str,
    handler: ImageActionsHandler = Depends(get_image_actions_handler),
) -> ExtractResponseSchema:
    record = await handler.enhance(ImageActionCommand(image_id=image_id, record_id=record_id))
    if record is None:
        return ExtractResponseSchema(discarded=True)
    return ExtractResponseSchema(record=record_to_schema(record))


@router.post("/{record_id}/images/{image_id}/colorize", response_model=ExtractionRecordSchema)
def toggle_colorize(
    record_id: str,
    image_id: str,
    payload: Optional[ColorizeRequestSchema] = None,
    handler: ImageActionsHandler = Depends(get_image_actions_handler),
) -> ExtractionRecordSchema:
    colorize = payload.colorize if payload is not None else None
    record = handler.toggle_colorize(
        ToggleColorizeCommand(image_id=image_id, colorize=colorize, record_id=record_id)
    )
    return record_to_schema(record)


@router.get("/{record_id}/images/{image_id}/payload", response_model=ImagePayloadSchema)
def get_image_payload(
    record_id: str,
    image_id: str,
    handler: ImageActionsHandler = Depends(get_image_actions_handler),
) -> ImagePayloadSchema:
    payload = handler.reveal_payload(ImageActionCommand(image_id=image_id, record_id=record_id))
    return ImagePayloadSchema(
        id=payload.image_id,
        mimeType=payload.mime_type,
        base64=payload.base64,
        dataUrl=payload.data_url,
    )
