"""Standalone image enhancement, independent of the extraction history."""
from __future__ import annotations

from fastapi import APIRouter, Depends, File, Form, UploadFile

from ocrbench.api.schemas import EnhancedImageSchema
from ocrbench.api.v1.dependencies import get_image_actions_handler
from ocrbench.application.commands.image_actions import EnhanceUploadCommand, ImageActionsHandler

router = APIRouter(prefix="/images", tags=["images"])


@router.post("/enhance", response_model=EnhancedImageSchema)
async def enhance_upload(
    file: UploadFile = File(...),
    colorize: bool = Form(False),
    handler: ImageActionsHandler = Depends(get_image_actions_handler),
) -> EnhancedImageSchema:
    data = await file.read()
    generated = await handler.enhance_upload(
        EnhanceUploadCommand(data=data, media_type=file.content_type or "", colorize=colorize)
    )
    return EnhancedImageSchema(
        mimeType=generated.mime_type,
        base64=generated.base64,
        dataUrl=generated.data_url,
    )
