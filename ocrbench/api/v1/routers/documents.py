"""Document endpoints: upload, navigation, zoom and crop selection."""
from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends, File, HTTPException, UploadFile
from fastapi.responses import Response

from ocrbench.api.schemas import (
    BoundingBoxSchema,
    CropRequestSchema,
    PageRequestSchema,
    PointerSchema,
    SelectionSchema,
    SurfaceStateSchema,
    ZoomRequestSchema,
)
from ocrbench.api.v1.dependencies import (
    get_change_page_handler,
    get_change_zoom_handler,
    get_crop_selection_handler,
    get_load_document_handler,
    get_surface_state_handler,
)
from ocrbench.application.commands.crop_selection import CropSelectionHandler, PointerEvent
from ocrbench.application.commands.load_document import LoadDocumentCommand, LoadDocumentHandler
from ocrbench.application.commands.navigate_document import (
    ChangePageCommand,
    ChangePageHandler,
    ChangeZoomCommand,
    ChangeZoomHandler,
)
from ocrbench.application.dto.workbench_dto import SurfaceStateDTO
from ocrbench.application.queries.get_surface_state import (
    GetSurfaceImageQuery,
    GetSurfaceStateHandler,
    GetSurfaceStateQuery,
)
from ocrbench.domain.value_objects.crop_rect import CropRect

router = APIRouter(prefix="/document", tags=["document"])


@router.post("", response_model=SurfaceStateSchema)
async def upload_document(
    file: UploadFile = File(...),
    handler: LoadDocumentHandler = Depends(get_load_document_handler),
    state: GetSurfaceStateHandler = Depends(get_surface_state_handler),
) -> SurfaceStateSchema:
    if not file.filename:
        raise HTTPException(status_code=400, detail="Filename is required")

    data = await file.read()
    handler.handle(
        LoadDocumentCommand(
            file_name=file.filename,
            media_type=file.content_type or "",
            data=data,
        )
    )
    return _state(state)


@router.get("", response_model=SurfaceStateSchema)
def get_document_state(state: GetSurfaceStateHandler = Depends(get_surface_state_handler)) -> SurfaceStateSchema:
    return _state(state)


@router.get("/image")
def get_document_image(
    original: bool = False,
    state: GetSurfaceStateHandler = Depends(get_surface_state_handler),
) -> Response:
    return Response(content=state.image(GetSurfaceImageQuery(original=original)), media_type="image/png")


@router.post("/page", response_model=SurfaceStateSchema)
def change_page(
    payload: PageRequestSchema,
    handler: ChangePageHandler = Depends(get_change_page_handler),
    state: GetSurfaceStateHandler = Depends(get_surface_state_handler),
) -> SurfaceStateSchema:
    handler.handle(ChangePageCommand(page_number=payload.pageNumber))
    return _state(state)


@router.post("/zoom", response_model=SurfaceStateSchema)
def change_zoom(
    payload: ZoomRequestSchema,
    handler: ChangeZoomHandler = Depends(get_change_zoom_handler),
    state: GetSurfaceStateHandler = Depends(get_surface_state_handler),
) -> SurfaceStateSchema:
    handler.handle(ChangeZoomCommand(zoom=payload.zoom))
    return _state(state)


@router.post("/zoom/in", response_model=SurfaceStateSchema)
def zoom_in(
    handler: ChangeZoomHandler = Depends(get_change_zoom_handler),
    state: GetSurfaceStateHandler = Depends(get_surface_state_handler),
) -> SurfaceStateSchema:
    handler.zoom_in()
    return _state(state)


@router.post("/zoom/out", response_model=SurfaceStateSchema)
def zoom_out(
    handler: ChangeZoomHandler = Depends(get_change_zoom_handler),
    state: GetSurfaceStateHandler = Depends(get_surface_state_handler),
) -> SurfaceStateSchema:
    handler.zoom_out()
    return _state(state)


@router.post("/selection/begin", response_model=SelectionSchema)
def begin_selection(
    payload: PointerSchema,
    handler: CropSelectionHandler = Depends(get_crop_selection_handler),
) -> SelectionSchema:
    handler.begin(_pointer(payload))
    return SelectionSchema()


@router.post("/selection/update", response_model=SelectionSchema)
def update_selection(
    payload: PointerSchema,
    handler: CropSelectionHandler = Depends(get_crop_selection_handler),
) -> SelectionSchema:
    return SelectionSchema(rect=_rect_schema(handler.update(_pointer(payload))))


@router.post("/selection/end", response_model=SelectionSchema)
def end_selection(handler: CropSelectionHandler = Depends(get_crop_selection_handler)) -> SelectionSchema:
    return SelectionSchema(rect=_rect_schema(handler.end()))


@router.post("/selection/confirm", response_model=SurfaceStateSchema)
def confirm_selection(
    handler: CropSelectionHandler = Depends(get_crop_selection_handler),
    state: GetSurfaceStateHandler = Depends(get_surface_state_handler),
) -> SurfaceStateSchema:
    handler.confirm()
    return _state(state)


@router.post("/selection/cancel", response_model=SurfaceStateSchema)
def cancel_selection(
    handler: CropSelectionHandler = Depends(get_crop_selection_handler),
    state: GetSurfaceStateHandler = Depends(get_surface_state_handler),
) -> SurfaceStateSchema:
    handler.cancel()
    return _state(state)


@router.post("/crop", response_model=SurfaceStateSchema)
def apply_crop(
    payload: CropRequestSchema,
    handler: CropSelectionHandler = Depends(get_crop_selection_handler),
    state: GetSurfaceStateHandler = Depends(get_surface_state_handler),
) -> SurfaceStateSchema:
    rect = None
    if payload.rect is not None:
        rect = CropRect(payload.rect.x, payload.rect.y, payload.rect.width, payload.rect.height)
    handler.apply(rect)
    return _state(state)


@router.delete("/crop", response_model=SurfaceStateSchema)
def reset_crop(
    handler: CropSelectionHandler = Depends(get_crop_selection_handler),
    state: GetSurfaceStateHandler = Depends(get_surface_state_handler),
) -> SurfaceStateSchema:
    handler.reset()
    return _state(state)


def _state(handler: GetSurfaceStateHandler) -> SurfaceStateSchema:
    return _surface_to_schema(handler.handle(GetSurfaceStateQuery()))


def _surface_to_schema(dto: SurfaceStateDTO) -> SurfaceStateSchema:
    return SurfaceStateSchema(
        fileName=dto.file_name,
        fileType=dto.file_type,
        pageNumber=dto.page_number,
        totalPages=dto.total_pages,
        zoom=dto.zoom,
        width=dto.width,
        height=dto.height,
        originalWidth=dto.original_width,
        originalHeight=dto.original_height,
        isCropped=dto.is_cropped,
    )


def _pointer(payload: PointerSchema) -> PointerEvent:
    return PointerEvent(
        x=payload.x,
        y=payload.y,
        display_width=payload.displayWidth,
        display_height=payload.displayHeight,
    )


def _rect_schema(rect: Optional[CropRect]) -> Optional[BoundingBoxSchema]:
    if rect is None:
        return None
    return BoundingBoxSchema(**rect.to_dict())
