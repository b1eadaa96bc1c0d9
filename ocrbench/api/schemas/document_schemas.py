"""
Schemas for the loaded document, the canvas and the crop selection
"""
from __future__ import annotations

from typing import Optional

from pydantic import BaseModel, Field

from .common_schemas import BoundingBoxSchema


class SurfaceStateSchema(BaseModel):
    fileName: str
    fileType: str
    pageNumber: int
    totalPages: int
    zoom: int
    width: int
    height: int
    originalWidth: int
    originalHeight: int
    isCropped: bool
    imageUrl: str = "/api/document/image"


class PageRequestSchema(BaseModel):
    pageNumber: int


class ZoomRequestSchema(BaseModel):
    zoom: int


class PointerSchema(BaseModel):
    x: float
    y: float
    displayWidth: Optional[float] = Field(default=None, gt=0)
    displayHeight: Optional[float] = Field(default=None, gt=0)


class SelectionSchema(BaseModel):
    rect: Optional[BoundingBoxSchema] = None


class CropRequestSchema(BaseModel):
    rect: Optional[BoundingBoxSchema] = None
