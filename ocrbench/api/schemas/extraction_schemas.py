"""
Schemas for extraction history, QAC and detected-image actions
"""
from __future__ import annotations

from typing import List, Optional

from pydantic import BaseModel, Field

from ocrbench.application.dto.workbench_dto import HistoryViewDTO
from ocrbench.domain.entities.extraction_record import ExtractionRecord


class QacFixSchema(BaseModel):
    original: str
    corrected: str
    type: str
    description: str


class DetectedImageSchema(BaseModel):
    id: str
    x: float
    y: float
    width: float
    height: float
    base64: str
    mimeType: str
    enhancedImageUrl: Optional[str] = None
    isProcessing: bool = False
    description: Optional[str] = None
    colorize: bool = False


class ExtractionRecordSchema(BaseModel):
    id: str
    text: str
    confidence: int
    fileName: str
    fileType: str
    pageNumber: int
    timestamp: str
    qacText: Optional[str] = None
    qacFixes: List[QacFixSchema] = Field(default_factory=list)
    isQACProcessed: bool = False
    extractionMethod: str = "ai-ocr"
    detectedImages: List[DetectedImageSchema] = Field(default_factory=list)


class HistorySchema(BaseModel):
    records: List[ExtractionRecordSchema] = Field(default_factory=list)
    activeId: Optional[str] = None


class ExtractRequestSchema(BaseModel):
    detectImages: Optional[bool] = None


class ExtractResponseSchema(BaseModel):
    record: Optional[ExtractionRecordSchema] = None
    discarded: bool = False


class SelectRequestSchema(BaseModel):
    id: str


class ColorizeRequestSchema(BaseModel):
    colorize: Optional[bool] = None


class ImagePayloadSchema(BaseModel):
    id: str
    mimeType: str
    base64: str
    dataUrl: str


class EnhancedImageSchema(BaseModel):
    mimeType: str
    base64: str
    dataUrl: str


def record_to_schema(record: ExtractionRecord) -> ExtractionRecordSchema:
    return ExtractionRecordSchema.model_validate(record.to_dict())


def history_to_schema(view: HistoryViewDTO) -> HistorySchema:
    return HistorySchema(
        records=[record_to_schema(record) for record in view.records],
        activeId=view.active_id,
    )
