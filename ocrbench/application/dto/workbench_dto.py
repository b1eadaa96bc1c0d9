"""Data Transfer Objects for the workbench read side."""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import List, Optional

from ocrbench.domain.entities.extraction_record import ExtractionRecord


@dataclass(frozen=True)
class SurfaceStateDTO:
    """DTO describing the loaded file and the displayed raster."""

    file_name: str
    file_type: str
    page_number: int
    total_pages: int
    zoom: int
    width: int
    height: int
    original_width: int
    original_height: int
    is_cropped: bool


@dataclass(frozen=True)
class HistoryViewDTO:
    """DTO with the newest-first history and the active record."""

    records: List[ExtractionRecord] = field(default_factory=list)
    active: Optional[ExtractionRecord] = None

    @property
    def active_id(self) -> Optional[str]:
        return self.active.record_id if self.active is not None else None
