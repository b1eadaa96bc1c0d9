"""
SourceContext value object

Identifies the file and page a raster (and any request built from it)
belongs to. Requests carry the context captured at dispatch; results whose
context no longer matches the session are discarded.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Literal

FileType = Literal["pdf", "image"]


@dataclass(frozen=True)
class SourceContext:
    document_id: str
    file_name: str
    file_type: FileType
    page_number: int

    def __post_init__(self):
        if self.page_number < 1:
            raise ValueError("page_number must be >= 1")
