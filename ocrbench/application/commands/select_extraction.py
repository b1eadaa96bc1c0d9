"""Command handler for choosing which history entry is active."""
from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from ocrbench.domain.entities.extraction_record import ExtractionRecord

from ocrbench.application.session import WorkbenchSession


@dataclass(frozen=True)
class SelectExtractionCommand:
    record_id: str


class SelectExtractionHandler:
    def __init__(self, session: WorkbenchSession):
        self._history = session.history

    def handle(self, command: SelectExtractionCommand) -> Optional[ExtractionRecord]:
        """Unknown ids leave the active record unchanged and return ``None``."""
        return self._history.set_active(command.record_id)
