"""GetHistory Query - the session's extraction history."""
from dataclasses import dataclass

from ocrbench.application.dto.workbench_dto import HistoryViewDTO
from ocrbench.application.session import WorkbenchSession


@dataclass(frozen=True)
class GetHistoryQuery:
    """Query for the full history view."""


class GetHistoryHandler:
    """Handles GetHistory queries."""

    def __init__(self, session: WorkbenchSession):
        self._history = session.history

    def handle(self, query: GetHistoryQuery) -> HistoryViewDTO:
        return HistoryViewDTO(records=self._history.list(), active=self._history.get_active())
