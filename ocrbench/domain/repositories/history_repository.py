"""Extraction history repository interface (Abstract Base Class)."""

from abc import ABC, abstractmethod
from typing import Callable, List, Optional

from ocrbench.domain.entities.extraction_record import ExtractionRecord

RecordUpdater = Callable[[ExtractionRecord], ExtractionRecord]


class ExtractionHistoryRepository(ABC):
    """
    Most-recent-first collection of extraction records with one active entry.

    Implementations must keep the active record value-equal to its history
    entry after every mutation.
    """

    @abstractmethod
    def add(self, record: ExtractionRecord) -> None:
        """Prepend ``record`` to history and make it active."""

    @abstractmethod
    def get_active(self) -> Optional[ExtractionRecord]:
        """Return the active record, if any."""

    @abstractmethod
    def set_active(self, record_id: str) -> Optional[ExtractionRecord]:
        """Activate the history entry with ``record_id``; unknown ids are ignored."""

    @abstractmethod
    def amend(self, record_id: str, updater: RecordUpdater) -> Optional[ExtractionRecord]:
        """Replace the record in place with ``updater(record)``; return the new value."""

    @abstractmethod
    def get(self, record_id: str) -> Optional[ExtractionRecord]:
        """Return the history entry with ``record_id``, if present."""

    @abstractmethod
    def list(self) -> List[ExtractionRecord]:
        """Return history, newest first."""

    @abstractmethod
    def clear(self) -> None:
        """Drop every record and the active pointer."""

    @abstractmethod
    def count(self) -> int:
        """Return number of records in history."""
