"""In-memory extraction history for a single session."""
from __future__ import annotations

import logging
from threading import Lock
from typing import List, Optional

from ocrbench.domain.entities.extraction_record import ExtractionRecord
from ocrbench.domain.repositories.history_repository import ExtractionHistoryRepository, RecordUpdater

logger = logging.getLogger(__name__)


class InMemoryExtractionHistory(ExtractionHistoryRepository):
    """
    History kept as a newest-first list plus the id of the active record.

    The active record is always read out of the list, so the two views
    cannot drift apart.
    """

    def __init__(self) -> None:
        self._records: List[ExtractionRecord] = []
        self._active_id: Optional[str] = None
        self._lock = Lock()

    def add(self, record: ExtractionRecord) -> None:
        with self._lock:
            if self._index_of(record.record_id) is not None:
                raise ValueError(f"Record {record.record_id} is already in history")
            self._records.insert(0, record)
            self._active_id = record.record_id
        logger.debug("Added extraction %s (history size %s)", record.record_id, len(self._records))

    def get_active(self) -> Optional[ExtractionRecord]:
        with self._lock:
            if self._active_id is None:
                return None
            index = self._index_of(self._active_id)
            return self._records[index] if index is not None else None

    def set_active(self, record_id: str) -> Optional[ExtractionRecord]:
        with self._lock:
            index = self._index_of(record_id)
            if index is None:
                logger.debug("Ignoring activation of unknown extraction %s", record_id)
                return None
            self._active_id = record_id
            return self._records[index]

    def amend(self, record_id: str, updater: RecordUpdater) -> Optional[ExtractionRecord]:
        with self._lock:
            index = self._index_of(record_id)
            if index is None:
                logger.debug("Ignoring amendment of unknown extraction %s", record_id)
                return None
            updated = updater(self._records[index])
            if updated.record_id != record_id:
                raise ValueError("Amendments must preserve the record identity")
            self._records[index] = updated
        logger.debug("Amended extraction %s", record_id)
        return updated

    def get(self, record_id: str) -> Optional[ExtractionRecord]:
        with self._lock:
            index = self._index_of(record_id)
            return self._records[index] if index is not None else None

    def list(self) -> List[ExtractionRecord]:
        with self._lock:
            return list(self._records)

    def clear(self) -> None:
        with self._lock:
            self._records.clear()
            self._active_id = None

    def count(self) -> int:
        with self._lock:
            return len(self._records)

    def _index_of(self, record_id: str) -> Optional[int]:
        for index, record in enumerate(self._records):
            if record.record_id == record_id:
                return index
        return None
