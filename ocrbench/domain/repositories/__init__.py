"""Domain repository interfaces."""

from .history_repository import ExtractionHistoryRepository, RecordUpdater

__all__ = ["ExtractionHistoryRepository", "RecordUpdater"]
