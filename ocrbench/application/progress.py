"""Coarse progress reporting for long-running workflows."""
from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Iterable, Optional

ProgressSink = Callable[[int, str], None]


@dataclass(frozen=True)
class ProgressSnapshot:
    percent: int
    status: str
    failed: bool = False


class ProgressTracker:
    """Fans ``(percent, status)`` updates out to sinks, never moving backwards."""

    def __init__(self, sinks: Iterable[Optional[ProgressSink]] = ()) -> None:
        self._sinks = [sink for sink in sinks if sink is not None]
        self._percent = 0
        self._status = ""
        self._failed = False

    @property
    def snapshot(self) -> ProgressSnapshot:
        return ProgressSnapshot(self._percent, self._status, self._failed)

    def report(self, percent: int, status: str) -> None:
        self._percent = max(self._percent, min(100, max(0, int(percent))))
        self._status = status
        self._emit()

    def status(self, status: str) -> None:
        """Change the status text without moving the percentage."""
        self.report(self._percent, status)

    def complete(self, status: str) -> None:
        self.report(100, status)

    def fail(self, status: str) -> None:
        self._failed = True
        self._status = status
        self._emit()

    def _emit(self) -> None:
        for sink in self._sinks:
            sink(self._percent, self._status)
