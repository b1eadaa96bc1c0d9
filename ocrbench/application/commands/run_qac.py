"""RunQac Command - corrects the active extraction against the full-page image."""
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional

from ocrbench.domain.entities.extraction_record import ExtractionRecord
from ocrbench.domain.exceptions import DomainException, InvalidCredentialError, PreconditionError
from ocrbench.infrastructure.vision.retry import RetryExecutor
from ocrbench.infrastructure.vision.vision_response_parser import VisionResponseParser

from ocrbench.application.progress import ProgressSink
from ocrbench.application.session import WorkbenchSession

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RunQacCommand:
    record_id: Optional[str] = None


class RunQacHandler:
    """Handles RunQac commands; the record is amended in place by identity."""

    def __init__(self, session: WorkbenchSession, parser: VisionResponseParser, retry: RetryExecutor):
        self._session = session
        self._parser = parser
        self._retry = retry

    async def handle(
        self,
        command: RunQacCommand,
        progress: Optional[ProgressSink] = None,
    ) -> Optional[ExtractionRecord]:
        history = self._session.history
        record = history.get(command.record_id) if command.record_id else history.get_active()
        if record is None:
            raise PreconditionError("Please extract text before running QAC.")
        surface = self._session.canvas.surface
        if surface is None:
            raise PreconditionError("No page is loaded. Upload a file first.")
        client = self._session.vision_client()

        tracker = self._session.start_progress(progress)
        try:
            tracker.report(10, "Preparing for QAC...")
            image_base64 = self._session.canvas.encode_original()

            tracker.report(30, "Sending to the AI service for QAC...")
            response = await self._retry.run(lambda: client.qac(record.text, image_base64), tracker.status)

            tracker.report(70, "Processing QAC response...")
            result = self._parser.parse_qac(response, record.text)

            updated = history.amend(record.record_id, lambda r: r.with_qac(result.corrected_text, result.fixes))
            if updated is None:
                logger.info("Discarding QAC result for %s; the extraction is no longer in history", record.record_id)
                tracker.fail("Discarded QAC result for an extraction that no longer exists.")
                return None

            tracker.complete("QAC completed successfully!")
            logger.info("QAC applied to %s with %s fixes", updated.record_id, len(updated.qac_fixes))
            return updated
        except InvalidCredentialError:
            self._session.invalidate_credential()
            tracker.fail("QAC failed")
            raise
        except DomainException:
            tracker.fail("QAC failed")
            raise
        except Exception as exc:  # noqa: BLE001 - never let an unclassified error escape
            logger.exception("Unexpected error during QAC")
            tracker.fail("QAC failed")
            raise DomainException("Failed to run QAC.") from exc
