"""Parse raw AI responses into typed extraction results.

Two grammars are supported and selected by configuration:

* ``structured`` - a single JSON object matching the schema declared in the
  request, optionally wrapped in a markdown code fence.
* ``delimited`` - a fixed text template with sentinel labels such as
  ``TEXT:``, ``CONFIDENCE:``, ``CORRECTED_TEXT:``, ``FIXES:`` and
  ``COORDINATES:``.
"""
from __future__ import annotations

import json
import logging
import re
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, Iterable, List, Optional

from ocrbench.constants import DEFAULT_CONFIDENCE, MIN_DETECTED_IMAGE_PERCENT
from ocrbench.domain.entities.extraction_record import QacFix
from ocrbench.domain.exceptions import EmptyResponseError, MalformedResponseError, SafetyBlockedError
from ocrbench.domain.value_objects.bounding_box import BoundingBox
from ocrbench.domain.value_objects.confidence import Confidence

logger = logging.getLogger(__name__)

SAFETY_FINISH_REASONS = frozenset({"content_filter", "safety"})

_FENCE_START = re.compile(r"^```(?:json|JSON)?\s*")
_FENCE_END = re.compile(r"\s*```$")


@dataclass(frozen=True)
class ModelResponse:
    """Text returned by the AI service plus its finish reason."""

    text: Optional[str]
    finish_reason: Optional[str] = None


@dataclass(frozen=True)
class OcrResult:
    text: str
    confidence: Confidence


@dataclass(frozen=True)
class QacResult:
    corrected_text: str
    fixes: tuple[QacFix, ...]


@dataclass(frozen=True)
class ImageRegion:
    bounding_box: BoundingBox
    description: Optional[str] = None


class VisionResponseParser(ABC):
    """Converts raw model output into typed results."""

    mode: str = ""

    def __init__(
        self,
        *,
        default_confidence: int = DEFAULT_CONFIDENCE,
        min_region_percent: float = MIN_DETECTED_IMAGE_PERCENT,
    ) -> None:
        self._default_confidence = default_confidence
        self._min_region_percent = min_region_percent

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------
    def parse_ocr(self, response: ModelResponse) -> OcrResult:
        raw = self.require_text(response, purpose="OCR")
        return self._parse_ocr(raw)

    def parse_qac(self, response: ModelResponse, original_text: str) -> QacResult:
        raw = self.require_text(
            response,
            purpose="QAC",
            empty_message="The AI returned an empty response for the QAC check.",
            safety_message="The QAC request was blocked by the API's safety filters.",
        )
        return self._parse_qac(raw, original_text)

    def parse_regions(self, response: ModelResponse) -> List[ImageRegion]:
        raw = self.require_text(response, purpose="image detection")
        regions = []
        for region in self._parse_regions(raw):
            if not region.bounding_box.is_significant(self._min_region_percent):
                logger.debug("Dropping insignificant image region %s", region.bounding_box)
                continue
            regions.append(region)
        return regions

    @staticmethod
    def require_text(
        response: ModelResponse,
        *,
        purpose: str,
        empty_message: Optional[str] = None,
        safety_message: Optional[str] = None,
    ) -> str:
        """Return the response text or raise the matching empty-response error."""
        if response.text and response.text.strip():
            return response.text

        finish_reason = (response.finish_reason or "").lower()
        if finish_reason in SAFETY_FINISH_REASONS:
            logger.warning("%s response blocked by safety filters", purpose)
            if safety_message:
                raise SafetyBlockedError(safety_message, finish_reason=response.finish_reason)
            raise SafetyBlockedError(finish_reason=response.finish_reason)

        logger.warning("%s response was empty (finish_reason=%s)", purpose, response.finish_reason)
        if empty_message:
            raise EmptyResponseError(empty_message, finish_reason=response.finish_reason)
        raise EmptyResponseError(finish_reason=response.finish_reason)

    # ------------------------------------------------------------------
    # Strategy hooks
    # ------------------------------------------------------------------
    @abstractmethod
    def _parse_ocr(self, raw: str) -> OcrResult: ...

    @abstractmethod
    def _parse_qac(self, raw: str, original_text: str) -> QacResult: ...

    @abstractmethod
    def _parse_regions(self, raw: str) -> Iterable[ImageRegion]: ...


class StructuredResponseParser(VisionResponseParser):
    """Strict JSON decoding after stripping markdown fences."""

    mode = "structured"

    def _parse_ocr(self, raw: str) -> OcrResult:
        payload = self._decode_object(raw, purpose="OCR")
        return OcrResult(
            text=_safe_str(payload.get("text")),
            confidence=Confidence.from_raw(payload.get("confidence"), self._default_confidence),
        )

    def _parse_qac(self, raw: str, original_text: str) -> QacResult:
        payload = self._decode_object(raw, purpose="QAC")
        fixes = []
        for item in payload.get("fixes") or []:
            if isinstance(item, dict):
                fixes.append(QacFix.from_dict(item))
            else:
                logger.debug("Dropping non-object QAC fix: %r", item)
        return QacResult(
            corrected_text=_safe_str(payload.get("correctedText")) or original_text,
            fixes=tuple(fixes),
        )

    def _parse_regions(self, raw: str) -> Iterable[ImageRegion]:
        payload = self.decode(raw, purpose="image detection")
        if isinstance(payload, dict):
            items = payload.get("images") or []
        elif isinstance(payload, list):
            items = payload
        else:
            raise MalformedResponseError("Image detection response is not a JSON object", raw_text=raw)

        for item in items:
            bbox = BoundingBox.from_dict(item) if isinstance(item, dict) else None
            if bbox is None:
                logger.debug("Dropping malformed image region: %r", item)
                continue
            yield ImageRegion(bounding_box=bbox, description=_safe_str(item.get("description")) or None)

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------
    @staticmethod
    def strip_fences(raw: str) -> str:
        text = raw.strip()
        text = _FENCE_START.sub("", text)
        text = _FENCE_END.sub("", text)
        return text.strip()

    def decode(self, raw: str, *, purpose: str) -> Any:
        try:
            return json.loads(self.strip_fences(raw))
        except json.JSONDecodeError as exc:
            logger.error("Failed to parse JSON response for %s: %.500s", purpose, raw)
            raise MalformedResponseError(
                f"Invalid JSON in {purpose} response: {exc}. Raw response: {raw}",
                raw_text=raw,
            ) from exc

    def _decode_object(self, raw: str, *, purpose: str) -> dict:
        payload = self.decode(raw, purpose=purpose)
        if not isinstance(payload, dict):
            logger.error("%s response is not a JSON object: %.500s", purpose, raw)
            raise MalformedResponseError(f"{purpose} response is not a JSON object. Raw response: {raw}", raw_text=raw)
        return payload


class DelimitedResponseParser(VisionResponseParser):
    """Tolerant extraction from the sentinel-labelled text template."""

    mode = "delimited"

    _TEXT = re.compile(r"TEXT:\s*(.*?)\s*(?:-{3,}\s*)?(?=CONFIDENCE:|\Z)", re.DOTALL)
    _CONFIDENCE = re.compile(r"CONFIDENCE:\s*(-?\d+(?:\.\d+)?)")
    _CORRECTED = re.compile(r"CORRECTED_TEXT:\s*(.*?)\s*(?:-{3,}\s*)?(?=FIXES:|\Z)", re.DOTALL)
    _FIXES = re.compile(r"FIXES:\s*(.*)\Z", re.DOTALL)
    _COORDINATES = re.compile(r"COORDINATES:\s*(.*)\Z", re.DOTALL)
    _BULLET = re.compile(r"^\s*(?:[-*•]|\d+[.)])\s+")

    def _parse_ocr(self, raw: str) -> OcrResult:
        text_match = self._TEXT.search(raw)
        confidence_match = self._CONFIDENCE.search(raw)
        text = text_match.group(1).strip() if text_match else raw.strip()
        confidence = Confidence.from_raw(
            confidence_match.group(1) if confidence_match else None,
            self._default_confidence,
        )
        return OcrResult(text=text, confidence=confidence)

    def _parse_qac(self, raw: str, original_text: str) -> QacResult:
        corrected_match = self._CORRECTED.search(raw)
        corrected = corrected_match.group(1).strip() if corrected_match else ""

        fixes: List[QacFix] = []
        fixes_match = self._FIXES.search(raw)
        if fixes_match:
            for row in self._rows(fixes_match.group(1)):
                fields = [part.strip() for part in row.split("|")]
                if len(fields) != 4:
                    logger.debug("Dropping malformed fix row: %r", row)
                    continue
                original, fixed, fix_type, description = fields
                fixes.append(QacFix(original=original, corrected=fixed, type=fix_type, description=description))

        return QacResult(corrected_text=corrected or original_text, fixes=tuple(fixes))

    def _parse_regions(self, raw: str) -> Iterable[ImageRegion]:
        match = self._COORDINATES.search(raw)
        if not match:
            return
        for row in self._rows(match.group(1)):
            fields = [part.strip() for part in row.split(",", 4)]
            if len(fields) < 4:
                logger.debug("Dropping malformed coordinate row: %r", row)
                continue
            bbox = BoundingBox.from_dict(
                {
                    "x": _strip_percent(fields[0]),
                    "y": _strip_percent(fields[1]),
                    "width": _strip_percent(fields[2]),
                    "height": _strip_percent(fields[3]),
                }
            )
            if bbox is None:
                logger.debug("Dropping non-numeric coordinate row: %r", row)
                continue
            description = fields[4] if len(fields) == 5 else None
            yield ImageRegion(bounding_box=bbox, description=description or None)

    def _rows(self, block: str) -> Iterable[str]:
        """Non-empty rows of a section body; a lone ``None`` means no rows."""
        if block.strip().rstrip(".").lower() in {"none", "n/a", ""}:
            return []
        rows = []
        for line in block.splitlines():
            line = self._BULLET.sub("", line).strip()
            if line and line.lower() != "none":
                rows.append(line)
        return rows


def get_response_parser(mode: str, **kwargs: Any) -> VisionResponseParser:
    """Return the parser configured for ``mode`` (``structured`` or ``delimited``)."""
    if mode == StructuredResponseParser.mode:
        return StructuredResponseParser(**kwargs)
    if mode == DelimitedResponseParser.mode:
        return DelimitedResponseParser(**kwargs)
    raise ValueError(f"Unknown response format: {mode}")


def _safe_str(value: Any) -> str:
    if value is None:
        return ""
    return str(value)


def _strip_percent(value: str) -> str:
    return value.rstrip("%").strip()
