"""
Confidence value object

Represents the model's self-reported extraction confidence on a 0-100 scale.
"""
from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Any

from ocrbench.constants import DEFAULT_CONFIDENCE


@dataclass(frozen=True)
class Confidence:
    """
    Immutable confidence value between 0 and 100.

    Values outside the range are clamped.
    """
    value: int

    def __post_init__(self):
        if isinstance(self.value, bool) or not isinstance(self.value, (int, float)):
            object.__setattr__(self, 'value', DEFAULT_CONFIDENCE)
        else:
            object.__setattr__(self, 'value', int(round(max(0, min(100, self.value)))))

    @classmethod
    def from_raw(cls, raw_value: Any, default: int = DEFAULT_CONFIDENCE) -> Confidence:
        """
        Create Confidence from any value, falling back to ``default`` when the
        model omitted it or sent something unusable.

        Examples:
            >>> Confidence.from_raw("95")
            Confidence(value=95)
            >>> Confidence.from_raw(None)
            Confidence(value=90)
            >>> Confidence.from_raw(0)
            Confidence(value=90)
        """
        try:
            value = float(raw_value)
        except (TypeError, ValueError):
            return cls(default)
        # A zero score means the model left the field blank.
        if value == 0 or math.isnan(value):
            return cls(default)
        return cls(value)

    def __int__(self) -> int:
        return self.value

    def __str__(self) -> str:
        return f"{self.value}%"
