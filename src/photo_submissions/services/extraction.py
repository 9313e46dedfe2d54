"""Odometer reading heuristic applied to OCR text."""

import re
from dataclasses import dataclass

_DIGIT_RUN = re.compile(r"[0-9](?:[0-9 ,]*[0-9])?")
_SEPARATORS = re.compile(r"[ ,]")
_MIN_DIGITS = 5
_MAX_DIGITS = 7
_HIGH_CONFIDENCE_DIGITS = 6


@dataclass(frozen=True)
class Reading:
    """Best-guess numeric reading and a coarse confidence in 0..1."""

    value: int | None
    confidence: float


def extract_reading(raw_text: str) -> Reading:
    """Pick the most plausible 5-7 digit reading out of free text.

    Digit runs may contain spaces or commas ("123 456", "12,345"); those are
    dropped before counting. The candidate with the most digits wins, ties go
    to the larger number.
    """
    best: tuple[int, int] | None = None
    for match in _DIGIT_RUN.finditer(raw_text):
        cleaned = _SEPARATORS.sub("", match.group())
        if not _MIN_DIGITS <= len(cleaned) <= _MAX_DIGITS:
            continue
        candidate = (len(cleaned), int(cleaned))
        if best is None or candidate > best:
            best = candidate

    if best is None:
        return Reading(value=None, confidence=0.0)
    digits, value = best
    confidence = 0.8 if digits >= _HIGH_CONFIDENCE_DIGITS else 0.6
    return Reading(value=value, confidence=confidence)
