"""
Input validators for the report questions.

Each validator takes the raw message text and returns Accepted(value) or
Rejected(reason). They never raise and never touch stored state, so the wizard
can always re-prompt on bad input.
"""
from __future__ import annotations

import math
import re
from dataclasses import dataclass
from typing import Any, Callable, Iterable, Union

from . import prompts
from .answers import SERIES_LENGTH, MetricSeries

_DECIMAL = re.compile(r"^[+-]?(?:\d+(?:\.\d*)?|\.\d+)$")
MIN_COMMENT_LENGTH = 3


@dataclass(frozen=True)
class Accepted:
    value: Any


@dataclass(frozen=True)
class Rejected:
    reason: str


Result = Union[Accepted, Rejected]
Validator = Callable[[str], Result]


def parse_decimal(raw: str) -> float | None:
    """'7,5' and '7.5' both give 7.5; anything else non-numeric gives None."""
    s = str(raw or "").strip().replace(",", ".", 1)
    if not _DECIMAL.match(s):
        return None
    value = float(s)
    if not math.isfinite(value):
        return None
    return value


def _matches(text: str, phrases: Iterable[str]) -> bool:
    low = text.strip().lower()
    return any(low == p.strip().lower() for p in phrases)


def parse_seven_numbers(raw: str, not_tracked_phrases: Iterable[str] = prompts.NOT_TRACKED_PHRASES) -> Result:
    text = str(raw or "").strip()
    if _matches(text, not_tracked_phrases):
        return Accepted(MetricSeries.not_tracked())
    parts = [p.strip() for p in text.split("/")]
    parts = [p for p in parts if p]
    if len(parts) != SERIES_LENGTH:
        return Rejected(prompts.NEED_SEVEN_VALUES)
    values = [parse_decimal(p) for p in parts]
    if any(v is None for v in values):
        return Rejected(prompts.ALL_MUST_BE_NUMBERS)
    return Accepted(MetricSeries(values=tuple(values)))


def parse_rating(raw: str, low: float = 1, high: float = 10) -> Result:
    value = parse_decimal(raw)
    if value is None or value < low or value > high:
        return Rejected(prompts.RATING_RANGE)
    return Accepted(value)


def normalize_optional_text(raw: str, none_phrases: Iterable[str]) -> Result:
    text = str(raw or "").strip()
    if not text or _matches(text, none_phrases):
        return Accepted("")
    return Accepted(text)


def parse_week_comment(raw: str) -> Result:
    text = str(raw or "").strip()
    if len(text) < MIN_COMMENT_LENGTH:
        return Rejected(prompts.COMMENT_TOO_SHORT)
    return Accepted(text)


def optional_text(none_phrases: Iterable[str]) -> Validator:
    """Bind a question's own "none" phrases into a single-argument validator."""
    phrases = frozenset(none_phrases)

    def _validate(raw: str) -> Result:
        return normalize_optional_text(raw, phrases)

    return _validate
