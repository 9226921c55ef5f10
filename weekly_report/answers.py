"""
Typed view of a finished report: week range, metric series and the answer set.

The wizard stores answers as plain JSON while a conversation is running; once the
last question is answered the payload is turned into an immutable AnswerSet.
"""
from __future__ import annotations

from dataclasses import dataclass
from datetime import date, timedelta
from typing import Any, Optional

WEEK_CURRENT = "current"
WEEK_PREVIOUS = "previous"
WEEK_KINDS = (WEEK_CURRENT, WEEK_PREVIOUS)

SERIES_NOT_TRACKED = "not_tracked"
SERIES_VALUES = "values"
SERIES_LENGTH = 7


@dataclass(frozen=True)
class WeekRange:
    start: date
    end: date

    def to_dict(self) -> dict[str, str]:
        return {"start": self.start.isoformat(), "end": self.end.isoformat()}

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "WeekRange":
        return cls(start=date.fromisoformat(data["start"]), end=date.fromisoformat(data["end"]))


def monday_of_week(today: date) -> date:
    """Monday on/before `today`; Sunday closes the week, it does not open one."""
    weekday = today.isoweekday()  # Monday=1 .. Sunday=7
    if weekday == 7:
        return today - timedelta(days=6)
    return today - timedelta(days=weekday - 1)


def week_range(kind: str, today: date) -> WeekRange:
    if kind not in WEEK_KINDS:
        raise ValueError(f"unknown week kind: {kind!r}")
    start = monday_of_week(today)
    if kind == WEEK_PREVIOUS:
        start = start - timedelta(days=7)
    return WeekRange(start=start, end=start + timedelta(days=6))


@dataclass(frozen=True)
class MetricSeries:
    """Seven daily values, or `values=None` when the user does not track the metric."""

    values: Optional[tuple[float, ...]] = None

    @property
    def tracked(self) -> bool:
        return self.values is not None

    @classmethod
    def not_tracked(cls) -> "MetricSeries":
        return cls(values=None)

    def to_dict(self) -> dict[str, Any]:
        if self.values is None:
            return {"kind": SERIES_NOT_TRACKED}
        return {"kind": SERIES_VALUES, "values": list(self.values)}

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "MetricSeries":
        if data.get("kind") == SERIES_NOT_TRACKED:
            return cls.not_tracked()
        return cls(values=tuple(float(v) for v in data["values"]))


@dataclass(frozen=True)
class AnswerSet:
    week: WeekRange
    resting_hr: MetricSeries
    sleep: MetricSeries
    mood: float
    body: float
    week_comment: str
    food: str = ""
    pain: str = ""
    plan_edits: str = ""
    wishes: str = ""
    questions: str = ""

    @classmethod
    def from_answers(cls, answers: dict[str, Any]) -> "AnswerSet":
        """Build from the stored wizard payload; all required keys exist by construction."""
        return cls(
            week=WeekRange.from_dict(answers["week"]),
            resting_hr=MetricSeries.from_dict(answers["resting_hr"]),
            sleep=MetricSeries.from_dict(answers["sleep"]),
            mood=float(answers["mood"]),
            body=float(answers["body"]),
            week_comment=answers["week_comment"],
            food=answers.get("food", ""),
            pain=answers.get("pain", ""),
            plan_edits=answers.get("plan_edits", ""),
            wishes=answers.get("wishes", ""),
            questions=answers.get("questions", ""),
        )
