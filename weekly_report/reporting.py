"""
Plain-text weekly report built from a finished AnswerSet.

Section order is fixed; optional blocks are left out entirely when empty.
"""
from __future__ import annotations

from .answers import AnswerSet, MetricSeries

NOT_TRACKED_LABEL = "not tracked"


def _num(value: float) -> str:
    if float(value).is_integer():
        return str(int(value))
    return repr(float(value))


def _series(series: MetricSeries) -> str:
    if not series.tracked:
        return NOT_TRACKED_LABEL
    return " / ".join(_num(v) for v in series.values)


def _block(lines: list[str], title: str, body: str) -> None:
    if not body:
        return
    lines.append("")
    lines.append(title)
    lines.append(body)


def format_report(answers: AnswerSet) -> str:
    week = answers.week
    lines: list[str] = [
        f"Weekly report ({week.start.isoformat()} — {week.end.isoformat()})",
        "",
        "Recovery:",
        f"- Resting HR: {_series(answers.resting_hr)}",
        f"- Sleep (hours): {_series(answers.sleep)}",
        f"- Mood: {_num(answers.mood)}/10",
        f"- Body: {_num(answers.body)}/10",
    ]
    if answers.food:
        lines.append(f"- Food: {answers.food}")
    if answers.pain:
        lines.append(f"- Pain / injuries: {answers.pain}")

    lines.append("")
    lines.append("Week comment:")
    lines.append(answers.week_comment)

    _block(lines, "Plan corrections:", answers.plan_edits)
    _block(lines, "Plan wishes:", answers.wishes)
    _block(lines, "Questions for the coach:", answers.questions)

    return "\n".join(lines)
