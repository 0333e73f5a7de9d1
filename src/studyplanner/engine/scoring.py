"""Subject priority scoring used to rank candidates within a day."""

from __future__ import annotations

from datetime import date, datetime
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from .scheduler import SubjectWorkload

DEFAULT_SCORE_WEIGHTS: dict[str, float] = {
    "w_urgency": 10.0,
    "w_difficulty": 2.0,
    "w_remaining": 1.0,
}


def _to_date(value: str | date) -> date:
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    return datetime.strptime(value, "%Y-%m-%d").date()


def days_until_exam(exam_date: str | date, today: str | date) -> int:
    """Return the signed day count from ``today`` to ``exam_date``."""
    return (_to_date(exam_date) - _to_date(today)).days


def compute_score(
    subject: SubjectWorkload,
    today: str | date,
    remaining_minutes: int,
    weights: dict[str, float] | None = None,
) -> float:
    """Compute the weighted priority of a subject on a given day.

    Formula:
    - urgency = 1 / max(days_until_exam, 1)
    - score = w_urgency * urgency + w_difficulty * difficulty + w_remaining * remaining_hours

    The day count is floored at 1, so the exam day itself and overdue
    subjects share the maximum urgency.
    """

    w = DEFAULT_SCORE_WEIGHTS if weights is None else {**DEFAULT_SCORE_WEIGHTS, **weights}
    urgency = 1.0 / max(days_until_exam(subject.exam_date, today), 1)
    remaining_hours = float(remaining_minutes) / 60.0

    return (
        float(w["w_urgency"]) * urgency
        + float(w["w_difficulty"]) * float(subject.difficulty)
        + float(w["w_remaining"]) * remaining_hours
    )
