"""Deterministic day-by-day study allocation.

For every day from the start date through the last exam:
1) rank the subjects still open on that day by score,
2) hand out chunks to the best-ranked subject until the daily budget is spent,
3) re-rank a partially served subject with its reduced workload.

Rule preserved: a subject is never scheduled after its own exam date.
"""

from __future__ import annotations

import heapq
from dataclasses import dataclass
from datetime import date, time, timedelta
from typing import Any, Hashable

from loguru import logger

from studyplanner.reporting.decision_trace import DecisionTraceCollector

from .scoring import compute_score

DEFAULT_CHUNK_MINUTES = 60
DEFAULT_DAY_START = time(18, 0)
DEFAULT_BREAK_MINUTES = 10

_MINUTES_PER_DAY = 24 * 60


@dataclass(frozen=True)
class SubjectWorkload:
    """Snapshot of one subject's open workload at planning time."""

    subject_id: Hashable
    exam_date: date
    difficulty: int
    remaining_minutes: int


@dataclass(frozen=True)
class PlannedAllocation:
    """One proposed study session."""

    subject_id: Hashable
    date: date
    start_time: time
    minutes: int

    def as_dict(self) -> dict[str, Any]:
        return {
            "subject_id": self.subject_id,
            "date": self.date.isoformat(),
            "start_time": self.start_time.strftime("%H:%M:%S"),
            "minutes": self.minutes,
        }


def _iter_days(start: date, end: date) -> list[date]:
    days: list[date] = []
    cursor = start
    while cursor <= end:
        days.append(cursor)
        cursor += timedelta(days=1)
    return days


def _clock(minute_of_day: int) -> time:
    return time(minute_of_day // 60, minute_of_day % 60)


def generate_plan(
    subjects: list[SubjectWorkload],
    start_date: date,
    daily_budget_minutes: int,
    chunk_minutes: int,
    *,
    day_start: time = DEFAULT_DAY_START,
    break_minutes: int = DEFAULT_BREAK_MINUTES,
    weights: dict[str, float] | None = None,
    decision_trace: DecisionTraceCollector | None = None,
) -> list[PlannedAllocation]:
    """Allocate study chunks day by day until the last exam.

    Degenerate inputs never raise: a non-positive budget or an empty subject
    list yields an empty plan, and a non-positive chunk falls back to
    ``DEFAULT_CHUNK_MINUTES``.

    Ties between equal scores go to the subject listed first in ``subjects``.
    """

    if daily_budget_minutes <= 0 or not subjects:
        return []
    if chunk_minutes <= 0:
        chunk_minutes = DEFAULT_CHUNK_MINUTES
    break_minutes = max(0, int(break_minutes))

    horizon_end = max(subject.exam_date for subject in subjects)
    remaining: dict[Hashable, int] = {subject.subject_id: subject.remaining_minutes for subject in subjects}
    day_start_minute = day_start.hour * 60 + day_start.minute

    plan: list[PlannedAllocation] = []
    for day in _iter_days(start_date, horizon_end):
        free = daily_budget_minutes
        cursor = day_start_minute

        heap: list[tuple[float, int, SubjectWorkload]] = []
        for order, subject in enumerate(subjects):
            rem = remaining.get(subject.subject_id, 0)
            if rem <= 0 or day > subject.exam_date:
                continue
            heapq.heappush(heap, (-compute_score(subject, day, rem, weights), order, subject))

        day_minutes = 0
        while free > 0 and heap and cursor < _MINUTES_PER_DAY:
            candidates = sorted(heap) if decision_trace is not None else []
            _, order, subject = heapq.heappop(heap)
            sid = subject.subject_id

            minutes = min(chunk_minutes, free, remaining[sid])
            if minutes <= 0:
                continue

            start_time = _clock(cursor)
            plan.append(PlannedAllocation(subject_id=sid, date=day, start_time=start_time, minutes=minutes))
            if decision_trace is not None:
                decision_trace.record(
                    day=day.isoformat(),
                    start_time=start_time.strftime("%H:%M"),
                    candidate_subjects=[str(item[2].subject_id) for item in candidates],
                    scores_by_subject={str(item[2].subject_id): -item[0] for item in candidates},
                    selected_subject_id=str(sid),
                    minutes=minutes,
                )

            free -= minutes
            day_minutes += minutes
            remaining[sid] -= minutes
            cursor += minutes + break_minutes

            if remaining[sid] > 0:
                heapq.heappush(heap, (-compute_score(subject, day, remaining[sid], weights), order, subject))

        if day_minutes:
            logger.debug(
                "Planned day {day}: {minutes} of {budget} minutes",
                day=day.isoformat(),
                minutes=day_minutes,
                budget=daily_budget_minutes,
            )

    logger.info(
        "Generated plan with {count} sessions from {start} to {end}",
        count=len(plan),
        start=start_date.isoformat(),
        end=horizon_end.isoformat(),
    )
    return plan
