"""Plan metrics collector."""

from __future__ import annotations

from collections import defaultdict
from datetime import date, timedelta
from statistics import mean
from typing import Any


def _clamp01(value: float) -> float:
    return max(0.0, min(1.0, float(value)))


def collect_metrics(
    *,
    allocations: list[dict[str, Any]],
    remaining_by_subject: dict[str, int],
    daily_budget_minutes: int,
) -> dict[str, Any]:
    """Compute plan totals, coverage and budget utilisation in [0,1].

    ``remaining_by_subject`` is the workload before planning, keyed by the
    stringified subject id.
    """
    used_by_day: dict[str, int] = defaultdict(int)
    used_by_subject: dict[str, int] = defaultdict(int)

    for alloc in allocations:
        minutes = max(0, int(alloc.get("minutes", 0) or 0))
        used_by_day[str(alloc.get("date", ""))] += minutes
        used_by_subject[str(alloc.get("subject_id", ""))] += minutes

    total_planned = sum(used_by_day.values())
    total_remaining = sum(max(0, int(v)) for v in remaining_by_subject.values())

    coverage_by_subject: dict[str, float] = {}
    unplanned_by_subject: dict[str, int] = {}
    for sid in sorted(remaining_by_subject):
        remaining = max(0, int(remaining_by_subject[sid]))
        planned = used_by_subject.get(sid, 0)
        coverage_by_subject[sid] = _clamp01(planned / remaining) if remaining > 0 else 1.0
        unplanned_by_subject[sid] = max(0, remaining - planned)

    utilization_values: list[float] = []
    if used_by_day and daily_budget_minutes > 0:
        days = sorted(date.fromisoformat(day) for day in used_by_day)
        cursor = days[0]
        while cursor <= days[-1]:
            utilization_values.append(_clamp01(used_by_day.get(cursor.isoformat(), 0) / daily_budget_minutes))
            cursor += timedelta(days=1)

    return {
        "sessions_count": len(allocations),
        "total_planned_minutes": total_planned,
        "days_with_sessions": len(used_by_day),
        "overall_coverage": _clamp01(total_planned / total_remaining) if total_remaining > 0 else 1.0,
        "budget_utilization": round(mean(utilization_values), 4) if utilization_values else 0.0,
        "coverage_by_subject": coverage_by_subject,
        "unplanned_minutes_by_subject": unplanned_by_subject,
    }
