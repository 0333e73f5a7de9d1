"""Coverage warnings for generated plans."""

from __future__ import annotations

from collections import defaultdict
from datetime import date
from typing import Any


def build_coverage_warnings(
    *,
    subjects: list[dict[str, Any]],
    allocations: list[dict[str, Any]],
    reference_day: date,
) -> list[dict[str, Any]]:
    """Flag subjects the plan cannot finish before their exam.

    ``subjects`` items carry ``subject_id``, ``name``, ``exam_date`` (ISO) and
    ``remaining_minutes`` as they were before planning.
    """
    planned: dict[str, int] = defaultdict(int)
    for alloc in allocations:
        planned[str(alloc.get("subject_id", ""))] += int(alloc.get("minutes", 0) or 0)

    warnings: list[dict[str, Any]] = []
    for subject in subjects:
        sid = str(subject.get("subject_id", ""))
        remaining = int(subject.get("remaining_minutes", 0) or 0)
        if remaining <= 0:
            continue
        exam_day = date.fromisoformat(str(subject["exam_date"]))
        name = subject.get("name") or sid

        if exam_day < reference_day:
            warnings.append(
                {
                    "code": "EXAM_ALREADY_PASSED",
                    "severity": "info",
                    "subject_id": sid,
                    "message": f"{name}: exam on {exam_day.isoformat()} is past, {remaining} minutes left unplanned.",
                }
            )
            continue

        missing = remaining - planned.get(sid, 0)
        if missing > 0:
            warnings.append(
                {
                    "code": "SUBJECT_NOT_COVERED",
                    "severity": "warning",
                    "subject_id": sid,
                    "missing_minutes": missing,
                    "message": f"{name}: {missing} of {remaining} minutes do not fit before the exam.",
                }
            )

    return warnings
