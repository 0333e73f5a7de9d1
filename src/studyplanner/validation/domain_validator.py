"""Domain-level validation rules for subject records."""

from __future__ import annotations

from datetime import date
from typing import Any

from .errors import ValidationReport

MIN_DIFFICULTY = 1
MAX_DIFFICULTY = 5


def validate_subject_input(
    payload: dict[str, Any],
    *,
    today: date | None = None,
    path: str = "$.subject",
) -> ValidationReport:
    """Validate one subject payload; all issues are collected."""
    report = ValidationReport()

    name = payload.get("name")
    if not isinstance(name, str) or not name.strip():
        report.add_error(
            code="MISSING_REQUIRED_FIELD",
            message="name must be a non-empty string",
            field_path=f"{path}.name",
        )

    raw_exam = payload.get("exam_date")
    exam_day = _parse_date(raw_exam)
    if raw_exam is None:
        report.add_error(code="MISSING_REQUIRED_FIELD", message="exam_date is required", field_path=f"{path}.exam_date")
    elif exam_day is None:
        report.add_error(
            code="INVALID_DATE_FORMAT",
            message="exam_date must be an ISO date (YYYY-MM-DD)",
            field_path=f"{path}.exam_date",
        )
    elif today is not None and exam_day < today:
        report.add_info(
            code="EXAM_DATE_IN_PAST",
            message="exam_date is before today; the subject will never be scheduled",
            field_path=f"{path}.exam_date",
        )

    _check_int_range(payload, "difficulty", MIN_DIFFICULTY, MAX_DIFFICULTY, path, report)
    _check_int_range(payload, "hours_required", 1, None, path, report)

    minutes_done = payload.get("minutes_done", 0)
    if minutes_done is not None and not _is_int(minutes_done):
        report.add_error(
            code="INVALID_TYPE",
            message="minutes_done must be an integer",
            field_path=f"{path}.minutes_done",
        )
    elif isinstance(minutes_done, int) and minutes_done < 0:
        report.add_info(
            code="INFO_MINUTES_DONE_CLAMPED",
            message="minutes_done was clamped to 0",
            field_path=f"{path}.minutes_done",
            extra={"applied_value": 0},
        )

    return report


def _check_int_range(
    payload: dict[str, Any],
    key: str,
    minimum: int,
    maximum: int | None,
    path: str,
    report: ValidationReport,
) -> None:
    value = payload.get(key)
    if value is None:
        report.add_error(code="MISSING_REQUIRED_FIELD", message=f"{key} is required", field_path=f"{path}.{key}")
        return
    if not _is_int(value):
        report.add_error(code="INVALID_TYPE", message=f"{key} must be an integer", field_path=f"{path}.{key}")
        return
    if value < minimum:
        report.add_error(code="OUT_OF_RANGE", message=f"{key} must be >= {minimum}", field_path=f"{path}.{key}")
    elif maximum is not None and value > maximum:
        report.add_error(code="OUT_OF_RANGE", message=f"{key} must be <= {maximum}", field_path=f"{path}.{key}")


def _is_int(value: Any) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


def _parse_date(raw: Any) -> date | None:
    if isinstance(raw, date):
        return raw
    if not isinstance(raw, str):
        return None
    try:
        return date.fromisoformat(raw)
    except ValueError:
        return None
