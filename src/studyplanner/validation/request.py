"""Validation for plan and availability requests."""

from __future__ import annotations

from datetime import date, time

from .errors import ValidationReport

MIN_CHUNK_MINUTES = 15

_MINUTES_PER_DAY = 24 * 60


def day_window_capacity(
    *,
    daily_budget_minutes: int,
    chunk_minutes: int,
    day_start: time,
    break_minutes: int,
) -> int:
    """Return how much of the daily budget fits between ``day_start`` and midnight.

    Mirrors the scheduler's cursor: chunks start strictly before midnight and
    are followed by a break.
    """
    chunk = max(1, int(chunk_minutes))
    pause = max(0, int(break_minutes))
    cursor = day_start.hour * 60 + day_start.minute
    fitted = 0
    while fitted < daily_budget_minutes and cursor < _MINUTES_PER_DAY:
        minutes = min(chunk, daily_budget_minutes - fitted)
        fitted += minutes
        cursor += minutes + pause
    return fitted


def validate_plan_request(
    *,
    start_date: date,
    chunk_minutes: int,
    exam_dates: list[date],
    max_horizon_days: int,
    daily_budget_minutes: int = 0,
    day_start: time | None = None,
    break_minutes: int = 0,
) -> ValidationReport:
    """Validate a generate request before the scheduler runs.

    The horizon guard keeps a far-future exam from turning one request into
    an unbounded day loop. A budget that cannot fit before midnight is only
    reported as an info: the plan is still generated with what fits.
    """
    report = ValidationReport()

    if chunk_minutes < MIN_CHUNK_MINUTES:
        report.add_error(
            code="OUT_OF_RANGE",
            message=f"chunk_minutes must be >= {MIN_CHUNK_MINUTES}",
            field_path="$.chunk_minutes",
        )

    if exam_dates:
        horizon_days = (max(exam_dates) - start_date).days + 1
        if horizon_days > max_horizon_days:
            report.add_error(
                code="HORIZON_TOO_LONG",
                message=f"Planning horizon of {horizon_days} days exceeds {max_horizon_days}",
                field_path="$.start_date",
                suggested_fix="Move the start date closer to the exams or raise max_horizon_days.",
                extra={"horizon_days": horizon_days},
            )

    if day_start is not None and daily_budget_minutes > 0 and chunk_minutes >= MIN_CHUNK_MINUTES:
        fitted = day_window_capacity(
            daily_budget_minutes=daily_budget_minutes,
            chunk_minutes=chunk_minutes,
            day_start=day_start,
            break_minutes=break_minutes,
        )
        if fitted < daily_budget_minutes:
            report.add_info(
                code="BUDGET_EXCEEDS_DAY_WINDOW",
                message=(
                    f"Only {fitted} of {daily_budget_minutes} minutes per day fit between "
                    f"{day_start.strftime('%H:%M')} and midnight; lower minutes_per_day or move day_start_time earlier."
                ),
                field_path="$.minutes_per_day",
                extra={"daily_budget_minutes": daily_budget_minutes, "schedulable_minutes": fitted},
            )

    return report


def validate_minutes_per_day(minutes_per_day: int) -> ValidationReport:
    report = ValidationReport()
    if minutes_per_day < 0:
        report.add_error(
            code="OUT_OF_RANGE",
            message="minutes_per_day must be >= 0",
            field_path="$.minutes_per_day",
        )
    return report
