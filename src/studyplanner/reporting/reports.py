"""Build CLI reports."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any

from studyplanner.validation import InvalidInputError, PlannerError, ValidationReport


def _now_iso() -> str:
    return datetime.now(timezone.utc).isoformat().replace("+00:00", "Z")


def build_error_report(error: PlannerError) -> dict[str, Any]:
    """Return a JSON-serializable error report."""
    payload: dict[str, Any] = {
        "status": "error",
        "generated_at": _now_iso(),
        "error": {
            "code": error.code,
            "message": str(error),
        },
    }
    if isinstance(error, InvalidInputError):
        payload["validation_report"] = error.report.as_dict()
    return payload


def build_success_report(
    command: str,
    result: Any,
    *,
    metrics: dict[str, Any] | None = None,
    warnings: list[dict[str, Any]] | None = None,
    decision_trace: list[dict[str, Any]] | None = None,
    validation_report: ValidationReport | None = None,
) -> dict[str, Any]:
    """Return a JSON-serializable success report; optional sections are omitted when empty."""
    payload: dict[str, Any] = {
        "status": "ok",
        "command": command,
        "generated_at": _now_iso(),
        "result": result,
    }
    if metrics is not None:
        payload["metrics"] = metrics
    if warnings is not None:
        payload["warnings"] = warnings
    if decision_trace:
        payload["decision_trace"] = decision_trace
    if validation_report is not None and (validation_report.errors or validation_report.infos):
        payload["validation_report"] = validation_report.as_dict()
    return payload


def group_sessions_by_day(sessions: list[dict[str, Any]]) -> list[dict[str, Any]]:
    """Group serialized sessions into ``[{date, total_minutes, sessions}]`` by ascending date."""
    by_day: dict[str, list[dict[str, Any]]] = {}
    for item in sessions:
        by_day.setdefault(str(item.get("date", "")), []).append(item)
    return [
        {
            "date": day,
            "total_minutes": sum(int(item.get("minutes", 0) or 0) for item in items),
            "sessions": sorted(items, key=lambda x: str(x.get("start_time", ""))),
        }
        for day, items in sorted(by_day.items(), key=lambda entry: entry[0])
    ]
