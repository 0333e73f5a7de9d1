"""Validation models and planner exceptions."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any


@dataclass(slots=True)
class ValidationIssue:
    """Structured validation issue for report export."""

    code: str
    message: str
    field_path: str
    suggested_fix: str | None = None
    extra: dict[str, Any] = field(default_factory=dict)

    def as_dict(self) -> dict[str, Any]:
        payload: dict[str, Any] = {
            "code": self.code,
            "message": self.message,
            "field_path": self.field_path,
        }
        if self.suggested_fix:
            payload["suggested_fix"] = self.suggested_fix
        payload.update(self.extra)
        return payload


@dataclass(slots=True)
class ValidationReport:
    """Aggregated report with errors and infos (no short-circuit)."""

    errors: list[ValidationIssue] = field(default_factory=list)
    infos: list[ValidationIssue] = field(default_factory=list)

    def add_error(
        self,
        *,
        code: str,
        message: str,
        field_path: str,
        suggested_fix: str | None = None,
        extra: dict[str, Any] | None = None,
    ) -> None:
        self.errors.append(
            ValidationIssue(
                code=code,
                message=message,
                field_path=field_path,
                suggested_fix=suggested_fix,
                extra=extra or {},
            )
        )

    def add_info(
        self,
        *,
        code: str,
        message: str,
        field_path: str,
        extra: dict[str, Any] | None = None,
    ) -> None:
        self.infos.append(
            ValidationIssue(
                code=code,
                message=message,
                field_path=field_path,
                extra=extra or {},
            )
        )

    @property
    def codes(self) -> set[str]:
        return {issue.code for issue in self.errors}

    def as_dict(self) -> dict[str, list[dict[str, Any]]]:
        return {
            "errors": [issue.as_dict() for issue in self.errors],
            "infos": [issue.as_dict() for issue in self.infos],
        }


class PlannerError(Exception):
    """Base class for errors surfaced to the planner caller."""

    code = "planner_error"


class NoSubjectsError(PlannerError):
    code = "no_subjects"

    def __init__(self, message: str = "No subjects found. Add subjects first.") -> None:
        super().__init__(message)


class SubjectNotFoundError(PlannerError):
    code = "subject_not_found"

    def __init__(self, subject_id: int) -> None:
        super().__init__(f"Subject not found: {subject_id}")
        self.subject_id = subject_id


class SessionNotFoundError(PlannerError):
    code = "session_not_found"

    def __init__(self, session_id: int) -> None:
        super().__init__(f"Session not found: {session_id}")
        self.session_id = session_id


class InvalidTransitionError(PlannerError):
    code = "invalid_transition"


class StateLoadError(PlannerError):
    code = "state_load_error"


class InvalidInputError(PlannerError):
    """Raised when a validation report contains errors."""

    code = "validation_error"

    def __init__(self, report: ValidationReport, message: str = "Invalid input") -> None:
        details = "; ".join(f"{issue.field_path}: {issue.message}" for issue in report.errors)
        super().__init__(f"{message}: {details}" if details else message)
        self.report = report
