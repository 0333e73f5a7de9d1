"""Validation helpers."""

from .errors import (
    InvalidInputError,
    InvalidTransitionError,
    NoSubjectsError,
    PlannerError,
    SessionNotFoundError,
    StateLoadError,
    SubjectNotFoundError,
    ValidationIssue,
    ValidationReport,
)
from .domain_validator import validate_subject_input
from .request import day_window_capacity, validate_minutes_per_day, validate_plan_request

__all__ = [
    "InvalidInputError",
    "InvalidTransitionError",
    "NoSubjectsError",
    "PlannerError",
    "SessionNotFoundError",
    "StateLoadError",
    "SubjectNotFoundError",
    "ValidationIssue",
    "ValidationReport",
    "day_window_capacity",
    "validate_minutes_per_day",
    "validate_plan_request",
    "validate_subject_input",
]
