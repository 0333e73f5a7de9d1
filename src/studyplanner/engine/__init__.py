"""Planning engine."""

from studyplanner.models import compute_remaining_minutes

from .scheduler import (
    DEFAULT_BREAK_MINUTES,
    DEFAULT_CHUNK_MINUTES,
    DEFAULT_DAY_START,
    PlannedAllocation,
    SubjectWorkload,
    generate_plan,
)
from .scoring import DEFAULT_SCORE_WEIGHTS, compute_score, days_until_exam
from .workload import build_workloads

__all__ = [
    "DEFAULT_BREAK_MINUTES",
    "DEFAULT_CHUNK_MINUTES",
    "DEFAULT_DAY_START",
    "DEFAULT_SCORE_WEIGHTS",
    "PlannedAllocation",
    "SubjectWorkload",
    "build_workloads",
    "compute_remaining_minutes",
    "compute_score",
    "days_until_exam",
    "generate_plan",
]
