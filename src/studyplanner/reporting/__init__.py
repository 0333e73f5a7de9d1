"""Reporting utilities."""

from .decision_trace import DecisionTraceCollector
from .reports import build_error_report, build_success_report, group_sessions_by_day
from .warnings import build_coverage_warnings

__all__ = [
    "DecisionTraceCollector",
    "build_coverage_warnings",
    "build_error_report",
    "build_success_report",
    "group_sessions_by_day",
]
