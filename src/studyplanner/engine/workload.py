"""Workload snapshots derived from stored subject progress."""

from __future__ import annotations

from studyplanner.models import Subject

from .scheduler import SubjectWorkload


def build_workloads(subjects: list[Subject]) -> list[SubjectWorkload]:
    """Build scheduler input from stored subjects, keeping their order."""
    return [
        SubjectWorkload(
            subject_id=subject.subject_id,
            exam_date=subject.exam_date,
            difficulty=subject.difficulty,
            remaining_minutes=subject.minutes_remaining,
        )
        for subject in subjects
    ]
