"""Persisted planner records."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date, time
from enum import Enum
from typing import Any

DEFAULT_SESSION_START = time(18, 0)
DEFAULT_MINUTES_PER_DAY = 180


def compute_remaining_minutes(hours_required: int, minutes_done: int) -> int:
    """Return ``max(0, hours_required * 60 - minutes_done)``; negative progress counts as none."""
    return max(0, int(hours_required) * 60 - max(0, int(minutes_done)))


class SessionStatus(str, Enum):
    PLANNED = "PLANNED"
    DONE = "DONE"
    MISSED = "MISSED"


@dataclass(slots=True)
class Subject:
    """A subject with an exam date and a study requirement in hours."""

    subject_id: int
    name: str
    exam_date: date
    difficulty: int
    hours_required: int
    minutes_done: int = 0

    @property
    def minutes_required(self) -> int:
        return self.hours_required * 60

    @property
    def minutes_remaining(self) -> int:
        return compute_remaining_minutes(self.hours_required, self.minutes_done)

    def as_dict(self) -> dict[str, Any]:
        return {
            "subject_id": self.subject_id,
            "name": self.name,
            "exam_date": self.exam_date.isoformat(),
            "difficulty": self.difficulty,
            "hours_required": self.hours_required,
            "minutes_done": self.minutes_done,
            "minutes_remaining": self.minutes_remaining,
        }

    @classmethod
    def from_dict(cls, payload: dict[str, Any]) -> "Subject":
        return cls(
            subject_id=int(payload["subject_id"]),
            name=str(payload["name"]),
            exam_date=date.fromisoformat(payload["exam_date"]),
            difficulty=int(payload["difficulty"]),
            hours_required=int(payload["hours_required"]),
            minutes_done=max(0, int(payload.get("minutes_done", 0) or 0)),
        )


@dataclass(slots=True)
class StudySession:
    """A stored study session; created PLANNED by plan generation."""

    session_id: int
    subject_id: int
    date: date
    minutes: int
    start_time: time = DEFAULT_SESSION_START
    status: SessionStatus = SessionStatus.PLANNED

    def as_dict(self) -> dict[str, Any]:
        return {
            "session_id": self.session_id,
            "subject_id": self.subject_id,
            "date": self.date.isoformat(),
            "start_time": self.start_time.strftime("%H:%M:%S"),
            "minutes": self.minutes,
            "status": self.status.value,
        }

    @classmethod
    def from_dict(cls, payload: dict[str, Any]) -> "StudySession":
        raw_start = payload.get("start_time")
        return cls(
            session_id=int(payload["session_id"]),
            subject_id=int(payload["subject_id"]),
            date=date.fromisoformat(payload["date"]),
            minutes=int(payload["minutes"]),
            start_time=time.fromisoformat(raw_start) if raw_start else DEFAULT_SESSION_START,
            status=SessionStatus(payload.get("status", SessionStatus.PLANNED.value)),
        )


@dataclass(slots=True)
class Availability:
    minutes_per_day: int = DEFAULT_MINUTES_PER_DAY

    def as_dict(self) -> dict[str, Any]:
        return {"minutes_per_day": self.minutes_per_day}
