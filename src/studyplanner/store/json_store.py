"""In-memory planner state with JSON file persistence."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from pathlib import Path
from typing import Any

from loguru import logger

from studyplanner.io import read_json, write_json
from studyplanner.models import DEFAULT_MINUTES_PER_DAY, Availability, StudySession, Subject

STATE_SCHEMA_VERSION = "1.0"


@dataclass
class PlanStore:
    """Subjects, sessions and the single availability record."""

    subjects: dict[int, Subject] = field(default_factory=dict)
    sessions: dict[int, StudySession] = field(default_factory=dict)
    availability: Availability | None = None
    next_subject_id: int = 1
    next_session_id: int = 1

    @classmethod
    def load(cls, path: str | Path) -> "PlanStore":
        payload = read_json(path, missing_ok=True)
        if not payload:
            logger.debug("No state at {path}, starting empty", path=str(path))
            return cls()

        store = cls(
            next_subject_id=int(payload.get("next_subject_id", 1)),
            next_session_id=int(payload.get("next_session_id", 1)),
        )
        for item in payload.get("subjects", []):
            subject = Subject.from_dict(item)
            store.subjects[subject.subject_id] = subject
        for item in payload.get("sessions", []):
            session = StudySession.from_dict(item)
            store.sessions[session.session_id] = session
        raw_availability = payload.get("availability")
        if isinstance(raw_availability, dict):
            store.availability = Availability(
                minutes_per_day=int(raw_availability.get("minutes_per_day", DEFAULT_MINUTES_PER_DAY))
            )

        # Counters must stay ahead of loaded ids even for hand-edited files.
        store.next_subject_id = max([store.next_subject_id, *(sid + 1 for sid in store.subjects)])
        store.next_session_id = max([store.next_session_id, *(sid + 1 for sid in store.sessions)])
        logger.debug(
            "Loaded state from {path}: {subjects} subjects, {sessions} sessions",
            path=str(path),
            subjects=len(store.subjects),
            sessions=len(store.sessions),
        )
        return store

    def save(self, path: str | Path) -> None:
        write_json(path, self.as_dict())

    def as_dict(self) -> dict[str, Any]:
        return {
            "schema_version": STATE_SCHEMA_VERSION,
            "next_subject_id": self.next_subject_id,
            "next_session_id": self.next_session_id,
            "availability": self.availability.as_dict() if self.availability else None,
            "subjects": [self.subjects[sid].as_dict() for sid in sorted(self.subjects)],
            "sessions": [self.sessions[sid].as_dict() for sid in sorted(self.sessions)],
        }

    # Subjects

    def add_subject(self, subject: Subject) -> Subject:
        subject.subject_id = self.next_subject_id
        self.next_subject_id += 1
        self.subjects[subject.subject_id] = subject
        return subject

    def delete_subject(self, subject_id: int) -> Subject | None:
        return self.subjects.pop(subject_id, None)

    # Sessions

    def add_session(self, session: StudySession) -> StudySession:
        session.session_id = self.next_session_id
        self.next_session_id += 1
        self.sessions[session.session_id] = session
        return session

    def delete_session(self, session_id: int) -> None:
        self.sessions.pop(session_id, None)

    def sessions_on(self, day: date) -> list[StudySession]:
        return [s for s in self._ordered_sessions() if s.date == day]

    def sessions_from(self, day: date) -> list[StudySession]:
        return [s for s in self._ordered_sessions() if s.date >= day]

    def sessions_between(self, start: date, end: date) -> list[StudySession]:
        return [s for s in self._ordered_sessions() if start <= s.date <= end]

    def _ordered_sessions(self) -> list[StudySession]:
        return sorted(self.sessions.values(), key=lambda s: (s.date, s.start_time, s.session_id))
