"""Plan orchestration on top of the stored state.

The service owns the read-modify-write cycle around the scheduler:
load subject progress, drop stale PLANNED sessions, run the scheduler and
store its allocations as new sessions. Callers persist the store afterwards.
"""

from __future__ import annotations

from datetime import date, timedelta
from typing import Any

from loguru import logger

from studyplanner.engine import build_workloads, generate_plan
from studyplanner.models import Availability, SessionStatus, StudySession, Subject
from studyplanner.normalization import DEFAULT_PLANNER_CONFIG, resolve_day_start
from studyplanner.reporting.decision_trace import DecisionTraceCollector
from studyplanner.store import PlanStore
from studyplanner.validation import (
    InvalidInputError,
    InvalidTransitionError,
    NoSubjectsError,
    SessionNotFoundError,
    SubjectNotFoundError,
    ValidationReport,
    validate_minutes_per_day,
    validate_plan_request,
    validate_subject_input,
)


class PlanningService:
    def __init__(self, store: PlanStore, config: dict[str, Any] | None = None) -> None:
        self.store = store
        self.config = config if config is not None else dict(DEFAULT_PLANNER_CONFIG)

    # Availability

    def get_or_create_availability(self) -> Availability:
        if self.store.availability is None:
            default = int(self.config.get("default_minutes_per_day", DEFAULT_PLANNER_CONFIG["default_minutes_per_day"]))
            self.store.availability = Availability(minutes_per_day=default)
        return self.store.availability

    def set_minutes_per_day(self, minutes_per_day: int) -> Availability:
        report = validate_minutes_per_day(minutes_per_day)
        if report.errors:
            raise InvalidInputError(report, "Invalid availability")
        availability = self.get_or_create_availability()
        availability.minutes_per_day = minutes_per_day
        logger.info("Daily study budget set to {minutes} minutes", minutes=minutes_per_day)
        return availability

    # Subjects

    def list_subjects(self) -> list[Subject]:
        """Return subjects by nearest exam first, harder subjects first on ties."""
        return sorted(
            self.store.subjects.values(),
            key=lambda s: (s.exam_date, -s.difficulty, s.subject_id),
        )

    def add_subject(self, payload: dict[str, Any], *, today: date | None = None) -> Subject:
        report = validate_subject_input(payload, today=today)
        if report.errors:
            raise InvalidInputError(report, "Invalid subject")
        for info in report.infos:
            logger.warning("{code}: {detail}", code=info.code, detail=info.message)

        exam_date = payload["exam_date"]
        subject = Subject(
            subject_id=0,
            name=str(payload["name"]).strip(),
            exam_date=exam_date if isinstance(exam_date, date) else date.fromisoformat(exam_date),
            difficulty=int(payload["difficulty"]),
            hours_required=int(payload["hours_required"]),
            minutes_done=max(0, int(payload.get("minutes_done") or 0)),
        )
        self.store.add_subject(subject)
        logger.info("Added subject {subject_id} ({name})", subject_id=subject.subject_id, name=subject.name)
        return subject

    def delete_subject(self, subject_id: int) -> Subject:
        subject = self.store.delete_subject(subject_id)
        if subject is None:
            raise SubjectNotFoundError(subject_id)
        orphaned = [s.session_id for s in self.store.sessions.values() if s.subject_id == subject_id]
        for session_id in orphaned:
            self.store.delete_session(session_id)
        logger.info(
            "Deleted subject {subject_id} and {count} sessions",
            subject_id=subject_id,
            count=len(orphaned),
        )
        return subject

    # Plan

    def generate_plan(
        self,
        start_date: date,
        chunk_minutes: int | None = None,
        *,
        decision_trace: DecisionTraceCollector | None = None,
        validation_report: ValidationReport | None = None,
    ) -> list[StudySession]:
        """Replace PLANNED sessions from ``start_date`` on with a fresh plan.

        DONE and MISSED sessions are history and are never touched. Non-blocking
        request infos are logged and appended to ``validation_report`` when given.
        """
        chunk = int(self.config["default_chunk_minutes"]) if chunk_minutes is None else int(chunk_minutes)
        subjects = [self.store.subjects[sid] for sid in sorted(self.store.subjects)]
        if not subjects:
            raise NoSubjectsError()

        availability = self.get_or_create_availability()
        day_start = resolve_day_start(self.config)
        break_minutes = int(self.config["break_minutes"])
        report = validate_plan_request(
            start_date=start_date,
            chunk_minutes=chunk,
            exam_dates=[s.exam_date for s in subjects],
            max_horizon_days=int(self.config["max_horizon_days"]),
            daily_budget_minutes=availability.minutes_per_day,
            day_start=day_start,
            break_minutes=break_minutes,
        )
        if report.errors:
            raise InvalidInputError(report, "Invalid plan request")
        for info in report.infos:
            logger.warning("{code}: {detail}", code=info.code, detail=info.message)
        if validation_report is not None:
            validation_report.infos.extend(report.infos)

        dropped = self._drop_planned_from(start_date)

        allocations = generate_plan(
            build_workloads(subjects),
            start_date,
            availability.minutes_per_day,
            chunk,
            day_start=day_start,
            break_minutes=break_minutes,
            weights=self.config.get("score_weights"),
            decision_trace=decision_trace,
        )

        saved = [
            self.store.add_session(
                StudySession(
                    session_id=0,
                    subject_id=int(item.subject_id),
                    date=item.date,
                    start_time=item.start_time,
                    minutes=item.minutes,
                    status=SessionStatus.PLANNED,
                )
            )
            for item in allocations
        ]
        logger.info(
            "Plan from {start}: replaced {dropped} planned sessions with {created}",
            start=start_date.isoformat(),
            dropped=dropped,
            created=len(saved),
        )
        return saved

    def mark_day_missed_and_reschedule(
        self,
        day: date,
        chunk_minutes: int | None = None,
        *,
        decision_trace: DecisionTraceCollector | None = None,
        validation_report: ValidationReport | None = None,
    ) -> list[StudySession]:
        """Mark the day's PLANNED sessions MISSED and re-plan from the next day."""
        if not self.store.subjects:
            raise NoSubjectsError()
        missed = 0
        for session in self.store.sessions_on(day):
            if session.status is SessionStatus.PLANNED:
                session.status = SessionStatus.MISSED
                missed += 1
        logger.info("Marked {count} sessions missed on {day}", count=missed, day=day.isoformat())
        return self.generate_plan(
            day + timedelta(days=1),
            chunk_minutes,
            decision_trace=decision_trace,
            validation_report=validation_report,
        )

    def mark_session_done(self, session_id: int) -> StudySession:
        session = self.store.sessions.get(session_id)
        if session is None:
            raise SessionNotFoundError(session_id)
        if session.status is SessionStatus.DONE:
            return session
        if session.status is SessionStatus.MISSED:
            raise InvalidTransitionError(f"Session {session_id} was missed and cannot be marked done")

        session.status = SessionStatus.DONE
        subject = self.store.subjects.get(session.subject_id)
        if subject is not None:
            subject.minutes_done += session.minutes
        logger.info(
            "Session {session_id} done: +{minutes} minutes for subject {subject_id}",
            session_id=session_id,
            minutes=session.minutes,
            subject_id=session.subject_id,
        )
        return session

    def get_sessions(self, start: date, end: date) -> list[StudySession]:
        return self.store.sessions_between(start, end)

    def _drop_planned_from(self, start_date: date) -> int:
        stale = [s.session_id for s in self.store.sessions_from(start_date) if s.status is SessionStatus.PLANNED]
        for session_id in stale:
            self.store.delete_session(session_id)
        return len(stale)
