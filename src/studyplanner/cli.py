"""CLI entrypoint for the study planner."""

from __future__ import annotations

import argparse
import json
from datetime import date, datetime, timedelta, timezone
from pathlib import Path
from typing import Any

from loguru import logger

from studyplanner.io import read_json, write_json
from studyplanner.logging_setup import setup_logger
from studyplanner.metrics import collect_metrics
from studyplanner.models import StudySession
from studyplanner.normalization import resolve_effective_config
from studyplanner.reporting import (
    DecisionTraceCollector,
    build_coverage_warnings,
    build_error_report,
    build_success_report,
    group_sessions_by_day,
)
from studyplanner.service import PlanningService
from studyplanner.store import PlanStore
from studyplanner.validation import InvalidInputError, PlannerError, StateLoadError, ValidationReport

DEFAULT_STATE_PATH = "studyplanner_state.json"


def _iso_date(raw: str) -> date:
    try:
        return date.fromisoformat(raw)
    except ValueError as exc:
        raise argparse.ArgumentTypeError(f"invalid date {raw!r}, expected YYYY-MM-DD") from exc


def _load_config(config_path: str | None) -> tuple[dict[str, Any], ValidationReport]:
    report = ValidationReport()
    file_config = None
    if config_path:
        try:
            file_config = read_json(config_path)
        except FileNotFoundError:
            report.add_error(code="FILE_NOT_FOUND", message=f"Config file not found: {config_path}", field_path="$.config")
        except ValueError as exc:
            report.add_error(code="INVALID_JSON", message=str(exc), field_path="$.config")
    config = resolve_effective_config([file_config], report)
    if report.errors:
        raise InvalidInputError(report, "Invalid config")
    return config, report


def _session_rows(service: PlanningService, sessions: list[StudySession]) -> list[dict[str, Any]]:
    rows = []
    for session in sessions:
        row = session.as_dict()
        subject = service.store.subjects.get(session.subject_id)
        row["subject_name"] = subject.name if subject else None
        rows.append(row)
    return rows


def _plan_report(
    command: str,
    service: PlanningService,
    start_date: date,
    chunk_minutes: int | None,
    *,
    missed_day: date | None = None,
    with_trace: bool = False,
    validation_report: ValidationReport | None = None,
) -> dict[str, Any]:
    # Snapshot before the run so warnings and metrics compare against the pre-plan workload.
    snapshot = [
        {
            "subject_id": str(subject.subject_id),
            "name": subject.name,
            "exam_date": subject.exam_date.isoformat(),
            "remaining_minutes": subject.minutes_remaining,
        }
        for subject in service.list_subjects()
    ]
    trace = DecisionTraceCollector(start_timestamp=datetime.now(timezone.utc)) if with_trace else None

    if missed_day is not None:
        sessions = service.mark_day_missed_and_reschedule(
            missed_day, chunk_minutes, decision_trace=trace, validation_report=validation_report
        )
    else:
        sessions = service.generate_plan(
            start_date, chunk_minutes, decision_trace=trace, validation_report=validation_report
        )

    rows = _session_rows(service, sessions)
    budget = service.get_or_create_availability().minutes_per_day
    metrics = collect_metrics(
        allocations=rows,
        remaining_by_subject={item["subject_id"]: item["remaining_minutes"] for item in snapshot},
        daily_budget_minutes=budget,
    )
    warnings = build_coverage_warnings(subjects=snapshot, allocations=rows, reference_day=start_date)
    return build_success_report(
        command,
        {
            "start_date": start_date.isoformat(),
            "minutes_per_day": budget,
            "sessions": rows,
            "daily_plan": group_sessions_by_day(rows),
        },
        metrics=metrics,
        warnings=warnings,
        decision_trace=trace.as_list() if trace is not None else None,
        validation_report=validation_report,
    )


def run_command(args: argparse.Namespace) -> tuple[dict[str, Any], int]:
    """Execute one parsed command against the state file; returns (report, exit_code)."""
    command = f"{args.command} {args.action}"
    try:
        config, config_report = _load_config(args.config)
        try:
            store = PlanStore.load(args.state)
        except (KeyError, TypeError, ValueError) as exc:
            raise StateLoadError(f"Unreadable state file {args.state}: {exc}") from exc
        service = PlanningService(store, config)

        if args.command == "subjects" and args.action == "add":
            subject = service.add_subject(
                {
                    "name": args.name,
                    "exam_date": args.exam_date,
                    "difficulty": args.difficulty,
                    "hours_required": args.hours,
                    "minutes_done": args.minutes_done,
                },
                today=date.today(),
            )
            report = build_success_report(command, subject.as_dict())
        elif args.command == "subjects" and args.action == "list":
            report = build_success_report(command, [subject.as_dict() for subject in service.list_subjects()])
        elif args.command == "subjects" and args.action == "delete":
            report = build_success_report(command, service.delete_subject(args.id).as_dict())
        elif args.command == "availability" and args.action == "get":
            report = build_success_report(command, service.get_or_create_availability().as_dict())
        elif args.command == "availability" and args.action == "set":
            report = build_success_report(command, service.set_minutes_per_day(args.minutes).as_dict())
        elif args.command == "plan" and args.action == "generate":
            report = _plan_report(
                command,
                service,
                args.start,
                args.chunk,
                with_trace=args.trace,
                validation_report=config_report,
            )
        elif args.command == "sessions" and args.action == "list":
            sessions = service.get_sessions(args.date_from, args.date_to)
            report = build_success_report(command, group_sessions_by_day(_session_rows(service, sessions)))
        elif args.command == "sessions" and args.action == "done":
            report = build_success_report(command, service.mark_session_done(args.id).as_dict())
        elif args.command == "sessions" and args.action == "missed":
            report = _plan_report(
                command,
                service,
                args.date + timedelta(days=1),
                args.chunk,
                missed_day=args.date,
                with_trace=args.trace,
                validation_report=config_report,
            )
        else:
            raise PlannerError(f"Unknown command: {command}")
    except PlannerError as exc:
        logger.error("{command} failed: {error}", command=command, error=str(exc))
        return build_error_report(exc), 2

    store.save(args.state)
    return report, 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="studyplanner", description="Exam study planner CLI")
    parser.add_argument("--state", default=DEFAULT_STATE_PATH, help="Path to the planner state JSON")
    parser.add_argument("--config", default=None, help="Optional planner config JSON")
    parser.add_argument("--output", default=None, help="Write the JSON report here instead of stdout")
    parser.add_argument("--debug", action="store_true", help="Enable debug logging")
    commands = parser.add_subparsers(dest="command", required=True)

    subjects = commands.add_parser("subjects", help="Manage subjects").add_subparsers(dest="action", required=True)
    add = subjects.add_parser("add", help="Add a subject")
    add.add_argument("--name", required=True)
    add.add_argument("--exam-date", required=True, type=_iso_date)
    add.add_argument("--difficulty", required=True, type=int, help="1 (easy) to 5 (hard)")
    add.add_argument("--hours", required=True, type=int, help="Total study hours required")
    add.add_argument("--minutes-done", type=int, default=0)
    subjects.add_parser("list", help="List subjects by exam date")
    delete = subjects.add_parser("delete", help="Delete a subject and its sessions")
    delete.add_argument("--id", required=True, type=int)

    availability = commands.add_parser("availability", help="Daily study budget").add_subparsers(
        dest="action", required=True
    )
    availability.add_parser("get", help="Show the daily budget")
    set_budget = availability.add_parser("set", help="Set the daily budget")
    set_budget.add_argument("--minutes", required=True, type=int)

    plan = commands.add_parser("plan", help="Plan generation").add_subparsers(dest="action", required=True)
    generate = plan.add_parser("generate", help="Generate a plan from a start date")
    generate.add_argument("--start", required=True, type=_iso_date)
    generate.add_argument("--chunk", type=int, default=None, help="Session chunk size in minutes")
    generate.add_argument("--trace", action="store_true", help="Include the decision trace")

    sessions = commands.add_parser("sessions", help="Study sessions").add_subparsers(dest="action", required=True)
    list_sessions = sessions.add_parser("list", help="List sessions in a date range")
    list_sessions.add_argument("--from", dest="date_from", required=True, type=_iso_date)
    list_sessions.add_argument("--to", dest="date_to", required=True, type=_iso_date)
    done = sessions.add_parser("done", help="Mark a session done")
    done.add_argument("--id", required=True, type=int)
    missed = sessions.add_parser("missed", help="Mark a day missed and re-plan from the next day")
    missed.add_argument("--date", required=True, type=_iso_date)
    missed.add_argument("--chunk", type=int, default=None)
    missed.add_argument("--trace", action="store_true")

    return parser


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    setup_logger("DEBUG" if args.debug else "INFO")

    report, exit_code = run_command(args)
    if args.output:
        write_json(Path(args.output), report)
    else:
        print(json.dumps(report, ensure_ascii=False, indent=2, sort_keys=True))
    return exit_code


if __name__ == "__main__":
    raise SystemExit(main())
