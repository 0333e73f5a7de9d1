from __future__ import annotations

from datetime import date, datetime, time, timezone

import pytest

from studyplanner.engine import SubjectWorkload, build_workloads, compute_remaining_minutes, compute_score, days_until_exam
from studyplanner.metrics import collect_metrics
from studyplanner.models import SessionStatus, StudySession, Subject
from studyplanner.normalization import DEFAULT_PLANNER_CONFIG, resolve_day_start, resolve_effective_config
from studyplanner.reporting import (
    DecisionTraceCollector,
    build_coverage_warnings,
    build_error_report,
    build_success_report,
    group_sessions_by_day,
)
from studyplanner.validation import (
    InvalidInputError,
    NoSubjectsError,
    ValidationReport,
    day_window_capacity,
    validate_minutes_per_day,
    validate_plan_request,
    validate_subject_input,
)


def _workload(exam: str, difficulty: int = 1, remaining: int = 0) -> SubjectWorkload:
    return SubjectWorkload(
        subject_id="s",
        exam_date=date.fromisoformat(exam),
        difficulty=difficulty,
        remaining_minutes=remaining,
    )


def test_score_formula_with_default_weights() -> None:
    subject = _workload("2026-01-03", difficulty=5, remaining=120)
    assert compute_score(subject, date(2026, 1, 1), 120) == pytest.approx(17.0)
    assert compute_score(subject, "2026-01-01", 30) == pytest.approx(15.5)


def test_score_urgency_is_floored_on_exam_day_and_after() -> None:
    subject = _workload("2026-01-05", difficulty=1)
    on_exam_day = compute_score(subject, date(2026, 1, 5), 0)
    overdue = compute_score(subject, date(2026, 1, 9), 0)
    day_before = compute_score(subject, date(2026, 1, 4), 0)

    assert on_exam_day == pytest.approx(12.0)
    assert overdue == pytest.approx(on_exam_day)
    assert day_before == pytest.approx(on_exam_day)


def test_score_accepts_partial_weight_overrides() -> None:
    subject = _workload("2026-01-11", difficulty=3, remaining=60)
    score = compute_score(subject, date(2026, 1, 1), 60, weights={"w_difficulty": 0.0})
    assert score == pytest.approx(10 * 0.1 + 1.0)


def test_days_until_exam_is_signed() -> None:
    assert days_until_exam("2026-01-10", "2026-01-01") == 9
    assert days_until_exam(date(2026, 1, 1), date(2026, 1, 3)) == -2


def test_remaining_minutes_never_negative() -> None:
    assert compute_remaining_minutes(3, 45) == 135
    assert compute_remaining_minutes(1, 90) == 0
    assert compute_remaining_minutes(2, -10) == 120


def test_subject_and_workload_agree_on_negative_progress() -> None:
    subject = Subject(subject_id=1, name="A", exam_date=date(2026, 1, 1), difficulty=1, hours_required=2, minutes_done=-10)

    (workload,) = build_workloads([subject])

    assert subject.minutes_remaining == 120
    assert workload.remaining_minutes == subject.minutes_remaining


def test_build_workloads_keeps_order_and_progress() -> None:
    subjects = [
        Subject(subject_id=2, name="B", exam_date=date(2026, 2, 1), difficulty=2, hours_required=1, minutes_done=15),
        Subject(subject_id=1, name="A", exam_date=date(2026, 1, 1), difficulty=4, hours_required=2),
    ]

    workloads = build_workloads(subjects)

    assert [w.subject_id for w in workloads] == [2, 1]
    assert [w.remaining_minutes for w in workloads] == [45, 120]
    assert workloads[1].difficulty == 4


def test_subject_and_session_dict_round_trip() -> None:
    subject = Subject(subject_id=3, name="Chem", exam_date=date(2026, 3, 1), difficulty=3, hours_required=4, minutes_done=30)
    session = StudySession(
        session_id=9,
        subject_id=3,
        date=date(2026, 2, 1),
        minutes=45,
        start_time=time(19, 10),
        status=SessionStatus.DONE,
    )

    assert Subject.from_dict(subject.as_dict()) == subject
    assert subject.as_dict()["minutes_remaining"] == 210
    assert StudySession.from_dict(session.as_dict()) == session
    assert session.as_dict()["start_time"] == "19:10:00"


def test_config_layers_merge_and_report_unknown_keys() -> None:
    report = ValidationReport()
    config = resolve_effective_config(
        [
            {"break_minutes": 5, "score_weights": {"w_urgency": 20}},
            {"day_start_time": "07:30", "colour": "blue", "max_horizon_days": -1},
        ],
        report,
    )

    assert config["break_minutes"] == 5
    assert config["day_start_time"] == "07:30"
    assert config["score_weights"] == {"w_urgency": 20.0, "w_difficulty": 2.0, "w_remaining": 1.0}
    assert config["max_horizon_days"] == DEFAULT_PLANNER_CONFIG["max_horizon_days"]
    assert resolve_day_start(config) == time(7, 30)
    assert report.codes == {"INVALID_CONFIG_KEY", "OUT_OF_RANGE"}
    assert DEFAULT_PLANNER_CONFIG["score_weights"]["w_urgency"] == 10.0


def test_config_rejects_bad_clock_and_weights() -> None:
    report = ValidationReport()
    config = resolve_effective_config(
        [{"day_start_time": "late", "score_weights": {"w_mood": 1, "w_remaining": "x"}}],
        report,
    )

    assert config["day_start_time"] == "18:00"
    assert config["score_weights"]["w_remaining"] == 1.0
    assert report.codes == {"INVALID_TIME_FORMAT", "INVALID_CONFIG_KEY", "INVALID_TYPE"}


def test_day_start_falls_back_to_default_clock() -> None:
    assert resolve_day_start({"day_start_time": "late"}) == time(18, 0)
    assert resolve_day_start({}) == time(18, 0)


def test_subject_validation_aggregates_errors() -> None:
    report = validate_subject_input(
        {"name": " ", "exam_date": "2026-13-40", "difficulty": 9, "hours_required": 0, "minutes_done": "x"}
    )

    paths = {issue.field_path for issue in report.errors}
    assert paths == {
        "$.subject.name",
        "$.subject.exam_date",
        "$.subject.difficulty",
        "$.subject.hours_required",
        "$.subject.minutes_done",
    }


def test_subject_validation_infos_do_not_block() -> None:
    report = validate_subject_input(
        {"name": "Math", "exam_date": "2026-01-01", "difficulty": 3, "hours_required": 2, "minutes_done": -5},
        today=date(2026, 2, 1),
    )

    assert report.errors == []
    assert {issue.code for issue in report.infos} == {"EXAM_DATE_IN_PAST", "INFO_MINUTES_DONE_CLAMPED"}


def test_plan_request_validation_guards_chunk_and_horizon() -> None:
    report = validate_plan_request(
        start_date=date(2026, 1, 1),
        chunk_minutes=10,
        exam_dates=[date(2027, 6, 1)],
        max_horizon_days=366,
    )
    assert report.codes == {"OUT_OF_RANGE", "HORIZON_TOO_LONG"}

    ok = validate_plan_request(
        start_date=date(2026, 1, 1),
        chunk_minutes=15,
        exam_dates=[date(2026, 12, 31)],
        max_horizon_days=365,
    )
    assert ok.errors == []
    assert validate_minutes_per_day(-1).codes == {"OUT_OF_RANGE"}
    assert validate_minutes_per_day(0).errors == []


def test_budget_beyond_midnight_is_reported_as_info() -> None:
    assert day_window_capacity(daily_budget_minutes=400, chunk_minutes=60, day_start=time(18, 0), break_minutes=10) == 360
    assert day_window_capacity(daily_budget_minutes=330, chunk_minutes=60, day_start=time(18, 0), break_minutes=10) == 330

    report = validate_plan_request(
        start_date=date(2026, 1, 1),
        chunk_minutes=60,
        exam_dates=[date(2026, 1, 1)],
        max_horizon_days=366,
        daily_budget_minutes=400,
        day_start=time(18, 0),
        break_minutes=10,
    )
    assert report.errors == []
    (info,) = report.infos
    assert info.code == "BUDGET_EXCEEDS_DAY_WINDOW"
    assert info.extra == {"daily_budget_minutes": 400, "schedulable_minutes": 360}

    early = validate_plan_request(
        start_date=date(2026, 1, 1),
        chunk_minutes=60,
        exam_dates=[date(2026, 1, 1)],
        max_horizon_days=366,
        daily_budget_minutes=400,
        day_start=time(8, 0),
        break_minutes=10,
    )
    assert early.infos == []


def test_metrics_coverage_and_utilization_are_clamped() -> None:
    allocations = [
        {"subject_id": "1", "date": "2026-01-01", "minutes": 60},
        {"subject_id": "1", "date": "2026-01-01", "minutes": 30},
        {"subject_id": "2", "date": "2026-01-03", "minutes": 45},
    ]

    metrics = collect_metrics(
        allocations=allocations,
        remaining_by_subject={"1": 90, "2": 90, "3": 0},
        daily_budget_minutes=90,
    )

    assert metrics["sessions_count"] == 3
    assert metrics["total_planned_minutes"] == 135
    assert metrics["days_with_sessions"] == 2
    assert metrics["coverage_by_subject"] == {"1": 1.0, "2": 0.5, "3": 1.0}
    assert metrics["unplanned_minutes_by_subject"] == {"1": 0, "2": 45, "3": 0}
    assert metrics["overall_coverage"] == pytest.approx(0.75)
    # Three calendar days: full, empty, half.
    assert metrics["budget_utilization"] == pytest.approx(0.5)


def test_metrics_for_empty_plan() -> None:
    metrics = collect_metrics(allocations=[], remaining_by_subject={}, daily_budget_minutes=0)
    assert metrics["budget_utilization"] == 0.0
    assert metrics["overall_coverage"] == 1.0


def test_coverage_warnings() -> None:
    subjects = [
        {"subject_id": "1", "name": "Math", "exam_date": "2026-01-01", "remaining_minutes": 300},
        {"subject_id": "2", "name": "Art", "exam_date": "2025-12-20", "remaining_minutes": 60},
        {"subject_id": "3", "name": "Bio", "exam_date": "2026-01-05", "remaining_minutes": 60},
    ]
    allocations = [
        {"subject_id": "1", "minutes": 90},
        {"subject_id": "3", "minutes": 60},
    ]

    warnings = build_coverage_warnings(subjects=subjects, allocations=allocations, reference_day=date(2026, 1, 1))

    assert [(w["code"], w["subject_id"]) for w in warnings] == [
        ("SUBJECT_NOT_COVERED", "1"),
        ("EXAM_ALREADY_PASSED", "2"),
    ]
    assert warnings[0]["missing_minutes"] == 210


def test_reports_shape() -> None:
    error = build_error_report(NoSubjectsError())
    assert error["status"] == "error"
    assert error["error"] == {"code": "no_subjects", "message": "No subjects found. Add subjects first."}

    report = ValidationReport()
    report.add_error(code="OUT_OF_RANGE", message="bad", field_path="$.chunk_minutes")
    invalid = build_error_report(InvalidInputError(report, "Invalid plan request"))
    assert invalid["error"]["code"] == "validation_error"
    assert invalid["validation_report"]["errors"][0]["field_path"] == "$.chunk_minutes"

    ok = build_success_report("subjects list", [], metrics={"x": 1})
    assert ok["status"] == "ok"
    assert ok["metrics"] == {"x": 1}
    assert "warnings" not in ok and "decision_trace" not in ok


def test_group_sessions_by_day_sorts_dates_and_times() -> None:
    grouped = group_sessions_by_day(
        [
            {"date": "2026-01-02", "start_time": "18:00:00", "minutes": 30},
            {"date": "2026-01-01", "start_time": "19:10:00", "minutes": 30},
            {"date": "2026-01-01", "start_time": "18:00:00", "minutes": 60},
        ]
    )

    assert [day["date"] for day in grouped] == ["2026-01-01", "2026-01-02"]
    assert grouped[0]["total_minutes"] == 90
    assert [s["start_time"] for s in grouped[0]["sessions"]] == ["18:00:00", "19:10:00"]


def test_decision_trace_naive_timestamp_becomes_utc() -> None:
    trace = DecisionTraceCollector(start_timestamp=datetime(2026, 1, 1, 8, 0))
    trace.record(
        day="2026-01-01",
        start_time="18:00",
        candidate_subjects=["b", "a"],
        scores_by_subject={"b": 1.0, "a": 2.0},
        selected_subject_id="b",
        minutes=30,
    )

    (entry,) = trace.as_list()
    assert trace.start_timestamp.tzinfo == timezone.utc
    assert entry["decision_id"] == "d-000001"
    assert entry["timestamp"] == "2026-01-01T08:00:01Z"
    assert list(entry["scores_by_subject"]) == ["a", "b"]
    assert len(trace) == 1
