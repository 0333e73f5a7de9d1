from __future__ import annotations

import random
from collections import defaultdict
from datetime import date, datetime, timedelta

import pytest

from studyplanner.engine import PlannedAllocation, SubjectWorkload, generate_plan

START = date(2026, 1, 1)
BREAK_MINUTES = 10


def _scenario(seed: int) -> tuple[list[SubjectWorkload], int, int]:
    rng = random.Random(seed)
    subjects = [
        SubjectWorkload(
            subject_id=f"s{idx}",
            exam_date=START + timedelta(days=rng.randint(-2, 20)),
            difficulty=rng.randint(1, 5),
            remaining_minutes=rng.choice([0, 15, 45, 60, 90, 240, 600, 1200]),
        )
        for idx in range(rng.randint(1, 6))
    ]
    budget = rng.choice([30, 60, 90, 120, 180, 240, 300])
    chunk = rng.choice([15, 25, 30, 45, 60, 90])
    return subjects, budget, chunk


SEEDS = list(range(40))


@pytest.mark.parametrize("seed", SEEDS)
def test_daily_budget_is_never_exceeded(seed: int) -> None:
    subjects, budget, chunk = _scenario(seed)
    by_day: dict[date, int] = defaultdict(int)
    for item in generate_plan(subjects, START, budget, chunk):
        by_day[item.date] += item.minutes

    assert all(minutes <= budget for minutes in by_day.values())


@pytest.mark.parametrize("seed", SEEDS)
def test_subject_workload_is_never_exceeded(seed: int) -> None:
    subjects, budget, chunk = _scenario(seed)
    planned: dict[str, int] = defaultdict(int)
    for item in generate_plan(subjects, START, budget, chunk):
        planned[item.subject_id] += item.minutes

    for subject in subjects:
        assert planned[subject.subject_id] <= subject.remaining_minutes


@pytest.mark.parametrize("seed", SEEDS)
def test_no_session_after_exam_and_sizes_are_bounded(seed: int) -> None:
    subjects, budget, chunk = _scenario(seed)
    exam_by_subject = {s.subject_id: s.exam_date for s in subjects}

    for item in generate_plan(subjects, START, budget, chunk):
        assert START <= item.date <= exam_by_subject[item.subject_id]
        assert 0 < item.minutes <= min(chunk, budget)


@pytest.mark.parametrize("seed", SEEDS)
def test_output_is_ordered_and_spaced_by_breaks(seed: int) -> None:
    subjects, budget, chunk = _scenario(seed)
    plan = generate_plan(subjects, START, budget, chunk)

    for prev, nxt in zip(plan, plan[1:]):
        assert prev.date <= nxt.date
        if prev.date == nxt.date:
            gap = datetime.combine(nxt.date, nxt.start_time) - datetime.combine(prev.date, prev.start_time)
            assert gap >= timedelta(minutes=prev.minutes + BREAK_MINUTES)


@pytest.mark.parametrize("seed", SEEDS)
def test_same_input_same_output(seed: int) -> None:
    subjects, budget, chunk = _scenario(seed)
    assert generate_plan(list(subjects), START, budget, chunk) == generate_plan(list(subjects), START, budget, chunk)


@pytest.mark.parametrize("seed", SEEDS)
def test_zero_budget_and_chunk_fallback(seed: int) -> None:
    subjects, budget, _ = _scenario(seed)
    assert generate_plan(subjects, START, 0, 60) == []
    assert generate_plan(subjects, START, budget, 0) == generate_plan(subjects, START, budget, 60)


def test_workload_is_exhausted_when_capacity_is_ample() -> None:
    subjects = [
        SubjectWorkload(subject_id="a", exam_date=START + timedelta(days=10), difficulty=2, remaining_minutes=300),
        SubjectWorkload(subject_id="b", exam_date=START + timedelta(days=4), difficulty=4, remaining_minutes=180),
        SubjectWorkload(subject_id="c", exam_date=START + timedelta(days=7), difficulty=1, remaining_minutes=90),
    ]

    plan = generate_plan(subjects, START, 240, 60)
    planned: dict[str, int] = defaultdict(int)
    for item in plan:
        planned[item.subject_id] += item.minutes

    assert planned == {"a": 300, "b": 180, "c": 90}


def test_generate_does_not_mutate_inputs() -> None:
    subjects = [
        SubjectWorkload(subject_id="a", exam_date=START + timedelta(days=3), difficulty=2, remaining_minutes=120),
    ]
    snapshot = list(subjects)

    plan = generate_plan(subjects, START, 60, 30)

    assert subjects == snapshot
    assert all(isinstance(item, PlannedAllocation) for item in plan)
