"""Resolve effective planner configuration from layered inputs."""

from __future__ import annotations

from datetime import time
from typing import Any

from studyplanner.engine.scheduler import DEFAULT_DAY_START
from studyplanner.validation import ValidationReport

DEFAULT_PLANNER_CONFIG: dict[str, Any] = {
    "day_start_time": "18:00",
    "break_minutes": 10,
    "default_chunk_minutes": 60,
    "default_minutes_per_day": 180,
    "max_horizon_days": 366,
    "score_weights": {
        "w_urgency": 10.0,
        "w_difficulty": 2.0,
        "w_remaining": 1.0,
    },
}

_INT_KEYS = ("break_minutes", "default_chunk_minutes", "default_minutes_per_day", "max_horizon_days")


def resolve_effective_config(
    sources: list[dict[str, Any] | None],
    validation_report: ValidationReport,
) -> dict[str, Any]:
    """Merge config layers in order: defaults first, later sources win.

    Unknown keys and ill-typed values are reported and dropped, so the
    returned payload is always engine-ready.
    """
    config = {**DEFAULT_PLANNER_CONFIG, "score_weights": dict(DEFAULT_PLANNER_CONFIG["score_weights"])}

    for layer_idx, source in enumerate(sources):
        if not isinstance(source, dict):
            continue
        for key, value in source.items():
            path = f"$.config[{layer_idx}].{key}"
            if key not in DEFAULT_PLANNER_CONFIG:
                validation_report.add_error(
                    code="INVALID_CONFIG_KEY",
                    message=f"Config key {key!r} is not allowed",
                    field_path=path,
                    suggested_fix=f"Use one of: {', '.join(sorted(DEFAULT_PLANNER_CONFIG))}",
                )
                continue
            if value is None:
                continue
            if key == "score_weights":
                config["score_weights"].update(_filter_weights(value, path, validation_report))
            elif key == "day_start_time":
                if parse_clock(value) is None:
                    validation_report.add_error(
                        code="INVALID_TIME_FORMAT",
                        message="day_start_time must be HH:MM",
                        field_path=path,
                    )
                    continue
                config[key] = value
            elif key in _INT_KEYS:
                if not isinstance(value, int) or isinstance(value, bool) or value < 0:
                    validation_report.add_error(
                        code="OUT_OF_RANGE",
                        message=f"{key} must be a non-negative integer",
                        field_path=path,
                    )
                    continue
                config[key] = value

    return config


def parse_clock(raw: Any) -> time | None:
    if isinstance(raw, time):
        return raw
    if not isinstance(raw, str):
        return None
    try:
        return time.fromisoformat(raw)
    except ValueError:
        return None


def resolve_day_start(config: dict[str, Any]) -> time:
    parsed = parse_clock(config.get("day_start_time"))
    return DEFAULT_DAY_START if parsed is None else parsed


def _filter_weights(value: Any, path: str, validation_report: ValidationReport) -> dict[str, float]:
    if not isinstance(value, dict):
        validation_report.add_error(code="INVALID_TYPE", message="score_weights must be an object", field_path=path)
        return {}

    allowed = DEFAULT_PLANNER_CONFIG["score_weights"]
    filtered: dict[str, float] = {}
    for name, weight in value.items():
        if name not in allowed:
            validation_report.add_error(
                code="INVALID_CONFIG_KEY",
                message=f"Score weight {name!r} is not allowed",
                field_path=f"{path}.{name}",
                suggested_fix=f"Use one of: {', '.join(sorted(allowed))}",
            )
            continue
        if not isinstance(weight, (int, float)) or isinstance(weight, bool):
            validation_report.add_error(
                code="INVALID_TYPE",
                message=f"Score weight {name!r} must be a number",
                field_path=f"{path}.{name}",
            )
            continue
        filtered[name] = float(weight)
    return filtered
