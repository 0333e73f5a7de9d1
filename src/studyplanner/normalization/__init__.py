"""Input normalization."""

from .config_resolver import DEFAULT_PLANNER_CONFIG, parse_clock, resolve_day_start, resolve_effective_config

__all__ = ["DEFAULT_PLANNER_CONFIG", "parse_clock", "resolve_day_start", "resolve_effective_config"]
