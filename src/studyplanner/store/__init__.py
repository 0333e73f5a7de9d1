"""Planner state persistence."""

from .json_store import PlanStore

__all__ = ["PlanStore"]
