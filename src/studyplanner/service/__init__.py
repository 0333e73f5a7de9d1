"""Plan orchestration."""

from .planning import PlanningService

__all__ = ["PlanningService"]
