"""Decision trace utilities for scheduler runtime events."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from typing import Any


@dataclass(slots=True)
class DecisionTraceCollector:
    """Collect one entry per chunk handed out by the scheduler."""

    start_timestamp: datetime
    _sequence: int = 0
    _items: list[dict[str, Any]] = field(default_factory=list)

    def __post_init__(self) -> None:
        if self.start_timestamp.tzinfo is None:
            self.start_timestamp = self.start_timestamp.replace(tzinfo=timezone.utc)

    def record(
        self,
        *,
        day: str,
        start_time: str,
        candidate_subjects: list[str],
        scores_by_subject: dict[str, float],
        selected_subject_id: str,
        minutes: int,
    ) -> None:
        self._sequence += 1
        timestamp = self.start_timestamp + timedelta(seconds=self._sequence)
        self._items.append(
            {
                "decision_id": f"d-{self._sequence:06d}",
                "timestamp": timestamp.isoformat().replace("+00:00", "Z"),
                "date": day,
                "start_time": start_time,
                "candidate_subjects": list(candidate_subjects),
                "scores_by_subject": {sid: round(float(scores_by_subject[sid]), 6) for sid in sorted(scores_by_subject)},
                "selected_subject_id": selected_subject_id,
                "minutes": int(minutes),
            }
        )

    def __len__(self) -> int:
        return len(self._items)

    def as_list(self) -> list[dict[str, Any]]:
        """Return trace sorted in deterministic chronological order."""
        return sorted(self._items, key=lambda item: (str(item["timestamp"]), str(item["decision_id"])))
