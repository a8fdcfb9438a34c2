"""Scenario result data models."""

import json
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Any, Dict, List, Optional

from .stat_summary import StatSummary


class ScenarioStatus(Enum):
    PASSED = "passed"
    FAILED = "failed"


@dataclass
class ScenarioResult:
    """
    Outcome of one named scenario run.

    ``facts`` holds point-in-time measurements such as file sizes, ``timers``
    the aggregated durations recorded under each timer name.
    """
    scenario: str
    status: ScenarioStatus = ScenarioStatus.PASSED
    facts: Dict[str, int] = field(default_factory=dict)
    timers: Dict[str, StatSummary] = field(default_factory=dict)
    error: Optional[str] = None

    @property
    def passed(self) -> bool:
        return self.status == ScenarioStatus.PASSED

    def mark_failed(self, error: BaseException) -> None:
        self.status = ScenarioStatus.FAILED
        self.error = f"{type(error).__name__}: {error}"

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary representation."""
        return {
            "scenario": self.scenario,
            "status": self.status.value,
            "facts": dict(self.facts),
            "timers": {name: summary.to_summary_dict() for name, summary in self.timers.items()},
            "error": self.error,
        }

    @staticmethod
    def save_all(results: List["ScenarioResult"], file_path: Path) -> None:
        """Save a list of scenario results to a JSON file."""
        file_path.parent.mkdir(parents=True, exist_ok=True)
        with open(file_path, "w", encoding="utf-8") as f:
            json.dump([r.to_dict() for r in results], f, ensure_ascii=False, indent=2)
