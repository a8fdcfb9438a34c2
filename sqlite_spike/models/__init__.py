"""Models for benchmark data structures."""

from .scenario_result import ScenarioResult, ScenarioStatus
from .stat_summary import StatSummary
from .timing_sample import TimerOptions, TimingSample

__all__ = ["ScenarioResult", "ScenarioStatus", "StatSummary", "TimerOptions", "TimingSample"]
