import time
from dataclasses import dataclass, asdict, field
from typing import Any, Dict

from sqlite_spike.consts.TimeUnit import TimeUnit


@dataclass(frozen=True)
class TimerOptions:
    """Names a timer in the metrics sink."""
    name: str
    measurement_unit: str = "commands"
    duration_unit: TimeUnit = TimeUnit.MILLISECONDS


@dataclass(frozen=True)
class TimingSample:
    """Duration of one executed database operation."""
    label: str
    duration: float
    unit: TimeUnit = TimeUnit.MILLISECONDS
    failed: bool = False
    # Epoch nanoseconds at which the operation finished
    recorded_at_ns: int = field(default_factory=time.time_ns)

    def to_dict(self) -> Dict[str, Any]:
        data = asdict(self)
        data["unit"] = self.unit.value
        return data
