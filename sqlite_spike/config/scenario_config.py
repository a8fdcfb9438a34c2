"""
Per-invocation scenario parameters.

Built from literal inputs for one scenario run and discarded afterwards.
"""

from dataclasses import dataclass
from pathlib import Path


@dataclass(frozen=True)
class ScenarioConfig:

    target_path: Path
    row_count: int = 0
    use_transaction: bool = True
    sample_count: int = 0

    def __post_init__(self):
        if self.row_count < 0:
            raise ValueError(f"row_count must be >= 0, got {self.row_count}")
        if self.sample_count < 0:
            raise ValueError(f"sample_count must be >= 0, got {self.sample_count}")
