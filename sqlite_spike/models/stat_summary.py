import dataclasses


@dataclasses.dataclass
class StatSummary:
    """Statistical summary of a list of numeric values"""
    raw_data: list[float]
    min: float
    max: float
    p50: float
    p95: float
    p99: float
    avg: float

    @property
    def count(self) -> int:
        return len(self.raw_data)

    def to_summary_dict(self):
        """Convert to dictionary for JSON serialization"""
        data = dataclasses.asdict(self)
        data.pop("raw_data")
        data["count"] = self.count
        return data
