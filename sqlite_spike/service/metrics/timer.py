import time
from typing import Optional

from sqlite_spike.errors import BenchmarkError
from sqlite_spike.models.timing_sample import TimingSample


class ScopedTimer:
    """
    Measures the wall-clock duration of the block it wraps.

    The duration is recorded on every exit path. When the block raises, the
    sample is marked ``failed`` and, for a ``BenchmarkError`` that carries no
    sample yet, attached to the exception.

        with ScopedTimer("sqlite-db-create") as timer:
            await runner.apply_schema(handle, ddl)
        sink.record(options, timer.sample)
    """

    def __init__(self, label: str):
        self.label = label
        self.sample: Optional[TimingSample] = None
        self._start: Optional[float] = None

    def __enter__(self) -> "ScopedTimer":
        self._start = time.perf_counter()
        return self

    def __exit__(self, exc_type, exc_value, traceback) -> bool:
        elapsed_ms = (time.perf_counter() - self._start) * 1000.0
        self.sample = TimingSample(label=self.label, duration=elapsed_ms, failed=exc_type is not None)
        if isinstance(exc_value, BenchmarkError) and exc_value.sample is None:
            exc_value.sample = self.sample
        return False
