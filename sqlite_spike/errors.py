"""
Exception taxonomy for benchmark scenarios.

Every error is fatal to the scenario that raised it. A timed operation that
fails carries the failed timing sample in ``sample`` so the harness can still
forward it to the metrics sink.
"""
from typing import Optional

from sqlite_spike.models.timing_sample import TimingSample


class BenchmarkError(Exception):

    def __init__(self, message: str, sample: Optional[TimingSample] = None):
        super().__init__(message)
        self.sample = sample


class StorageOpenError(BenchmarkError):
    """The database file could not be created or opened."""


class SchemaError(BenchmarkError):
    """DDL execution failed (malformed script, lock conflict)."""


class InsertError(BenchmarkError):
    """DML execution failed, e.g. a constraint violation."""


class NotFoundError(BenchmarkError):
    """A file or directory was missing when its size was queried."""


class MetricsFlushError(BenchmarkError):
    """A metrics reporter could not deliver its report."""
