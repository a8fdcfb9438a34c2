"""
In-process metrics sink.

Collects timing samples under named timers and hands them to the configured
reporters on ``flush()``. A flush clears the buffered samples so each
scenario reports only its own measurements.
"""
from typing import Dict, List

from sqlite_spike.errors import MetricsFlushError
from sqlite_spike.models.stat_summary import StatSummary
from sqlite_spike.models.timing_sample import TimerOptions, TimingSample
from sqlite_spike.service.metrics.reporters import Reporter
from sqlite_spike.util.cal_utils import calculate_stat_summary
from sqlite_spike.util.log_config import setup_logger

logger = setup_logger(__name__)


class MetricsSink:

    def __init__(self, reporters: List[Reporter]):
        self.reporters = reporters
        self._options: Dict[str, TimerOptions] = {}
        self._samples: Dict[str, List[TimingSample]] = {}

    def record(self, options: TimerOptions, sample: TimingSample) -> None:
        self._options.setdefault(options.name, options)
        self._samples.setdefault(options.name, []).append(sample)

    def summarize(self) -> Dict[str, StatSummary]:
        """Duration summary per timer, successful samples only."""
        return {
            name: calculate_stat_summary([s.duration for s in samples if not s.failed])
            for name, samples in self._samples.items()
        }

    async def flush(self, scenario: str) -> Dict[str, StatSummary]:
        """
        Report all buffered samples for ``scenario`` and clear the buffer.

        Returns:
            The summaries that were reported

        Raises:
            MetricsFlushError: If any reporter fails
        """
        summaries = self.summarize()
        samples = {name: list(s) for name, s in self._samples.items()}
        options = dict(self._options)
        self._samples.clear()
        self._options.clear()

        if not samples:
            logger.debug(f"No samples to report for {scenario}")
            return summaries

        for reporter in self.reporters:
            try:
                await reporter.report(scenario, options, samples, summaries)
            except OSError as e:
                raise MetricsFlushError(f"{type(reporter).__name__} failed for {scenario}: {e}") from e
        logger.debug(f"Flushed {sum(len(s) for s in samples.values())} sample(s) for {scenario}")
        return summaries

    def close(self) -> None:
        for reporter in self.reporters:
            reporter.close()
