"""
Metrics reporters.

Each reporter receives the samples buffered for one scenario together with
their summaries. Console output goes through the logger as a table; the
JSON and line-protocol reporters write files under the output directory,
and the InfluxDB reporter pushes one point per sample to a collector.
"""
import asyncio
import json
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Dict, List, Optional

import urllib3
from influxdb_client import InfluxDBClient, Point, WritePrecision
from influxdb_client.client.write_api import SYNCHRONOUS
from influxdb_client.rest import ApiException
from tabulate import tabulate

from sqlite_spike.config.influxdb_settings import InfluxDbSettings
from sqlite_spike.errors import MetricsFlushError
from sqlite_spike.models.stat_summary import StatSummary
from sqlite_spike.models.timing_sample import TimerOptions, TimingSample
from sqlite_spike.util.log_config import setup_logger

logger = setup_logger(__name__)

Samples = Dict[str, List[TimingSample]]
Summaries = Dict[str, StatSummary]
Options = Dict[str, TimerOptions]


class Reporter(ABC):

    @abstractmethod
    async def report(self, scenario: str, options: Options, samples: Samples, summaries: Summaries) -> None:
        pass

    def close(self) -> None:
        """Release connections held by the reporter."""


class ConsoleReporter(Reporter):

    async def report(self, scenario: str, options: Options, samples: Samples, summaries: Summaries) -> None:
        headers = ["timer", "count", "failed", "min", "avg", "p50", "p95", "p99", "max"]
        rows = []
        for name, summary in summaries.items():
            unit = options[name].duration_unit.value
            failed = sum(1 for s in samples[name] if s.failed)
            rows.append([
                name,
                summary.count,
                failed,
                *(f"{v:.3f} {unit}" for v in (summary.min, summary.avg, summary.p50,
                                              summary.p95, summary.p99, summary.max)),
            ])
        table = tabulate(rows, headers=headers, tablefmt="simple", stralign="right", numalign="right")
        logger.info(f"Timers for {scenario}:\n{table}")


class JsonReporter(Reporter):
    """Writes ``metrics.json`` (summaries) and ``metrics_raw.json`` (samples), keyed by scenario."""

    def __init__(self, output_dir: Path):
        self.summary_path = output_dir / "metrics.json"
        self.raw_path = output_dir / "metrics_raw.json"
        self._summary: Dict[str, dict] = {}
        self._raw: Dict[str, dict] = {}

    async def report(self, scenario: str, options: Options, samples: Samples, summaries: Summaries) -> None:
        self._summary[scenario] = {name: s.to_summary_dict() for name, s in summaries.items()}
        self._raw[scenario] = {name: [s.to_dict() for s in items] for name, items in samples.items()}
        await asyncio.to_thread(self._write)

    def _write(self) -> None:
        self.summary_path.parent.mkdir(parents=True, exist_ok=True)
        with open(self.summary_path, "w", encoding="utf-8") as f:
            json.dump(self._summary, f, indent=2)
        with open(self.raw_path, "w", encoding="utf-8") as f:
            json.dump(self._raw, f, indent=2)


def build_points(scenario: str, options: Options, samples: Samples) -> List[Point]:
    """One point per sample, stamped with the time the operation finished."""
    points = []
    for name, items in samples.items():
        opts = options[name]
        for sample in items:
            points.append(
                Point(name)
                .tag("scenario", scenario)
                .tag("unit", opts.measurement_unit)
                .tag("duration_unit", opts.duration_unit.value)
                .tag("status", "failed" if sample.failed else "ok")
                .field("duration", float(sample.duration))
                .time(sample.recorded_at_ns, WritePrecision.NS)
            )
    return points


class LineProtocolReporter(Reporter):
    """
    Appends the InfluxDB points to ``sqlite-spike.lp``.

    The file can be imported with ``influx write`` when no collector is reachable
    during the run.
    """

    def __init__(self, output_dir: Path, database: str = "sqlite-spike"):
        self.path = output_dir / f"{database}.lp"

    async def report(self, scenario: str, options: Options, samples: Samples, summaries: Summaries) -> None:
        lines = [point.to_line_protocol() for point in build_points(scenario, options, samples)]
        await asyncio.to_thread(self._append, lines)

    def _append(self, lines: List[str]) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        with open(self.path, "a", encoding="utf-8") as f:
            for line in lines:
                f.write(line + "\n")


class InfluxDbReporter(Reporter):
    """
    Writes the points to an InfluxDB server over HTTP.

    Uses the 1.8 compatibility endpoints: ``username:password`` as token and
    ``database/retention_policy`` as bucket.
    """

    def __init__(self, settings: InfluxDbSettings, client: Optional[InfluxDBClient] = None):
        self.settings = settings
        self.client = client or InfluxDBClient(
            url=settings.url,
            token=f"{settings.username}:{settings.password}",
            org="-",
            timeout=settings.timeout_ms,
        )
        self.write_api = self.client.write_api(write_options=SYNCHRONOUS)

    async def report(self, scenario: str, options: Options, samples: Samples, summaries: Summaries) -> None:
        points = build_points(scenario, options, samples)
        try:
            await asyncio.to_thread(self.write_api.write, bucket=self.settings.bucket, record=points)
        except (ApiException, urllib3.exceptions.HTTPError) as e:
            raise MetricsFlushError(f"InfluxDB write to {self.settings.url} failed: {e}") from e
        logger.debug(f"Wrote {len(points)} point(s) to {self.settings.url} ({self.settings.bucket})")

    def close(self) -> None:
        self.client.close()


def build_reporters(names: List[str], output_dir: Path, influxdb: Optional[InfluxDbSettings] = None) -> List[Reporter]:
    reporters: List[Reporter] = []
    for name in names:
        if name == "console":
            reporters.append(ConsoleReporter())
        elif name == "json":
            reporters.append(JsonReporter(output_dir))
        elif name == "line_protocol":
            reporters.append(LineProtocolReporter(output_dir, influxdb.database if influxdb else "sqlite-spike"))
        elif name == "influxdb":
            if influxdb is None:
                raise ValueError("The influxdb reporter needs an 'influxdb' configuration section")
            reporters.append(InfluxDbReporter(influxdb))
        else:
            raise ValueError(f"Unsupported reporter: {name}")
    return reporters
