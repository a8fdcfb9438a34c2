#!/usr/bin/env python3
"""
Scenario harness for the SQLite storage benchmarks.

Loads the configuration, runs the selected scenarios one after another in a
single event loop and writes a summary of every scenario result.
"""
import asyncio
import sqlite3
import sys
from pathlib import Path
from typing import List, Optional

from sqlite_spike.cli.cli import parse_scenario_args
from sqlite_spike.config.config_loader import ConfigLoader
from sqlite_spike.consts.ScenarioType import ScenarioType
from sqlite_spike.errors import BenchmarkError
from sqlite_spike.models.scenario_result import ScenarioResult
from sqlite_spike.models.timing_sample import TimerOptions
from sqlite_spike.service.metrics.metrics_sink import MetricsSink
from sqlite_spike.service.metrics.reporters import build_reporters
from sqlite_spike.service.runner.runner import BenchmarkRunner
from sqlite_spike.service.scenario.scenarios import ScenarioCall, ScenarioContext, plan_scenarios
from sqlite_spike.util.file_utils import resolve_base_dir
from sqlite_spike.util.log_config import configure_package_logging, setup_logger

logger = setup_logger(__name__)

CONFIG_PATH = Path(__file__).parent / "config_yaml"


async def execute_scenario(ctx: ScenarioContext, name: str, call) -> ScenarioResult:
    """
    Run one scenario and turn any failure into a failed result.

    Samples recorded before the failing step, and the failed sample attached
    to the error, are flushed best-effort.
    """
    try:
        ctx.config.sql.validate()
        return await call()
    except (BenchmarkError, sqlite3.Error, OSError) as e:
        logger.error(f"Scenario {name} failed: {e}")
        sample = getattr(e, "sample", None)
        if sample is not None:
            ctx.sink.record(TimerOptions(name=sample.label), sample)
        result = ScenarioResult(scenario=name)
        result.mark_failed(e)
        try:
            result.timers = await ctx.sink.flush(name)
        except BenchmarkError as flush_error:
            logger.error(f"Could not report metrics for failed scenario {name}: {flush_error}")
        return result


async def run_all(ctx: ScenarioContext, calls: List[ScenarioCall]) -> List[ScenarioResult]:
    results = []
    for idx, (name, call) in enumerate(calls, 1):
        logger.info("-" * 60)
        logger.info(f"Scenario {idx}/{len(calls)}: {name}")
        logger.info("-" * 60)
        result = await execute_scenario(ctx, name, call)
        status = "✓" if result.passed else "✗"
        logger.info(f"{status} Scenario {idx}/{len(calls)} {result.status.value}")
        results.append(result)
    return results


def main(argv: Optional[List[str]] = None) -> int:
    args = parse_scenario_args(argv)

    config = ConfigLoader(CONFIG_PATH, env=args.env).config_data
    if args.scenario:
        config.scenarios = [ScenarioType(s) for s in args.scenario]
    if args.base_dir:
        config.base_dir = args.base_dir
    if args.keep_files:
        config.keep_files = True

    configure_package_logging(config.log_level, Path(config.log_file) if config.log_file else None)

    logger.info("=" * 60)
    logger.info("Starting SQLite Spike Scenarios")
    logger.info("=" * 60)
    if args.env:
        logger.info(f"Loaded configuration with environment override: {args.env}")

    output_dir = Path(config.cwd)
    ctx = ScenarioContext(
        runner=BenchmarkRunner(config.sql.insert_message, config.isolation_level),
        sink=MetricsSink(build_reporters(config.reporters, output_dir, config.influxdb)),
        config=config,
        base_dir=resolve_base_dir(config.base_dir),
    )
    calls = plan_scenarios(ctx, args.batch_size)
    logger.info(f"Planned {len(calls)} scenario run(s) in {ctx.base_dir}")

    try:
        results = asyncio.run(run_all(ctx, calls))
    finally:
        ctx.sink.close()

    summary_path = output_dir / "summary.json"
    ScenarioResult.save_all(results, summary_path)
    logger.info(f"✓ Summary exported to: {summary_path.resolve()}")

    failed = [r.scenario for r in results if not r.passed]
    if failed:
        logger.error(f"{len(failed)} scenario(s) failed: {', '.join(failed)}")
        return 1
    logger.info("All scenarios completed successfully!")
    return 0


if __name__ == "__main__":
    sys.exit(main())
