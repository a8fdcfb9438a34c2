"""
Benchmark scenarios.

Each scenario composes runner operations, records its timings in the metrics
sink and awaits ``sink.flush()`` before returning. Database files created by
a scenario are removed when it ends unless ``keep_files`` is set.
"""
import uuid
from dataclasses import dataclass
from pathlib import Path
from typing import Awaitable, Callable, List, Optional, Tuple

from sqlite_spike.config.benchmark_config import BenchmarkConfig
from sqlite_spike.config.scenario_config import ScenarioConfig
from sqlite_spike.consts.ScenarioType import ScenarioType
from sqlite_spike.models.scenario_result import ScenarioResult
from sqlite_spike.models.timing_sample import TimerOptions
from sqlite_spike.service.engine.connection import ConnectionHandle
from sqlite_spike.service.metrics.metrics_sink import MetricsSink
from sqlite_spike.service.metrics.timer import ScopedTimer
from sqlite_spike.service.runner.runner import APPEND_TIMER, BenchmarkRunner
from sqlite_spike.util.cal_utils import BYTES_PER_KB, size_breakdown
from sqlite_spike.util.log_config import setup_logger

logger = setup_logger(__name__)

CREATE_TIMER = TimerOptions(name="sqlite-db-create")
CREATE_MANY_TIMER = TimerOptions(name="sqlite-db-create-many")
PROVISION_TIMER = TimerOptions(name="sqlite-provision")

SINGLE_DB_FILE = "spike1.db"
MANY_DATABASES_DIR = "sqlite-spike"


@dataclass
class ScenarioContext:
    runner: BenchmarkRunner
    sink: MetricsSink
    config: BenchmarkConfig
    base_dir: Path

    def temp_database(self, prefix: str) -> Path:
        return self.base_dir / f"{prefix}-{uuid.uuid4()}.db"


async def _close_and_remove(ctx: ScenarioContext, handle: Optional[ConnectionHandle], path: Path) -> None:
    if handle is not None:
        await handle.close()
    if not ctx.config.keep_files:
        await ctx.runner.remove(path)


def _log_file_size(label: str, length: int) -> None:
    b, kb, mb = size_breakdown(length)
    logger.info(f"{label}: {b} b, {kb} kb, {mb} mb")


async def database_size(ctx: ScenarioContext) -> ScenarioResult:
    """Size of a freshly created database holding only the empty schema."""
    result = ScenarioResult(scenario=ScenarioType.DATABASE_SIZE.value)
    path = ctx.temp_database("sqlite-spike-size")
    handle = None
    try:
        handle = await ctx.runner.provision(path)
        await ctx.runner.apply_schema(handle, ctx.config.sql.create_tables)
        length = await ctx.runner.measure_file_size(path)
    finally:
        await _close_and_remove(ctx, handle, path)

    result.facts["file_size_bytes"] = length
    _log_file_size("FileSize", length)
    await ctx.sink.flush(result.scenario)
    return result


async def time_to_create_database(ctx: ScenarioContext) -> ScenarioResult:
    """Schema creation latency on one path, deleting the file between iterations."""
    result = ScenarioResult(scenario=ScenarioType.TIME_TO_CREATE_DATABASE.value)
    path = ctx.temp_database("sqlite-spike-create")
    handle = await ctx.runner.provision(path)
    await handle.close()
    try:
        for _ in range(ctx.config.create_repeat):
            with ScopedTimer(CREATE_TIMER.name) as timer:
                await ctx.runner.apply_schema(handle, ctx.config.sql.create_tables)
            ctx.sink.record(CREATE_TIMER, timer.sample)
            await ctx.runner.remove(path)
    finally:
        await _close_and_remove(ctx, handle, path)

    result.timers = await ctx.sink.flush(result.scenario)
    return result


async def time_to_create_many_databases(ctx: ScenarioContext) -> ScenarioResult:
    """
    Provision and schema many distinct files in one directory, one handle at a time,
    then report the directory size.
    """
    result = ScenarioResult(scenario=ScenarioType.TIME_TO_CREATE_MANY_DATABASES.value)
    directory = ctx.base_dir / MANY_DATABASES_DIR / str(uuid.uuid4())
    directory.mkdir(parents=True)
    try:
        for i in range(ctx.config.many_databases):
            with ScopedTimer(CREATE_MANY_TIMER.name) as timer:
                handle = await ctx.runner.provision(directory / str(i))
                await ctx.runner.apply_schema(handle, ctx.config.sql.create_tables)
            ctx.sink.record(CREATE_MANY_TIMER, timer.sample)

        total_size = await ctx.runner.measure_directory_size(directory)
    finally:
        if not ctx.config.keep_files:
            await ctx.runner.remove_tree(directory)

    result.facts["directory_size_bytes"] = total_size
    result.facts["directory_size_mb"] = total_size // (BYTES_PER_KB * BYTES_PER_KB)
    logger.info(f"Directory size: {result.facts['directory_size_mb']}mb ({total_size} b)")
    result.timers = await ctx.sink.flush(result.scenario)
    return result


async def time_to_create_single_db(ctx: ScenarioContext) -> ScenarioResult:
    """Drop and recreate the schema on one fixed path, timed as a single unit."""
    result = ScenarioResult(scenario=ScenarioType.TIME_TO_CREATE_SINGLE_DB.value)
    path = ctx.base_dir / SINGLE_DB_FILE
    handle = ConnectionHandle(path)
    try:
        with ScopedTimer(PROVISION_TIMER.name) as timer:
            await ctx.runner.apply_schema(handle, ctx.config.sql.drop_tables)
            await ctx.runner.apply_schema(handle, ctx.config.sql.create_tables)
        ctx.sink.record(PROVISION_TIMER, timer.sample)
    finally:
        await _close_and_remove(ctx, handle, path)

    result.timers = await ctx.sink.flush(result.scenario)
    return result


async def batch_insert_and_single_append(ctx: ScenarioContext, scenario_config: ScenarioConfig) -> ScenarioResult:
    """
    Bulk insert ``row_count`` rows, then time ``sample_count`` single-row appends
    and report the resulting file size.
    """
    result = ScenarioResult(scenario=f"{ScenarioType.BATCH_INSERT_AND_SINGLE_APPEND.value}[{scenario_config.row_count}]")
    path = scenario_config.target_path
    handle = None
    try:
        handle = await ctx.runner.provision(path)
        await ctx.runner.apply_schema(handle, ctx.config.sql.create_tables)
        await ctx.runner.bulk_insert(handle, scenario_config.row_count, scenario_config.use_transaction)
        logger.info(f"Inserted {scenario_config.row_count} row(s) in one batch")

        async for sample in ctx.runner.timed_single_appends(handle, scenario_config.sample_count):
            ctx.sink.record(APPEND_TIMER, sample)
        await handle.close()

        length = await ctx.runner.measure_file_size(path)
    finally:
        await _close_and_remove(ctx, handle, path)

    b, kb, mb = size_breakdown(length)
    result.facts.update(file_size_bytes=b, file_size_kb=kb, file_size_mb=mb)
    _log_file_size("FileSize", length)
    result.timers = await ctx.sink.flush(result.scenario)
    return result


ScenarioCall = Tuple[str, Callable[[], Awaitable[ScenarioResult]]]


def plan_scenarios(ctx: ScenarioContext, batch_sizes: Optional[List[int]] = None) -> List[ScenarioCall]:
    """
    Expand the configured scenario types into named, ready-to-run calls.

    The batch scenario is expanded once per batch size.
    """
    batch_sizes = ctx.config.batch_sizes if batch_sizes is None else batch_sizes
    simple = {
        ScenarioType.DATABASE_SIZE: database_size,
        ScenarioType.TIME_TO_CREATE_DATABASE: time_to_create_database,
        ScenarioType.TIME_TO_CREATE_MANY_DATABASES: time_to_create_many_databases,
        ScenarioType.TIME_TO_CREATE_SINGLE_DB: time_to_create_single_db,
    }

    calls: List[ScenarioCall] = []
    for scenario in ctx.config.scenarios:
        if scenario in simple:
            fn = simple[scenario]
            calls.append((scenario.value, lambda fn=fn: fn(ctx)))
            continue
        for n in batch_sizes:
            scenario_config = ScenarioConfig(
                target_path=ctx.base_dir / f"sqlite-spike-batch-{n}.db",
                row_count=n,
                use_transaction=True,
                sample_count=ctx.config.append_samples,
            )
            calls.append((f"{scenario.value}[{n}]",
                          lambda c=scenario_config: batch_insert_and_single_append(ctx, c)))
    return calls
