from pathlib import Path

import pytest

import sqlite_spike
from sqlite_spike.config.config_loader import ConfigLoader
from sqlite_spike.service.metrics.metrics_sink import MetricsSink
from sqlite_spike.service.runner.runner import BenchmarkRunner
from sqlite_spike.service.scenario.scenarios import ScenarioContext

PACKAGE_DIR = Path(sqlite_spike.__file__).parent


@pytest.fixture
def config():
    """Packaged configuration scaled down for tests."""
    config = ConfigLoader(PACKAGE_DIR / "config_yaml").config_data
    config.create_repeat = 3
    config.many_databases = 3
    config.append_samples = 25
    config.batch_sizes = [0, 10]
    config.reporters = []
    config.keep_files = False
    return config


@pytest.fixture
def runner(config):
    return BenchmarkRunner(config.sql.insert_message, config.isolation_level)


@pytest.fixture
def ctx(config, runner, tmp_path):
    return ScenarioContext(runner=runner, sink=MetricsSink([]), config=config, base_dir=tmp_path)
