"""Configuration module for benchmark scenarios."""

from .benchmark_config import BenchmarkConfig
from .influxdb_settings import InfluxDbSettings
from .scenario_config import ScenarioConfig
from .sql_templates import SqlTemplates

__all__ = ["BenchmarkConfig", "InfluxDbSettings", "ScenarioConfig", "SqlTemplates"]
