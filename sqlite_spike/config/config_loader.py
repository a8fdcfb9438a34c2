"""
Configuration manager for benchmark scenarios.

This module provides the ConfigLoader class for loading and validating
benchmark configuration from YAML files.
"""
from pathlib import Path
from typing import Optional

import yaml

from sqlite_spike.config.benchmark_config import BenchmarkConfig
from sqlite_spike.config.influxdb_settings import InfluxDbSettings
from sqlite_spike.config.sql_templates import SqlTemplates
from sqlite_spike.consts.IsolationLevel import IsolationLevel
from sqlite_spike.consts.ScenarioType import ScenarioType

REPORTER_NAMES = {"console", "json", "line_protocol", "influxdb"}


class ConfigLoader:

    def __init__(self, config_path: Path, env: Optional[str] = None):
        self.config_path = config_path
        self.env = env
        self.config_data = self._load_config()

    def _load_config(self) -> BenchmarkConfig:
        """
        Load and parse benchmark configuration from YAML file.
        Supports environment-specific overrides via config_<env>.yaml
        
        Returns:
            BenchmarkConfig: Configured benchmark configuration instance

        Raises:
            FileNotFoundError: If the base or environment file is missing
            ValueError: If a value is out of range or unknown
        """
        base_config_file = self.config_path / "config.yaml"
        with open(base_config_file, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f) or {}
        
        if self.env:
            env_config_file = self.config_path / f"config_{self.env}.yaml"
            with open(env_config_file, "r", encoding="utf-8") as f:
                env_data = yaml.safe_load(f) or {}
                # dict.update() will overwrite existing keys
                data.update(env_data)
        
        config = BenchmarkConfig()

        config.scenarios = [ScenarioType(name) for name in data.get("scenarios", [s.value for s in ScenarioType])]
        config.base_dir = data.get("base_dir")
        config.cwd = data.get("output_cwd", "results")
        config.keep_files = bool(data.get("keep_files", False))
        config.create_repeat = self._non_negative(data, "create_repeat", 100)
        config.many_databases = self._non_negative(data, "many_databases", 100)
        config.append_samples = self._non_negative(data, "append_samples", 25)
        config.batch_sizes = [int(n) for n in data.get("batch_sizes", [100])]
        if any(n < 0 for n in config.batch_sizes):
            raise ValueError(f"batch_sizes must be non-negative: {config.batch_sizes}")
        config.isolation_level = IsolationLevel(data.get("isolation_level", IsolationLevel.IMMEDIATE.value))

        config.reporters = list(data.get("reporters", ["console"]))
        unknown = [r for r in config.reporters if r not in REPORTER_NAMES]
        if unknown:
            raise ValueError(f"Unknown reporter(s): {', '.join(unknown)}")
        try:
            config.influxdb = InfluxDbSettings.from_dict(data.get("influxdb") or {})
        except TypeError as e:
            raise ValueError(f"Invalid influxdb section: {e}") from e

        config.sql = self._load_sql(data.get("sql", {}))
        config.log_level = data.get("log_level", "INFO")
        config.log_file = data.get("log_file")

        return config

    def _load_sql(self, sql_data: dict) -> SqlTemplates:
        # Relative paths are resolved against the package directory
        package_dir = self.config_path.parent

        def resolve(key: str) -> Path:
            path = Path(sql_data.get(key, f"sql/{key}.sql"))
            return path if path.is_absolute() else package_dir / path

        return SqlTemplates.from_files(
            create_tables=resolve("create_tables"),
            drop_tables=resolve("drop_tables"),
            insert_message=resolve("insert_message"),
        )

    @staticmethod
    def _non_negative(data: dict, key: str, default: int) -> int:
        value = int(data.get(key, default))
        if value < 0:
            raise ValueError(f"{key} must be >= 0, got {value}")
        return value


if __name__ == "__main__":

    # python3 -m sqlite_spike.config.config_loader

    config = ConfigLoader(Path(__file__).parent.parent / "config_yaml", env="dev")
    print(vars(config.config_data))
