from typing import List, Optional

from sqlite_spike.config.influxdb_settings import InfluxDbSettings
from sqlite_spike.config.sql_templates import SqlTemplates
from sqlite_spike.consts.IsolationLevel import IsolationLevel
from sqlite_spike.consts.ScenarioType import ScenarioType


class BenchmarkConfig:
    scenarios: List[ScenarioType]
    base_dir: Optional[str]
    cwd: str
    keep_files: bool
    create_repeat: int
    many_databases: int
    append_samples: int
    batch_sizes: List[int]
    isolation_level: IsolationLevel
    reporters: List[str]
    influxdb: InfluxDbSettings
    sql: SqlTemplates
    log_level: str
    log_file: Optional[str]
