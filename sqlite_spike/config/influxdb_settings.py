"""
InfluxDB collector settings for the influxdb and line_protocol reporters.
"""

import os
from dataclasses import dataclass

PASSWORD_ENV_VAR = "SQLITE_SPIKE_INFLUXDB_PASSWORD"


@dataclass(frozen=True)
class InfluxDbSettings:

    url: str = "http://localhost:8086"
    database: str = "sqlite-spike"
    retention_policy: str = "autogen"
    username: str = ""
    password: str = ""
    timeout_ms: int = 10_000

    @property
    def bucket(self) -> str:
        return f"{self.database}/{self.retention_policy}"

    @classmethod
    def from_dict(cls, data: dict) -> "InfluxDbSettings":
        settings = dict(data)
        # Keep the password out of the YAML when the environment provides it
        if os.environ.get(PASSWORD_ENV_VAR):
            settings["password"] = os.environ[PASSWORD_ENV_VAR]
        return cls(**settings)
