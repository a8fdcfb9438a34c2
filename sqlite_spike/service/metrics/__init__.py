from .metrics_sink import MetricsSink
from .reporters import ConsoleReporter, JsonReporter, LineProtocolReporter, Reporter, build_reporters
from .timer import ScopedTimer

__all__ = [
    "ConsoleReporter",
    "JsonReporter",
    "LineProtocolReporter",
    "MetricsSink",
    "Reporter",
    "ScopedTimer",
    "build_reporters",
]
