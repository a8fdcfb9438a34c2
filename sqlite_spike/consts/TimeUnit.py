from enum import Enum


class TimeUnit(Enum):
    MILLISECONDS = "ms"
