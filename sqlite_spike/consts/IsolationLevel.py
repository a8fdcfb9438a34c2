from enum import Enum


class IsolationLevel(Enum):
    """SQLite transaction modes, from weakest to strictest write lock."""
    DEFERRED = "deferred"
    IMMEDIATE = "immediate"
    EXCLUSIVE = "exclusive"

    @property
    def begin_statement(self) -> str:
        return f"BEGIN {self.name}"
