"""
Connection handle for an embedded SQLite database file.

Wraps an ``aiosqlite`` connection so it can be opened and closed repeatedly
against the same connection string, the way the scenarios open a file,
run one command and close it again.
"""
import sqlite3
from enum import Enum
from pathlib import Path
from typing import Any, Mapping, Optional

import aiosqlite

from sqlite_spike.util.log_config import setup_logger

logger = setup_logger(__name__)


class CacheMode(Enum):
    SHARED = "shared"


class OpenMode(Enum):
    READ_WRITE_CREATE = "rwc"


class ConnectionHandle:

    def __init__(
        self,
        path: Path,
        cache: CacheMode = CacheMode.SHARED,
        mode: OpenMode = OpenMode.READ_WRITE_CREATE,
    ) -> None:
        self.path = Path(path).resolve()
        self.cache = cache
        self.mode = mode
        self._connection: Optional[aiosqlite.Connection] = None

    @property
    def connection_string(self) -> str:
        return f"{self.path.as_uri()}?cache={self.cache.value}&mode={self.mode.value}"

    @property
    def is_open(self) -> bool:
        return self._connection is not None

    @property
    def in_transaction(self) -> bool:
        return self._connection is not None and self._connection.in_transaction

    async def open(self) -> None:
        """
        Open the connection if it is not open yet.

        Raises:
            sqlite3.Error: If the engine cannot open or create the file
        """
        if self._connection is not None:
            return
        # isolation_level=None leaves transaction control to explicit BEGIN/COMMIT
        self._connection = await aiosqlite.connect(
            self.connection_string, uri=True, isolation_level=None
        )
        logger.debug(f"Opened {self.connection_string}")

    async def close(self) -> None:
        if self._connection is None:
            return
        connection, self._connection = self._connection, None
        await connection.close()
        logger.debug(f"Closed {self.path}")

    async def execute_non_query(self, sql: str) -> None:
        """Run a (possibly multi-statement) script on the open connection."""
        await self._require_open().executescript(sql)

    async def execute(self, sql: str, parameters: Mapping[str, Any]) -> int:
        """Run one statement; SQLite's statement cache reuses the prepared form."""
        async with self._require_open().execute(sql, parameters) as cursor:
            return cursor.rowcount

    async def begin(self, begin_statement: str) -> None:
        await self._require_open().execute(begin_statement)

    async def commit(self) -> None:
        await self._require_open().commit()

    async def rollback(self) -> None:
        await self._require_open().rollback()

    def _require_open(self) -> aiosqlite.Connection:
        if self._connection is None:
            raise sqlite3.ProgrammingError(f"Connection to {self.path} is not open")
        return self._connection

    def __repr__(self) -> str:
        state = "open" if self.is_open else "closed"
        return f"ConnectionHandle({self.connection_string!r}, {state})"
