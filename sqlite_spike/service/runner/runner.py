import asyncio
import shutil
import sqlite3
import uuid
from datetime import datetime, timezone
from pathlib import Path
from typing import AsyncIterator, Dict, Optional

from sqlite_spike.consts.IsolationLevel import IsolationLevel
from sqlite_spike.errors import InsertError, NotFoundError, SchemaError, StorageOpenError
from sqlite_spike.models.timing_sample import TimerOptions, TimingSample
from sqlite_spike.service.engine.connection import ConnectionHandle
from sqlite_spike.service.metrics.timer import ScopedTimer
from sqlite_spike.util.file_utils import delete_database_file, directory_size
from sqlite_spike.util.log_config import setup_logger

logger = setup_logger(__name__)

APPEND_TIMER = TimerOptions(name="sqlite-append-on-batch")


def new_message() -> Dict[str, str]:
    """Fresh unique id and current UTC timestamp for one ``messages_2`` row."""
    return {
        "id": str(uuid.uuid4()),
        "created": datetime.now(timezone.utc).isoformat(sep=" "),
    }


class BenchmarkRunner:
    """
    Database operations the scenarios are composed of.

    Every engine error is re-raised as the matching ``BenchmarkError``
    subclass; nothing is retried.
    """

    def __init__(self, insert_sql: str, isolation_level: IsolationLevel = IsolationLevel.IMMEDIATE) -> None:
        self.insert_sql = insert_sql
        self.isolation_level = isolation_level

    async def provision(self, path: Path) -> ConnectionHandle:
        """
        Delete whatever is at ``path`` and open a fresh database there.

        Raises:
            StorageOpenError: If the old file cannot be removed or the engine
                cannot create the new one
        """
        try:
            await asyncio.to_thread(delete_database_file, Path(path))
        except OSError as e:
            raise StorageOpenError(f"Cannot remove existing database {path}: {e}") from e

        handle = ConnectionHandle(path)
        try:
            await handle.open()
        except sqlite3.Error as e:
            raise StorageOpenError(f"Cannot open database {handle.connection_string}: {e}") from e
        logger.debug(f"Provisioned {path}")
        return handle

    async def apply_schema(self, handle: ConnectionHandle, ddl_text: str) -> None:
        """
        Open the handle if needed, run the DDL script as one command, close the handle.

        Raises:
            StorageOpenError: If the handle cannot be opened
            SchemaError: If the script fails
        """
        await self._open(handle)
        try:
            await handle.execute_non_query(ddl_text)
        except sqlite3.Error as e:
            raise SchemaError(f"Schema script failed on {handle.path}: {e}") from e
        finally:
            await handle.close()

    async def bulk_insert(self, handle: ConnectionHandle, row_count: int, use_transaction: bool = True) -> None:
        """
        Insert ``row_count`` fresh rows, committed once at the end.

        With ``use_transaction`` the rows are inserted inside a single
        transaction started with the configured isolation level; a failure
        rolls it back so no row becomes visible. Without it every row is
        committed on its own.

        Raises:
            InsertError: If any insert or the commit fails
        """
        if row_count < 0:
            raise ValueError(f"row_count must be >= 0, got {row_count}")
        await self._open(handle)

        if not use_transaction:
            for _ in range(row_count):
                await self._insert(handle)
            return

        try:
            await handle.begin(self.isolation_level.begin_statement)
            for _ in range(row_count):
                await handle.execute(self.insert_sql, new_message())
            await handle.commit()
        except sqlite3.Error as e:
            await self._rollback_after(handle, e)
            raise InsertError(f"Bulk insert of {row_count} row(s) into {handle.path} failed: {e}") from e
        logger.debug(f"Committed {row_count} row(s) to {handle.path}")

    async def timed_single_appends(self, handle: ConnectionHandle, sample_count: int) -> AsyncIterator[TimingSample]:
        """
        Insert ``sample_count`` rows one at a time, timing each insert.

        Yields one sample per insert, in execution order, after the insert
        has completed. A failed insert raises ``InsertError`` carrying the
        failed sample.
        """
        if sample_count < 0:
            raise ValueError(f"sample_count must be >= 0, got {sample_count}")
        await self._open(handle)

        for _ in range(sample_count):
            parameters = new_message()
            with ScopedTimer(APPEND_TIMER.name) as timer:
                await self._insert(handle, parameters)
            yield timer.sample

    async def measure_file_size(self, path: Path) -> int:
        """
        Byte length of the file at ``path`` right now.

        Raises:
            NotFoundError: If the file does not exist
        """
        try:
            return await asyncio.to_thread(lambda: Path(path).stat().st_size)
        except FileNotFoundError as e:
            raise NotFoundError(f"Database file not found: {path}") from e

    async def measure_directory_size(self, path: Path) -> int:
        try:
            return await asyncio.to_thread(directory_size, Path(path))
        except FileNotFoundError as e:
            raise NotFoundError(f"Directory not found: {path}") from e

    async def remove(self, path: Path) -> None:
        await asyncio.to_thread(delete_database_file, Path(path))

    async def remove_tree(self, path: Path) -> None:
        await asyncio.to_thread(shutil.rmtree, Path(path), True)

    async def _insert(self, handle: ConnectionHandle, parameters: Optional[Dict[str, str]] = None) -> None:
        if parameters is None:
            parameters = new_message()
        try:
            await handle.execute(self.insert_sql, parameters)
        except sqlite3.Error as e:
            raise InsertError(f"Insert into {handle.path} failed: {e}") from e

    @staticmethod
    async def _rollback_after(handle: ConnectionHandle, cause: sqlite3.Error) -> None:
        """Roll back an open transaction; a failing rollback is reported as the insert failure."""
        if not handle.in_transaction:
            return
        try:
            await handle.rollback()
        except sqlite3.Error as e:
            raise InsertError(f"Rollback on {handle.path} failed ({e}) after: {cause}") from cause

    @staticmethod
    async def _open(handle: ConnectionHandle) -> None:
        try:
            await handle.open()
        except sqlite3.Error as e:
            raise StorageOpenError(f"Cannot open database {handle.connection_string}: {e}") from e
