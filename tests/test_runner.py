"""Tests for the benchmark runner operations."""

import asyncio
import sqlite3

import pytest

from sqlite_spike.errors import InsertError, NotFoundError, SchemaError, StorageOpenError
from sqlite_spike.service.runner.runner import APPEND_TIMER, BenchmarkRunner


def count_rows(path, table="messages_2"):
    conn = sqlite3.connect(path)
    try:
        return conn.execute(f"SELECT COUNT(*) FROM {table}").fetchone()[0]
    finally:
        conn.close()


def schema_of(path):
    conn = sqlite3.connect(path)
    try:
        return conn.execute("SELECT type, name, sql FROM sqlite_master ORDER BY name").fetchall()
    finally:
        conn.close()


class BrokenTransactionHandle:
    """Handle whose insert fails inside the transaction and whose rollback fails too."""

    path = "broken.db"
    in_transaction = False

    async def open(self):
        pass

    async def begin(self, begin_statement):
        self.in_transaction = True

    async def execute(self, sql, parameters):
        raise sqlite3.IntegrityError("UNIQUE constraint failed: messages_2.id")

    async def commit(self):
        pass

    async def rollback(self):
        raise sqlite3.OperationalError("disk I/O error")


class TestProvision:
    """Tests for provision."""

    def test_provision_replaces_existing_file(self, runner, tmp_path):
        """Should delete stale content before opening the new database."""
        path = tmp_path / "stale.db"
        path.write_bytes(b"not a database")

        async def scenario():
            handle = await runner.provision(path)
            assert handle.is_open
            await handle.close()

        asyncio.run(scenario())
        assert not path.exists() or path.read_bytes() != b"not a database"

    def test_provision_uses_shared_cache_and_create_mode(self, runner, tmp_path):
        """Should build a URI connection string with shared cache and rwc mode."""
        async def scenario():
            handle = await runner.provision(tmp_path / "uri.db")
            await handle.close()
            return handle.connection_string

        connection_string = asyncio.run(scenario())
        assert connection_string.startswith("file:")
        assert "cache=shared" in connection_string
        assert "mode=rwc" in connection_string

    @pytest.mark.filterwarnings("ignore::pytest.PytestUnhandledThreadExceptionWarning")
    def test_provision_unwritable_path_raises_storage_open_error(self, runner, tmp_path):
        """Should fail with StorageOpenError when the file cannot be created."""
        path = tmp_path / "missing-dir" / "x.db"

        async def scenario():
            with pytest.raises(StorageOpenError):
                await runner.provision(path)
            # Let the engine worker thread finish before the loop closes
            await asyncio.sleep(0.1)

        asyncio.run(scenario())


class TestApplySchema:
    """Tests for apply_schema."""

    def test_creates_all_tables_and_closes_handle(self, runner, config, tmp_path):
        """Should create metadata, messages and messages_2 and leave the handle closed."""
        path = tmp_path / "schema.db"

        async def scenario():
            handle = await runner.provision(path)
            await runner.apply_schema(handle, config.sql.create_tables)
            return handle

        handle = asyncio.run(scenario())
        assert not handle.is_open
        names = {row[1] for row in schema_of(path) if row[0] == "table"}
        assert {"metadata", "messages", "messages_2"} <= names

    def test_apply_twice_is_idempotent(self, runner, config, tmp_path):
        """Should not raise and leave the same schema as a single application."""
        path = tmp_path / "twice.db"

        async def scenario():
            handle = await runner.provision(path)
            await runner.apply_schema(handle, config.sql.create_tables)
            first = schema_of(path)
            await runner.apply_schema(handle, config.sql.create_tables)
            return first

        first = asyncio.run(scenario())
        assert schema_of(path) == first

    def test_malformed_ddl_raises_schema_error(self, runner, tmp_path):
        """Should wrap engine errors in SchemaError and close the handle."""
        async def scenario():
            handle = await runner.provision(tmp_path / "bad.db")
            try:
                await runner.apply_schema(handle, "CREATE TABLE (;")
            finally:
                assert not handle.is_open

        with pytest.raises(SchemaError):
            asyncio.run(scenario())


class TestBulkInsert:
    """Tests for bulk_insert."""

    @pytest.mark.parametrize("row_count", [0, 1, 250])
    def test_inserts_exactly_row_count_unique_rows(self, runner, config, tmp_path, row_count):
        """Should leave exactly row_count rows with distinct ids."""
        path = tmp_path / f"bulk-{row_count}.db"

        async def scenario():
            handle = await runner.provision(path)
            await runner.apply_schema(handle, config.sql.create_tables)
            await runner.bulk_insert(handle, row_count)
            await handle.close()

        asyncio.run(scenario())
        conn = sqlite3.connect(path)
        try:
            total, distinct = conn.execute("SELECT COUNT(*), COUNT(DISTINCT id) FROM messages_2").fetchone()
        finally:
            conn.close()
        assert total == row_count
        assert distinct == row_count

    def test_without_transaction_inserts_all_rows(self, runner, config, tmp_path):
        """Should autocommit each row when use_transaction is off."""
        path = tmp_path / "autocommit.db"

        async def scenario():
            handle = await runner.provision(path)
            await runner.apply_schema(handle, config.sql.create_tables)
            await runner.bulk_insert(handle, 20, use_transaction=False)
            await handle.close()

        asyncio.run(scenario())
        assert count_rows(path) == 20

    def test_failed_row_rolls_back_whole_batch(self, config, tmp_path):
        """Should commit nothing when one insert violates a constraint."""
        path = tmp_path / "rollback.db"
        runner = BenchmarkRunner("INSERT INTO messages (id, created) VALUES ('duplicate', :created);")

        async def scenario():
            handle = await runner.provision(path)
            await runner.apply_schema(handle, config.sql.create_tables)
            try:
                await runner.bulk_insert(handle, 3)
            finally:
                assert not handle.in_transaction
                await handle.close()

        with pytest.raises(InsertError):
            asyncio.run(scenario())
        assert count_rows(path, "messages") == 0

    def test_failed_rollback_is_reported_as_insert_error(self, runner):
        """Should raise InsertError chained to the insert failure when the rollback also fails."""
        handle = BrokenTransactionHandle()

        with pytest.raises(InsertError) as exc_info:
            asyncio.run(runner.bulk_insert(handle, 3))

        assert "Rollback" in str(exc_info.value)
        assert isinstance(exc_info.value.__cause__, sqlite3.IntegrityError)

    def test_negative_row_count_rejected(self, runner, tmp_path):
        async def scenario():
            handle = await runner.provision(tmp_path / "neg.db")
            try:
                await runner.bulk_insert(handle, -1)
            finally:
                await handle.close()

        with pytest.raises(ValueError):
            asyncio.run(scenario())


    def test_empty_parameters_are_bound_as_given(self, runner, config, tmp_path):
        """Should pass an empty mapping to the engine instead of generating a message."""
        path = tmp_path / "empty-params.db"

        async def scenario():
            handle = await runner.provision(path)
            await runner.apply_schema(handle, config.sql.create_tables)
            await runner._open(handle)
            try:
                await runner._insert(handle, {})
            finally:
                await handle.close()

        with pytest.raises(InsertError):
            asyncio.run(scenario())
        assert count_rows(path) == 0


class TestTimedSingleAppends:
    """Tests for timed_single_appends."""

    @pytest.mark.parametrize("sample_count", [0, 1, 25])
    def test_yields_one_sample_per_insert(self, runner, config, tmp_path, sample_count):
        """Should yield sample_count non-negative samples and insert as many rows."""
        path = tmp_path / f"append-{sample_count}.db"

        async def scenario():
            handle = await runner.provision(path)
            await runner.apply_schema(handle, config.sql.create_tables)
            samples = [s async for s in runner.timed_single_appends(handle, sample_count)]
            await handle.close()
            return samples

        samples = asyncio.run(scenario())
        assert len(samples) == sample_count
        assert all(s.duration >= 0 for s in samples)
        assert all(s.label == APPEND_TIMER.name and not s.failed for s in samples)
        assert count_rows(path) == sample_count

    def test_samples_arrive_after_each_insert(self, runner, config, tmp_path):
        """Should have the row committed by the time its sample is yielded."""
        path = tmp_path / "order.db"

        async def scenario():
            handle = await runner.provision(path)
            await runner.apply_schema(handle, config.sql.create_tables)
            seen = []
            async for _ in runner.timed_single_appends(handle, 5):
                seen.append(count_rows(path))
            await handle.close()
            return seen

        assert asyncio.run(scenario()) == [1, 2, 3, 4, 5]

    def test_failed_insert_carries_failed_sample(self, config, tmp_path):
        """Should raise InsertError with a sample tagged failed."""
        runner = BenchmarkRunner("INSERT INTO messages (id, created) VALUES ('duplicate', :created);")

        async def scenario():
            handle = await runner.provision(tmp_path / "fail.db")
            await runner.apply_schema(handle, config.sql.create_tables)
            samples = []
            try:
                async for sample in runner.timed_single_appends(handle, 3):
                    samples.append(sample)
            finally:
                await handle.close()
            return samples

        with pytest.raises(InsertError) as exc_info:
            asyncio.run(scenario())
        assert exc_info.value.sample is not None
        assert exc_info.value.sample.failed
        assert exc_info.value.sample.duration >= 0


class TestMeasureFileSize:
    """Tests for measure_file_size."""

    def test_schemed_database_size_is_positive_and_stable(self, runner, config, tmp_path):
        path = tmp_path / "size.db"

        async def scenario():
            handle = await runner.provision(path)
            await runner.apply_schema(handle, config.sql.create_tables)
            return [await runner.measure_file_size(path) for _ in range(3)]

        sizes = asyncio.run(scenario())
        assert sizes[0] > 0
        assert len(set(sizes)) == 1

    def test_deleted_file_raises_not_found(self, runner, config, tmp_path):
        """Should raise NotFoundError when the file was removed out of band."""
        path = tmp_path / "gone.db"

        async def scenario():
            handle = await runner.provision(path)
            await runner.apply_schema(handle, config.sql.create_tables)
            path.unlink()
            await runner.measure_file_size(path)

        with pytest.raises(NotFoundError):
            asyncio.run(scenario())

    def test_directory_size_sums_files(self, runner, tmp_path):
        (tmp_path / "a").write_bytes(b"x" * 10)
        (tmp_path / "b").write_bytes(b"x" * 5)
        (tmp_path / "sub").mkdir()

        assert asyncio.run(runner.measure_directory_size(tmp_path)) == 15

    def test_missing_directory_raises_not_found(self, runner, tmp_path):
        with pytest.raises(NotFoundError):
            asyncio.run(runner.measure_directory_size(tmp_path / "nope"))
