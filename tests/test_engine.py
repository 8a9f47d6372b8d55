"""
Tests for the storage Engine.
"""

import os

import pytest

from logdb.engine.engine import Engine
from logdb.interfaces.index_loader import IndexLoader
from logdb.models.exceptions import InvalidDataError, KeyNotFoundError, StoreIOError
from logdb.models.header import Header
from logdb.models.log_file import LogFile
from logdb.models.record import Record


class TestEngine:
    """Tests for the main Engine operations."""

    def test_put_and_get(self, engine):
        """Test basic put and get operations."""
        engine.put("key1", "value1")
        assert engine.get("key1") == "value1"

    def test_multiple_keys(self, engine, sample_entries):
        """Test keys are retrievable independently of each other."""
        for key, value in sample_entries:
            engine.put(key, value)

        for key, value in sample_entries:
            assert engine.get(key) == value

    def test_get_missing_key(self, engine):
        with pytest.raises(KeyNotFoundError) as exc_info:
            engine.get("nonexistent")

        assert exc_info.value.key == "nonexistent"
        assert isinstance(exc_info.value, KeyError)

    def test_update(self, engine):
        """Test updating existing key returns the newest value."""
        engine.put("key1", "value1")
        engine.put("key1", "new_value")

        assert engine.get("key1") == "new_value"
        assert len(engine) == 1

    def test_update_keeps_old_bytes(self, engine):
        """Test an update appends rather than overwriting."""
        engine.put("key1", "value1")
        size_after_first = os.path.getsize(engine.path)
        engine.put("key1", "value2")

        assert os.path.getsize(engine.path) == 2 * size_after_first

    def test_delete(self, engine):
        """Test delete operation."""
        engine.put("key1", "value1")
        engine.delete("key1")

        with pytest.raises(KeyNotFoundError):
            engine.get("key1")
        assert "key1" not in engine

    def test_delete_missing_key(self, engine):
        """Test deleting a key never written leaves log and index untouched."""
        engine.put("key1", "value1")
        with open(engine.path, "rb") as f:
            before = f.read()

        with pytest.raises(KeyNotFoundError):
            engine.delete("nonexistent")

        with open(engine.path, "rb") as f:
            assert f.read() == before
        assert list(engine.keys()) == ["key1"]

    def test_delete_twice(self, engine):
        engine.put("key1", "value1")
        engine.delete("key1")

        with pytest.raises(KeyNotFoundError):
            engine.delete("key1")

    def test_delete_flags_header_in_place(self, engine):
        """Test delete only flips the tombstone byte of the latest record."""
        engine.put("key1", "value1")
        with open(engine.path, "rb") as f:
            before = f.read()

        engine.delete("key1")

        with open(engine.path, "rb") as f:
            after = f.read()

        assert len(after) == len(before)
        assert after[8] == 1
        assert after[:8] == before[:8]
        assert after[9:] == before[9:]

    def test_put_after_delete(self, engine):
        engine.put("key1", "value1")
        engine.delete("key1")
        engine.put("key1", "value2")

        assert engine.get("key1") == "value2"

    def test_large_values(self, engine):
        """Test a value of one million characters."""
        large_value = "x" * 1_000_000
        engine.put("large_key", large_value)

        assert engine.get("large_key") == large_value

    def test_unicode_values(self, engine):
        engine.put("ключ", "значение ✓")
        engine.put("emoji", "🙂" * 100)

        assert engine.get("ключ") == "значение ✓"
        assert engine.get("emoji") == "🙂" * 100

    def test_empty_value(self, engine):
        engine.put("key1", "")
        assert engine.get("key1") == ""

    def test_on_disk_format(self, engine):
        """Test the log holds exactly the serialized record."""
        engine.put("k", "v")

        with open(engine.path, "rb") as f:
            data = f.read()

        assert data == bytes(Record.create("k", "v"))

    def test_get_ignores_deleted_flag(self, engine):
        """Test get reads whatever record the index points at."""
        engine.put("key1", "value1")

        with open(engine.path, "r+b") as f:
            f.seek(8)
            f.write(b"\x01")

        assert engine.get("key1") == "value1"

    def test_get_invalid_utf8_value(self, engine):
        engine.put("key1", "abc")

        with open(engine.path, "r+b") as f:
            f.seek(Header.SIZE + len("key1"))
            f.write(b"\xff")

        with pytest.raises(InvalidDataError) as exc_info:
            engine.get("key1")

        assert exc_info.value.offset == 0

    def test_get_truncated_value(self, engine):
        """Test a value cut short on disk is reported rather than returned partially."""
        engine.put("key1", "value1")

        with open(engine.path, "r+b") as f:
            f.truncate(Header.SIZE + len("key1") + 3)

        with pytest.raises(InvalidDataError) as exc_info:
            engine.get("key1")

        assert exc_info.value.offset == 0

    def test_keys_and_len(self, engine, sample_entries):
        for key, value in sample_entries:
            engine.put(key, value)
        engine.delete("key2")

        assert sorted(engine.keys()) == ["key1", "key3"]
        assert len(engine) == 2
        assert "key1" in engine
        assert "key2" not in engine


class TestEngineLifecycle:
    """Tests for open and close."""

    def test_open_missing_file(self, temp_dir):
        """Test the log file must already exist."""
        path = os.path.join(temp_dir, "missing.db")

        with pytest.raises(StoreIOError):
            Engine.open(path)

        assert not os.path.exists(path)

    def test_open_create(self, temp_dir):
        path = os.path.join(temp_dir, "new.db")

        with Engine.open(path, create=True) as engine:
            engine.put("key1", "value1")

        assert os.path.getsize(path) > 0

    def test_open_empty_path(self):
        with pytest.raises(ValueError):
            Engine.open("")

    def test_empty_log_is_empty_database(self, engine):
        assert len(engine) == 0

    def test_close(self, db_path):
        engine = Engine.open(db_path)
        engine.put("key1", "value1")
        engine.close()

        assert engine.is_closed
        with pytest.raises(StoreIOError):
            engine.get("key1")
        with pytest.raises(StoreIOError):
            engine.put("key2", "value2")

    def test_close_is_idempotent(self, db_path):
        engine = Engine.open(db_path)
        engine.close()
        engine.close()

    def test_context_manager_closes(self, db_path):
        with Engine.open(db_path) as engine:
            engine.put("key1", "value1")

        assert engine.is_closed

    def test_sync_writes(self, db_path):
        with Engine.open(db_path, sync_writes=True) as engine:
            engine.put("key1", "value1")
            assert engine.get("key1") == "value1"

    def test_custom_loader(self, db_path):
        """Test the index strategy can be replaced."""

        class FixedLoader(IndexLoader):
            def load(self, log_file):
                return {"key1": 0}

        with Engine.open(db_path) as engine:
            engine.put("key1", "value1")
            engine.put("key1", "value2")

        with Engine.open(db_path, loader=FixedLoader()) as engine:
            assert engine.get("key1") == "value1"


class TestEngineRecovery:
    """Tests for rebuilding the index by replay."""

    def test_persistence(self, db_path):
        """Test that data persists across engine restarts."""
        with Engine.open(db_path) as engine:
            engine.put("key1", "value1")

        with Engine.open(db_path) as engine:
            assert engine.get("key1") == "value1"

    def test_replay_resolves_latest_write(self, db_path):
        """Test replay maps a key to its record with the highest offset."""
        with Engine.open(db_path) as engine:
            engine.put("key1", "value1")
            engine.put("key2", "value2")
            engine.put("key1", "other")

        with Engine.open(db_path) as engine:
            assert engine.get("key1") == "other"
            assert engine.get("key2") == "value2"

    def test_delete_survives_reopen(self, db_path):
        """Test a deleted key stays deleted after replay."""
        with Engine.open(db_path) as engine:
            engine.put("key1", "value1")
            engine.delete("key1")

        with Engine.open(db_path) as engine:
            with pytest.raises(KeyNotFoundError):
                engine.get("key1")
            assert len(engine) == 0

    def test_delete_after_update_survives_reopen(self, db_path):
        with Engine.open(db_path) as engine:
            engine.put("key1", "value1")
            engine.put("key1", "value2")
            engine.delete("key1")

        with Engine.open(db_path) as engine:
            assert "key1" not in engine

    def test_put_after_delete_survives_reopen(self, db_path):
        with Engine.open(db_path) as engine:
            engine.put("key1", "value1")
            engine.delete("key1")
            engine.put("key1", "value2")

        with Engine.open(db_path) as engine:
            assert engine.get("key1") == "value2"

    def test_writes_after_reopen_append(self, db_path):
        """Test a reopened engine appends after the existing records."""
        with Engine.open(db_path) as engine:
            engine.put("key1", "value1")

        with Engine.open(db_path) as engine:
            engine.put("key2", "value2")
            assert engine.get("key1") == "value1"
            assert engine.get("key2") == "value2"

        with Engine.open(db_path) as engine:
            assert sorted(engine.keys()) == ["key1", "key2"]

    def test_large_value_survives_reopen(self, db_path):
        large_value = "y" * 1_000_000

        with Engine.open(db_path) as engine:
            engine.put("large_key", large_value)
            engine.put("small_key", "small")

        with Engine.open(db_path) as engine:
            assert engine.get("large_key") == large_value
            assert engine.get("small_key") == "small"

    def test_truncated_log(self, db_path):
        """Test a log cut short in the middle of a record fails to open."""
        with Engine.open(db_path) as engine:
            engine.put("key1", "value1")
            engine.put("key2", "value2")

        size = os.path.getsize(db_path)
        with open(db_path, "r+b") as f:
            f.truncate(size - 3)

        with pytest.raises(InvalidDataError):
            Engine.open(db_path)

    def test_load_error_not_masked_by_sync(self, db_path, monkeypatch):
        """Test a failing loader's error reaches the caller even if syncing would fail."""

        class FailingLoader(IndexLoader):
            def load(self, log_file):
                raise InvalidDataError("bad log", 0)

        def failing_sync(self):
            raise StoreIOError("sync", self.file_path, OSError("disk gone"))

        monkeypatch.setattr(LogFile, "sync", failing_sync)

        with pytest.raises(InvalidDataError):
            Engine.open(db_path, loader=FailingLoader())

    def test_invalid_utf8_key_in_log(self, db_path):
        header = Header(checksum=0, timestamp=0, is_deleted=False, key_size=1, value_size=1)
        with open(db_path, "wb") as f:
            f.write(bytes(header) + b"\xff" + b"v")

        with pytest.raises(InvalidDataError):
            Engine.open(db_path)
