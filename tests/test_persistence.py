"""Tests for key/value storage and the persistence adapter."""

import json
from datetime import datetime, date, UTC
from decimal import Decimal

import pytest

from spendtrack.database.factories import create_sqlite_storage, default_database_path
from spendtrack.database.persistence import (
    PersistenceAdapter,
    SETTINGS_KEY,
    TRANSACTIONS_KEY,
)
from spendtrack.domain.entities import Settings, Transaction
from spendtrack.domain.errors import CorruptDataError


class TestSQLAlchemyStorage:
    """Tests for the SQLite-backed storage."""

    def test_missing_key(self, temp_storage):
        assert temp_storage.get_item("nothing") is None

    def test_set_and_get(self, temp_storage):
        temp_storage.set_item("a", "1")
        assert temp_storage.get_item("a") == "1"

    def test_overwrite(self, temp_storage):
        temp_storage.set_item("a", "1")
        temp_storage.set_item("a", "2")
        assert temp_storage.get_item("a") == "2"
        assert temp_storage.keys() == ["a"]

    def test_remove(self, temp_storage):
        temp_storage.set_item("a", "1")
        temp_storage.remove_item("a")
        temp_storage.remove_item("never-set")
        assert temp_storage.get_item("a") is None
        assert temp_storage.keys() == []

    def test_keys_are_sorted(self, temp_storage):
        for key in ("b", "c", "a"):
            temp_storage.set_item(key, key)
        assert temp_storage.keys() == ["a", "b", "c"]

    def test_values_survive_reconnect(self, temp_storage):
        temp_storage.set_item("a", "kept")
        temp_storage.disconnect()

        other = create_sqlite_storage(database_path=temp_storage.database_path)
        assert other.get_item("a") == "kept"
        other.disconnect()

    def test_env_var_path(self, tmp_path, monkeypatch):
        path = tmp_path / "env.db"
        monkeypatch.setenv("SPENDTRACK_DB_PATH", str(path))

        storage = create_sqlite_storage()
        storage.set_item("a", "1")
        storage.disconnect()

        assert path.exists()

    def test_default_path_under_home(self, tmp_path, monkeypatch):
        monkeypatch.delenv("SPENDTRACK_DB_PATH", raising=False)
        monkeypatch.setattr("pathlib.Path.home", lambda: tmp_path / "home")

        path = default_database_path()

        assert path == tmp_path / "home" / ".spendtrack" / "spendtrack.db"
        assert path.parent.is_dir()

    def test_blank_env_var_uses_default(self, tmp_path, monkeypatch):
        monkeypatch.setenv("SPENDTRACK_DB_PATH", "  ")
        monkeypatch.setattr("pathlib.Path.home", lambda: tmp_path)

        assert default_database_path() == tmp_path / ".spendtrack" / "spendtrack.db"


@pytest.fixture
def transaction():
    now = datetime(2024, 6, 1, 9, 30, tzinfo=UTC)
    return Transaction(
        id="txn_1",
        description="Coffee",
        amount=Decimal("4.50"),
        category="Food",
        date=date(2024, 6, 1),
        created_at=now,
        updated_at=now,
    )


class TestPersistenceAdapter:
    """Tests for JSON documents in storage."""

    def test_nothing_stored(self, persistence):
        assert persistence.load_transactions() is None
        assert persistence.load_settings() is None

    def test_save_and_load_transactions(self, persistence, temp_storage, transaction):
        assert persistence.save_transactions([transaction]) is True

        assert persistence.load_transactions() == [transaction]
        stored = json.loads(temp_storage.get_item(TRANSACTIONS_KEY))
        assert stored[0]["createdAt"] == "2024-06-01T09:30:00Z"

    def test_save_and_load_settings(self, persistence):
        settings = Settings(currency="€", spending_limit=Decimal("99.99"))
        assert persistence.save_settings(settings) is True
        assert persistence.load_settings() == settings

    def test_legacy_settings_key(self, persistence, temp_storage):
        temp_storage.set_item(SETTINGS_KEY, json.dumps({"monthlyCap": 75}))
        assert persistence.load_settings().spending_limit == Decimal("75")

    @pytest.mark.parametrize(
        "raw",
        [
            "{not json",
            '{"id": "txn_1"}',
            '[{"id": "txn_1"}]',
            '[{"id": "txn_1", "description": "x", "amount": 1, "category": "Food", '
            '"date": "June", "createdAt": "2024-06-01T00:00:00Z"}]',
        ],
    )
    def test_corrupt_transactions(self, persistence, temp_storage, raw):
        temp_storage.set_item(TRANSACTIONS_KEY, raw)
        with pytest.raises(CorruptDataError, match=TRANSACTIONS_KEY):
            persistence.load_transactions()

    @pytest.mark.parametrize("raw", ["[]", '{"currency": 5}', "nope"])
    def test_corrupt_settings(self, persistence, temp_storage, raw):
        temp_storage.set_item(SETTINGS_KEY, raw)
        with pytest.raises(CorruptDataError):
            persistence.load_settings()

    def test_write_failure_returns_false(self, memory_storage, transaction, caplog):
        memory_storage.fail_writes = True
        adapter = PersistenceAdapter(memory_storage)

        assert adapter.save_transactions([transaction]) is False
        assert adapter.save_settings(Settings()) is False
        assert adapter.clear() is False
        assert "quota exceeded" in caplog.text

    def test_read_failure_reads_as_absent(self, memory_storage):
        memory_storage.fail_reads = True
        assert PersistenceAdapter(memory_storage).load_transactions() is None

    def test_clear(self, persistence, temp_storage, transaction):
        persistence.save_transactions([transaction])
        persistence.save_settings(Settings())
        temp_storage.set_item("other:key", "1")

        assert persistence.clear() is True

        assert temp_storage.keys() == ["other:key"]
