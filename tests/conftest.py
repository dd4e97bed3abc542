"""Shared pytest fixtures for spendtrack tests."""

import tempfile
import os
from datetime import date, datetime, timedelta, UTC
from decimal import Decimal
from typing import Optional

import logging

import pytest

from spendtrack import logging_setup
from spendtrack.database.base import Storage, StorageError
from spendtrack.database.factories import create_sqlite_storage
from spendtrack.database.persistence import PersistenceAdapter
from spendtrack.domain.entities import Transaction
from spendtrack.domain.store import TransactionStore
from spendtrack.domain.transfer import DataTransferService


class MemoryStorage(Storage):
    """Dict-backed storage that can be switched into failure mode."""

    def __init__(self):
        self.items: dict[str, str] = {}
        self.fail_writes = False
        self.fail_reads = False

    def connect(self) -> None:
        pass

    def disconnect(self) -> None:
        pass

    def initialize_schema(self) -> None:
        pass

    def get_item(self, key: str) -> Optional[str]:
        if self.fail_reads:
            raise StorageError("storage unavailable")
        return self.items.get(key)

    def set_item(self, key: str, value: str) -> None:
        if self.fail_writes:
            raise StorageError("quota exceeded")
        self.items[key] = value

    def remove_item(self, key: str) -> None:
        if self.fail_writes:
            raise StorageError("quota exceeded")
        self.items.pop(key, None)

    def keys(self) -> list[str]:
        return sorted(self.items)


class FakeClock:
    """Clock returning a fixed UTC time that tests advance explicitly."""

    def __init__(self, start: datetime):
        self.now = start

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> datetime:
        self.now = self.now + timedelta(**kwargs)
        return self.now


@pytest.fixture(autouse=True)
def reset_logging():
    """Undo CLI logging configuration so caplog keeps seeing package records."""
    yield
    logger = logging.getLogger("spendtrack")
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
    logger.propagate = True
    logger.setLevel(logging.NOTSET)
    logging_setup._CONFIGURED = False


@pytest.fixture
def temp_storage():
    """Create a temporary SQLite storage for testing."""
    fd, db_path = tempfile.mkstemp(suffix=".db")
    os.close(fd)

    storage = create_sqlite_storage(database_path=db_path)
    # Store the path for tests that need it
    storage.database_path = db_path
    storage.connect()
    storage.initialize_schema()

    yield storage

    storage.disconnect()
    if os.path.exists(db_path):
        os.unlink(db_path)


@pytest.fixture
def memory_storage():
    """Create an in-memory storage that can simulate failures."""
    return MemoryStorage()


@pytest.fixture
def persistence(temp_storage):
    """Create a PersistenceAdapter over the temporary storage."""
    return PersistenceAdapter(temp_storage)


@pytest.fixture
def clock():
    """Create a controllable clock."""
    return FakeClock(datetime(2024, 6, 15, 12, 0, tzinfo=UTC))


@pytest.fixture
def store(persistence):
    """Create a TransactionStore backed by the temporary storage."""
    return TransactionStore(persistence)


@pytest.fixture
def transfer_service(store):
    """Create a DataTransferService for the store."""
    return DataTransferService(store)


@pytest.fixture
def today():
    """Fixed reference day used by date-sensitive tests."""
    return date(2024, 6, 15)


@pytest.fixture
def make_transaction():
    """Build Transaction entities directly, without a store."""
    created = datetime(2024, 6, 1, 9, 30, tzinfo=UTC)

    def _make(
        id: str,
        description: str = "Coffee",
        amount: str = "4.50",
        category: str = "Food",
        date: date = date(2024, 6, 1),
    ) -> Transaction:
        return Transaction(
            id=id,
            description=description,
            amount=Decimal(amount),
            category=category,
            date=date,
            created_at=created,
            updated_at=created,
        )

    return _make


@pytest.fixture
def cli_runner():
    """Create a Click CLI test runner."""
    from click.testing import CliRunner

    return CliRunner()


@pytest.fixture
def db_path(tmp_path):
    """Path for a database file used by CLI tests."""
    return str(tmp_path / "spendtrack.db")
