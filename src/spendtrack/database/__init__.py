"""Storage and persistence layer for spendtrack."""

from spendtrack.database.base import Storage, StorageError
from spendtrack.database.factories import create_sqlite_storage
from spendtrack.database.persistence import PersistenceAdapter
from spendtrack.domain.errors import CorruptDataError

__all__ = [
    "Storage",
    "StorageError",
    "create_sqlite_storage",
    "PersistenceAdapter",
    "CorruptDataError",
]
