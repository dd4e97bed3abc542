"""Generic SQLAlchemy key/value storage implementation."""

from typing import Optional
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from spendtrack.database.base import Storage, StorageError
from spendtrack.database.models import StorageEntry, create_session_factory


class SQLAlchemyStorage(Storage):
    """SQLAlchemy-based implementation of the Storage interface."""

    def __init__(self, database_url: str):
        """Initialize SQLAlchemy storage.

        Args:
            database_url: SQLAlchemy database URL (e.g., 'sqlite:///path/to.db')
        """
        self.database_url = database_url
        try:
            self.session_factory = create_session_factory(database_url)
        except SQLAlchemyError as e:
            raise StorageError(f"Could not open storage at {database_url}: {e}") from e
        self._session: Optional[Session] = None

    def _get_session(self) -> Session:
        """Get current session, creating one if needed."""
        if self._session is None:
            self._session = self.session_factory()
        return self._session

    def connect(self) -> None:
        """Connect to the storage backend."""
        # Connection is lazy, so this is a no-op
        pass

    def disconnect(self) -> None:
        """Disconnect from the storage backend."""
        if self._session is not None:
            self._session.close()
            self._session = None

    def initialize_schema(self) -> None:
        """Initialize storage schema (create tables)."""
        # Schema is created automatically by create_session_factory
        pass

    def get_item(self, key: str) -> Optional[str]:
        """Get the value stored under key, or None if absent."""
        session = self._get_session()
        try:
            entry = session.get(StorageEntry, key)
        except SQLAlchemyError as e:
            session.rollback()
            raise StorageError(f"Could not read '{key}': {e}") from e
        if entry is None:
            return None
        return entry.value

    def set_item(self, key: str, value: str) -> None:
        """Store value under key, replacing any previous value."""
        session = self._get_session()
        try:
            entry = session.get(StorageEntry, key)
            if entry is None:
                session.add(StorageEntry(key=key, value=value))
            else:
                entry.value = value
            session.commit()
        except SQLAlchemyError as e:
            session.rollback()
            raise StorageError(f"Could not write '{key}': {e}") from e

    def remove_item(self, key: str) -> None:
        """Remove key. Removing an absent key is a no-op."""
        session = self._get_session()
        try:
            session.query(StorageEntry).filter(StorageEntry.key == key).delete()
            session.commit()
        except SQLAlchemyError as e:
            session.rollback()
            raise StorageError(f"Could not remove '{key}': {e}") from e

    def keys(self) -> list[str]:
        """List stored keys in sorted order."""
        session = self._get_session()
        try:
            rows = session.query(StorageEntry.key).order_by(StorageEntry.key).all()
        except SQLAlchemyError as e:
            session.rollback()
            raise StorageError(f"Could not list keys: {e}") from e
        return [row[0] for row in rows]
