"""Abstract key/value storage interface."""

from abc import ABC, abstractmethod
from typing import Optional


class StorageError(Exception):
    """Storage backend failed to read or write (unavailable, full, locked)."""


class Storage(ABC):
    """Abstract local key/value storage for serialized documents.

    Values are opaque strings (JSON documents written by the persistence
    adapter). Implementations raise :class:`StorageError` on backend
    failures.
    """

    @abstractmethod
    def connect(self) -> None:
        """Connect to the storage backend."""
        pass

    @abstractmethod
    def disconnect(self) -> None:
        """Disconnect from the storage backend."""
        pass

    @abstractmethod
    def initialize_schema(self) -> None:
        """Initialize storage schema (create tables)."""
        pass

    @abstractmethod
    def get_item(self, key: str) -> Optional[str]:
        """Get the value stored under key, or None if absent."""
        pass

    @abstractmethod
    def set_item(self, key: str, value: str) -> None:
        """Store value under key, replacing any previous value."""
        pass

    @abstractmethod
    def remove_item(self, key: str) -> None:
        """Remove key. Removing an absent key is a no-op."""
        pass

    @abstractmethod
    def keys(self) -> list[str]:
        """List stored keys in sorted order."""
        pass
