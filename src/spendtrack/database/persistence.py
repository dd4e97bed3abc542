"""Persistence adapter storing transactions and settings as JSON documents."""

import json
from decimal import InvalidOperation
from typing import Any, Optional

from spendtrack.database.base import Storage, StorageError
from spendtrack.database.mappers import (
    settings_from_record,
    settings_to_record,
    transaction_from_record,
    transaction_to_record,
)
from spendtrack.domain.entities import Settings, Transaction
from spendtrack.domain.errors import CorruptDataError, corrupt_document
from spendtrack.logging_setup import get_logger

logger = get_logger(__name__)

TRANSACTIONS_KEY = "spendtrack:transactions"
SETTINGS_KEY = "spendtrack:settings"


class PersistenceAdapter:
    """Reads and writes the store's documents in key/value storage.

    Writes never raise: storage failures are logged and reported as
    ``False`` so the in-memory session can continue. Reads return ``None``
    for absent documents and raise :class:`CorruptDataError` for documents
    that cannot be decoded.
    """

    def __init__(self, storage: Storage):
        """Initialize persistence adapter.

        Args:
            storage: Storage backend instance
        """
        self.storage = storage

    def load_transactions(self) -> Optional[list[Transaction]]:
        """Load stored transactions, or None when nothing is stored.

        Raises:
            CorruptDataError: If the stored document cannot be decoded
        """
        document = self._read_document(TRANSACTIONS_KEY)
        if document is None:
            return None
        if not isinstance(document, list):
            raise CorruptDataError(
                corrupt_document(TRANSACTIONS_KEY, "expected a list")
            )
        try:
            return [transaction_from_record(record) for record in document]
        except (KeyError, TypeError, ValueError, AttributeError, InvalidOperation) as e:
            raise CorruptDataError(corrupt_document(TRANSACTIONS_KEY, str(e))) from e

    def load_settings(self) -> Optional[Settings]:
        """Load stored settings, or None when nothing is stored.

        Raises:
            CorruptDataError: If the stored document cannot be decoded
        """
        document = self._read_document(SETTINGS_KEY)
        if document is None:
            return None
        if not isinstance(document, dict):
            raise CorruptDataError(corrupt_document(SETTINGS_KEY, "expected an object"))
        try:
            return settings_from_record(document)
        except (TypeError, ValueError, InvalidOperation) as e:
            raise CorruptDataError(corrupt_document(SETTINGS_KEY, str(e))) from e

    def save_transactions(self, transactions: list[Transaction]) -> bool:
        """Persist the full transaction list. Returns False on failure."""
        records = [transaction_to_record(txn) for txn in transactions]
        return self._write_document(TRANSACTIONS_KEY, records)

    def save_settings(self, settings: Settings) -> bool:
        """Persist settings. Returns False on failure."""
        return self._write_document(SETTINGS_KEY, settings_to_record(settings))

    def clear(self) -> bool:
        """Remove all stored documents. Returns False on failure."""
        try:
            self.storage.remove_item(TRANSACTIONS_KEY)
            self.storage.remove_item(SETTINGS_KEY)
        except StorageError as e:
            logger.error("Failed to clear stored data: %s", e)
            return False
        return True

    def _read_document(self, key: str) -> Any:
        try:
            raw = self.storage.get_item(key)
        except StorageError as e:
            # Unavailable storage reads as absent; the session runs on defaults.
            logger.error("Failed to load '%s': %s", key, e)
            return None
        if raw is None:
            return None
        try:
            return json.loads(raw)
        except json.JSONDecodeError as e:
            raise CorruptDataError(corrupt_document(key, str(e))) from e

    def _write_document(self, key: str, document: Any) -> bool:
        try:
            self.storage.set_item(key, json.dumps(document))
        except StorageError as e:
            logger.error("Failed to save '%s': %s", key, e)
            return False
        logger.debug("Saved '%s'", key)
        return True
