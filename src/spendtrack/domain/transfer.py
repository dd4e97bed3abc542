"""Import and export of the complete data set as JSON documents."""

import json
import math
import re
from datetime import date, datetime, UTC
from decimal import InvalidOperation
from pathlib import Path
from typing import Any, Mapping, Optional, Union

from spendtrack.database.mappers import (
    SETTINGS_KEY_MAP,
    format_timestamp,
    parse_record_date,
    parse_timestamp,
    settings_patch_from_record,
    settings_to_record,
    transaction_from_record,
    transaction_to_record,
)
from spendtrack.domain.entities import Transaction
from spendtrack.domain.errors import (
    ImportDataError,
    import_record_label,
    invalid_import_field,
    missing_import_field,
    unknown_fields,
)
from spendtrack.domain.store import TransactionStore
from spendtrack.domain.validation import MAX_AMOUNT
from spendtrack.logging_setup import get_logger

logger = get_logger(__name__)

EXPORT_VERSION = "1.0"

REQUIRED_TRANSACTION_FIELDS = ("id", "description", "amount", "category", "date", "createdAt")
OPTIONAL_TRANSACTION_FIELDS = ("updatedAt",)

_RECORD_DATE = re.compile(r"\d{4}-\d{2}-\d{2}")


class DataTransferService:
    """Service for exporting and importing the store's data."""

    def __init__(self, store: TransactionStore):
        """Initialize transfer service.

        Args:
            store: Store to export from and import into
        """
        self.store = store

    def export_data(self, now: Optional[datetime] = None) -> dict[str, Any]:
        """Build the export document for the current store state."""
        return {
            "transactions": [
                transaction_to_record(txn) for txn in self.store.get_transactions()
            ],
            "settings": settings_to_record(self.store.settings),
            "exportDate": format_timestamp(now or datetime.now(UTC)),
            "version": EXPORT_VERSION,
        }

    def export_json(self, indent: Optional[int] = 2, now: Optional[datetime] = None) -> str:
        """Serialize the export document to JSON text."""
        return json.dumps(self.export_data(now), indent=indent)

    def export_to_file(self, path: Union[str, Path, None] = None) -> Path:
        """Write the export document to a file.

        Args:
            path: Target file; defaults to spendtrack-export-YYYY-MM-DD.json
                in the current directory

        Returns:
            Path of the written file
        """
        target = Path(path) if path is not None else Path(default_export_filename())
        target.write_text(self.export_json() + "\n", encoding="utf-8")
        logger.info("Exported %d transactions to %s", len(self.store.get_transactions()), target)
        return target

    def import_data(self, raw: Union[str, bytes, Mapping[str, Any]]) -> int:
        """Validate a document and replace the store's data with it.

        The import is all-or-nothing: if the document or any single
        transaction is invalid, nothing in the store changes.

        Args:
            raw: JSON text, bytes, or an already parsed document

        Returns:
            Number of imported transactions

        Raises:
            ImportDataError: If the document is malformed
        """
        document = parse_import_document(raw)
        transactions = validate_import_transactions(document.get("transactions"))
        settings_patch = validate_import_settings(document.get("settings"))

        self.store.replace_data(transactions, settings_patch)
        logger.info("Imported %d transactions", len(transactions))
        return len(transactions)

    def import_file(self, path: Union[str, Path]) -> int:
        """Import a JSON file through the same path as :meth:`import_data`.

        Raises:
            ImportDataError: If the file cannot be read or is invalid
        """
        try:
            content = Path(path).read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as e:
            raise ImportDataError(f"Could not read import file '{path}': {e}") from e
        return self.import_data(content)


def default_export_filename(today: Optional[date] = None) -> str:
    """Return the default export file name for a day."""
    return f"spendtrack-export-{(today or date.today()).isoformat()}.json"


def parse_import_document(raw: Union[str, bytes, Mapping[str, Any]]) -> Mapping[str, Any]:
    """Parse import input into a document mapping.

    Raises:
        ImportDataError: If the input is not a JSON object
    """
    if isinstance(raw, (str, bytes, bytearray)):
        try:
            document = json.loads(raw)
        except (json.JSONDecodeError, UnicodeDecodeError) as e:
            raise ImportDataError(f"Invalid JSON: {e}") from e
    else:
        document = raw

    if not isinstance(document, Mapping):
        raise ImportDataError("Invalid data format: expected a JSON object")
    return document


def validate_import_transactions(items: Any) -> list[Transaction]:
    """Check every imported transaction record and convert them.

    Raises:
        ImportDataError: Naming the first record that fails
    """
    if not isinstance(items, list):
        raise ImportDataError("Invalid data format: transactions array required")

    allowed = set(REQUIRED_TRANSACTION_FIELDS) | set(OPTIONAL_TRANSACTION_FIELDS)
    seen_ids: set[str] = set()
    transactions = []
    for index, record in enumerate(items):
        if not isinstance(record, Mapping):
            raise ImportDataError(f"Transaction {index}: expected an object")

        transaction_id = record.get("id")
        for field in REQUIRED_TRANSACTION_FIELDS:
            if field not in record:
                raise ImportDataError(missing_import_field(index, transaction_id, field))

        extra = [name for name in record if name not in allowed]
        if extra:
            raise ImportDataError(
                f"{import_record_label(index, transaction_id)}: "
                f"{unknown_fields('transaction', extra)}"
            )

        _check_transaction_record(index, record)
        if transaction_id in seen_ids:
            raise ImportDataError(
                invalid_import_field(index, transaction_id, "id", "duplicate id")
            )
        seen_ids.add(transaction_id)
        transactions.append(transaction_from_record(record))

    return transactions


def _check_transaction_record(index: int, record: Mapping[str, Any]) -> None:
    transaction_id = record["id"]

    def fail(field: str, reason: str) -> ImportDataError:
        return ImportDataError(invalid_import_field(index, transaction_id, field, reason))

    for field in ("id", "description", "category"):
        value = record[field]
        if not isinstance(value, str) or not value.strip():
            raise fail(field, "must be a non-empty string")

    amount = record["amount"]
    if not _is_number(amount):
        raise fail("amount", "must be a number")
    if amount < 0:
        raise fail("amount", "must not be negative")
    if amount > MAX_AMOUNT:
        raise fail("amount", f"must not exceed {MAX_AMOUNT:,}")

    record_date = record["date"]
    if not isinstance(record_date, str) or not _RECORD_DATE.fullmatch(record_date):
        raise fail("date", "must be YYYY-MM-DD")
    try:
        parse_record_date(record_date)
    except ValueError:
        raise fail("date", "not a real calendar date")

    try:
        created_at = parse_timestamp(record["createdAt"])
    except (TypeError, ValueError):
        raise fail("createdAt", "must be an ISO-8601 timestamp")

    if record.get("updatedAt") is not None:
        try:
            updated_at = parse_timestamp(record["updatedAt"])
        except (TypeError, ValueError):
            raise fail("updatedAt", "must be an ISO-8601 timestamp")
        if updated_at < created_at:
            raise fail("updatedAt", "earlier than createdAt")


def validate_import_settings(settings: Any) -> dict[str, Any]:
    """Check imported settings and convert them to Settings field values.

    Raises:
        ImportDataError: If settings are malformed
    """
    if settings is None:
        return {}
    if not isinstance(settings, Mapping):
        raise ImportDataError("Invalid settings: expected an object")

    extra = [name for name in settings if name not in SETTINGS_KEY_MAP]
    if extra:
        raise ImportDataError(f"Invalid settings: {unknown_fields('settings', extra)}")

    for key in ("currency", "baseCurrency"):
        if settings.get(key) is not None and not isinstance(settings[key], str):
            raise ImportDataError(f"Invalid settings: '{key}' must be a string")

    for key in ("spendingLimit", "monthlyCap"):
        value = settings.get(key)
        if value is not None and (not _is_number(value) or not 0 <= value <= MAX_AMOUNT):
            raise ImportDataError(
                f"Invalid settings: '{key}' must be a number from 0 to {MAX_AMOUNT:,} or null"
            )

    rates = settings.get("exchangeRates")
    if rates is not None:
        if not isinstance(rates, Mapping) or not all(
            _is_number(rate) and rate > 0 for rate in rates.values()
        ):
            raise ImportDataError(
                "Invalid settings: 'exchangeRates' must map currency codes to positive numbers"
            )

    categories = settings.get("categories")
    if categories is not None and (
        not isinstance(categories, list) or not all(isinstance(c, str) for c in categories)
    ):
        raise ImportDataError("Invalid settings: 'categories' must be a list of strings")

    # null clears the spending limit; for every other key it means "keep".
    present = {
        key: value
        for key, value in settings.items()
        if value is not None or key in ("spendingLimit", "monthlyCap")
    }
    try:
        patch = settings_patch_from_record(present)
    except (TypeError, ValueError, InvalidOperation) as e:
        raise ImportDataError(f"Invalid settings: {e}") from e
    return patch


def _is_number(value: Any) -> bool:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return False
    return math.isfinite(value)
