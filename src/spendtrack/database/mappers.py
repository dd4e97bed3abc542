"""Mapper functions to convert between domain entities and stored records.

Records are the JSON-ready dictionaries written to storage and exported
documents. Field names on records are camelCase (``createdAt``,
``spendingLimit``); entities use Python names. Keeping the conversion here
means the stored format can change without touching business logic.
"""

from datetime import datetime, date, UTC
from decimal import Decimal, ROUND_HALF_UP
from typing import Any, Mapping, Optional

from dateutil import parser as date_parser

from spendtrack.domain import entities as domain

CENTS = Decimal("0.01")

# Stored settings key -> Settings attribute. ``monthlyCap`` is the legacy
# name for the spending limit.
SETTINGS_KEY_MAP: dict[str, str] = {
    "currency": "currency",
    "baseCurrency": "base_currency",
    "spendingLimit": "spending_limit",
    "monthlyCap": "spending_limit",
    "exchangeRates": "exchange_rates",
    "categories": "categories",
}


def to_decimal(value: Any) -> Decimal:
    """Convert a JSON number to a Decimal rounded to cents."""
    if isinstance(value, bool):
        raise TypeError("Boolean is not an amount")
    return Decimal(str(value)).quantize(CENTS, rounding=ROUND_HALF_UP)


def format_timestamp(value: datetime) -> str:
    """Render a timestamp as ISO-8601 UTC with a ``Z`` suffix."""
    if value.tzinfo is None:
        value = value.replace(tzinfo=UTC)
    return value.astimezone(UTC).isoformat().replace("+00:00", "Z")


def parse_timestamp(value: str) -> datetime:
    """Parse an ISO-8601 timestamp; naive values are taken as UTC."""
    if not isinstance(value, str):
        raise TypeError("Timestamp must be a string")
    parsed = date_parser.isoparse(value)
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=UTC)
    return parsed.astimezone(UTC)


def parse_record_date(value: str) -> date:
    """Parse a ``YYYY-MM-DD`` record date."""
    if not isinstance(value, str):
        raise TypeError("Date must be a string")
    return datetime.strptime(value, "%Y-%m-%d").date()


def transaction_to_record(transaction: domain.Transaction) -> dict[str, Any]:
    """Convert a domain Transaction to a stored record."""
    return {
        "id": transaction.id,
        "description": transaction.description,
        "amount": float(transaction.amount),
        "category": transaction.category,
        "date": transaction.date.isoformat(),
        "createdAt": format_timestamp(transaction.created_at),
        "updatedAt": format_timestamp(transaction.updated_at),
    }


def transaction_from_record(record: Mapping[str, Any]) -> domain.Transaction:
    """Convert a stored record to a domain Transaction.

    Raises:
        KeyError, TypeError, ValueError: If the record is malformed
    """
    created_at = parse_timestamp(record["createdAt"])
    updated_raw = record.get("updatedAt")
    updated_at = parse_timestamp(updated_raw) if updated_raw is not None else created_at
    return domain.Transaction(
        id=str(record["id"]),
        description=str(record["description"]),
        amount=to_decimal(record["amount"]),
        category=str(record["category"]),
        date=parse_record_date(record["date"]),
        created_at=created_at,
        updated_at=updated_at,
    )


def settings_to_record(settings: domain.Settings) -> dict[str, Any]:
    """Convert domain Settings to a stored record."""
    limit = settings.spending_limit
    return {
        "currency": settings.currency,
        "baseCurrency": settings.base_currency,
        "spendingLimit": float(limit) if limit is not None else None,
        "exchangeRates": {
            code: float(rate) for code, rate in settings.exchange_rates.items()
        },
        "categories": list(settings.categories),
    }


def settings_patch_from_record(record: Mapping[str, Any]) -> dict[str, Any]:
    """Convert a stored settings record into Settings field values.

    Unknown keys are skipped. Only keys present in the record appear in the
    result, so it can be merged over existing settings.

    Raises:
        TypeError, ValueError: If a known key carries a malformed value
    """
    patch: dict[str, Any] = {}
    for key, value in record.items():
        name = SETTINGS_KEY_MAP.get(key)
        if name is None:
            continue
        if name == "spending_limit":
            patch[name] = _limit_from_record(value)
        elif name == "exchange_rates":
            if not isinstance(value, Mapping):
                raise TypeError("exchangeRates must be an object")
            patch[name] = {
                str(code): Decimal(str(rate)) for code, rate in value.items()
            }
        elif name == "categories":
            if not isinstance(value, list):
                raise TypeError("categories must be a list")
            patch[name] = tuple(str(item) for item in value)
        else:
            if not isinstance(value, str):
                raise TypeError(f"{key} must be a string")
            patch[name] = value
    return patch


def settings_from_record(
    record: Mapping[str, Any], base: Optional[domain.Settings] = None
) -> domain.Settings:
    """Build Settings from a stored record, filling gaps from ``base``."""
    current = base or domain.Settings()
    values = {name: getattr(current, name) for name in domain.SETTINGS_FIELDS}
    values.update(settings_patch_from_record(record))
    return domain.Settings(**values)


def _limit_from_record(value: Any) -> Optional[Decimal]:
    if value is None:
        return None
    if isinstance(value, bool) or not isinstance(value, (int, float, str)):
        raise TypeError("Spending limit must be a number")
    return to_decimal(value)
