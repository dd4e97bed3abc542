"""Domain model entities for spendtrack.

These are pure data classes representing business concepts, independent of
how they are persisted. The persistence layer converts them to and from JSON
documents through ``spendtrack.database.mappers``.
"""

from dataclasses import dataclass, field
from datetime import datetime, date
from decimal import Decimal
from enum import Enum
from typing import Any, Optional

DEFAULT_CATEGORIES: tuple[str, ...] = (
    "Food",
    "Books",
    "Transport",
    "Entertainment",
    "Fees",
    "Other",
)

DEFAULT_EXCHANGE_RATES: dict[str, Decimal] = {
    "EUR": Decimal("0.85"),
    "GBP": Decimal("0.73"),
}

# Fields a caller may supply or change on a transaction.
TRANSACTION_FIELDS: tuple[str, ...] = ("description", "amount", "category", "date")


@dataclass(frozen=True)
class Transaction:
    """Transaction domain entity."""

    id: str
    description: str
    amount: Decimal
    category: str
    date: date
    created_at: datetime
    updated_at: datetime


@dataclass(frozen=True)
class Settings:
    """User preferences stored alongside transactions."""

    currency: str = "$"
    base_currency: str = "USD"
    spending_limit: Optional[Decimal] = None
    exchange_rates: dict[str, Decimal] = field(
        default_factory=lambda: dict(DEFAULT_EXCHANGE_RATES)
    )
    categories: tuple[str, ...] = DEFAULT_CATEGORIES


SETTINGS_FIELDS: tuple[str, ...] = (
    "currency",
    "base_currency",
    "spending_limit",
    "exchange_rates",
    "categories",
)


@dataclass(frozen=True)
class FieldResult:
    """Outcome of validating a single field."""

    valid: bool
    message: Optional[str] = None
    value: Any = None

    @classmethod
    def ok(cls, value: Any) -> "FieldResult":
        return cls(valid=True, value=value)

    @classmethod
    def error(cls, message: str) -> "FieldResult":
        return cls(valid=False, message=message)


@dataclass(frozen=True)
class FormValidation:
    """Outcome of validating every field of a transaction form.

    ``results`` keeps one entry per field, valid or not, so callers can show
    all errors at once without losing the fields that were already correct.
    """

    results: dict[str, FieldResult]

    @property
    def valid(self) -> bool:
        return all(result.valid for result in self.results.values())

    @property
    def errors(self) -> dict[str, str]:
        return {
            name: result.message or "Invalid value"
            for name, result in self.results.items()
            if not result.valid
        }

    @property
    def data(self) -> Optional[dict[str, Any]]:
        """Normalized values, or None when any field failed."""
        if not self.valid:
            return None
        return {name: result.value for name, result in self.results.items()}


@dataclass(frozen=True)
class SpendingStats:
    """Aggregates derived from the current transaction list."""

    total: Decimal
    count: int
    top_category: Optional[str]
    recent_spending: Decimal
    current_month: Decimal
    average: Decimal
    category_totals: dict[str, Decimal]


class AlertLevel(str, Enum):
    """Severity of a spending limit alert."""

    WARNING = "warning"
    EXCEEDED = "exceeded"


@dataclass(frozen=True)
class SpendingAlert:
    """Monthly spending limit alert."""

    level: AlertLevel
    message: str
    percentage: float


class SortOrder(str, Enum):
    """Sort orders supported by the search engine."""

    DATE_DESC = "date-desc"
    DATE_ASC = "date-asc"
    AMOUNT_DESC = "amount-desc"
    AMOUNT_ASC = "amount-asc"
    DESCRIPTION_ASC = "description-asc"
    DESCRIPTION_DESC = "description-desc"
    CATEGORY_ASC = "category-asc"


@dataclass(frozen=True)
class SearchCriteria:
    """Combined search, filter and sort options."""

    search_term: str = ""
    case_sensitive: bool = False
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    categories: tuple[str, ...] = ()
    min_amount: Optional[Decimal] = None
    max_amount: Optional[Decimal] = None
    sort_by: Optional[SortOrder] = None
