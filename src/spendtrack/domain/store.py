"""Transaction store: the in-memory source of truth for transactions and settings."""

import uuid
from dataclasses import replace
from datetime import date, datetime, timedelta, UTC
from decimal import Decimal, ROUND_HALF_UP
from typing import TYPE_CHECKING, Any, Callable, Iterable, Optional

from spendtrack.domain.entities import (
    AlertLevel,
    Settings,
    SETTINGS_FIELDS,
    SpendingAlert,
    SpendingStats,
    Transaction,
    TRANSACTION_FIELDS,
)
from spendtrack.domain.errors import (
    CorruptDataError,
    StoreError,
    ValidationError,
    unknown_fields,
)
from spendtrack.logging_setup import get_logger
from spendtrack.utils.amount_parser import format_amount

if TYPE_CHECKING:
    from spendtrack.database.persistence import PersistenceAdapter

logger = get_logger(__name__)

Listener = Callable[["TransactionStore"], None]

CENTS = Decimal("0.01")
WARNING_RATIO = Decimal("0.8")
RECENT_DAYS = 7


def generate_transaction_id() -> str:
    """Return a new opaque transaction ID."""
    return f"txn_{uuid.uuid4().hex}"


class TransactionStore:
    """Owns the transaction list and settings.

    Every successful mutation is persisted through the adapter and then
    announced to subscribed listeners, synchronously and in registration
    order. Listeners must not mutate the store while being notified.

    The store trusts its input: callers validate fields with
    ``spendtrack.domain.validation`` before adding or updating.
    """

    def __init__(
        self,
        persistence: "PersistenceAdapter",
        clock: Optional[Callable[[], datetime]] = None,
        id_factory: Optional[Callable[[], str]] = None,
    ):
        """Initialize the store and load persisted data.

        Args:
            persistence: Persistence adapter used for every write
            clock: Returns the current aware datetime (defaults to UTC now)
            id_factory: Generates transaction IDs
        """
        self.persistence = persistence
        self._clock = clock or (lambda: datetime.now(UTC))
        self._id_factory = id_factory or generate_transaction_id
        self._listeners: list[Listener] = []
        self._notifying = False
        self._transactions: list[Transaction] = []
        self._settings = Settings()
        self.persisted = True
        self._load()

    def _load(self) -> None:
        try:
            transactions = self.persistence.load_transactions()
        except CorruptDataError as e:
            logger.warning("%s; starting with no transactions", e)
            transactions = None
        try:
            settings = self.persistence.load_settings()
        except CorruptDataError as e:
            logger.warning("%s; using default settings", e)
            settings = None

        self._transactions = list(transactions or [])
        self._settings = settings or Settings()

    # Listeners
    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """Register a change listener. Returns a function that unsubscribes it."""
        self._listeners.append(listener)
        return lambda: self.unsubscribe(listener)

    def unsubscribe(self, listener: Listener) -> bool:
        """Remove a listener. Returns False if it was not registered."""
        try:
            self._listeners.remove(listener)
        except ValueError:
            return False
        return True

    def _notify(self) -> None:
        self._notifying = True
        try:
            for listener in list(self._listeners):
                listener(self)
        finally:
            self._notifying = False

    def _ensure_mutable(self) -> None:
        if self._notifying:
            raise StoreError("Cannot modify the store while listeners are being notified")

    def _commit(self, transactions_changed: bool = True, settings_changed: bool = False) -> None:
        ok = True
        if transactions_changed:
            ok = self.persistence.save_transactions(self._transactions) and ok
        if settings_changed:
            ok = self.persistence.save_settings(self._settings) and ok
        if not ok:
            logger.warning("Changes kept in memory only; persistence failed")
        self.persisted = ok
        self._notify()

    # Transactions
    def add_transaction(
        self,
        description: str,
        amount: Decimal,
        category: str,
        date: date,
    ) -> Transaction:
        """Add a transaction.

        Args:
            description: Normalized description
            amount: Transaction amount
            category: Category name (added to known categories if new)
            date: Transaction date

        Returns:
            The stored transaction with its generated ID and timestamps
        """
        self._ensure_mutable()
        fields = _coerce_transaction_fields(
            {"description": description, "amount": amount, "category": category, "date": date}
        )
        now = self._clock()
        transaction = Transaction(
            id=self._new_id(),
            created_at=now,
            updated_at=now,
            **fields,
        )
        self._transactions.append(transaction)
        settings_changed = self._remember_category(transaction.category)
        logger.debug("Added transaction %s", transaction.id)
        self._commit(settings_changed=settings_changed)
        return transaction

    def get_transaction(self, transaction_id: str) -> Optional[Transaction]:
        """Get transaction by ID, or None if not found."""
        for transaction in self._transactions:
            if transaction.id == transaction_id:
                return transaction
        return None

    def get_transactions(self) -> list[Transaction]:
        """Return a copy of all transactions in insertion order."""
        return list(self._transactions)

    def update_transaction(self, transaction_id: str, **patch: Any) -> Optional[Transaction]:
        """Merge field changes into a transaction.

        Returns:
            The updated transaction, or None if the ID is not found

        Raises:
            ValidationError: If the patch names fields a transaction does not have
        """
        unknown = [name for name in patch if name not in TRANSACTION_FIELDS]
        if unknown:
            raise ValidationError(unknown_fields("transaction", unknown))
        self._ensure_mutable()

        index = self._index_of(transaction_id)
        if index is None:
            return None

        current = self._transactions[index]
        now = self._clock()
        updated = replace(
            current,
            **_coerce_transaction_fields(patch),
            updated_at=max(now, current.created_at),
        )
        self._transactions[index] = updated
        settings_changed = self._remember_category(updated.category)
        logger.debug("Updated transaction %s", transaction_id)
        self._commit(settings_changed=settings_changed)
        return updated

    def delete_transaction(self, transaction_id: str) -> bool:
        """Delete a transaction. Returns False if the ID is not found."""
        self._ensure_mutable()
        index = self._index_of(transaction_id)
        if index is None:
            return False
        del self._transactions[index]
        logger.debug("Deleted transaction %s", transaction_id)
        self._commit()
        return True

    def replace_data(
        self,
        transactions: Iterable[Transaction],
        settings_patch: Optional[dict[str, Any]] = None,
    ) -> None:
        """Replace all transactions and merge settings (used by imports)."""
        self._ensure_mutable()
        self._transactions = list(transactions)
        if settings_patch:
            self._settings = replace(self._settings, **_coerce_settings_fields(settings_patch))
        for transaction in self._transactions:
            self._remember_category(transaction.category)
        self._commit(settings_changed=True)

    def clear_all_data(self) -> None:
        """Reset to the default empty state and clear persisted storage."""
        self._ensure_mutable()
        self._transactions = []
        self._settings = Settings()
        self.persisted = self.persistence.clear()
        logger.info("Cleared all data")
        self._notify()

    # Settings and categories
    @property
    def settings(self) -> Settings:
        """Current settings; the exchange rate mapping is a copy."""
        return replace(self._settings, exchange_rates=dict(self._settings.exchange_rates))

    def update_settings(self, **patch: Any) -> Settings:
        """Merge settings fields, persist and notify.

        Raises:
            ValidationError: If the patch names unknown settings
        """
        unknown = [name for name in patch if name not in SETTINGS_FIELDS]
        if unknown:
            raise ValidationError(unknown_fields("settings", unknown))
        self._ensure_mutable()
        self._settings = replace(self._settings, **_coerce_settings_fields(patch))
        self._commit(transactions_changed=False, settings_changed=True)
        return self.settings

    @property
    def categories(self) -> list[str]:
        return list(self._settings.categories)

    def add_category(self, name: str) -> bool:
        """Add a known category. Returns False if it already exists."""
        self._ensure_mutable()
        if not self._remember_category(name):
            return False
        self._commit(transactions_changed=False, settings_changed=True)
        return True

    def convert_amount(self, amount: Decimal, currency: str) -> Decimal:
        """Convert a base-currency amount with the stored exchange rates.

        Raises:
            ValidationError: If no rate is stored for the currency
        """
        code = currency.upper()
        if code == self._settings.base_currency.upper():
            rate = Decimal("1")
        else:
            rate = self._settings.exchange_rates.get(code)
            if rate is None:
                raise ValidationError(f"No exchange rate for '{currency}'")
        return (Decimal(amount) * rate).quantize(CENTS, rounding=ROUND_HALF_UP)

    # Queries
    def get_stats(self, today: Optional[date] = None) -> SpendingStats:
        """Compute totals, top category and recent/monthly spending."""
        today = today or self._clock().date()
        # Seven calendar days ending today
        recent_start = today - timedelta(days=RECENT_DAYS - 1)
        zero = Decimal("0")

        total = zero
        recent = zero
        month = zero
        category_totals: dict[str, Decimal] = {}
        for txn in self._transactions:
            total += txn.amount
            category_totals[txn.category] = category_totals.get(txn.category, zero) + txn.amount
            if recent_start <= txn.date <= today:
                recent += txn.amount
            if txn.date.year == today.year and txn.date.month == today.month:
                month += txn.amount

        top_category = None
        for category, amount in category_totals.items():
            if top_category is None or amount > category_totals[top_category]:
                top_category = category

        count = len(self._transactions)
        average = (total / count).quantize(CENTS, rounding=ROUND_HALF_UP) if count else zero

        return SpendingStats(
            total=total,
            count=count,
            top_category=top_category,
            recent_spending=recent,
            current_month=month,
            average=average,
            category_totals=category_totals,
        )

    def check_spending_limit(self, today: Optional[date] = None) -> Optional[SpendingAlert]:
        """Compare this month's spending with the configured limit.

        Returns:
            EXCEEDED alert at or above the limit, WARNING alert at or above
            80% of it, otherwise None (also when no limit is set)
        """
        limit = self._settings.spending_limit
        if not limit:
            return None
        today = today or self._clock().date()

        currency = self._settings.currency
        current = self.get_stats(today).current_month
        percentage = float(current / limit * 100)

        if current >= limit:
            return SpendingAlert(
                level=AlertLevel.EXCEEDED,
                message=(
                    f"You've exceeded your monthly limit of {format_amount(limit, currency)} "
                    f"by {format_amount(current - limit, currency)}"
                ),
                percentage=percentage,
            )
        if current >= limit * WARNING_RATIO:
            return SpendingAlert(
                level=AlertLevel.WARNING,
                message=(
                    f"You've used {percentage:.1f}% of your monthly limit "
                    f"({format_amount(current, currency)} of {format_amount(limit, currency)})"
                ),
                percentage=percentage,
            )
        return None

    # Helpers
    def _index_of(self, transaction_id: str) -> Optional[int]:
        for index, transaction in enumerate(self._transactions):
            if transaction.id == transaction_id:
                return index
        return None

    def _new_id(self) -> str:
        existing = {txn.id for txn in self._transactions}
        while True:
            candidate = self._id_factory()
            if candidate not in existing:
                return candidate

    def _remember_category(self, name: str) -> bool:
        if name in self._settings.categories:
            return False
        self._settings = replace(self._settings, categories=self._settings.categories + (name,))
        return True


def _coerce_transaction_fields(fields: dict[str, Any]) -> dict[str, Any]:
    values = dict(fields)
    if "amount" in values and not isinstance(values["amount"], Decimal):
        values["amount"] = Decimal(str(values["amount"]))
    if "date" in values and isinstance(values["date"], str):
        values["date"] = date.fromisoformat(values["date"])
    return values


def _coerce_settings_fields(fields: dict[str, Any]) -> dict[str, Any]:
    values = dict(fields)
    limit = values.get("spending_limit")
    if limit is not None and not isinstance(limit, Decimal):
        values["spending_limit"] = Decimal(str(limit))
    if "exchange_rates" in values:
        values["exchange_rates"] = {
            str(code).upper(): rate if isinstance(rate, Decimal) else Decimal(str(rate))
            for code, rate in values["exchange_rates"].items()
        }
    if "categories" in values:
        values["categories"] = tuple(dict.fromkeys(values["categories"]))
    return values
