"""Field validation rules for transactions.

Every validator takes the raw value a user typed and returns a
:class:`FieldResult`. Validators never raise for bad input; the form helpers
run all of them so that every failing field is reported at once.
"""

import re
from datetime import date, datetime
from decimal import Decimal, InvalidOperation
from typing import Any, Mapping, Optional

from dateutil.relativedelta import relativedelta

from spendtrack.domain.entities import FieldResult, FormValidation, TRANSACTION_FIELDS

DESCRIPTION_MIN_LENGTH = 3
DESCRIPTION_MAX_LENGTH = 100
MAX_AMOUNT = Decimal("999999.99")
MAX_AGE_YEARS = 10

DESCRIPTION_PATTERN = re.compile(r"\S(?:.*\S)?")
DUPLICATE_WORD_PATTERN = re.compile(r"\b(\w+)\s+\1\b", re.IGNORECASE)
AMOUNT_PATTERN = re.compile(r"(0|[1-9]\d*)(\.\d{1,2})?")
CATEGORY_PATTERN = re.compile(r"[A-Za-z]+(?:[ -][A-Za-z]+)*")
DATE_PATTERN = re.compile(r"\d{4}-(0[1-9]|1[0-2])-(0[1-9]|[12]\d|3[01])")
CENTS_PATTERN = re.compile(r"\.\d{2}\b")

_WHITESPACE_RUN = re.compile(r"\s+")


def _as_text(value: Any) -> str:
    if value is None or isinstance(value, bool):
        return ""
    if isinstance(value, date):
        return value.isoformat()
    return str(value)


def normalize_description(value: str) -> str:
    """Trim outer whitespace and collapse internal runs to single spaces."""
    return _WHITESPACE_RUN.sub(" ", value.strip())


def validate_description(value: Any) -> FieldResult:
    """Validate a transaction description."""
    text = normalize_description(_as_text(value))

    if not text:
        return FieldResult.error("Description is required")

    if not DESCRIPTION_PATTERN.fullmatch(text):
        return FieldResult.error("Description cannot have leading/trailing spaces")

    if DUPLICATE_WORD_PATTERN.search(text):
        return FieldResult.error("Description contains duplicate words")

    if len(text) < DESCRIPTION_MIN_LENGTH:
        return FieldResult.error(
            f"Description must be at least {DESCRIPTION_MIN_LENGTH} characters"
        )

    if len(text) > DESCRIPTION_MAX_LENGTH:
        return FieldResult.error(
            f"Description must be at most {DESCRIPTION_MAX_LENGTH} characters"
        )

    return FieldResult.ok(text)


def validate_amount(value: Any) -> FieldResult:
    """Validate a new transaction amount.

    Accepts plain decimals with at most two fractional digits. Zero is
    rejected: a new entry must record actual spending.
    """
    text = _as_text(value).strip()

    if not text:
        return FieldResult.error("Amount is required")

    if not AMOUNT_PATTERN.fullmatch(text):
        return FieldResult.error(
            "Amount must be a valid positive number with up to 2 decimal places (e.g., 12.50)"
        )

    try:
        amount = Decimal(text)
    except InvalidOperation:
        return FieldResult.error("Amount must be a valid number")

    if amount <= 0:
        return FieldResult.error("Amount must be greater than 0")

    if amount > MAX_AMOUNT:
        return FieldResult.error("Amount cannot exceed 999,999.99")

    return FieldResult.ok(amount)


def validate_category(value: Any) -> FieldResult:
    """Validate a category name (letters, spaces and hyphens)."""
    text = _as_text(value)

    if not text:
        return FieldResult.error("Category is required")

    if not CATEGORY_PATTERN.fullmatch(text):
        return FieldResult.error(
            "Category can only contain letters, spaces, and hyphens"
        )

    return FieldResult.ok(text)


def validate_date(value: Any, today: Optional[date] = None) -> FieldResult:
    """Validate a transaction date in YYYY-MM-DD form.

    Args:
        value: Raw date text (or a ``date``)
        today: Reference day for the future/age checks, defaults to today

    Returns:
        FieldResult whose value is a ``date``
    """
    text = _as_text(value).strip()
    today = today or date.today()

    if not text:
        return FieldResult.error("Date is required")

    if not DATE_PATTERN.fullmatch(text):
        return FieldResult.error("Date must be in YYYY-MM-DD format")

    try:
        parsed = datetime.strptime(text, "%Y-%m-%d").date()
    except ValueError:
        return FieldResult.error("Invalid date")

    if parsed > today:
        return FieldResult.error("Date cannot be in the future")

    if parsed < today - relativedelta(years=MAX_AGE_YEARS):
        return FieldResult.error(
            f"Date cannot be more than {MAX_AGE_YEARS} years ago"
        )

    return FieldResult.ok(parsed)


def has_cents(value: Any) -> bool:
    """Return True when an amount is written with two cent digits."""
    return CENTS_PATTERN.search(_as_text(value)) is not None


def _validate_field(name: str, value: Any, today: Optional[date]) -> FieldResult:
    if name == "description":
        return validate_description(value)
    if name == "amount":
        return validate_amount(value)
    if name == "category":
        return validate_category(value)
    if name == "date":
        return validate_date(value, today=today)
    return FieldResult.error(f"Unknown field '{name}'")


def validate_form(data: Mapping[str, Any], today: Optional[date] = None) -> FormValidation:
    """Validate a complete transaction form.

    Every field is checked even when an earlier one fails. Missing fields are
    validated as empty input and unknown fields are reported as errors.
    """
    results = {
        name: _validate_field(name, data.get(name), today)
        for name in TRANSACTION_FIELDS
    }
    for name in data:
        if name not in results:
            results[name] = _validate_field(name, data[name], today)
    return FormValidation(results=results)


def validate_fields(data: Mapping[str, Any], today: Optional[date] = None) -> FormValidation:
    """Validate only the fields present in ``data`` (partial updates)."""
    return FormValidation(
        results={name: _validate_field(name, value, today) for name, value in data.items()}
    )
