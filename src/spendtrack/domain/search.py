"""Search, filter and sort functions over transaction lists.

All functions are pure: they take a sequence of transactions and return a
new list, never modifying their input.
"""

import locale
import re
from datetime import date
from decimal import Decimal
from typing import Iterable, Optional, Sequence, Union

from spendtrack.domain.entities import SearchCriteria, SortOrder, Transaction
from spendtrack.domain.errors import SearchPatternError, invalid_search_pattern
from spendtrack.logging_setup import get_logger

logger = get_logger(__name__)

DateBound = Union[date, str, None]

SEARCH_PRESETS: dict[str, re.Pattern] = {
    "Cents present": re.compile(r"\.\d{2}\b"),
    "Beverage keywords": re.compile(r"(coffee|tea|juice|soda|water)", re.IGNORECASE),
    "Duplicate words": re.compile(r"\b(\w+)\s+\1\b", re.IGNORECASE),
    "Food items": re.compile(r"(lunch|dinner|breakfast|snack|meal)", re.IGNORECASE),
    "Transport": re.compile(r"(bus|taxi|uber|train|metro)", re.IGNORECASE),
    "Books/Education": re.compile(r"(book|textbook|course|class|tuition)", re.IGNORECASE),
}


def compile_pattern(pattern: str, case_sensitive: bool = False) -> re.Pattern:
    """Compile a user search pattern.

    Raises:
        SearchPatternError: If the pattern is not a valid regular expression
    """
    flags = 0 if case_sensitive else re.IGNORECASE
    try:
        return re.compile(pattern, flags)
    except re.error as e:
        raise SearchPatternError(invalid_search_pattern(pattern, str(e))) from e


def searchable_text(transaction: Transaction) -> str:
    """Text a search pattern is matched against."""
    return " ".join(
        [
            transaction.description,
            transaction.category,
            _amount_text(transaction.amount),
            transaction.date.isoformat(),
        ]
    )


def search_transactions(
    transactions: Sequence[Transaction],
    pattern: str,
    case_sensitive: bool = False,
) -> list[Transaction]:
    """Return transactions whose searchable text matches the pattern.

    An empty pattern matches everything. A bad pattern raises
    :class:`SearchPatternError`, which callers keep apart from an empty
    result so they can keep showing the previous results.
    """
    if not pattern or not pattern.strip():
        return list(transactions)

    regex = compile_pattern(pattern, case_sensitive)
    return [txn for txn in transactions if regex.search(searchable_text(txn))]


def highlight_matches(
    text: str,
    pattern: str,
    case_sensitive: bool = False,
    before: str = "<mark>",
    after: str = "</mark>",
) -> str:
    """Wrap every match of pattern in ``before``/``after`` markers.

    Never raises: an empty or invalid pattern returns the text unchanged.
    """
    if not text or not pattern:
        return text
    try:
        regex = compile_pattern(pattern, case_sensitive)
    except SearchPatternError as e:
        logger.debug("Not highlighting: %s", e)
        return text

    def wrap(match: re.Match) -> str:
        found = match.group(0)
        return f"{before}{found}{after}" if found else found

    return regex.sub(wrap, text)


def filter_by_date_range(
    transactions: Sequence[Transaction],
    start_date: DateBound = None,
    end_date: DateBound = None,
) -> list[Transaction]:
    """Keep transactions dated within [start_date, end_date].

    Either bound may be omitted. Bounds may be dates or YYYY-MM-DD strings.
    """
    start = _coerce_date(start_date)
    end = _coerce_date(end_date)
    return [
        txn
        for txn in transactions
        if (start is None or txn.date >= start) and (end is None or txn.date <= end)
    ]


def filter_by_category(
    transactions: Sequence[Transaction],
    categories: Optional[Iterable[str]],
) -> list[Transaction]:
    """Keep transactions in any of the given categories (empty means all)."""
    wanted = set(categories or ())
    if not wanted:
        return list(transactions)
    return [txn for txn in transactions if txn.category in wanted]


def filter_by_amount_range(
    transactions: Sequence[Transaction],
    min_amount: Optional[Decimal] = None,
    max_amount: Optional[Decimal] = None,
) -> list[Transaction]:
    """Keep transactions with min_amount <= amount <= max_amount (None = unbounded)."""
    low = Decimal(str(min_amount)) if min_amount is not None else None
    high = Decimal(str(max_amount)) if max_amount is not None else None
    return [
        txn
        for txn in transactions
        if (low is None or txn.amount >= low) and (high is None or txn.amount <= high)
    ]


def _text_key(value: str) -> str:
    return locale.strxfrm(value.casefold())


_SORT_KEYS = {
    SortOrder.DATE_DESC: (lambda txn: txn.date, True),
    SortOrder.DATE_ASC: (lambda txn: txn.date, False),
    SortOrder.AMOUNT_DESC: (lambda txn: txn.amount, True),
    SortOrder.AMOUNT_ASC: (lambda txn: txn.amount, False),
    SortOrder.DESCRIPTION_ASC: (lambda txn: _text_key(txn.description), False),
    SortOrder.DESCRIPTION_DESC: (lambda txn: _text_key(txn.description), True),
    SortOrder.CATEGORY_ASC: (lambda txn: _text_key(txn.category), False),
}


def sort_transactions(
    transactions: Sequence[Transaction],
    sort_by: Union[SortOrder, str, None],
) -> list[Transaction]:
    """Return a stably sorted copy.

    Transactions that compare equal keep their input order, for descending
    orders too. An unknown or missing order returns an unsorted copy.
    """
    try:
        order = SortOrder(sort_by) if sort_by is not None else None
    except ValueError:
        order = None
    if order is None:
        return list(transactions)
    key, reverse = _SORT_KEYS[order]
    # sorted() keeps equal elements in input order even with reverse=True.
    return sorted(transactions, key=key, reverse=reverse)


def get_search_suggestions(
    transactions: Sequence[Transaction],
    query: str,
    limit: int = 5,
) -> list[str]:
    """Suggest descriptions and categories containing the query."""
    if not query or len(query) < 2:
        return []
    needle = query.casefold()
    suggestions: dict[str, None] = {}
    for txn in transactions:
        if needle in txn.description.casefold():
            suggestions.setdefault(txn.description)
        if needle in txn.category.casefold():
            suggestions.setdefault(txn.category)
    return list(suggestions)[:limit]


def advanced_search(
    transactions: Sequence[Transaction],
    criteria: SearchCriteria,
) -> list[Transaction]:
    """Apply text search, date, category and amount filters, then sort.

    Raises:
        SearchPatternError: If the search term is not a valid pattern
    """
    results = search_transactions(transactions, criteria.search_term, criteria.case_sensitive)
    results = filter_by_date_range(results, criteria.start_date, criteria.end_date)
    results = filter_by_category(results, criteria.categories)
    results = filter_by_amount_range(results, criteria.min_amount, criteria.max_amount)
    return sort_transactions(results, criteria.sort_by)


def _coerce_date(value: DateBound) -> Optional[date]:
    if value is None or value == "":
        return None
    if isinstance(value, date):
        return value
    return date.fromisoformat(value)


def _amount_text(amount: Decimal) -> str:
    # Plain decimal without trailing zeros, as a number prints: 4.5, 12
    return format(amount.normalize(), "f")
