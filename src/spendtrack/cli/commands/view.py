"""Transaction viewing command with search, filters and sorting."""

from decimal import Decimal

import click

from spendtrack.cli.date_filters import resolve_cli_date_range
from spendtrack.cli.error_handling import handle_domain_error
from spendtrack.domain.entities import SearchCriteria, SortOrder
from spendtrack.domain.errors import SearchPatternError
from spendtrack.domain.search import (
    SEARCH_PRESETS,
    advanced_search,
    get_search_suggestions,
    highlight_matches,
)
from spendtrack.utils.amount_parser import format_amount, parse_amount

HIGHLIGHT_START = click.style("", bold=True, underline=True, reset=False)
HIGHLIGHT_END = "\x1b[0m"


@click.command("view")
@click.option("--search", "search_term", help="Regular expression matched against description, category, amount and date")
@click.option("--preset", type=click.Choice(sorted(SEARCH_PRESETS)), help="Use a built-in search pattern")
@click.option("--case-sensitive", is_flag=True, help="Match the search pattern case-sensitively")
@click.option("--start-date", help="Start date (YYYY-MM-DD or relative like 'last month')")
@click.option("--end-date", help="End date (YYYY-MM-DD or relative like 'today')")
@click.option("--this-month", is_flag=True, help="Show this month")
@click.option("--this-year", is_flag=True, help="Show this year")
@click.option("--this-week", is_flag=True, help="Show this week")
@click.option("--last-month", is_flag=True, help="Show last month")
@click.option("--last-year", is_flag=True, help="Show last year")
@click.option("--last-week", is_flag=True, help="Show last week")
@click.option("--category", "categories", multiple=True, help="Only these categories (repeatable)")
@click.option("--min-amount", help="Smallest amount to include")
@click.option("--max-amount", help="Largest amount to include")
@click.option(
    "--sort",
    "sort_by",
    type=click.Choice([order.value for order in SortOrder]),
    default=SortOrder.DATE_DESC.value,
    show_default=True,
    help="Sort order",
)
@click.pass_context
def view_transactions(
    ctx,
    search_term: str | None,
    preset: str | None,
    case_sensitive: bool,
    start_date: str | None,
    end_date: str | None,
    this_month: bool,
    this_year: bool,
    this_week: bool,
    last_month: bool,
    last_year: bool,
    last_week: bool,
    categories: tuple[str, ...],
    min_amount: str | None,
    max_amount: str | None,
    sort_by: str,
):
    """View transactions with optional search, filters and sorting.

    Examples:
        spendtrack view --search "coffee|tea" --this-month
        spendtrack view --category Food --min-amount 10 --sort amount-desc
    """
    store = ctx.obj["store"]

    if search_term and preset:
        click.echo("Error: --search cannot be combined with --preset.", err=True)
        ctx.exit(1)
    if preset:
        search_term = SEARCH_PRESETS[preset].pattern

    start, end = resolve_cli_date_range(
        ctx,
        start_date=start_date,
        end_date=end_date,
        period_flags={
            "this-month": this_month,
            "this-year": this_year,
            "this-week": this_week,
            "last-month": last_month,
            "last-year": last_year,
            "last-week": last_week,
        },
    )

    try:
        low = parse_amount(min_amount) if min_amount is not None else None
        high = parse_amount(max_amount) if max_amount is not None else None
    except ValueError as e:
        handle_domain_error(ctx, e)

    criteria = SearchCriteria(
        search_term=search_term or "",
        case_sensitive=case_sensitive,
        start_date=start,
        end_date=end,
        categories=categories,
        min_amount=low,
        max_amount=high,
        sort_by=SortOrder(sort_by),
    )
    transactions = store.get_transactions()
    try:
        results = advanced_search(transactions, criteria)
    except SearchPatternError as e:
        handle_domain_error(ctx, e)

    if not results:
        click.echo("No transactions found.")
        suggestions = get_search_suggestions(transactions, search_term or "")
        if suggestions:
            click.echo(f"Suggestions: {', '.join(suggestions)}")
        return

    currency = store.settings.currency
    total = sum((txn.amount for txn in results), Decimal("0"))

    click.echo(f"\nFound {len(results)} transaction(s):")
    click.echo("-" * 100)
    click.echo(f"{'ID':<38} {'Date':<12} {'Amount':>12}  {'Category':<16} {'Description'}")
    click.echo("-" * 100)
    for txn in results:
        description = txn.description
        category = txn.category
        if search_term:
            description = highlight_matches(description, search_term, case_sensitive, HIGHLIGHT_START, HIGHLIGHT_END)
            category = highlight_matches(category, search_term, case_sensitive, HIGHLIGHT_START, HIGHLIGHT_END)
        click.echo(
            f"{txn.id:<38} {str(txn.date):<12} {format_amount(txn.amount, currency):>12}  "
            f"{category:<16} {description}"
        )
    click.echo("-" * 100)
    click.echo(f"Total: {format_amount(total, currency)}")


def register_commands(cli):
    """Register view command with main CLI."""
    cli.add_command(view_transactions)
