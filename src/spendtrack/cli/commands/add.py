"""Add transaction command."""

import click

from spendtrack.cli.date_filters import cli_date_text
from spendtrack.cli.error_handling import exit_on_invalid_form
from spendtrack.domain.validation import validate_form
from spendtrack.utils.amount_parser import format_amount


@click.command("add")
@click.option("--description", required=True, help="What the money was spent on")
@click.option("--amount", required=True, help="Amount spent (e.g., 12.50)")
@click.option("--category", required=True, help="Category (letters, spaces and hyphens)")
@click.option(
    "--date",
    default="today",
    show_default=True,
    help="Transaction date (YYYY-MM-DD or relative like 'today', 'yesterday')",
)
@click.pass_context
def add_transaction(ctx, description: str, amount: str, category: str, date: str):
    """Record a spending transaction.

    All fields are validated together and every problem is reported.

    Examples:
        spendtrack add --description "Coffee" --amount 4.50 --category Food
        spendtrack add --description "Train ticket" --amount 12 --category Transport --date yesterday
    """
    store = ctx.obj["store"]

    form = validate_form(
        {
            "description": description,
            "amount": amount,
            "category": category,
            "date": cli_date_text(date),
        }
    )
    exit_on_invalid_form(ctx, form)

    txn = store.add_transaction(**form.data)
    currency = store.settings.currency
    click.echo(f"Created transaction {txn.id}")
    click.echo(f"  Date: {txn.date}")
    click.echo(f"  Amount: {format_amount(txn.amount, currency)}")
    click.echo(f"  Category: {txn.category}")
    click.echo(f"  Description: {txn.description}")

    if not store.persisted:
        click.echo("Warning: could not save to storage; the change may be lost", err=True)

    alert = store.check_spending_limit()
    if alert is not None:
        click.echo(f"{alert.level.value.upper()}: {alert.message}")


def register_commands(cli):
    """Register add command with main CLI."""
    cli.add_command(add_transaction)
