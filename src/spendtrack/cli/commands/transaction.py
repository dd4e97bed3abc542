"""Transaction management commands."""

import click

from spendtrack.cli.date_filters import cli_date_text
from spendtrack.cli.error_handling import exit_on_invalid_form, handle_domain_error
from spendtrack.domain.entities import Transaction
from spendtrack.domain.errors import NotFoundError, transaction_not_found
from spendtrack.domain.validation import validate_fields
from spendtrack.utils.amount_parser import format_amount


def print_transaction(txn: Transaction, currency: str) -> None:
    """Print all fields of a transaction."""
    click.echo(f"Transaction ID: {txn.id}")
    click.echo(f"  Date: {txn.date}")
    click.echo(f"  Amount: {format_amount(txn.amount, currency)}")
    click.echo(f"  Category: {txn.category}")
    click.echo(f"  Description: {txn.description}")
    click.echo(f"  Created: {txn.created_at.isoformat()}")
    click.echo(f"  Updated: {txn.updated_at.isoformat()}")


@click.group()
def transaction_group():
    """Manage transactions."""
    pass


@transaction_group.command("show")
@click.argument("transaction_id")
@click.pass_context
def show_transaction(ctx, transaction_id: str):
    """Show one transaction."""
    store = ctx.obj["store"]
    txn = store.get_transaction(transaction_id)
    if txn is None:
        handle_domain_error(ctx, NotFoundError(transaction_not_found(transaction_id)))
    print_transaction(txn, store.settings.currency)


@transaction_group.command("update")
@click.argument("transaction_id")
@click.option("--description", help="New description")
@click.option("--amount", help="New amount (e.g., 12.50)")
@click.option("--category", help="New category")
@click.option("--date", help="New date (YYYY-MM-DD or relative like 'yesterday')")
@click.pass_context
def update_transaction(
    ctx,
    transaction_id: str,
    description: str | None,
    amount: str | None,
    category: str | None,
    date: str | None,
):
    """Update a transaction.

    Updates only the fields that are provided.

    Examples:
        spendtrack transaction update txn_1a2b --amount 5.25
        spendtrack transaction update txn_1a2b --category "Eating Out" --date 2024-01-14
    """
    store = ctx.obj["store"]

    changes = {
        name: value
        for name, value in (
            ("description", description),
            ("amount", amount),
            ("category", category),
            ("date", cli_date_text(date) if date is not None else None),
        )
        if value is not None
    }
    if not changes:
        click.echo("Error: Nothing to update. Provide at least one field option.", err=True)
        ctx.exit(1)

    form = validate_fields(changes)
    exit_on_invalid_form(ctx, form)

    txn = store.update_transaction(transaction_id, **form.data)
    if txn is None:
        handle_domain_error(ctx, NotFoundError(transaction_not_found(transaction_id)))
    click.echo(f"Updated transaction {transaction_id}")


@transaction_group.command("delete")
@click.argument("transaction_id")
@click.pass_context
def delete_transaction(ctx, transaction_id: str):
    """Delete a transaction."""
    store = ctx.obj["store"]
    if not store.delete_transaction(transaction_id):
        handle_domain_error(ctx, NotFoundError(transaction_not_found(transaction_id)))
    click.echo(f"Deleted transaction {transaction_id}")


def register_commands(cli):
    """Register transaction commands with main CLI."""
    cli.add_command(transaction_group, name="transaction")
