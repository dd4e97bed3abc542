"""Spending summary command."""

import click

from spendtrack.cli.error_handling import handle_domain_error
from spendtrack.domain.errors import ValidationError
from spendtrack.utils.amount_parser import format_amount


@click.command("summary")
@click.option("--currency", "convert_to", help="Also show totals converted to this currency code (e.g., EUR)")
@click.pass_context
def summary(ctx, convert_to: str | None):
    """Show spending totals, category breakdown and budget status."""
    store = ctx.obj["store"]
    settings = store.settings
    stats = store.get_stats()
    symbol = settings.currency

    click.echo("\nSpending summary")
    click.echo("=" * 40)
    click.echo(f"{'Transactions:':<22} {stats.count}")
    click.echo(f"{'Total spent:':<22} {format_amount(stats.total, symbol)}")
    click.echo(f"{'Average:':<22} {format_amount(stats.average, symbol)}")
    click.echo(f"{'Last 7 days:':<22} {format_amount(stats.recent_spending, symbol)}")
    click.echo(f"{'This month:':<22} {format_amount(stats.current_month, symbol)}")
    click.echo(f"{'Top category:':<22} {stats.top_category or '-'}")

    if convert_to:
        try:
            converted = store.convert_amount(stats.total, convert_to)
        except ValidationError as e:
            handle_domain_error(ctx, e)
        click.echo(f"{'Total in ' + convert_to.upper() + ':':<22} {converted:,.2f}")

    if stats.category_totals:
        click.echo("\nBy category:")
        click.echo("-" * 40)
        for name, amount in sorted(
            stats.category_totals.items(), key=lambda item: item[1], reverse=True
        ):
            share = amount / stats.total * 100 if stats.total else 0
            click.echo(f"  {name:<20} {format_amount(amount, symbol):>12} {share:5.1f}%")

    if settings.spending_limit is not None:
        click.echo(f"\nMonthly limit: {format_amount(settings.spending_limit, symbol)}")
        remaining = settings.spending_limit - stats.current_month
        if remaining >= 0:
            click.echo(f"  {format_amount(remaining, symbol)} remaining")
        else:
            click.echo(f"  {format_amount(-remaining, symbol)} over budget")

    alert = store.check_spending_limit()
    if alert is not None:
        click.echo(f"\n{alert.level.value.upper()}: {alert.message}")


def register_commands(cli):
    """Register summary command with main CLI."""
    cli.add_command(summary)
