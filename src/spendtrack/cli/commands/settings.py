"""Settings commands."""

import click

from spendtrack.cli.error_handling import handle_domain_error
from spendtrack.utils.amount_parser import format_amount, parse_amount


@click.group()
def settings_group():
    """View and change settings."""
    pass


@settings_group.command("show")
@click.pass_context
def show_settings(ctx):
    """Show current settings."""
    settings = ctx.obj["store"].settings
    limit = settings.spending_limit
    click.echo(f"Currency symbol: {settings.currency}")
    click.echo(f"Base currency:   {settings.base_currency}")
    click.echo(
        f"Monthly limit:   {format_amount(limit, settings.currency) if limit is not None else 'not set'}"
    )
    click.echo("Exchange rates:")
    for code, rate in sorted(settings.exchange_rates.items()):
        click.echo(f"  1 {settings.base_currency} = {rate} {code}")


def parse_rate(value: str) -> tuple[str, object]:
    """Parse a CODE=RATE option value."""
    code, sep, rate = value.partition("=")
    if not sep or not code.strip().isalpha():
        raise ValueError(f"Invalid rate '{value}'. Use CODE=RATE, e.g., EUR=0.85")
    amount = parse_amount(rate)
    if amount <= 0:
        raise ValueError(f"Exchange rate for {code.strip().upper()} must be greater than 0")
    return code.strip().upper(), amount


@settings_group.command("set")
@click.option("--currency", help="Currency symbol used for display (e.g., $, €)")
@click.option("--base-currency", help="Base currency code (e.g., USD)")
@click.option("--limit", help="Monthly spending limit")
@click.option("--clear-limit", is_flag=True, help="Remove the monthly spending limit")
@click.option("--rate", "rates", multiple=True, help="Exchange rate as CODE=RATE (repeatable)")
@click.pass_context
def set_settings(
    ctx,
    currency: str | None,
    base_currency: str | None,
    limit: str | None,
    clear_limit: bool,
    rates: tuple[str, ...],
):
    """Change settings. Only the options given are changed.

    Examples:
        spendtrack settings set --limit 500
        spendtrack settings set --base-currency USD --rate EUR=0.85 --rate GBP=0.73
    """
    store = ctx.obj["store"]

    if limit is not None and clear_limit:
        click.echo("Error: --limit cannot be combined with --clear-limit.", err=True)
        ctx.exit(1)

    patch: dict[str, object] = {}
    try:
        if currency is not None:
            patch["currency"] = currency
        if base_currency is not None:
            patch["base_currency"] = base_currency.upper()
        if limit is not None:
            patch["spending_limit"] = parse_amount(limit)
        if clear_limit:
            patch["spending_limit"] = None
        if rates:
            exchange_rates = dict(store.settings.exchange_rates)
            exchange_rates.update(parse_rate(rate) for rate in rates)
            patch["exchange_rates"] = exchange_rates
    except ValueError as e:
        handle_domain_error(ctx, e)

    if not patch:
        click.echo("Error: Nothing to change. Provide at least one option.", err=True)
        ctx.exit(1)

    store.update_settings(**patch)
    click.echo("Settings updated")


def register_commands(cli):
    """Register settings commands with main CLI."""
    cli.add_command(settings_group, name="settings")
