"""Export, import and clear commands."""

import click

from spendtrack.cli.error_handling import handle_domain_error
from spendtrack.domain.errors import ImportDataError
from spendtrack.domain.transfer import DataTransferService


@click.command("export")
@click.option(
    "--output",
    "-o",
    type=click.Path(dir_okay=False),
    help="Write to this file instead of standard output",
)
@click.pass_context
def export_data(ctx, output: str | None):
    """Export all transactions and settings as JSON."""
    service = DataTransferService(ctx.obj["store"])
    if output is None:
        click.echo(service.export_json())
        return
    try:
        path = service.export_to_file(output)
    except OSError as e:
        click.echo(f"Error: Could not write {output}: {e}", err=True)
        ctx.exit(1)
    click.echo(f"Exported {len(ctx.obj['store'].get_transactions())} transactions to {path}")


@click.command("import")
@click.argument("json_file", type=click.Path(exists=True, dir_okay=False))
@click.pass_context
def import_data(ctx, json_file: str):
    """Import a JSON export, replacing all transactions.

    Nothing changes if any transaction in the file is invalid.
    """
    service = DataTransferService(ctx.obj["store"])
    try:
        count = service.import_file(json_file)
    except ImportDataError as e:
        handle_domain_error(ctx, e)
    click.echo(f"Imported {count} transactions")


@click.command("clear")
@click.confirmation_option(prompt="Delete all transactions and reset settings?")
@click.pass_context
def clear_data(ctx):
    """Delete all data and restore default settings."""
    ctx.obj["store"].clear_all_data()
    click.echo("All data cleared")


def register_commands(cli):
    """Register transfer commands with main CLI."""
    cli.add_command(export_data)
    cli.add_command(import_data)
    cli.add_command(clear_data)
