"""Main CLI entry point."""

import click

from spendtrack.database.factories import create_sqlite_storage
from spendtrack.database.persistence import PersistenceAdapter
from spendtrack.domain.store import TransactionStore
from spendtrack.logging_setup import configure_logging

# Import and register all commands at module level
from spendtrack.cli.commands import (
    add,
    category,
    settings,
    summary,
    transaction,
    transfer,
    view,
)


@click.group()
@click.option(
    "--db-path",
    type=click.Path(),
    help="Path to database file (overrides SPENDTRACK_DB_PATH environment variable)",
    envvar="SPENDTRACK_DB_PATH",
)
@click.option(
    "--log-level",
    help="Log level (DEBUG, INFO, WARNING, ERROR); defaults to SPENDTRACK_LOG_LEVEL or WARNING",
    envvar="SPENDTRACK_LOG_LEVEL",
)
@click.pass_context
def cli(ctx, db_path: str | None, log_level: str | None):
    """Spendtrack - Personal spending tracker.

    Record spending, search and sort it, watch a monthly budget, and move
    your data in and out as JSON.
    """
    ctx.ensure_object(dict)

    # Open storage only when actually running a command (not when showing help)
    if ctx.invoked_subcommand is not None:
        configure_logging(log_level)
        storage = create_sqlite_storage(database_path=db_path)
        storage.connect()
        storage.initialize_schema()
        ctx.call_on_close(storage.disconnect)
        ctx.obj["store"] = TransactionStore(PersistenceAdapter(storage))


# Register all commands
add.register_commands(cli)
transaction.register_commands(cli)
view.register_commands(cli)
summary.register_commands(cli)
settings.register_commands(cli)
category.register_commands(cli)
transfer.register_commands(cli)


def main():
    """Main entry point for CLI."""
    cli()


if __name__ == "__main__":
    main()
