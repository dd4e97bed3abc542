"""Category management commands."""

import click

from spendtrack.cli.error_handling import handle_domain_error
from spendtrack.domain.errors import ValidationError
from spendtrack.domain.validation import validate_category


@click.group()
def category_group():
    """Manage categories."""
    pass


@category_group.command("list")
@click.pass_context
def list_categories(ctx):
    """List known categories."""
    for name in ctx.obj["store"].categories:
        click.echo(name)


@category_group.command("add")
@click.argument("name")
@click.pass_context
def add_category(ctx, name: str):
    """Add a category."""
    result = validate_category(name)
    if not result.valid:
        handle_domain_error(ctx, ValidationError(result.message))

    if ctx.obj["store"].add_category(result.value):
        click.echo(f"Created category '{result.value}'")
    else:
        click.echo(f"Category '{result.value}' already exists")


def register_commands(cli):
    """Register category commands with main CLI."""
    cli.add_command(category_group, name="category")
