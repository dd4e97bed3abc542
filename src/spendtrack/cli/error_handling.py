"""CLI error handling helpers."""

import click

from spendtrack.domain.entities import FormValidation
from spendtrack.domain.errors import DomainError


def handle_domain_error(ctx: click.Context, error: DomainError | ValueError) -> None:
    """Render a domain error and exit with failure."""
    click.echo(f"Error: {error}", err=True)
    ctx.exit(1)


def exit_on_invalid_form(ctx: click.Context, form: FormValidation) -> None:
    """Print every failing field and exit if the form is invalid."""
    if form.valid:
        return
    for field, message in form.errors.items():
        click.echo(f"Error: {field}: {message}", err=True)
    ctx.exit(1)
