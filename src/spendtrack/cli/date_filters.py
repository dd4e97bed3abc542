"""CLI helpers for date range resolution."""

from datetime import date

import click

from spendtrack.domain.validation import DATE_PATTERN
from spendtrack.utils.date_parser import PERIODS, get_date_range, parse_date


def period_flag_names() -> str:
    return ", ".join(f"--{period}" for period in PERIODS)


def resolve_cli_date_range(
    ctx: click.Context,
    *,
    start_date: str | None,
    end_date: str | None,
    period_flags: dict[str, bool],
) -> tuple[date | None, date | None]:
    """Resolve a date range from period flags or explicit --start-date/--end-date."""
    periods = [period for period, is_set in period_flags.items() if is_set]

    if len(periods) > 1:
        click.echo(
            f"Error: Only one period option ({period_flag_names()}) can be specified at a time.",
            err=True,
        )
        ctx.exit(1)

    if periods:
        if start_date or end_date:
            click.echo(
                "Error: Period options cannot be combined with --start-date or --end-date.",
                err=True,
            )
            ctx.exit(1)
        return get_date_range(periods[0])

    bounds: list[date | None] = []
    for label, value in (("start", start_date), ("end", end_date)):
        if not value:
            bounds.append(None)
            continue
        try:
            bounds.append(parse_date(value))
        except ValueError as e:
            click.echo(f"Error: Invalid {label} date: {e}", err=True)
            ctx.exit(1)

    return bounds[0], bounds[1]


def cli_date_text(value: str) -> str:
    """Turn relative dates ("today", "3 days ago") into YYYY-MM-DD for validation.

    Text that does not parse is returned unchanged so the validator reports it.
    """
    if DATE_PATTERN.fullmatch(value.strip()):
        return value.strip()
    try:
        return parse_date(value).isoformat()
    except ValueError:
        return value
