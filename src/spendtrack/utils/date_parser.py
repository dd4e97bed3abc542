"""Date parsing utilities for command line filters."""

import re
from datetime import date, timedelta
from typing import Optional

from dateutil import parser as date_parser
from dateutil.relativedelta import relativedelta

WEEKDAYS = ["monday", "tuesday", "wednesday", "thursday", "friday", "saturday", "sunday"]

PERIODS = ("this-month", "this-year", "this-week", "last-month", "last-year", "last-week")

_DAYS_AGO = re.compile(r"(\d+) days? ago")


def parse_date(date_str: str, today: Optional[date] = None) -> date:
    """Parse a date string into a date object.

    Supports:
    - Absolute dates: "2024-01-15", "January 15, 2024", etc.
    - Relative days: "today", "yesterday", "3 days ago"
    - Period starts: "this week", "this month", "last month", "last year"
    - Weekdays: "last monday"

    Args:
        date_str: Date string
        today: Reference day, defaults to today

    Returns:
        Date object

    Raises:
        ValueError: If date string cannot be parsed
    """
    text = date_str.strip().lower()
    today = today or date.today()

    if text == "today":
        return today
    if text == "yesterday":
        return today - timedelta(days=1)

    days_ago = _DAYS_AGO.fullmatch(text)
    if days_ago:
        return today - timedelta(days=int(days_ago.group(1)))

    if text.startswith(("this ", "last ")):
        when, period = text.split(" ", 1)
        if period in ("week", "month", "year"):
            return get_date_range(f"{when}-{period}", today)[0]
        if when == "last" and period in WEEKDAYS:
            days_back = (today.weekday() - WEEKDAYS.index(period)) % 7 or 7
            return today - timedelta(days=days_back)

    try:
        return date_parser.parse(text).date()
    except (ValueError, OverflowError) as e:
        raise ValueError(f"Could not parse date '{date_str}': {e}")


def get_date_range(period: str, today: Optional[date] = None) -> tuple[date, date]:
    """Get inclusive start and end dates for a named period.

    Current periods ("this-*") end today; past periods end on their last day.

    Raises:
        ValueError: If period string is not recognized
    """
    period = period.strip().lower()
    today = today or date.today()

    week_start = today - timedelta(days=today.weekday())
    month_start = today.replace(day=1)
    year_start = today.replace(month=1, day=1)

    if period == "this-week":
        return week_start, today
    if period == "this-month":
        return month_start, today
    if period == "this-year":
        return year_start, today
    if period == "last-week":
        start = week_start - timedelta(days=7)
        return start, start + timedelta(days=6)
    if period == "last-month":
        return month_start - relativedelta(months=1), month_start - timedelta(days=1)
    if period == "last-year":
        return year_start - relativedelta(years=1), year_start - timedelta(days=1)

    raise ValueError(f"Unknown period: '{period}'. Supported periods: {', '.join(PERIODS)}")
