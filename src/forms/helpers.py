"""Date helpers shared by the form layer."""

from datetime import date, datetime
from typing import Union

from src.models.transaction import utc_midnight


def date_to_utc_date(value: Union[datetime, date]) -> datetime:
    """
    Pin a picked calendar date to midnight UTC.

    The calendar date is taken from the value's own wall clock (local
    time for naive datetimes), so a user east or west of UTC stores the
    day they actually clicked, not the neighbouring one.
    """
    return utc_midnight(value)


def format_date(value: datetime) -> str:
    """Long human date, e.g. 'March 1st, 2024'."""
    day = value.day
    if 11 <= day % 100 <= 13:
        suffix = "th"
    else:
        suffix = {1: "st", 2: "nd", 3: "rd"}.get(day % 10, "th")
    return f"{value.strftime('%B')} {day}{suffix}, {value.year}"
