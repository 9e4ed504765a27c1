"""Date parsing utilities."""

from datetime import date, datetime, timedelta, UTC
from dateutil import parser as date_parser
from dateutil.relativedelta import relativedelta

SIE_DATE_FORMAT = "%Y%m%d"


def parse_date(date_str: str) -> date:
    """Parse a date string into a date object.

    Supports:
    - ISO dates: "2024-01-15"
    - SIE compact dates: "20240115"
    - Relative dates: "today", "yesterday"

    Args:
        date_str: Date string

    Returns:
        Date object

    Raises:
        ValueError: If date string cannot be parsed
    """
    date_str = date_str.strip().lower()
    today = date.today()

    relative_dates = {
        "today": today,
        "yesterday": today - timedelta(days=1),
    }
    if date_str in relative_dates:
        return relative_dates[date_str]

    if len(date_str) == 8 and date_str.isdigit():
        try:
            return datetime.strptime(date_str, SIE_DATE_FORMAT).date()
        except ValueError as e:
            raise ValueError(f"Could not parse date '{date_str}': {e}")

    try:
        dt = date_parser.parse(date_str)
        return dt.date()
    except (ValueError, TypeError, OverflowError) as e:
        raise ValueError(f"Could not parse date '{date_str}': {e}")


def parse_sie_strict(value: str) -> date:
    """Parse a SIE YYYYMMDD date, raising ValueError when malformed."""
    value = value.strip().strip('"')
    if len(value) != 8 or not value.isdigit():
        raise ValueError(f"Invalid SIE date '{value}'")
    return datetime.strptime(value, SIE_DATE_FORMAT).date()


def parse_sie_date(value: str) -> date:
    """Parse a SIE YYYYMMDD date.

    Malformed or wrong-length input falls back to the current UTC date
    instead of raising.
    """
    try:
        return parse_sie_strict(value)
    except ValueError:
        return datetime.now(UTC).date()


def format_sie_date(value: date) -> str:
    """Format a date as YYYYMMDD."""
    return value.strftime(SIE_DATE_FORMAT)


def month_range(year: int, month: int) -> tuple[date, date]:
    """Get first and last calendar day of a month.

    Raises:
        ValueError: If month is not 1-12
    """
    if month < 1 or month > 12:
        raise ValueError(f"Invalid month: {month}")
    start_date = date(year, month, 1)
    end_date = start_date + relativedelta(months=1) - timedelta(days=1)
    return (start_date, end_date)


def period_key(value: date) -> str:
    """Return the YYYY-MM period a date falls in."""
    return f"{value.year:04d}-{value.month:02d}"
