"""
utils/time_utils.py

Purpose: Time helpers

- Local "now" in the configured timezone
- Sheet timestamp formatting and parsing (dd/mm/yyyy HH:MM:SS)
- Calendar month checks
- Session idle checks
"""

from datetime import datetime, timedelta, timezone
from typing import Optional
from zoneinfo import ZoneInfo

from app.core.config import settings

SHEET_DATE_FORMAT = "%d/%m/%Y"
SHEET_TIME_FORMAT = "%H:%M:%S"


def local_now() -> datetime:
    """Current time in the configured timezone."""
    return datetime.now(ZoneInfo(settings.TIMEZONE))


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def format_sheet_date(dt: datetime) -> str:
    """dd/mm/yyyy, as the sheet's date-only columns hold it."""
    return dt.strftime(SHEET_DATE_FORMAT)


def format_sheet_timestamp(dt: datetime) -> str:
    """dd/mm/yyyy HH:MM:SS, as the ingresos/gastos sheets hold it."""
    return f"{dt.strftime(SHEET_DATE_FORMAT)} {dt.strftime(SHEET_TIME_FORMAT)}"


def parse_sheet_date(value: str) -> Optional[datetime]:
    """
    Parses the date part of a sheet cell.

    Only the text before the first space is considered, so both
    "19/10/2026" and "19/10/2026 14:05:03" work. Non zero-padded
    values such as "5/3/2026" are accepted.

    Returns:
        Naive datetime at midnight, or None if the cell is not a date
    """
    if not value:
        return None
    date_part = value.strip().split(" ")[0].rstrip(",")
    try:
        return datetime.strptime(date_part, SHEET_DATE_FORMAT)
    except ValueError:
        return None


def parse_sheet_timestamp(value: str) -> Optional[datetime]:
    """
    Parses "dd/mm/yyyy HH:MM:SS", falling back to the date part alone.
    """
    if not value:
        return None
    try:
        return datetime.strptime(
            value.strip(), f"{SHEET_DATE_FORMAT} {SHEET_TIME_FORMAT}"
        )
    except ValueError:
        return parse_sheet_date(value)


def is_same_month(value: datetime, reference: datetime) -> bool:
    """Compares calendar month and year only."""
    return value.month == reference.month and value.year == reference.year


def is_session_expired(last_interaction: datetime, timeout_minutes: int = 60) -> bool:
    """
    Checks if a session has been idle longer than the timeout.
    """
    if not last_interaction:
        return True

    expiry_time = last_interaction + timedelta(minutes=timeout_minutes)
    return utc_now() > expiry_time
