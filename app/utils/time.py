"""Time utilities (IST) and NAV date helpers."""

from datetime import date, datetime
from typing import Optional
from zoneinfo import ZoneInfo

IST = ZoneInfo("Asia/Kolkata")

# mfapi.in publishes dates as dd-MM-yyyy
NAV_DATE_FORMAT = "%d-%m-%Y"


def now_ist_naive() -> datetime:
    """
    Current time in IST, returned as naive datetime for DB storage.
    """
    return datetime.now(IST).replace(tzinfo=None)


def today_ist() -> date:
    return datetime.now(IST).date()


def parse_nav_date(value: str) -> Optional[date]:
    """Parse a dd-MM-yyyy NAV date; None when malformed."""
    try:
        return datetime.strptime((value or "").strip(), NAV_DATE_FORMAT).date()
    except ValueError:
        return None


def format_display_date(value: date) -> str:
    """Human-readable date, e.g. 'Jan 5, 2024'."""
    return f"{value:%b} {value.day}, {value.year}"
