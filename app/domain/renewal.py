"""
Renewal window calculation.

Uses calendar dates only: datetimes are truncated to their date, so the
day difference equals ceil((renewal - today) / 1 day) for date-only values.
The reference date is always passed in by the caller.
"""
from datetime import date, datetime

RENEWAL_WINDOW_DAYS = 7


def _as_date(value: date | datetime) -> date:
    if isinstance(value, datetime):
        return value.date()
    return value


def days_until_renewal(renewal_date: date | datetime, today: date | datetime) -> int:
    """
    Whole calendar days from `today` to `renewal_date`.

    Negative when the renewal date is in the past, 0 on the renewal day.
    """
    return (_as_date(renewal_date) - _as_date(today)).days


def is_expiring_soon(renewal_date: date | datetime, today: date | datetime) -> bool:
    """
    True if the renewal falls within the next RENEWAL_WINDOW_DAYS days.

    The renewal day itself (0 days left) and past dates are not "soon";
    exactly 7 days ahead is.

    Example:
        >>> is_expiring_soon(date(2026, 3, 8), date(2026, 3, 1))
        True
        >>> is_expiring_soon(date(2026, 3, 9), date(2026, 3, 1))
        False
    """
    diff_days = days_until_renewal(renewal_date, today)
    return 0 < diff_days <= RENEWAL_WINDOW_DAYS
