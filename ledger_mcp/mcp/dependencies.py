"""
Shared helpers for MCP tools: ledger access and parameter validation.
"""
import calendar
from datetime import date
from typing import Optional, Tuple

from ledger_mcp.ledger import LedgerClient

DEFAULT_LOOKBACK_MONTHS = 3

_ledger: Optional[LedgerClient] = None


def get_ledger() -> LedgerClient:
    """
    Shared ledger client for tool invocations.
    Created from settings on first use; initialization happens lazily on the first request.
    """
    global _ledger
    if _ledger is None:
        _ledger = LedgerClient.from_settings()
    return _ledger


def set_ledger(ledger: Optional[LedgerClient]) -> None:
    """Replace the shared ledger client (None resets to settings on next use)."""
    global _ledger
    _ledger = ledger


def validate_date(value: Optional[str]) -> Optional[date]:
    """
    Safely parse an ISO date, returning None if invalid.

    Args:
        value: Date string in YYYY-MM-DD format (optional)

    Returns:
        date object or None if invalid/empty
    """
    if not value:
        return None
    try:
        return date.fromisoformat(value)
    except (ValueError, TypeError):
        return None


def shift_months(day: date, months: int) -> date:
    """Move a date by whole months, clamping the day to the target month's length."""
    index = day.year * 12 + (day.month - 1) + months
    year, month = divmod(index, 12)
    month += 1
    return date(year, month, min(day.day, calendar.monthrange(year, month)[1]))


def get_date_range(
    start_date: Optional[str] = None,
    end_date: Optional[str] = None,
    today: Optional[date] = None,
) -> Tuple[str, str]:
    """
    Resolve a (start, end) pair of ISO dates, defaulting to the last three months.

    Raises:
        ValueError: If a provided date is not a valid YYYY-MM-DD string
    """
    today = today or date.today()
    for label, value in (("start_date", start_date), ("end_date", end_date)):
        if value and validate_date(value) is None:
            raise ValueError(f"{label} must be a valid date in YYYY-MM-DD format")

    start = start_date or shift_months(today, -DEFAULT_LOOKBACK_MONTHS).isoformat()
    end = end_date or today.isoformat()
    if start > end:
        raise ValueError("start_date must not be after end_date")
    return start, end


def get_date_range_for_months(months: int, today: Optional[date] = None) -> Tuple[str, str]:
    """
    Window covering the current month and the (months - 1) before it.
    Starts on the first day of the earliest month and ends today.
    """
    today = today or date.today()
    first_month = shift_months(today.replace(day=1), -(months - 1))
    return first_month.isoformat(), today.isoformat()
