"""
Utility functions for WeddingLedger
"""
from __future__ import annotations
import calendar
import os
import uuid
from datetime import date, datetime
from typing import Optional

# symbol, thousands separator, decimal separator
CURRENCY_FORMATS = {
    "BRL": ("R$ ", ".", ","),
    "USD": ("$", ",", "."),
    "EUR": ("€ ", ".", ","),
}


def today_str() -> str:
    """Get today's date as ISO string"""
    return date.today().isoformat()


def new_id() -> str:
    return str(uuid.uuid4())


def parse_date(s: str) -> date:
    """Parse YYYY-MM-DD date string; longer ISO timestamps are cut to the date part"""
    return datetime.strptime(s.strip()[:10], "%Y-%m-%d").date()


def try_parse_date(s: Optional[str]) -> Optional[date]:
    """Parse a date, returning None for missing or malformed input"""
    if not s:
        return None
    try:
        return parse_date(s)
    except (TypeError, ValueError, AttributeError):
        return None


def add_months(d: date, months: int) -> date:
    """Add calendar months, clamping the day to the end of the target month"""
    total = d.month - 1 + months
    year = d.year + total // 12
    month = total % 12 + 1
    day = min(d.day, calendar.monthrange(year, month)[1])
    return date(year, month, day)


def months_between(later: date, earlier: date) -> int:
    """Number of full months from earlier to later (negative if later < earlier)"""
    if later < earlier:
        return -months_between(earlier, later)
    months = (later.year - earlier.year) * 12 + (later.month - earlier.month)
    if add_months(earlier, months) > later:
        months -= 1
    return months


def month_bounds(year: int, month: int) -> tuple:
    """First and last calendar day of a month (month is 1-12)"""
    last = calendar.monthrange(year, month)[1]
    return date(year, month, 1), date(year, month, last)


def format_currency(amount: Optional[float], currency: Optional[str] = None) -> str:
    """Format an amount with two decimals, e.g. 'R$ 1.234,56'"""
    if currency is None:
        from config import CURRENCY
        currency = CURRENCY
    symbol, thousands, decimal_sep = CURRENCY_FORMATS.get(currency.upper(), CURRENCY_FORMATS["BRL"])
    value = float(amount or 0.0)
    sign = "-" if value < 0 else ""
    body = f"{abs(value):,.2f}"
    body = body.replace(",", "\0").replace(".", decimal_sep).replace("\0", thousands)
    return f"{sign}{symbol}{body}"


def format_date(s: Optional[str], fmt: str = "%d/%m/%Y") -> str:
    """Format an ISO date for display; unparseable input is returned unchanged"""
    if not s:
        return ""
    d = try_parse_date(s)
    if d is None:
        return s
    return d.strftime(fmt)


def safe_float(x, default: Optional[float] = 0.0) -> Optional[float]:
    """Convert to float safely, returning default on error"""
    try:
        return float(x)
    except (TypeError, ValueError):
        return default


def app_dir() -> str:
    """
    Get application data directory: ~/Library/Application Support/WeddingLedger
    (or WEDDING_LEDGER_DATA_DIR when set). Creates directory if it doesn't exist.
    """
    path = os.getenv("WEDDING_LEDGER_DATA_DIR")
    if not path:
        base = os.path.expanduser("~/Library/Application Support")
        path = os.path.join(base, "WeddingLedger")
    os.makedirs(path, exist_ok=True)
    return path
