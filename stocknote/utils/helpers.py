"""
STOCKNOTE - Common Utility Functions
"""
import math
import re
from datetime import date, datetime, timezone
from typing import Any, Optional
from zoneinfo import ZoneInfo

_ISO_DATE = re.compile(r"^\d{4}-\d{2}-\d{2}$")


def utc_now() -> datetime:
    """Return current UTC datetime."""
    return datetime.now(timezone.utc)


def utc_timestamp() -> str:
    """Return current UTC timestamp as ISO string."""
    return utc_now().isoformat()


def today_in(tz_name: str = "UTC") -> date:
    """Return today's calendar date in the given IANA timezone."""
    return datetime.now(ZoneInfo(tz_name)).date()


def normalize_symbol(symbol: str) -> str:
    """Normalize a ticker: ' aapl ' -> 'AAPL'."""
    sym = (symbol or "").strip().upper()
    if not sym:
        raise ValueError("symbol must be a non-empty string")
    return sym


def parse_calendar_date(value: Any) -> Optional[date]:
    """Parse a strict YYYY-MM-DD string (or pass a date through). None if invalid."""
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if not isinstance(value, str):
        return None
    text = value.strip()
    if not _ISO_DATE.match(text):
        return None
    try:
        return date.fromisoformat(text)
    except ValueError:
        return None


def safe_float(value: Any) -> Optional[float]:
    """Coerce to a finite float, or None."""
    if value is None or isinstance(value, bool):
        return None
    try:
        result = float(value)
    except (TypeError, ValueError):
        return None
    if not math.isfinite(result):
        return None
    return result


def usable_price(value: Any) -> Optional[float]:
    """A price is usable only when finite and strictly positive; zero counts as absent."""
    price = safe_float(value)
    if price is None or price <= 0:
        return None
    return price


def pct_change(old_val: float, new_val: float) -> float:
    """Calculate percentage change between two values."""
    if old_val == 0:
        return 0.0
    return ((new_val - old_val) / abs(old_val)) * 100.0
