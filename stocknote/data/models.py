"""
STOCKNOTE - Data Models for Quotes, Price History and Notes
Canonical data structures used across the entire platform.
"""
import datetime as dt
from enum import Enum
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field


class Trend(str, Enum):
    BUY = "buy"
    HOLD = "hold"
    SELL = "sell"


class Quote(BaseModel):
    """Current quote as returned by a quote source."""
    symbol: str
    price: Optional[float] = None
    change: Optional[float] = None
    change_percent: Optional[float] = None
    timestamp: Optional[dt.datetime] = None
    day_low: Optional[float] = None
    day_high: Optional[float] = None
    open: Optional[float] = None
    previous_close: Optional[float] = None
    raw: Optional[Dict[str, Any]] = None


class PriceSnapshot(BaseModel):
    """Last known quote for a (user, symbol) pair. Replaced wholesale, never patched."""
    model_config = ConfigDict(frozen=True)

    symbol: str
    price: Optional[float] = None
    change: Optional[float] = None
    change_percent: Optional[float] = None
    fetched_on: Optional[dt.date] = None


class DailyPricePoint(BaseModel):
    """Single daily bar. close is always finite."""
    model_config = ConfigDict(frozen=True)

    date: dt.date
    close: float = 0.0
    open: Optional[float] = None
    high: Optional[float] = None
    low: Optional[float] = None
    volume: Optional[float] = None


class Note(BaseModel):
    """User annotation on a stock and calendar day.

    note_date stays a raw string: a malformed value is representable and
    simply never aligns.
    """
    model_config = ConfigDict(frozen=True)

    id: str
    symbol: str
    note_date: str
    trend: Trend = Trend.HOLD
    title: str
    content: Optional[str] = None
    source: Optional[str] = None
    created_at: dt.datetime
    updated_at: Optional[dt.datetime] = None


class AlignedGroup(BaseModel):
    """All notes that resolve to one trading day of the series."""
    model_config = ConfigDict(frozen=True)

    matched_date: dt.date
    notes: List[Note] = Field(default_factory=list)


class ChartPoint(BaseModel):
    """A series point joined with the notes aligned to it."""
    date: dt.date
    close: float
    open: Optional[float] = None
    high: Optional[float] = None
    low: Optional[float] = None
    volume: Optional[float] = None
    notes: List[Note] = Field(default_factory=list)
