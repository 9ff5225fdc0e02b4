"""
STOCKNOTE - Test Configuration & Fixtures
Shared fixtures for all test modules.
"""
from datetime import date, datetime, timedelta, timezone
from typing import Any, Dict, List, Optional
import pytest

from stocknote.data.adapters.base import BaseQuoteSource
from stocknote.data.models import DailyPricePoint, Note, PriceSnapshot, Quote, Trend


TODAY = date(2024, 6, 14)


class FakeQuoteSource(BaseQuoteSource):
    """In-process quote source that records every call."""

    name = "fake"

    def __init__(self, price: Optional[float] = 101.5, history: Optional[List[Dict[str, Any]]] = None):
        super().__init__()
        self.connected = False
        self.quote = Quote(symbol="AAPL", price=price, change=1.5, change_percent=1.5) if price is not None else None
        self.history = history or []
        self.error: Optional[Exception] = None
        self.quote_calls: List[str] = []
        self.history_calls: List[tuple] = []
        self.company_name: Optional[str] = "Apple Inc."
        self.profile_calls: List[str] = []

    async def connect(self) -> None:
        self.connected = True

    async def disconnect(self) -> None:
        self.connected = False

    async def fetch_quote(self, symbol: str) -> Optional[Quote]:
        self.quote_calls.append(symbol)
        if self.error:
            raise self.error
        return self.quote

    async def fetch_history(self, symbol: str, start: date, end: date) -> List[Dict[str, Any]]:
        self.history_calls.append((symbol, start, end))
        if self.error:
            raise self.error
        return self.history

    async def fetch_company_name(self, symbol: str) -> Optional[str]:
        self.profile_calls.append(symbol)
        return self.company_name


@pytest.fixture
def today():
    return TODAY


@pytest.fixture
def clock():
    return lambda: TODAY


@pytest.fixture
def quote_source():
    return FakeQuoteSource()


@pytest.fixture
def make_note():
    """Factory for notes; created_at defaults to a fixed base plus `order` minutes."""
    base = datetime(2024, 1, 10, 9, 0, tzinfo=timezone.utc)

    def _make(note_id: str, note_date: str, order: int = 0, trend: Trend = Trend.HOLD, **extra) -> Note:
        return Note(
            id=note_id,
            symbol=extra.pop("symbol", "AAPL"),
            note_date=note_date,
            trend=trend,
            title=extra.pop("title", f"note {note_id}"),
            created_at=extra.pop("created_at", base + timedelta(minutes=order)),
            **extra,
        )

    return _make


@pytest.fixture
def two_day_series():
    return [
        DailyPricePoint(date=date(2024, 1, 2), close=10.0),
        DailyPricePoint(date=date(2024, 1, 3), close=11.0),
    ]


@pytest.fixture
def raw_history():
    """Raw provider bars, newest first the way FMP reports them, with a duplicate date."""
    return [
        {"date": "2024-06-13", "close": 190.5, "open": 189.0, "high": 191.0, "low": 188.2, "volume": 51000000},
        {"date": "2024-06-12", "close": 188.0, "open": 186.1, "high": 188.9, "low": 185.7, "volume": 48000000},
        {"date": "2024-06-03", "close": 180.2, "open": 179.9, "high": 181.0, "low": 179.1, "volume": 40000000},
        {"date": "2024-05-31", "close": 178.0, "open": 177.5, "high": 178.9, "low": 176.8, "volume": 39000000},
        {"date": "2024-05-15", "close": 176.4, "open": 175.0, "high": 177.0, "low": 174.6, "volume": 37000000},
        {"date": "2024-03-14", "close": 172.0, "open": 171.0, "high": 173.1, "low": 170.2, "volume": 36000000},
        {"date": "2024-01-02", "close": 185.6, "open": 187.1, "high": 188.4, "low": 183.9, "volume": 82000000},
        {"date": "2024-06-12", "close": 188.7, "open": 186.1, "high": 189.2, "low": 185.7, "volume": 48500000},
    ]


@pytest.fixture
def yesterday_snapshot():
    return PriceSnapshot(
        symbol="AAPL", price=99.0, change=-1.0, change_percent=-1.0,
        fetched_on=TODAY - timedelta(days=1),
    )


@pytest.fixture
def today_snapshot():
    return PriceSnapshot(
        symbol="AAPL", price=100.0, change=0.5, change_percent=0.5, fetched_on=TODAY,
    )
