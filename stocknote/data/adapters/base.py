"""
STOCKNOTE - Base Quote Source Interface
All quote providers must implement this interface.
"""
from abc import ABC, abstractmethod
from datetime import date
from typing import Any, Dict, List, Optional

from stocknote.data.models import Quote


class BaseQuoteSource(ABC):
    """Abstract base class for all quote providers.

    Implementations may fail or return nothing; callers never assume
    the data is reliable.
    """

    name: str = "base"

    def __init__(self):
        self._session = None

    @abstractmethod
    async def connect(self) -> None:
        """Initialize connection / session."""
        pass

    @abstractmethod
    async def disconnect(self) -> None:
        """Clean up connection / session."""
        pass

    @abstractmethod
    async def fetch_quote(self, symbol: str) -> Optional[Quote]:
        """Fetch the current quote for a symbol, or None."""
        pass

    @abstractmethod
    async def fetch_history(self, symbol: str, start: date, end: date) -> List[Dict[str, Any]]:
        """
        Fetch raw daily records between start and end (inclusive).
        Each record carries date, close (or price), open, high, low, volume.
        Values are unvalidated; an empty list means no data.
        """
        pass

    async def fetch_company_name(self, symbol: str) -> Optional[str]:
        """Company display name, if the provider knows one."""
        return None
