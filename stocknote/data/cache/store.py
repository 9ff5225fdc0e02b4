"""
STOCKNOTE - Snapshot Store Interface
Where the price cache keeps the last known snapshot per (user, symbol).
"""
from abc import ABC, abstractmethod
from typing import Optional, Tuple

from cachetools import LRUCache

from stocknote.data.models import PriceSnapshot


class SnapshotStore(ABC):
    """Persistence seam for PriceSnapshot records."""

    @abstractmethod
    async def get(self, user_id: str, symbol: str) -> Optional[PriceSnapshot]:
        pass

    @abstractmethod
    async def put(self, user_id: str, snapshot: PriceSnapshot) -> None:
        pass

    async def count(self) -> int:
        return 0


class InMemorySnapshotStore(SnapshotStore):
    """Process-local store, bounded by LRU eviction."""

    def __init__(self, maxsize: int = 5000):
        self._records: LRUCache = LRUCache(maxsize=maxsize)

    @staticmethod
    def _key(user_id: str, symbol: str) -> Tuple[str, str]:
        return user_id, symbol

    async def get(self, user_id: str, symbol: str) -> Optional[PriceSnapshot]:
        return self._records.get(self._key(user_id, symbol))

    async def put(self, user_id: str, snapshot: PriceSnapshot) -> None:
        self._records[self._key(user_id, snapshot.symbol)] = snapshot

    async def count(self) -> int:
        return len(self._records)

    def clear(self) -> None:
        self._records.clear()
