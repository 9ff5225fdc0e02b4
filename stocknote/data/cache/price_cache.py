"""
STOCKNOTE - Price Cache Layer
Daily-staleness quote cache: at most one upstream quote fetch per
(user, symbol) per calendar day, falling back to the last good snapshot.
"""
import asyncio
import weakref
from datetime import date
from typing import Any, Callable, Dict, Iterable, Optional

from stocknote.data.adapters.base import BaseQuoteSource
from stocknote.data.cache.store import InMemorySnapshotStore, SnapshotStore
from stocknote.data.models import PriceSnapshot, Quote
from stocknote.utils.helpers import normalize_symbol, today_in, usable_price
from stocknote.utils.logger import get_logger

logger = get_logger("price_cache")

DEFAULT_USER = "default"


class PriceCache:
    """
    Per (user, symbol) snapshot cache.

    Refreshes for different keys run concurrently; refreshes of the same
    key are serialized by a per-key asyncio.Lock so two racing requests
    cannot both see "stale" and double-fetch.
    """

    def __init__(
        self,
        quote_source: BaseQuoteSource,
        store: Optional[SnapshotStore] = None,
        clock: Optional[Callable[[], date]] = None,
    ):
        self.quote_source = quote_source
        self.store = store or InMemorySnapshotStore()
        self._clock = clock or today_in
        # a key's lock lives only while some request holds or waits on it
        self._locks: "weakref.WeakValueDictionary[tuple, asyncio.Lock]" = weakref.WeakValueDictionary()
        self._fetches = 0
        self._fetch_failures = 0
        self._hits = 0

    def today(self) -> date:
        return self._clock()

    def is_fresh(self, snapshot: Optional[PriceSnapshot]) -> bool:
        """Fresh means fetched today and carrying a usable price."""
        if snapshot is None:
            return False
        return snapshot.fetched_on == self.today() and usable_price(snapshot.price) is not None

    def _lock_for(self, user_id: str, symbol: str) -> asyncio.Lock:
        key = (user_id, symbol)
        lock = self._locks.get(key)
        if lock is None:
            lock = asyncio.Lock()
            self._locks[key] = lock
        return lock

    async def _fetch_quote(self, symbol: str) -> Optional[Quote]:
        self._fetches += 1
        try:
            quote = await self.quote_source.fetch_quote(symbol)
        except Exception as e:
            self._fetch_failures += 1
            logger.warning("quote_fetch_failed", symbol=symbol, error=str(e))
            return None
        if quote is None or usable_price(quote.price) is None:
            self._fetch_failures += 1
            logger.warning("quote_unusable", symbol=symbol)
            return None
        return quote

    async def get_fresh_snapshot(
        self,
        symbol: str,
        cached: Optional[PriceSnapshot] = None,
        user_id: str = DEFAULT_USER,
    ) -> Optional[PriceSnapshot]:
        """
        Return a snapshot that is fresh for today, refreshing at most once.

        When `cached` is not supplied the store's record is used. A failed
        refresh returns the prior snapshot unchanged (None on a first-ever
        request with no data).
        """
        symbol = normalize_symbol(symbol)

        if self.is_fresh(cached):
            self._hits += 1
            return cached

        async with self._lock_for(user_id, symbol):
            stored = await self.store.get(user_id, symbol)
            # Another request may have refreshed while we waited.
            if self.is_fresh(stored):
                self._hits += 1
                return stored

            prior = cached if cached is not None else stored
            quote = await self._fetch_quote(symbol)
            if quote is None:
                logger.info("snapshot_kept_stale", symbol=symbol, user_id=user_id,
                            fetched_on=str(prior.fetched_on) if prior else None)
                return prior

            snapshot = PriceSnapshot(
                symbol=symbol,
                price=usable_price(quote.price),
                change=quote.change,
                change_percent=quote.change_percent,
                fetched_on=self.today(),
            )
            await self.store.put(user_id, snapshot)
            logger.info("snapshot_refreshed", symbol=symbol, user_id=user_id, price=snapshot.price)
            return snapshot

    async def refresh_portfolio(
        self, user_id: str, symbols: Iterable[str]
    ) -> Dict[str, Optional[PriceSnapshot]]:
        """Refresh many symbols concurrently; one symbol never waits on another."""
        ordered = list(dict.fromkeys(normalize_symbol(s) for s in symbols))
        tasks = [self.get_fresh_snapshot(s, user_id=user_id) for s in ordered]
        results = await asyncio.gather(*tasks)
        return dict(zip(ordered, results))

    def clear(self) -> None:
        """Reset counters. Per-key locks are left alone; in-flight requests may hold them."""
        self._fetches = 0
        self._fetch_failures = 0
        self._hits = 0
        logger.info("cache_cleared")

    @property
    def stats(self) -> Dict[str, Any]:
        """Return cache statistics."""
        return {
            "quote_fetches": self._fetches,
            "quote_fetch_failures": self._fetch_failures,
            "fresh_hits": self._hits,
            "tracked_keys": len(self._locks),
        }
