"""
STOCKNOTE - Chart Service
Fetches a symbol's history once per revalidation window and re-projects
notes onto it for whichever time range is requested.
"""
from datetime import date, timedelta
from typing import Any, Callable, Dict, List, Optional, Sequence, Union

from cachetools import LRUCache, TTLCache

from stocknote.chart.projection import ChartProjection, build_projection
from stocknote.config.settings import ChartSettings, DataSourceSettings
from stocknote.data.adapters.base import BaseQuoteSource
from stocknote.data.models import Note
from stocknote.series.alignment import align
from stocknote.series.history import TimeRange, series_for_range
from stocknote.utils.helpers import normalize_symbol, today_in
from stocknote.utils.logger import get_logger

logger = get_logger("chart_service")


class ChartService:
    """Composes history fetch, range filtering, alignment and projection."""

    def __init__(
        self,
        quote_source: BaseQuoteSource,
        data_settings: Optional[DataSourceSettings] = None,
        chart_settings: Optional[ChartSettings] = None,
        clock: Optional[Callable[[], date]] = None,
    ):
        self.quote_source = quote_source
        self.data_settings = data_settings or DataSourceSettings()
        self.chart_settings = chart_settings or ChartSettings()
        self._clock = clock or today_in
        self._history_cache: TTLCache = TTLCache(
            maxsize=256, ttl=self.data_settings.history_cache_ttl_seconds
        )
        # last non-empty fetch per symbol, served when a refetch fails
        self._last_good: LRUCache = LRUCache(maxsize=256)

    def resolve_range(self, time_range: Optional[Union[str, TimeRange]]) -> TimeRange:
        if time_range is None:
            time_range = self.chart_settings.default_range
        if isinstance(time_range, TimeRange):
            return time_range
        try:
            return TimeRange(str(time_range).strip().upper())
        except ValueError:
            raise ValueError(
                f"time_range must be one of {[r.value for r in TimeRange]}, got {time_range!r}"
            )

    async def get_raw_history(self, symbol: str, today: date) -> List[Dict[str, Any]]:
        """
        Raw bars for the full lookback window, cached per (symbol, day).
        A failed or empty refetch falls back to the last good bars for the symbol.
        """
        key = (symbol, today)
        cached = self._history_cache.get(key)
        if cached is not None:
            return cached

        start = today - timedelta(days=self.data_settings.history_lookback_days)
        try:
            raw = await self.quote_source.fetch_history(symbol, start, today)
        except Exception as e:
            logger.warning("history_fetch_failed", symbol=symbol, error=str(e))
            raw = []

        if raw:
            self._history_cache[key] = raw
            self._last_good[symbol] = raw
            return raw

        fallback = self._last_good.get(symbol)
        if fallback is not None:
            logger.warning("history_serving_last_good", symbol=symbol, count=len(fallback))
            return fallback
        logger.warning("history_empty", symbol=symbol)
        return []

    async def get_chart(
        self,
        symbol: str,
        notes: Sequence[Note],
        time_range: Optional[Union[str, TimeRange]] = None,
        today: Optional[date] = None,
    ) -> ChartProjection:
        symbol = normalize_symbol(symbol)
        window = self.resolve_range(time_range)
        today = today or self._clock()

        raw = await self.get_raw_history(symbol, today)
        series = series_for_range(raw, window, today)

        own_notes = [n for n in notes if (n.symbol or "").strip().upper() == symbol]
        if len(own_notes) != len(notes):
            logger.debug("chart_foreign_notes_skipped", symbol=symbol, skipped=len(notes) - len(own_notes))
        groups = align(series, own_notes)

        logger.info(
            "chart_projected",
            symbol=symbol,
            time_range=window.value,
            points=len(series),
            notes=len(own_notes),
            aligned=sum(len(g.notes) for g in groups),
        )
        return build_projection(symbol, series, groups, window.value)

    def clear(self) -> None:
        self._history_cache.clear()
        self._last_good.clear()

    @property
    def stats(self) -> Dict[str, Any]:
        return {
            "history_entries": len(self._history_cache),
            "last_good_symbols": len(self._last_good),
        }
