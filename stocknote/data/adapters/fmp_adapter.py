"""
STOCKNOTE - Financial Modeling Prep Quote Adapter
Current quotes, daily history and company profiles via the FMP v3 API.
"""
from datetime import date, datetime, timezone
from typing import Any, Dict, List, Optional

import aiohttp

from stocknote.config.settings import DataSourceSettings
from stocknote.data.adapters.base import BaseQuoteSource
from stocknote.data.models import Quote
from stocknote.utils.helpers import normalize_symbol, pct_change, safe_float, usable_price
from stocknote.utils.logger import get_logger

logger = get_logger("fmp_adapter")


class FMPQuoteSource(BaseQuoteSource):
    """Financial Modeling Prep adapter. Errors are logged and reported as no data."""

    name = "fmp"

    def __init__(self, settings: DataSourceSettings):
        super().__init__()
        self.settings = settings
        self.api_key = settings.fmp_api_key
        self.base_url = settings.fmp_base_url.rstrip("/")

    async def connect(self) -> None:
        timeout = aiohttp.ClientTimeout(total=self.settings.poll_timeout_seconds)
        self._session = aiohttp.ClientSession(timeout=timeout)
        logger.info("fmp_adapter_connected")

    async def disconnect(self) -> None:
        if self._session:
            await self._session.close()
            self._session = None
        logger.info("fmp_adapter_disconnected")

    def _has_key(self, operation: str) -> bool:
        if not self.api_key:
            logger.warning("fmp_api_key_missing", operation=operation)
            return False
        return True

    async def _get_json(self, path: str, params: Optional[Dict[str, Any]] = None) -> Optional[Any]:
        if not self._session:
            await self.connect()

        query = dict(params or {})
        query["apikey"] = self.api_key
        url = f"{self.base_url}{path}"

        async with self._session.get(url, params=query) as resp:
            if resp.status != 200:
                body = await resp.text()
                logger.warning("fmp_http_error", path=path, status=resp.status, body=body[:200])
                return None
            return await resp.json()

    async def fetch_quote(self, symbol: str) -> Optional[Quote]:
        """Fetch the latest quote from /api/v3/quote."""
        if not self._has_key("quote"):
            return None
        try:
            symbol = normalize_symbol(symbol)
            data = await self._get_json(f"/api/v3/quote/{symbol}")
            quote = self.parse_quote(symbol, data)
            if quote is None:
                logger.warning("fmp_quote_empty", symbol=symbol)
            return quote
        except Exception as e:
            logger.error("fmp_quote_exception", symbol=symbol, error=str(e))
            return None

    async def fetch_history(self, symbol: str, start: date, end: date) -> List[Dict[str, Any]]:
        """Fetch raw daily bars from /api/v3/historical-price-full."""
        if not self._has_key("history"):
            return []
        try:
            symbol = normalize_symbol(symbol)
            params = {"from": start.isoformat(), "to": end.isoformat()}
            data = await self._get_json(f"/api/v3/historical-price-full/{symbol}", params)
            records = self.parse_history(data)
            logger.info("fmp_history_fetched", symbol=symbol, count=len(records))
            return records
        except Exception as e:
            logger.error("fmp_history_exception", symbol=symbol, error=str(e))
            return []

    async def fetch_company_name(self, symbol: str) -> Optional[str]:
        """Look up the company name from /api/v3/profile."""
        if not self._has_key("profile"):
            return None
        try:
            symbol = normalize_symbol(symbol)
            data = await self._get_json(f"/api/v3/profile/{symbol}")
            return self.parse_company_name(data)
        except Exception as e:
            logger.error("fmp_profile_exception", symbol=symbol, error=str(e))
            return None

    @staticmethod
    def parse_quote(symbol: str, data: Any) -> Optional[Quote]:
        """Turn an FMP quote payload into a Quote; None when there is no usable price."""
        if not isinstance(data, list) or not data or not isinstance(data[0], dict):
            return None
        item = data[0]

        price = usable_price(item.get("price"))
        if price is None:
            return None

        previous_close = safe_float(item.get("previousClose"))
        change = safe_float(item.get("change"))
        change_percent = safe_float(item.get("changesPercentage"))
        if change is None and previous_close:
            change = price - previous_close
        if change_percent is None and previous_close:
            change_percent = pct_change(previous_close, price)

        ts = item.get("timestamp")
        if isinstance(ts, (int, float)) and not isinstance(ts, bool):
            timestamp = datetime.fromtimestamp(ts, tz=timezone.utc)
        else:
            timestamp = datetime.now(timezone.utc)

        return Quote(
            symbol=str(item.get("symbol") or symbol).upper(),
            price=price,
            change=change,
            change_percent=change_percent,
            timestamp=timestamp,
            day_low=safe_float(item.get("dayLow")),
            day_high=safe_float(item.get("dayHigh")),
            open=safe_float(item.get("open")),
            previous_close=previous_close,
            raw=item,
        )

    @staticmethod
    def parse_history(data: Any) -> List[Dict[str, Any]]:
        """Extract the raw `historical` records; values are left for the series builder to validate."""
        if not isinstance(data, dict):
            return []
        historical = data.get("historical") or []
        return [
            {
                "date": item.get("date"),
                "close": item.get("close"),
                "open": item.get("open"),
                "high": item.get("high"),
                "low": item.get("low"),
                "volume": item.get("volume"),
            }
            for item in historical
            if isinstance(item, dict)
        ]

    @staticmethod
    def parse_company_name(data: Any) -> Optional[str]:
        if not isinstance(data, list) or not data or not isinstance(data[0], dict):
            return None
        item = data[0]
        # v3 profile is flat; some responses nest it under "profile"
        name = item.get("companyName") or (item.get("profile") or {}).get("companyName")
        return name or None
