"""
STOCKNOTE - Daily Price History
Builds the ordered, date-unique series that charting and note alignment consume.
"""
from datetime import date
from enum import Enum
from typing import Any, Dict, Iterable, List, Optional

import numpy as np
import pandas as pd

from stocknote.data.models import DailyPricePoint
from stocknote.utils.logger import get_logger

logger = get_logger("history")

_NUMERIC = ["close", "open", "high", "low", "volume"]


class TimeRange(str, Enum):
    ONE_MONTH = "1M"
    THREE_MONTHS = "3M"
    SIX_MONTHS = "6M"
    ONE_YEAR = "1Y"
    ALL = "ALL"

    @property
    def months(self) -> Optional[int]:
        return {"1M": 1, "3M": 3, "6M": 6, "1Y": 12}.get(self.value)

    def start_for(self, today: date) -> Optional[date]:
        """Inclusive lower bound for this range; None means no bound.

        Month arithmetic clamps to month end (May 31 - 3M -> Feb 29).
        """
        if self.months is None:
            return None
        return (pd.Timestamp(today) - pd.DateOffset(months=self.months)).date()


def _to_frame(raw_points: Iterable[Dict[str, Any]]) -> pd.DataFrame:
    rows = []
    for item in raw_points:
        if not isinstance(item, dict):
            continue
        row = {col: item.get(col) for col in ["date"] + _NUMERIC}
        if "close" not in item:
            row["close"] = item.get("price")
        rows.append(row)
    return pd.DataFrame(rows, columns=["date"] + _NUMERIC, dtype=object)


def build_series(
    raw_points: Iterable[Dict[str, Any]],
    range_start: Optional[date] = None,
    range_end: Optional[date] = None,
) -> List[DailyPricePoint]:
    """
    Deduplicate by date (last write wins), keep range_start <= date <= range_end
    (either bound optional), sort ascending, and normalize a non-finite close to 0.
    """
    df = _to_frame(raw_points)
    if df.empty:
        return []

    parsed = pd.to_datetime(df["date"].astype("string"), format="%Y-%m-%d", errors="coerce")
    bad_dates = int(parsed.isna().sum())
    if bad_dates:
        logger.warning("history_unparseable_dates_dropped", count=bad_dates)
    df = df.assign(date=parsed.dt.date).loc[parsed.notna()].copy()

    for col in _NUMERIC:
        # bool is an int subclass; True must not read as a price of 1.0
        values = df[col].map(lambda v: None if isinstance(v, (bool, np.bool_)) else v)
        df[col] = pd.to_numeric(values, errors="coerce").replace([np.inf, -np.inf], np.nan)

    bad_close = int(df["close"].isna().sum())
    if bad_close:
        logger.debug("history_close_normalized", count=bad_close)
    df["close"] = df["close"].fillna(0.0)

    df = df.drop_duplicates(subset="date", keep="last")
    if range_start is not None:
        df = df[df["date"] >= range_start]
    if range_end is not None:
        df = df[df["date"] <= range_end]
    df = df.sort_values("date", kind="stable")

    df = df.astype(object).where(df.notna(), None)
    return [
        DailyPricePoint(
            date=row["date"],
            close=float(row["close"]),
            open=row["open"],
            high=row["high"],
            low=row["low"],
            volume=row["volume"],
        )
        for row in df.to_dict("records")
    ]


def series_for_range(
    raw_points: Iterable[Dict[str, Any]],
    time_range: TimeRange,
    today: date,
) -> List[DailyPricePoint]:
    """Series for one of the preset windows ending today."""
    return build_series(raw_points, time_range.start_for(today))
