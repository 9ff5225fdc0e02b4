"""
STOCKNOTE - Chart Projection
Read-only join of a price series with its aligned note groups.
"""
from typing import Any, Dict, List, Optional, Sequence

import pandas as pd
from pydantic import BaseModel, Field

from stocknote.data.models import AlignedGroup, ChartPoint, DailyPricePoint
from stocknote.series.alignment import notes_by_date


class ChartProjection(BaseModel):
    """What presentation draws: the series, each point carrying its notes."""
    symbol: str
    time_range: str
    points: List[ChartPoint] = Field(default_factory=list)
    groups: List[AlignedGroup] = Field(default_factory=list)

    @property
    def annotated_points(self) -> List[ChartPoint]:
        return [p for p in self.points if p.notes]

    @property
    def note_count(self) -> int:
        return sum(len(g.notes) for g in self.groups)

    def to_dict(self) -> Dict[str, Any]:
        return self.model_dump(mode="json")

    def to_dataframe(self) -> pd.DataFrame:
        """Flat frame indexed by date, with note ids per day."""
        if not self.points:
            return pd.DataFrame(columns=["close", "open", "high", "low", "volume", "note_ids"])
        df = pd.DataFrame(
            [
                {
                    "date": p.date,
                    "close": p.close,
                    "open": p.open,
                    "high": p.high,
                    "low": p.low,
                    "volume": p.volume,
                    "note_ids": [n.id for n in p.notes],
                }
                for p in self.points
            ]
        )
        df.set_index("date", inplace=True)
        return df


def build_projection(
    symbol: str,
    series: Sequence[DailyPricePoint],
    groups: Sequence[AlignedGroup],
    time_range: Optional[str] = None,
) -> ChartProjection:
    index = notes_by_date(groups)
    points = [
        ChartPoint(
            date=point.date,
            close=point.close,
            open=point.open,
            high=point.high,
            low=point.low,
            volume=point.volume,
            notes=index.get(point.date, []),
        )
        for point in series
    ]
    return ChartProjection(
        symbol=symbol,
        time_range=time_range or "ALL",
        points=points,
        groups=list(groups),
    )
