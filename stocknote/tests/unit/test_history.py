"""
STOCKNOTE - Unit Tests for Daily Price History
"""
from datetime import date

import pytest

from stocknote.data.models import DailyPricePoint
from stocknote.series.history import TimeRange, build_series, series_for_range


class TestBuildSeries:
    def test_sorted_ascending(self, raw_history):
        series = build_series(raw_history)
        dates = [p.date for p in series]
        assert dates == sorted(dates)
        assert all(isinstance(p, DailyPricePoint) for p in series)

    def test_dates_unique_last_write_wins(self, raw_history):
        series = build_series(raw_history)
        dates = [p.date for p in series]
        assert len(dates) == len(set(dates)) == 7
        june_12 = next(p for p in series if p.date == date(2024, 6, 12))
        assert june_12.close == 188.7
        assert june_12.volume == 48500000

    def test_range_start_inclusive_filter(self, raw_history):
        series = build_series(raw_history, range_start=date(2024, 6, 1), range_end=date(2024, 6, 14))
        assert [p.date for p in series] == [date(2024, 6, 3), date(2024, 6, 12), date(2024, 6, 13)]

    def test_range_start_on_a_trading_day_is_kept(self, raw_history):
        series = build_series(raw_history, range_start=date(2024, 5, 31))
        assert series[0].date == date(2024, 5, 31)

    def test_range_end_inclusive(self, raw_history):
        series = build_series(raw_history, range_end=date(2024, 6, 12))
        assert series[-1].date == date(2024, 6, 12)

    def test_no_bounds_is_identity_filter(self, raw_history):
        assert len(build_series(raw_history, None, None)) == 7

    def test_non_numeric_close_becomes_zero(self):
        raw = [
            {"date": "2024-01-02", "close": "n/a", "open": 1, "high": 2, "low": 0.5, "volume": 10},
            {"date": "2024-01-03", "close": None},
            {"date": "2024-01-04", "close": float("nan")},
            {"date": "2024-01-05", "close": float("inf")},
            {"date": "2024-01-08", "close": "12.5"},
        ]
        series = build_series(raw)
        assert len(series) == 5
        assert [p.close for p in series] == [0.0, 0.0, 0.0, 0.0, 12.5]

    def test_other_missing_numbers_are_none(self):
        series = build_series([{"date": "2024-01-02", "close": 5, "open": "bad"}])
        assert series[0].open is None
        assert series[0].volume is None
        assert series[0].close == 5.0

    def test_boolean_values_are_not_numbers(self):
        raw = [
            {"date": "2024-01-02", "close": True, "open": True, "volume": False},
            {"date": "2024-01-03", "close": False, "high": 3},
        ]
        series = build_series(raw)
        assert [p.close for p in series] == [0.0, 0.0]
        assert series[0].open is None
        assert series[0].volume is None
        assert series[1].high == 3

    def test_price_key_accepted_as_close(self):
        series = build_series([{"date": "2024-01-02", "price": 42.0}])
        assert series[0].close == 42.0

    def test_unparseable_dates_dropped(self):
        raw = [
            {"date": "2024-01-02", "close": 1},
            {"date": "not-a-date", "close": 2},
            {"date": None, "close": 3},
        ]
        series = build_series(raw)
        assert [p.date for p in series] == [date(2024, 1, 2)]

    def test_empty_input(self):
        assert build_series([]) == []
        assert build_series([], date(2024, 1, 1)) == []

    def test_input_not_mutated(self, raw_history):
        before = [dict(r) for r in raw_history]
        build_series(raw_history, date(2024, 6, 1))
        assert raw_history == before


class TestTimeRange:
    def test_start_for_months(self):
        today = date(2024, 6, 14)
        assert TimeRange.ONE_MONTH.start_for(today) == date(2024, 5, 14)
        assert TimeRange.THREE_MONTHS.start_for(today) == date(2024, 3, 14)
        assert TimeRange.SIX_MONTHS.start_for(today) == date(2023, 12, 14)
        assert TimeRange.ONE_YEAR.start_for(today) == date(2023, 6, 14)

    def test_all_has_no_lower_bound(self):
        assert TimeRange.ALL.start_for(date(2024, 6, 14)) is None

    def test_month_end_clamps(self):
        assert TimeRange.THREE_MONTHS.start_for(date(2024, 5, 31)) == date(2024, 2, 29)

    def test_series_for_range(self, raw_history, today):
        three_months = series_for_range(raw_history, TimeRange.THREE_MONTHS, today)
        assert three_months[0].date == date(2024, 3, 14)
        assert len(three_months) == 6
        assert len(series_for_range(raw_history, TimeRange.ONE_MONTH, today)) == 5
        assert len(series_for_range(raw_history, TimeRange.ALL, today)) == 7

    def test_parse_value(self):
        assert TimeRange("1Y") is TimeRange.ONE_YEAR
        with pytest.raises(ValueError):
            TimeRange("2W")
