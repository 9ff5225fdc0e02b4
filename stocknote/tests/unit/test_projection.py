"""
STOCKNOTE - Unit Tests for Chart Projection
"""
from datetime import date

from stocknote.chart.projection import build_projection
from stocknote.series.alignment import align


class TestChartProjection:
    def test_every_point_present_with_notes_joined(self, two_day_series, make_note):
        notes = [make_note("a", "2024-01-03"), make_note("b", "2024-01-05", order=1)]
        projection = build_projection("AAPL", two_day_series, align(two_day_series, notes), "3M")
        assert [p.date for p in projection.points] == [date(2024, 1, 2), date(2024, 1, 3)]
        assert projection.points[0].notes == []
        assert [n.id for n in projection.points[1].notes] == ["a", "b"]
        assert projection.points[1].close == 11.0

    def test_annotated_points_and_count(self, two_day_series, make_note):
        notes = [make_note("a", "2024-01-02"), make_note("b", "2023-12-01")]
        projection = build_projection("AAPL", two_day_series, align(two_day_series, notes))
        assert len(projection.annotated_points) == 1
        assert projection.note_count == 1
        assert projection.time_range == "ALL"

    def test_empty_series(self, make_note):
        projection = build_projection("AAPL", [], [], "1M")
        assert projection.points == []
        assert projection.to_dataframe().empty

    def test_to_dict_is_json_ready(self, two_day_series, make_note):
        projection = build_projection("AAPL", two_day_series, align(two_day_series, [make_note("a", "2024-01-03")]))
        data = projection.to_dict()
        assert data["symbol"] == "AAPL"
        assert data["points"][1]["date"] == "2024-01-03"
        assert data["points"][1]["notes"][0]["trend"] == "hold"
        assert data["groups"][0]["matched_date"] == "2024-01-03"

    def test_to_dataframe(self, two_day_series, make_note):
        projection = build_projection("AAPL", two_day_series, align(two_day_series, [make_note("a", "2024-01-03")]))
        df = projection.to_dataframe()
        assert list(df.index) == [date(2024, 1, 2), date(2024, 1, 3)]
        assert df.loc[date(2024, 1, 3), "note_ids"] == ["a"]
        assert df["close"].tolist() == [10.0, 11.0]
