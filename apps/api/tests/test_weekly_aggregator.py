"""
Tests for the Weekly Aggregator

Week-over-week change, Monday week starts and the chat summary line.
"""
from datetime import date

import pytest

from services.weekly_aggregator import (
    WeekTotal,
    percent_change_label,
    summarize_history,
    usage_summary_line,
    week_over_week,
    week_start,
)


class TestWeekOverWeek:
    """percent_change = (current - previous) / previous * 100"""

    def test_reduction(self):
        change = week_over_week(80, 100)
        assert change.percent_change == pytest.approx(-20.0)
        assert change.is_reduction is True
        assert change.display_change == 20.0
        assert change.direction == "down"

    def test_increase(self):
        change = week_over_week(150, 100)
        assert change.percent_change == pytest.approx(50.0)
        assert change.is_reduction is False
        assert change.direction == "up"

    def test_zero_previous_saturates(self):
        """First tracked week shows 0% instead of dividing by zero"""
        change = week_over_week(42, 0)
        assert change.percent_change == 0.0
        assert change.is_reduction is False

    def test_both_zero(self):
        change = week_over_week(0, 0)
        assert change.percent_change == 0.0
        assert change.is_reduction is False

    def test_display_change_rounds_to_one_decimal(self):
        change = week_over_week(2, 3)
        assert change.display_change == 33.3


class TestWeekStart:
    @pytest.mark.parametrize("day,monday", [
        (date(2024, 3, 4), date(2024, 3, 4)),    # Monday
        (date(2024, 3, 6), date(2024, 3, 4)),    # Wednesday
        (date(2024, 3, 10), date(2024, 3, 4)),   # Sunday
        (date(2024, 1, 1), date(2024, 1, 1)),
        (date(2023, 12, 31), date(2023, 12, 25)),
    ])
    def test_monday_of_week(self, day, monday):
        assert week_start(day) == monday


class TestSummarizeHistory:
    def test_newest_first_rows(self):
        rows = [
            WeekTotal(date(2024, 3, 11), 50.0, 2500.0),
            WeekTotal(date(2024, 3, 4), 100.0, 5000.0),
            WeekTotal(date(2024, 2, 26), 25.0, 1250.0),
        ]
        summary = summarize_history(rows)
        assert summary.change.current == 50.0
        assert summary.change.previous == 100.0
        assert summary.change.is_reduction is True
        assert summary.total_grams == 175.0
        assert summary.total_kg == pytest.approx(0.175)
        assert summary.total_data_mb == 8750.0
        assert [w.week_start for w in summary.series] == [
            date(2024, 2, 26), date(2024, 3, 4), date(2024, 3, 11),
        ]

    def test_single_week(self):
        summary = summarize_history([WeekTotal(date(2024, 3, 11), 12.0)])
        assert summary.change.current == 12.0
        assert summary.change.previous == 0.0
        assert summary.change.percent_change == 0.0

    def test_no_history(self):
        summary = summarize_history([])
        assert summary.change.current == 0.0
        assert summary.total_grams == 0.0
        assert summary.series == []


class TestLabels:
    def test_usage_summary_line_down(self):
        line = usage_summary_line(80.0, week_over_week(80, 100), 1234.56, 42)
        assert line == "📊 This week: 80.0g CO₂ | ✅ Down 20.0% | Total: 1234.6g | Points: 42"

    def test_usage_summary_line_up(self):
        line = usage_summary_line(150.0, week_over_week(150, 100), 150.0, 0)
        assert "⚠️ Up 50.0%" in line

    def test_percent_change_label(self):
        assert percent_change_label(week_over_week(112.5, 100)) == "+12.5%"
        assert percent_change_label(week_over_week(80, 100)) == "-20.0%"
        assert percent_change_label(week_over_week(5, 0)) == "0.0%"
        assert percent_change_label(None) is None
