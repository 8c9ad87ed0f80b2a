"""
Weekly Aggregator

Week-over-week comparison of emission totals.

    percent_change = (current - previous) / previous * 100   if previous > 0
                   = 0                                        otherwise

A zero previous week saturates the change at 0 instead of dividing by zero;
a first week of tracking therefore shows "0%" rather than an error or infinity.
"""
from dataclasses import dataclass
from datetime import date, timedelta
from typing import List, Optional, Protocol, Sequence


class WeekTotalLike(Protocol):
    week_start: date
    co2_emitted_grams: float
    data_used_mb: float


@dataclass(frozen=True)
class WeekTotal:
    week_start: date
    co2_emitted_grams: float
    data_used_mb: float = 0.0


@dataclass(frozen=True)
class WeekOverWeek:
    current: float
    previous: float
    percent_change: float
    is_reduction: bool

    @property
    def display_change(self) -> float:
        """Magnitude for display; direction comes from is_reduction."""
        return round(abs(self.percent_change), 1)

    @property
    def direction(self) -> str:
        return "down" if self.is_reduction else "up"


@dataclass(frozen=True)
class WeeklySummary:
    change: WeekOverWeek
    total_grams: float
    total_data_mb: float
    # Oldest first, ready for charting
    series: List[WeekTotal]

    @property
    def total_kg(self) -> float:
        return self.total_grams / 1000


def week_over_week(current: float, previous: float) -> WeekOverWeek:
    if previous > 0:
        percent_change = (current - previous) / previous * 100
    else:
        percent_change = 0.0
    return WeekOverWeek(
        current=current,
        previous=previous,
        percent_change=percent_change,
        is_reduction=current < previous,
    )


def week_start(day: date) -> date:
    """Monday of the ISO week containing `day`."""
    return day - timedelta(days=day.isoweekday() - 1)


def summarize_history(entries_newest_first: Sequence[WeekTotalLike]) -> WeeklySummary:
    """
    Summarize weekly rows as read from the store (newest week first).

    The first row is "this week" and the second "last week"; missing rows
    count as zero.
    """
    current = entries_newest_first[0].co2_emitted_grams if len(entries_newest_first) > 0 else 0.0
    previous = entries_newest_first[1].co2_emitted_grams if len(entries_newest_first) > 1 else 0.0

    series = [
        WeekTotal(e.week_start, e.co2_emitted_grams, e.data_used_mb)
        for e in reversed(entries_newest_first)
    ]
    return WeeklySummary(
        change=week_over_week(current, previous),
        total_grams=sum(e.co2_emitted_grams for e in entries_newest_first),
        total_data_mb=sum(e.data_used_mb for e in entries_newest_first),
        series=series,
    )


def usage_summary_line(
    this_week_grams: float,
    change: WeekOverWeek,
    total_grams: float,
    green_points: int,
) -> str:
    """One-line dashboard summary shown in the chat panel."""
    trend = "✅ Down" if change.is_reduction else "⚠️ Up"
    return (
        f"📊 This week: {this_week_grams:.1f}g CO₂ | {trend} {change.display_change}% | "
        f"Total: {total_grams:.1f}g | Points: {green_points}"
    )


def percent_change_label(change: Optional[WeekOverWeek]) -> Optional[str]:
    """Signed label for prompts, e.g. '+12.5%' or '-20.0%'."""
    if change is None:
        return None
    sign = "+" if change.percent_change > 0 else ""
    return f"{sign}{change.percent_change:.1f}%"
