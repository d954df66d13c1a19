# POS FinSight - Revenue reconciliation & reporting for point-of-sale data
# Copyright (c) 2025 Maxence Bernard (maxencebernardhub)
# Licensed under the MIT License. See LICENSE file for details.

"""
Date-range helpers for POS FinSight.

This module defines a DateRange value object and the helpers built on it:

- filtering entities (or DataFrames) whose ``created_at`` falls inside an
  inclusive, day-granularity window,
- resolving the quick-filter presets offered to users (today, this week,
  last 30 days, ...) into concrete windows as of a given "now",
- deriving the comparable previous period used for growth figures.

A missing bound means "unbounded" on that side; a range with no bounds at
all selects everything.
"""

from calendar import monthrange
from collections.abc import Iterable
from dataclasses import dataclass
from datetime import date, datetime, time, timedelta
from typing import Optional, TypeVar

import pandas as pd

T = TypeVar("T")

PRESETS = (
    "today",
    "yesterday",
    "thisWeek",
    "lastWeek",
    "thisMonth",
    "lastMonth",
    "last30Days",
    "last90Days",
    "allTime",
)


@dataclass(frozen=True)
class DateRange:
    """Inclusive reporting window; either bound may be None."""

    start: Optional[datetime] = None
    end: Optional[datetime] = None

    @property
    def is_unbounded(self) -> bool:
        return self.start is None and self.end is None

    @property
    def lower(self) -> Optional[datetime]:
        """Start bound normalized to the start of its day."""
        if self.start is None:
            return None
        return start_of_day(self.start)

    @property
    def upper(self) -> Optional[datetime]:
        """End bound normalized to the end of its day."""
        if self.end is None:
            return None
        return end_of_day(self.end)

    @property
    def label(self) -> str:
        if self.is_unbounded:
            return "All time"
        start = self.start.date().isoformat() if self.start else "…"
        end = self.end.date().isoformat() if self.end else "…"
        return f"{start} → {end}"


def start_of_day(value: datetime) -> datetime:
    return datetime.combine(value.date(), time.min)


def end_of_day(value: datetime) -> datetime:
    return datetime.combine(value.date(), time.max)


def _today(now: Optional[datetime] = None) -> datetime:
    """Return the current moment (isolated for easier testing)."""
    return now if now is not None else datetime.now()


def filter_by_date_range(entities: Iterable[T], date_range: DateRange) -> list[T]:
    """
    Keep the entities whose ``created_at`` lies in the date range.

    Both bounds are inclusive: the start is taken from the beginning of its
    day and the end runs to the last microsecond of its day. The input is
    never modified; a new list is returned.
    """
    items = list(entities)
    if date_range.is_unbounded:
        return items

    lower = date_range.lower
    upper = date_range.upper
    return [
        item
        for item in items
        if (lower is None or item.created_at >= lower)
        and (upper is None or item.created_at <= upper)
    ]


def filter_frame_by_range(
    frame: pd.DataFrame, date_range: DateRange, column: str = "created_at"
) -> pd.DataFrame:
    """
    Filter a DataFrame to the rows whose ``column`` lies in the date range.

    The column is expected to be of type datetime64[ns] (as produced by the
    CSV readers in ``io.py``). Same inclusive rule as
    :func:`filter_by_date_range`.
    """
    mask = pd.Series(True, index=frame.index)
    if date_range.lower is not None:
        mask &= frame[column] >= pd.Timestamp(date_range.lower)
    if date_range.upper is not None:
        mask &= frame[column] <= pd.Timestamp(date_range.upper)
    return frame.loc[mask].copy()


def resolve_preset(name: str, now: Optional[datetime] = None) -> DateRange:
    """
    Resolve a quick-filter preset into a concrete DateRange as of ``now``.

    Weeks start on Sunday. "Last N days" windows start N days before today
    and run to the end of today.

    Raises:
        ValueError: if the preset name is unknown.
    """
    current = _today(now)
    today = start_of_day(current)

    if name == "allTime":
        return DateRange()
    if name == "today":
        return DateRange(start=today, end=end_of_day(today))
    if name == "yesterday":
        yesterday = today - timedelta(days=1)
        return DateRange(start=yesterday, end=end_of_day(yesterday))
    if name == "thisWeek":
        # Python weekday(): Monday == 0 ... Sunday == 6
        days_since_sunday = (today.weekday() + 1) % 7
        return DateRange(
            start=today - timedelta(days=days_since_sunday), end=end_of_day(today)
        )
    if name == "lastWeek":
        days_since_sunday = (today.weekday() + 1) % 7
        start = today - timedelta(days=days_since_sunday + 7)
        return DateRange(start=start, end=end_of_day(start + timedelta(days=6)))
    if name == "thisMonth":
        return DateRange(start=today.replace(day=1), end=end_of_day(today))
    if name == "lastMonth":
        if today.month == 1:
            year, month = today.year - 1, 12
        else:
            year, month = today.year, today.month - 1
        last_day = monthrange(year, month)[1]
        return DateRange(
            start=datetime(year, month, 1),
            end=end_of_day(datetime(year, month, last_day)),
        )
    if name == "last30Days":
        return DateRange(start=today - timedelta(days=30), end=end_of_day(today))
    if name == "last90Days":
        return DateRange(start=today - timedelta(days=90), end=end_of_day(today))

    raise ValueError(f"Unknown date range preset: {name!r}")


def custom_range(
    from_date: Optional[date] = None, to_date: Optional[date] = None
) -> DateRange:
    """
    Build a DateRange from calendar dates (typically CLI arguments).

    Raises:
        ValueError: if the end date is before the start date.
    """
    if from_date and to_date and to_date < from_date:
        raise ValueError("Custom period end date cannot be before start date.")

    start = datetime.combine(from_date, time.min) if from_date else None
    end = datetime.combine(to_date, time.max) if to_date else None
    return DateRange(start=start, end=end)


def previous_period(date_range: DateRange) -> Optional[DateRange]:
    """
    Return the window of the same number of days that ends the day before
    ``date_range`` starts, or None when the range is open on either side.

    Used to compute revenue and sales growth against a comparable baseline.
    """
    if date_range.start is None or date_range.end is None:
        return None

    first_day = date_range.start.date()
    span_days = (date_range.end.date() - first_day).days + 1
    prev_end = first_day - timedelta(days=1)
    prev_start = prev_end - timedelta(days=span_days - 1)
    return DateRange(
        start=datetime.combine(prev_start, time.min),
        end=datetime.combine(prev_end, time.max),
    )


def month_range(year: int, month: int) -> DateRange:
    """Full calendar month as a DateRange."""
    last_day = monthrange(year, month)[1]
    return DateRange(
        start=datetime(year, month, 1),
        end=datetime.combine(date(year, month, last_day), time.max),
    )
