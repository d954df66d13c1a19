from dataclasses import dataclass
from datetime import date, datetime, time

import pandas as pd
import pytest

import pos_finsight.periods as periods

# Wednesday
NOW = datetime(2025, 3, 12, 15, 30)


@dataclass(frozen=True)
class Stamped:
    name: str
    created_at: datetime


def _stamped() -> list[Stamped]:
    return [
        Stamped("a", datetime(2025, 2, 28, 23, 59)),
        Stamped("b", datetime(2025, 3, 1, 0, 0)),
        Stamped("c", datetime(2025, 3, 15, 12, 0)),
        Stamped("d", datetime(2025, 3, 31, 23, 59, 59)),
        Stamped("e", datetime(2025, 4, 1, 0, 0)),
    ]


def test_filter_by_date_range_inclusive_day_bounds() -> None:
    """Start is taken from 00:00 and end runs to the last instant of its day."""
    window = periods.DateRange(
        start=datetime(2025, 3, 1, 9, 0), end=datetime(2025, 3, 31, 8, 0)
    )

    kept = periods.filter_by_date_range(_stamped(), window)

    assert [s.name for s in kept] == ["b", "c", "d"]


def test_filter_by_date_range_unbounded_returns_copy() -> None:
    items = _stamped()

    kept = periods.filter_by_date_range(items, periods.DateRange())

    assert kept == items
    assert kept is not items


def test_filter_by_date_range_open_bounds() -> None:
    after = periods.DateRange(start=datetime(2025, 3, 15))
    before = periods.DateRange(end=datetime(2025, 3, 1))

    assert [s.name for s in periods.filter_by_date_range(_stamped(), after)] == [
        "c",
        "d",
        "e",
    ]
    assert [s.name for s in periods.filter_by_date_range(_stamped(), before)] == [
        "a",
        "b",
    ]


def test_filter_by_date_range_is_idempotent() -> None:
    window = periods.month_range(2025, 3)

    once = periods.filter_by_date_range(_stamped(), window)
    twice = periods.filter_by_date_range(once, window)

    assert once == twice


def test_filter_frame_by_range_matches_entity_filter() -> None:
    df = pd.DataFrame(
        {
            "created_at": pd.to_datetime([s.created_at for s in _stamped()]),
            "name": [s.name for s in _stamped()],
        }
    )

    filtered = periods.filter_frame_by_range(df, periods.month_range(2025, 3))

    assert filtered["name"].tolist() == ["b", "c", "d"]
    # Input is left untouched
    assert len(df) == 5


@pytest.mark.parametrize(
    "preset, expected_start, expected_end",
    [
        ("today", date(2025, 3, 12), date(2025, 3, 12)),
        ("yesterday", date(2025, 3, 11), date(2025, 3, 11)),
        ("thisWeek", date(2025, 3, 9), date(2025, 3, 12)),
        ("lastWeek", date(2025, 3, 2), date(2025, 3, 8)),
        ("thisMonth", date(2025, 3, 1), date(2025, 3, 12)),
        ("lastMonth", date(2025, 2, 1), date(2025, 2, 28)),
        ("last30Days", date(2025, 2, 10), date(2025, 3, 12)),
        ("last90Days", date(2024, 12, 12), date(2025, 3, 12)),
    ],
)
def test_resolve_preset_windows(preset, expected_start, expected_end) -> None:
    window = periods.resolve_preset(preset, now=NOW)

    assert window.start == datetime.combine(expected_start, time.min)
    assert window.end == datetime.combine(expected_end, time.max)


def test_resolve_preset_last_month_in_january() -> None:
    window = periods.resolve_preset("lastMonth", now=datetime(2025, 1, 20))

    assert window.start == datetime(2024, 12, 1)
    assert window.end.date() == date(2024, 12, 31)


def test_resolve_preset_all_time_and_unknown() -> None:
    assert periods.resolve_preset("allTime", now=NOW).is_unbounded

    with pytest.raises(ValueError):
        periods.resolve_preset("nextYear", now=NOW)


def test_custom_range_rejects_inverted_dates() -> None:
    window = periods.custom_range(date(2025, 1, 1), date(2025, 1, 31))
    assert window.label == "2025-01-01 → 2025-01-31"

    with pytest.raises(ValueError):
        periods.custom_range(date(2025, 2, 1), date(2025, 1, 1))


def test_previous_period_same_length_ending_day_before() -> None:
    previous = periods.previous_period(periods.month_range(2025, 3))

    assert previous.start == datetime(2025, 1, 29)
    assert previous.end.date() == date(2025, 2, 28)


def test_previous_period_open_range_is_none() -> None:
    assert periods.previous_period(periods.DateRange()) is None
    assert periods.previous_period(periods.DateRange(start=NOW)) is None
