from __future__ import annotations

from datetime import date, timedelta

import pytest

from hrv_tracker.schema import HrvReading, ReadingSource
from hrv_tracker.statistics import (
    HrvStatistics,
    calculate_change,
    calculate_rolling_average,
    calculate_statistics,
    get_readings_for_last_days,
    round_half_up,
)


def _reading(day: str, hrv: float) -> HrvReading:
    return HrvReading(date=day, hrv_ms=hrv, source=ReadingSource.WHOOP_CSV)


def _series(start: date, values: list[float]) -> list[HrvReading]:
    return [_reading((start + timedelta(days=idx)).isoformat(), value) for idx, value in enumerate(values)]


def test_statistics_on_known_series() -> None:
    readings = [_reading("2024-01-01", 45.5), _reading("2024-01-02", 48.2)]
    stats = calculate_statistics(readings, today=date(2024, 1, 3))
    assert stats.current == 48.2
    assert stats.average_7_day == 47
    assert stats.average_30_day == 47
    assert stats.min == 45.5
    assert stats.max == 48.2
    assert stats.trend == "stable"


def test_current_uses_latest_date_not_input_order() -> None:
    readings = [_reading("2024-01-05", 70.0), _reading("2024-01-01", 30.0)]
    stats = calculate_statistics(readings, today=date(2024, 1, 6))
    assert stats.current == 70.0


def test_empty_statistics_are_all_none() -> None:
    assert calculate_statistics([]) == HrvStatistics()
    assert all(value is None for value in calculate_statistics([]).to_dict().values())


def test_improving_and_declining_trends() -> None:
    today = date(2024, 1, 15)
    rising = _series(date(2024, 1, 1), [40.0] * 7 + [50.0] * 7)
    falling = _series(date(2024, 1, 1), [50.0] * 7 + [40.0] * 7)
    assert calculate_statistics(rising, today=today).trend == "improving"
    assert calculate_statistics(falling, today=today).trend == "declining"


def test_trend_threshold_is_configurable() -> None:
    today = date(2024, 1, 15)
    rising = _series(date(2024, 1, 1), [40.0] * 7 + [50.0] * 7)
    assert calculate_statistics(rising, today=today, threshold_pct=20).trend == "stable"


def test_stale_collection_has_no_windowed_values() -> None:
    readings = _series(date(2024, 1, 1), [40.0, 50.0, 60.0])
    stats = calculate_statistics(readings, today=date(2024, 3, 1))
    assert stats.current == 60.0
    assert stats.average_7_day is None
    assert stats.average_30_day is None
    assert stats.trend is None
    assert (stats.min, stats.max) == (40.0, 60.0)


def test_window_cutoff_is_inclusive() -> None:
    readings = [_reading("2024-01-08", 40.0), _reading("2024-01-07", 99.0)]
    recent = get_readings_for_last_days(readings, 7, today=date(2024, 1, 15))
    assert [r.date for r in recent] == ["2024-01-08"]


def test_statistics_rejects_non_sequence() -> None:
    with pytest.raises(TypeError):
        calculate_statistics(None)  # type: ignore[arg-type]


def test_rolling_average_grows_then_slides() -> None:
    readings = _series(date(2024, 1, 1), [10.0, 20.0, 30.0, 40.0])
    points = calculate_rolling_average(readings, 2)
    assert [p.value for p in points] == [10.0, 15.0, 25.0, 35.0]
    assert [p.date for p in points] == ["2024-01-01", "2024-01-02", "2024-01-03", "2024-01-04"]


def test_rolling_average_rounds_to_one_decimal() -> None:
    readings = _series(date(2024, 1, 1), [1.0, 2.0, 2.0])
    assert [p.value for p in calculate_rolling_average(readings, 3)] == [1.0, 1.5, 1.7]


def test_rolling_average_keeps_input_order() -> None:
    readings = [_reading("2024-01-03", 30.0), _reading("2024-01-01", 10.0)]
    points = calculate_rolling_average(readings, 7)
    assert [p.date for p in points] == ["2024-01-03", "2024-01-01"]
    assert [p.value for p in points] == [30.0, 20.0]


def test_rolling_average_empty_and_invalid_window() -> None:
    assert calculate_rolling_average([], 7) == []
    with pytest.raises(ValueError):
        calculate_rolling_average([_reading("2024-01-01", 1.0)], 0)


@pytest.mark.parametrize(
    ("current", "previous", "value", "direction"),
    [
        (110, 100, 10, "up"),
        (90, 100, 10, "down"),
        (100, 100, 0, "same"),
        (5, 0, 0, "same"),
        (115, 100, 15, "up"),
    ],
)
def test_calculate_change(current: float, previous: float, value: int, direction: str) -> None:
    change = calculate_change(current, previous)
    assert change.value == value
    assert change.direction == direction


def test_round_half_up() -> None:
    assert round_half_up(2.5) == 3
    assert round_half_up(-2.5) == -2
    assert round_half_up(46.85) == 47
    assert round_half_up(1.25, 1) == 1.3


@pytest.mark.parametrize(
    "earlier, recent, expected",
    [
        (47.5, 52.5, "improving"),
        (52.5, 47.5, "declining"),
        (47.6, 52.4, "stable"),
        (52.4, 47.6, "stable"),
    ],
)
def test_trend_threshold_is_inclusive(earlier: float, recent: float, expected: str) -> None:
    readings = _series(date(2024, 1, 1), [earlier] * 7 + [recent] * 7)
    stats = calculate_statistics(readings, today=date(2024, 1, 15))
    assert stats.trend == expected
