"""Trend statistics over a daily HRV series."""

from __future__ import annotations

from dataclasses import asdict, dataclass
from datetime import date, timedelta
import math
from typing import Iterable, List, Literal, Optional, Sequence

import pandas as pd

from .schema import HrvReading, readings_to_frame

Trend = Literal["improving", "declining", "stable"]
Direction = Literal["up", "down", "same"]

TREND_THRESHOLD_PCT = 5.0


@dataclass(frozen=True)
class HrvStatistics:
    current: Optional[float] = None
    average_7_day: Optional[int] = None
    average_30_day: Optional[int] = None
    min: Optional[float] = None
    max: Optional[float] = None
    trend: Optional[Trend] = None

    def to_dict(self) -> dict:
        return asdict(self)


@dataclass(frozen=True)
class RollingPoint:
    date: str
    value: float


@dataclass(frozen=True)
class Change:
    value: int
    direction: Direction


def round_half_up(value: float, ndigits: int = 0) -> float:
    """Round with ties going up (2.5 -> 3), unlike Python's banker's rounding."""
    factor = 10**ndigits
    return math.floor(value * factor + 0.5) / factor


def calculate_average(values: Iterable[float]) -> Optional[float]:
    values = list(values)
    if not values:
        return None
    return sum(values) / len(values)


def cutoff_date(days: int, today: Optional[date] = None) -> str:
    """Return the ``YYYY-MM-DD`` string ``days`` before ``today``."""
    today = today or date.today()
    return (today - timedelta(days=days)).isoformat()


def get_readings_for_last_days(
    readings: Sequence[HrvReading], days: int, today: Optional[date] = None
) -> List[HrvReading]:
    """Return readings dated on or after ``today - days``."""
    cutoff = cutoff_date(days, today)
    return [reading for reading in readings if reading.date >= cutoff]


def classify_trend(
    recent_avg: float, baseline_avg: float, threshold_pct: float = TREND_THRESHOLD_PCT
) -> Optional[Trend]:
    """Compare a short-window mean against a longer-window mean.

    Returns None when the baseline is zero and no percent change exists.
    """
    if baseline_avg == 0:
        return None
    change = (recent_avg - baseline_avg) / baseline_avg * 100
    if change >= threshold_pct:
        return "improving"
    if change <= -threshold_pct:
        return "declining"
    return "stable"


def _ensure_readings(readings: Sequence[HrvReading]) -> Sequence[HrvReading]:
    if isinstance(readings, (str, bytes)) or not isinstance(readings, Sequence):
        raise TypeError("Expected a sequence of HrvReading objects")
    return readings


def calculate_statistics(
    readings: Sequence[HrvReading],
    *,
    today: Optional[date] = None,
    threshold_pct: float = TREND_THRESHOLD_PCT,
) -> HrvStatistics:
    """Summarise a reading collection relative to ``today`` (defaults to the local date)."""
    readings = _ensure_readings(readings)
    if not readings:
        return HrvStatistics()

    frame = readings_to_frame(readings)
    current = float(frame["hrv_ms"].iloc[-1])

    def window_mean(days: int) -> Optional[float]:
        values = frame.loc[frame["date"] >= cutoff_date(days, today), "hrv_ms"]
        return calculate_average(values.tolist())

    average_7 = window_mean(7)
    average_30 = window_mean(30)
    average_14 = window_mean(14)

    trend: Optional[Trend] = None
    if average_7 is not None and average_14 is not None:
        trend = classify_trend(average_7, average_14, threshold_pct)

    return HrvStatistics(
        current=current,
        average_7_day=int(round_half_up(average_7)) if average_7 is not None else None,
        average_30_day=int(round_half_up(average_30)) if average_30 is not None else None,
        min=float(frame["hrv_ms"].min()),
        max=float(frame["hrv_ms"].max()),
        trend=trend,
    )


def calculate_rolling_average(
    readings: Sequence[HrvReading], window_days: int
) -> List[RollingPoint]:
    """Trailing mean over the previous ``window_days`` entries, in input order.

    The input is expected to be sorted by date already. The window grows from
    one entry until it is full, so every reading gets a point.
    """
    readings = _ensure_readings(readings)
    if window_days < 1:
        raise ValueError("window_days must be at least 1")
    if not readings:
        return []

    values = pd.Series([reading.hrv_ms for reading in readings], dtype=float)
    sums = values.rolling(window=window_days, min_periods=1).sum()
    counts = values.rolling(window=window_days, min_periods=1).count()
    means = sums / counts
    return [
        RollingPoint(date=reading.date, value=round_half_up(float(mean), 1))
        for reading, mean in zip(readings, means)
    ]


def calculate_change(current: float, previous: float) -> Change:
    """Percent change from ``previous`` to ``current``, rounded, with its direction."""
    if previous == 0:
        return Change(value=0, direction="same")
    change = (current - previous) / previous * 100
    direction: Direction = "up" if change > 0 else "down" if change < 0 else "same"
    return Change(value=abs(int(round_half_up(change))), direction=direction)
