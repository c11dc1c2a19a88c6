"""Progress toward a user's target-percentile HRV goal."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from typing import List, Optional, Sequence

from .percentile import percentile_to_target_hrv
from .schema import HrvReading, UserProfile
from .statistics import (
    TREND_THRESHOLD_PCT,
    Trend,
    calculate_average,
    classify_trend,
    get_readings_for_last_days,
    round_half_up,
)

MIN_TREND_READINGS = 7


@dataclass(frozen=True)
class GoalPreset:
    label: str
    percentile: int


GOAL_PRESETS: List[GoalPreset] = [
    GoalPreset(label="Average (50th)", percentile=50),
    GoalPreset(label="Above Average (75th)", percentile=75),
    GoalPreset(label="Excellent (90th)", percentile=90),
]


@dataclass(frozen=True)
class GoalProgress:
    current_hrv: int
    target_hrv: int
    progress: int
    days_at_goal: int
    trend: Trend


def count_days_at_goal(readings: Sequence[HrvReading], target_hrv: float) -> int:
    """Length of the unbroken run at or above ``target_hrv`` ending at the latest reading."""
    streak = 0
    for reading in sorted(readings, key=lambda r: r.date, reverse=True):
        if reading.hrv_ms < target_hrv:
            break
        streak += 1
    return streak


def calculate_goal_progress(
    readings: Sequence[HrvReading],
    profile: UserProfile,
    *,
    today: Optional[date] = None,
    threshold_pct: float = TREND_THRESHOLD_PCT,
) -> Optional[GoalProgress]:
    """Return goal progress, or None without a target or without readings in the last 7 days."""
    if not readings or not profile.target_percentile:
        return None

    target_hrv = percentile_to_target_hrv(profile.target_percentile, profile.age, profile.gender)

    last_7 = [r.hrv_ms for r in get_readings_for_last_days(readings, 7, today)]
    last_14 = [r.hrv_ms for r in get_readings_for_last_days(readings, 14, today)]
    if not last_7:
        return None

    current_hrv = calculate_average(last_7) or 0.0
    progress = min(current_hrv / target_hrv * 100, 100) if target_hrv > 0 else 100

    trend: Trend = "stable"
    if len(last_14) >= MIN_TREND_READINGS:
        trend = classify_trend(current_hrv, calculate_average(last_14) or 0.0, threshold_pct) or "stable"

    return GoalProgress(
        current_hrv=int(round_half_up(current_hrv)),
        target_hrv=int(round_half_up(target_hrv)),
        progress=int(round_half_up(progress)),
        days_at_goal=count_days_at_goal(readings, target_hrv),
        trend=trend,
    )
