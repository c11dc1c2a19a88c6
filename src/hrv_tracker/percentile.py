"""Percentile rank of an HRV value against population benchmarks."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Literal

from .benchmarks import AgeBracket, get_age_bracket, get_benchmark
from .schema import Gender
from .statistics import round_half_up

Comparison = Literal["above", "below", "at"]

MIN_PERCENTILE = 1
MAX_PERCENTILE = 99


@dataclass(frozen=True)
class PercentileResult:
    percentile: int
    bracket: AgeBracket
    benchmark_p50: float
    comparison: Comparison


def get_percentile(hrv: float, age: float, gender: Gender) -> PercentileResult:
    """Interpolate ``hrv`` linearly between the p25/p50/p75 benchmark anchors.

    Below p25 the value is scaled towards zero and floored at 1; above p75 it
    is extrapolated with slope 25/p75 and capped at 99.
    """
    bracket = get_age_bracket(age)
    benchmark = get_benchmark(age, gender)

    if hrv <= benchmark.p25:
        percentile = max(MIN_PERCENTILE, 25 * (hrv / benchmark.p25))
    elif hrv <= benchmark.p50:
        percentile = 25 + 25 * (hrv - benchmark.p25) / (benchmark.p50 - benchmark.p25)
    elif hrv <= benchmark.p75:
        percentile = 50 + 25 * (hrv - benchmark.p50) / (benchmark.p75 - benchmark.p50)
    else:
        percentile = min(MAX_PERCENTILE, 75 + 25 * (hrv - benchmark.p75) / benchmark.p75)

    if hrv > benchmark.p50:
        comparison: Comparison = "above"
    elif hrv < benchmark.p50:
        comparison = "below"
    else:
        comparison = "at"

    return PercentileResult(
        percentile=int(round_half_up(percentile)),
        bracket=bracket,
        benchmark_p50=benchmark.p50,
        comparison=comparison,
    )


def percentile_to_target_hrv(percentile: float, age: float, gender: Gender) -> float:
    """Convert a goal percentile into a target HRV value.

    Between p25 and p75 this inverts :func:`get_percentile`. Goals at or below
    the 25th percentile target p25 itself; goals above the 75th extend the
    p50-p75 slope.
    """
    benchmark = get_benchmark(age, gender)

    if percentile <= 25:
        return benchmark.p25
    if percentile <= 50:
        return benchmark.p25 + (percentile - 25) / 25 * (benchmark.p50 - benchmark.p25)
    if percentile <= 75:
        return benchmark.p50 + (percentile - 50) / 25 * (benchmark.p75 - benchmark.p50)
    return benchmark.p75 + (percentile - 75) / 25 * (benchmark.p75 - benchmark.p50)


def get_percentile_description(percentile: float) -> str:
    if percentile >= 90:
        return "Excellent"
    if percentile >= 75:
        return "Above Average"
    if percentile >= 50:
        return "Average"
    if percentile >= 25:
        return "Below Average"
    return "Low"


def get_ordinal_suffix(n: int) -> str:
    """Return ``n`` with its English ordinal suffix (1st, 12th, 23rd)."""
    if 11 <= n % 100 <= 13:
        suffix = "th"
    else:
        suffix = {1: "st", 2: "nd", 3: "rd"}.get(n % 10, "th")
    return f"{n}{suffix}"
