"""Population HRV benchmarks (RMSSD, ms) by age bracket and gender."""

from __future__ import annotations

from typing import Dict, Literal

from pydantic import BaseModel, ConfigDict

from .schema import Gender

AgeBracket = Literal["18-25", "26-35", "36-45", "46-55", "56-65", "65+"]

AGE_BRACKETS: tuple[AgeBracket, ...] = ("18-25", "26-35", "36-45", "46-55", "56-65", "65+")

# Upper (exclusive) age limit for every bracket except the last.
_BRACKET_LIMITS = ((26, "18-25"), (36, "26-35"), (46, "36-45"), (56, "46-55"), (66, "56-65"))


class Benchmark(BaseModel):
    p25: float
    p50: float
    p75: float

    model_config = ConfigDict(frozen=True)


def _row(p25: float, p50: float, p75: float) -> Benchmark:
    return Benchmark(p25=p25, p50=p50, p75=p75)


# "other" is the mean of the male and female cells, rounded down.
HRV_BENCHMARKS: Dict[str, Dict[str, Benchmark]] = {
    "male": {
        "18-25": _row(50, 78, 100),
        "26-35": _row(40, 60, 80),
        "36-45": _row(35, 48, 65),
        "46-55": _row(30, 40, 55),
        "56-65": _row(25, 35, 48),
        "65+": _row(20, 30, 42),
    },
    "female": {
        "18-25": _row(45, 70, 90),
        "26-35": _row(38, 55, 75),
        "36-45": _row(32, 45, 60),
        "46-55": _row(28, 38, 52),
        "56-65": _row(24, 33, 45),
        "65+": _row(20, 28, 40),
    },
    "other": {
        "18-25": _row(47, 74, 95),
        "26-35": _row(39, 57, 77),
        "36-45": _row(33, 46, 62),
        "46-55": _row(29, 39, 53),
        "56-65": _row(24, 34, 46),
        "65+": _row(20, 29, 41),
    },
}


def get_age_bracket(age: float) -> AgeBracket:
    for limit, bracket in _BRACKET_LIMITS:
        if age < limit:
            return bracket  # type: ignore[return-value]
    return "65+"


def get_benchmark(age: float, gender: Gender) -> Benchmark:
    """Return the benchmark row for ``age`` and ``gender``."""
    try:
        by_bracket = HRV_BENCHMARKS[gender]
    except KeyError:
        raise ValueError(f"Unknown gender category: {gender!r}") from None
    return by_bracket[get_age_bracket(age)]
