from __future__ import annotations

from datetime import date, timedelta

from hypothesis import given, settings, strategies as st

from hrv_tracker.parsers import parse_whoop_csv
from hrv_tracker.percentile import get_percentile, percentile_to_target_hrv
from hrv_tracker.repository import ReadingRepository
from hrv_tracker.schema import HrvReading, ReadingSource

HEADER = "Cycle start time,Heart rate variability (ms),Resting heart rate (bpm)"

genders = st.sampled_from(["male", "female", "other"])
ages = st.integers(min_value=18, max_value=90)


@st.composite
def whoop_exports(draw: st.DrawFn) -> str:
    size = draw(st.integers(min_value=0, max_value=15))
    lines = [HEADER]
    for _ in range(size):
        day = date(2024, 1, 1) + timedelta(days=draw(st.integers(min_value=0, max_value=20)))
        hour = draw(st.integers(min_value=0, max_value=23))
        hrv = draw(st.one_of(st.just(""), st.floats(min_value=5, max_value=200).map(lambda v: f"{v:.1f}")))
        lines.append(f"{day.isoformat()}T{hour:02d}:00:00Z,{hrv},{draw(st.integers(40, 80))}")
    return "\n".join(lines)


def _content(readings: list[HrvReading]) -> list[tuple]:
    return [(r.date, r.hrv_ms, r.resting_hr, r.recovery_score, r.raw_data) for r in readings]


@settings(max_examples=50)
@given(whoop_exports())
def test_parse_is_idempotent_apart_from_ids(export: str) -> None:
    first = parse_whoop_csv(export)
    second = parse_whoop_csv(export)
    assert _content(first.readings) == _content(second.readings)
    assert first.skipped_rows == second.skipped_rows
    assert first.errors == second.errors


@settings(max_examples=50)
@given(whoop_exports())
def test_parse_output_is_sorted_and_unique(export: str) -> None:
    result = parse_whoop_csv(export)
    dates = [r.date for r in result.readings]
    assert dates == sorted(dates)
    assert len(dates) == len(set(dates))
    assert len(result.readings) + result.skipped_rows == export.count("\n")


@given(
    st.lists(
        st.tuples(st.integers(min_value=0, max_value=10), st.floats(min_value=0, max_value=300)),
        max_size=30,
    )
)
def test_repository_keeps_last_write_per_date(entries: list[tuple[int, float]]) -> None:
    batch = [
        HrvReading(
            date=(date(2024, 1, 1) + timedelta(days=offset)).isoformat(),
            hrv_ms=value,
            source=ReadingSource.MANUAL,
        )
        for offset, value in entries
    ]
    repository = ReadingRepository()
    added = repository.import_readings(batch)
    expected = {reading.date: reading.hrv_ms for reading in batch}
    assert added == len(expected)
    assert {r.date: r.hrv_ms for r in repository.readings} == expected
    assert repository.import_readings(batch) == 0


@given(
    st.floats(min_value=0, max_value=200),
    st.floats(min_value=8, max_value=100),
    ages,
    genders,
)
def test_percentile_strictly_increases_with_hrv(hrv: float, gap: float, age: int, gender: str) -> None:
    lower = get_percentile(hrv, age, gender).percentile
    higher = get_percentile(hrv + gap, age, gender).percentile
    assert 1 <= lower <= higher <= 99
    if higher < 99:
        assert lower < higher


@given(st.integers(min_value=25, max_value=75), ages, genders)
def test_target_hrv_inverts_percentile(percentile: int, age: int, gender: str) -> None:
    target = percentile_to_target_hrv(percentile, age, gender)
    assert get_percentile(target, age, gender).percentile == percentile


@given(st.integers(min_value=1, max_value=98), ages, genders)
def test_target_hrv_never_decreases_with_percentile(percentile: int, age: int, gender: str) -> None:
    assert percentile_to_target_hrv(percentile, age, gender) <= percentile_to_target_hrv(
        percentile + 1, age, gender
    )
