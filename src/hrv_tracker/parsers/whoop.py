"""Parsers for WHOOP physiological-cycle exports and API recovery payloads."""

from __future__ import annotations

import logging
from typing import Any, Iterable, List, Mapping, Set

from pydantic import ValidationError

from ..schema import HrvReading, ReadingSource
from .base import (
    ParseResult,
    ValidationResult,
    check_header_line,
    parse_calendar_date,
    parse_number,
    read_csv_text,
)

CYCLE_START = "Cycle start time"
HRV_COLUMN = "Heart rate variability (ms)"
RESTING_HR_COLUMN = "Resting heart rate (bpm)"
RECOVERY_COLUMN = "Recovery score"

REQUIRED_COLUMNS = (CYCLE_START, HRV_COLUMN)
EXPORT_HINT = "a WHOOP physiological cycles export"

SCORED = "SCORED"


def validate_whoop_csv(content: str) -> ValidationResult:
    """Check the header row of a WHOOP export before parsing it."""
    return check_header_line(content, REQUIRED_COLUMNS, EXPORT_HINT)


def _optional_vitals(row: Mapping[str, str]) -> tuple[float, float | None]:
    resting_hr = parse_number(row.get(RESTING_HR_COLUMN))
    if resting_hr is None or resting_hr < 0:
        resting_hr = 0.0
    recovery = parse_number(row.get(RECOVERY_COLUMN))
    if recovery is not None and not 0 <= recovery <= 100:
        recovery = None
    return resting_hr, recovery


def parse_whoop_csv(content: str) -> ParseResult:
    """Parse a WHOOP physiological-cycles CSV export into daily readings.

    Rows without a usable date or HRV value are counted in ``skipped_rows``, as
    are later rows falling on a calendar day already seen in this file (the
    first one wins). Structural CSV problems land in ``errors`` without
    stopping the scan. Readings come back sorted by date.
    """
    frame, errors = read_csv_text(content)
    result = ParseResult(errors=errors)
    seen_dates: Set[str] = set()

    for row in frame.to_dict(orient="records"):
        day = parse_calendar_date(row.get(CYCLE_START))
        hrv = parse_number(row.get(HRV_COLUMN))

        if day is None or hrv is None or hrv < 0:
            result.skipped_rows += 1
            continue

        if day in seen_dates:
            result.skipped_rows += 1
            continue
        seen_dates.add(day)

        resting_hr, recovery = _optional_vitals(row)
        result.readings.append(
            HrvReading(
                date=day,
                hrv_ms=hrv,
                resting_hr=resting_hr,
                recovery_score=recovery,
                source=ReadingSource.WHOOP_CSV,
                raw_data={str(key): str(value) for key, value in row.items()},
            )
        )

    result.readings.sort(key=lambda reading: reading.date)
    logging.debug(
        "Parsed WHOOP export: %d readings, %d skipped rows, %d errors",
        len(result.readings),
        result.skipped_rows,
        len(result.errors),
    )
    return result


def readings_from_whoop_recoveries(records: Iterable[Mapping[str, Any]]) -> List[HrvReading]:
    """Convert fetched WHOOP cycle/recovery pairs into readings.

    Each record holds a ``cycle`` and its ``recovery`` payload as returned by
    the WHOOP developer API. Unscored cycles or recoveries and recoveries
    without a positive HRV are dropped.
    """
    readings: List[HrvReading] = []
    for record in records:
        cycle = record.get("cycle") or {}
        recovery = record.get("recovery") or {}
        if cycle.get("score_state") != SCORED or recovery.get("score_state") != SCORED:
            continue

        score = recovery.get("score") or {}
        hrv = score.get("hrv_rmssd_milli") or 0
        if hrv <= 0:
            continue

        try:
            reading = HrvReading(
                id=f"whoop-{cycle['id']}",
                date=str(cycle["start"]).split("T")[0],
                hrv_ms=hrv,
                resting_hr=score.get("resting_heart_rate") or 0,
                recovery_score=score.get("recovery_score"),
                source=ReadingSource.WHOOP_API,
            )
        except (KeyError, ValidationError) as exc:
            logging.warning("Skipping WHOOP cycle %s: %s", cycle.get("id"), exc)
            continue
        readings.append(reading)

    readings.sort(key=lambda reading: reading.date)
    return readings
