from __future__ import annotations

from hrv_tracker.parsers import readings_from_whoop_recoveries
from hrv_tracker.schema import ReadingSource


def _record(cycle_id: int, start: str, hrv: float, *, cycle_state: str = "SCORED", recovery_state: str = "SCORED") -> dict:
    return {
        "cycle": {"id": cycle_id, "start": start, "score_state": cycle_state},
        "recovery": {
            "score_state": recovery_state,
            "score": {
                "hrv_rmssd_milli": hrv,
                "resting_heart_rate": 54,
                "recovery_score": 66,
            },
        },
    }


def test_converts_scored_recoveries_sorted_by_date() -> None:
    readings = readings_from_whoop_recoveries(
        [
            _record(2, "2024-05-02T06:10:00.000Z", 61.2),
            _record(1, "2024-05-01T05:55:00.000Z", 58.4),
        ]
    )
    assert [r.date for r in readings] == ["2024-05-01", "2024-05-02"]
    assert readings[0].id == "whoop-1"
    assert readings[0].hrv_ms == 58.4
    assert readings[0].resting_hr == 54
    assert readings[0].recovery_score == 66
    assert readings[0].source is ReadingSource.WHOOP_API


def test_drops_unscored_and_zero_hrv() -> None:
    readings = readings_from_whoop_recoveries(
        [
            _record(1, "2024-05-01T05:55:00.000Z", 58.4, cycle_state="PENDING_SCORE"),
            _record(2, "2024-05-02T05:55:00.000Z", 58.4, recovery_state="UNSCORABLE"),
            _record(3, "2024-05-03T05:55:00.000Z", 0),
            _record(4, "2024-05-04T05:55:00.000Z", 49.0),
        ]
    )
    assert [r.id for r in readings] == ["whoop-4"]


def test_skips_records_with_malformed_cycle_start() -> None:
    readings = readings_from_whoop_recoveries([_record(9, "yesterday", 50.0)])
    assert readings == []
