"""Canonical data model for daily HRV readings and user profiles."""

from __future__ import annotations

from datetime import date as Date
from enum import Enum
import hashlib
import json
import math
import re
from typing import Dict, Iterable, Literal, Optional
import uuid

import pandas as pd
from pydantic import BaseModel, ConfigDict, Field, field_validator

DATE_PATTERN = re.compile(r"^\d{4}-\d{2}-\d{2}$")

Gender = Literal["male", "female", "other"]

FRAME_COLUMNS = ["date", "hrv_ms", "resting_hr", "recovery_score", "source"]


class ReadingSource(str, Enum):
    """Where a reading came from. Provenance only, never used for merging."""

    MANUAL = "manual"
    WHOOP_CSV = "whoop_csv"
    WHOOP_API = "whoop_api"


def generate_id() -> str:
    return uuid.uuid4().hex[:13]


def validate_date_string(value: str) -> str:
    """Return ``value`` if it is a zero-padded ``YYYY-MM-DD`` calendar date."""
    if not isinstance(value, str) or not DATE_PATTERN.match(value):
        raise ValueError(f"Expected a YYYY-MM-DD date, got {value!r}.")
    Date.fromisoformat(value)
    return value


class HrvReading(BaseModel):
    """One calendar day's HRV measurement."""

    id: str = Field(default_factory=generate_id)
    date: str = Field(..., description="Calendar day, YYYY-MM-DD. Unique within a collection.")
    hrv_ms: float = Field(..., ge=0, description="RMSSD heart-rate variability in milliseconds.")
    resting_hr: float = Field(0, ge=0, description="Resting heart rate in bpm, 0 when unknown.")
    recovery_score: Optional[float] = Field(None, ge=0, le=100)
    source: ReadingSource
    raw_data: Optional[Dict[str, str]] = Field(
        None, description="Verbatim copy of the source row, diagnostics only."
    )

    model_config = ConfigDict(extra="forbid", frozen=True)

    @field_validator("date")
    @staticmethod
    def validate_date(value: str) -> str:
        return validate_date_string(value)

    @field_validator("hrv_ms")
    @staticmethod
    def validate_finite(value: float) -> float:
        if not math.isfinite(value):
            raise ValueError("hrv_ms must be a finite number.")
        return value

    @classmethod
    def manual(
        cls,
        date: str,
        hrv_ms: float,
        resting_hr: float = 0,
        recovery_score: Optional[float] = None,
    ) -> "HrvReading":
        """Build a manually entered reading with a fresh id."""
        return cls(
            date=date,
            hrv_ms=hrv_ms,
            resting_hr=resting_hr,
            recovery_score=recovery_score,
            source=ReadingSource.MANUAL,
        )


class UserProfile(BaseModel):
    """Demographics used for benchmark lookups and goal targets."""

    age: int = Field(..., ge=0)
    gender: Gender
    target_percentile: Optional[float] = Field(None, ge=1, le=99)

    model_config = ConfigDict(frozen=True)


def readings_to_frame(readings: Iterable[HrvReading]) -> pd.DataFrame:
    """Return a date-sorted dataframe with one row per reading."""
    rows = [
        {
            "date": reading.date,
            "hrv_ms": reading.hrv_ms,
            "resting_hr": reading.resting_hr,
            "recovery_score": reading.recovery_score,
            "source": reading.source.value,
        }
        for reading in readings
    ]
    frame = pd.DataFrame(rows, columns=FRAME_COLUMNS)
    frame["hrv_ms"] = frame["hrv_ms"].astype(float)
    return frame.sort_values("date", kind="stable").reset_index(drop=True)


def schema_hash() -> str:
    """Return a stable hash of the HrvReading schema for stored-blob compatibility checks."""
    schema_json = json.dumps(HrvReading.model_json_schema(), sort_keys=True)
    return hashlib.sha256(schema_json.encode("utf-8")).hexdigest()
