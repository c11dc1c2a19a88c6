"""Utility helpers for vendor parsers."""

from __future__ import annotations

from dataclasses import dataclass, field
import csv
import io
import logging
import math
from typing import Any, Iterable, List, Optional, Union

import pandas as pd

from ..schema import HrvReading


@dataclass
class ValidationResult:
    valid: bool
    error: Optional[str] = None


@dataclass
class ParseResult:
    readings: List[HrvReading] = field(default_factory=list)
    errors: List[str] = field(default_factory=list)
    skipped_rows: int = 0


def check_header_line(content: str, required: Iterable[str], export_hint: str) -> ValidationResult:
    """Check the first line of ``content`` contains every required column label.

    Matching is by substring so extra columns, ordering and trailing
    whitespace are tolerated; renamed headers are not.
    """
    first_line = content.split("\n")[0]
    for column in required:
        if column not in first_line:
            return ValidationResult(
                valid=False,
                error=f'Missing required column: "{column}". Please ensure you\'re using {export_hint}.',
            )
    return ValidationResult(valid=True)


def _tokenize(content: str) -> List[Union[List[str], csv.Error]]:
    """Split CSV text into non-blank rows, keeping quoting errors in their place."""
    entries: List[Union[List[str], csv.Error]] = []
    reader = csv.reader(io.StringIO(content), strict=True)
    while True:
        try:
            fields = next(reader)
        except StopIteration:
            break
        except csv.Error as exc:
            entries.append(exc)
            continue
        if fields:
            entries.append(fields)
    return entries


def read_csv_text(content: str) -> tuple[pd.DataFrame, List[str]]:
    """Read CSV text into an all-string dataframe, collecting structural problems.

    The first non-blank row is the header, with names trimmed. Rows with the
    wrong number of fields are padded or truncated to the header width and
    reported; rows with a quoting error are dropped but keep their data-row
    index. Blank lines are ignored.
    """
    if not content.strip():
        return pd.DataFrame(), []

    header: Optional[List[str]] = None
    records: List[List[str]] = []
    errors: List[str] = []
    index = 0
    for entry in _tokenize(content):
        if isinstance(entry, csv.Error):
            errors.append(f"Row {index}: {entry}")
            if header is not None:
                index += 1
            continue
        if header is None:
            header = [name.strip() for name in entry]
            continue
        width = len(header)
        fields = entry
        if len(fields) > width:
            errors.append(f"Row {index}: Too many fields: expected {width} fields but parsed {len(fields)}")
            fields = fields[:width]
        elif len(fields) < width:
            errors.append(f"Row {index}: Too few fields: expected {width} fields but parsed {len(fields)}")
            fields = fields + [""] * (width - len(fields))
        records.append(fields)
        index += 1

    for message in errors:
        logging.warning("CSV structure problem: %s", message)
    if header is None:
        return pd.DataFrame(), errors
    return pd.DataFrame(records, columns=header, dtype=str), errors


def parse_number(value: Any) -> Optional[float]:
    """Return ``value`` as a finite float, or None when empty or non-numeric."""
    if value is None:
        return None
    text = str(value).strip()
    if not text:
        return None
    number = pd.to_numeric(text, errors="coerce")
    if pd.isna(number) or not math.isfinite(float(number)):
        return None
    return float(number)


def parse_calendar_date(value: Any) -> Optional[str]:
    """Parse a timestamp (space or ``T`` separated) and return its UTC calendar date."""
    if value is None:
        return None
    text = str(value).strip()
    if not text:
        return None
    timestamp = pd.to_datetime(text.replace(" ", "T", 1), utc=True, errors="coerce")
    if pd.isna(timestamp):
        return None
    return timestamp.strftime("%Y-%m-%d")
