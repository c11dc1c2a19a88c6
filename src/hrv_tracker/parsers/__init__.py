"""Vendor-specific parsers that convert raw HRV exports into canonical readings."""

from .base import ParseResult, ValidationResult
from .whoop import parse_whoop_csv, readings_from_whoop_recoveries, validate_whoop_csv

__all__ = [
    "ParseResult",
    "ValidationResult",
    "parse_whoop_csv",
    "readings_from_whoop_recoveries",
    "validate_whoop_csv",
]
