"""Canonical per-day reading collection with last-write-wins imports."""

from __future__ import annotations

from enum import Enum
import logging
from typing import Dict, Iterable, List, Optional

from pydantic import ValidationError

from .schema import HrvReading, schema_hash, validate_date_string
from .stores import KeyValueStore

READINGS_KEY = "hrv_readings"


class RepositoryState(str, Enum):
    UNINITIALIZED = "uninitialized"
    LOADING = "loading"
    READY = "ready"


class RepositoryNotReadyError(RuntimeError):
    """Raised when a store-backed repository is used before ``load()``."""


class ReadingRepository:
    """Holds at most one reading per calendar date.

    Without a store the repository is usable immediately. With a store it
    starts ``uninitialized`` and must be hydrated through :meth:`load` before
    any read or write; :meth:`save` writes the whole collection back.
    """

    def __init__(self, store: Optional[KeyValueStore] = None, key: str = READINGS_KEY) -> None:
        self.store = store
        self.key = key
        self._by_date: Dict[str, HrvReading] = {}
        self.state = RepositoryState.UNINITIALIZED if store is not None else RepositoryState.READY

    def _require_ready(self) -> None:
        if self.state is not RepositoryState.READY:
            raise RepositoryNotReadyError(
                f"Reading repository is {self.state.value}; call load() first."
            )

    def load(self) -> int:
        """Hydrate from the store and return the number of readings loaded."""
        if self.store is None:
            self.state = RepositoryState.READY
            return len(self._by_date)

        self.state = RepositoryState.LOADING
        try:
            payload = self.store.get(self.key)
            self._by_date = self._decode(payload)
        except Exception:
            self.state = RepositoryState.UNINITIALIZED
            raise
        self.state = RepositoryState.READY
        logging.info("Loaded %d HRV readings from store", len(self._by_date))
        return len(self._by_date)

    def _decode(self, payload: Optional[dict]) -> Dict[str, HrvReading]:
        if not payload:
            return {}
        if payload.get("schema_hash") != schema_hash():
            logging.warning("Stored readings were saved under a different schema; revalidating each one")
        by_date: Dict[str, HrvReading] = {}
        for item in payload.get("readings", []):
            try:
                reading = HrvReading.model_validate(item)
            except ValidationError as exc:
                logging.warning("Dropping unreadable stored reading: %s", exc)
                continue
            by_date[reading.date] = reading
        return by_date

    def save(self) -> None:
        self._require_ready()
        if self.store is None:
            return
        self.store.set(
            self.key,
            {
                "schema_hash": schema_hash(),
                "readings": [reading.model_dump(mode="json") for reading in self.readings],
            },
        )

    def import_readings(self, batch: Iterable[HrvReading]) -> int:
        """Upsert ``batch`` by date and return how many dates are new.

        A later reading for a date replaces the earlier one, whatever its
        source, including duplicates inside ``batch`` itself.
        """
        self._require_ready()
        if isinstance(batch, (str, bytes, HrvReading)) or not isinstance(batch, Iterable):
            raise TypeError("import_readings expects a sequence of HrvReading objects")

        staged = dict(self._by_date)
        added = 0
        for reading in batch:
            if not isinstance(reading, HrvReading):
                raise TypeError(f"Expected HrvReading, got {type(reading).__name__}")
            if reading.date not in staged:
                added += 1
            staged[reading.date] = reading

        self._by_date = staged
        logging.debug("Imported readings: %d new dates, %d total", added, len(staged))
        return added

    def get_reading_by_date(self, date: str) -> Optional[HrvReading]:
        self._require_ready()
        return self._by_date.get(date)

    def get_readings_by_date_range(self, start_date: str, end_date: str) -> List[HrvReading]:
        """Return readings with ``start_date <= date <= end_date``, oldest first."""
        self._require_ready()
        start = validate_date_string(start_date)
        end = validate_date_string(end_date)
        return [reading for reading in self.readings if start <= reading.date <= end]

    def get_latest_reading(self) -> Optional[HrvReading]:
        self._require_ready()
        if not self._by_date:
            return None
        return self._by_date[max(self._by_date)]

    def clear_readings(self) -> None:
        self._require_ready()
        self._by_date = {}

    @property
    def readings(self) -> List[HrvReading]:
        """All readings sorted ascending by date."""
        self._require_ready()
        return [self._by_date[day] for day in sorted(self._by_date)]

    def __len__(self) -> int:
        self._require_ready()
        return len(self._by_date)
