"""Key-value store collaborators used to persist whole collections."""

from __future__ import annotations

from dataclasses import dataclass
import json
import logging
from pathlib import Path
import time
from typing import Any, Callable, Dict, Optional, Protocol


class KeyValueStore(Protocol):
    def get(self, key: str) -> Any: ...

    def set(self, key: str, value: Any) -> None: ...

    def delete(self, key: str) -> None: ...


class InMemoryStore:
    """Dict-backed store, mainly for tests and throwaway sessions."""

    def __init__(self) -> None:
        self._data: Dict[str, Any] = {}

    def get(self, key: str) -> Any:
        return self._data.get(key)

    def set(self, key: str, value: Any) -> None:
        self._data[key] = value

    def delete(self, key: str) -> None:
        self._data.pop(key, None)


class JsonFileStore:
    """Store each key as ``<directory>/<key>.json``."""

    def __init__(self, directory: Path | str) -> None:
        self.directory = Path(directory)

    def _path(self, key: str) -> Path:
        return self.directory / f"{key}.json"

    def get(self, key: str) -> Any:
        path = self._path(key)
        if not path.exists():
            return None
        with path.open("r", encoding="utf-8") as handle:
            return json.load(handle)

    def set(self, key: str, value: Any) -> None:
        self.directory.mkdir(parents=True, exist_ok=True)
        path = self._path(key)
        tmp_path = path.with_suffix(".json.tmp")
        tmp_path.write_text(json.dumps(value, indent=2, default=str), encoding="utf-8")
        tmp_path.replace(path)
        logging.debug("Wrote %s", path)

    def delete(self, key: str) -> None:
        self._path(key).unlink(missing_ok=True)


@dataclass
class _Entry:
    value: Any
    expires_at: float


class ExpiringStore:
    """Process-wide keyed store where every entry carries an expiry timestamp.

    Reads of an expired key behave as if it were never set. ``increment``
    starts a fresh window at 1 when the key is missing or expired.
    """

    def __init__(self, ttl_seconds: float, clock: Callable[[], float] = time.time) -> None:
        if ttl_seconds <= 0:
            raise ValueError("ttl_seconds must be positive")
        self.ttl_seconds = ttl_seconds
        self._clock = clock
        self._entries: Dict[str, _Entry] = {}

    def _live(self, key: str) -> Optional[_Entry]:
        entry = self._entries.get(key)
        if entry is None:
            return None
        if self._clock() >= entry.expires_at:
            del self._entries[key]
            return None
        return entry

    def get(self, key: str) -> Any:
        entry = self._live(key)
        return None if entry is None else entry.value

    def expires_at(self, key: str) -> Optional[float]:
        entry = self._live(key)
        return None if entry is None else entry.expires_at

    def set(self, key: str, value: Any) -> None:
        self._entries[key] = _Entry(value=value, expires_at=self._clock() + self.ttl_seconds)

    def delete(self, key: str) -> None:
        self._entries.pop(key, None)

    def increment(self, key: str) -> int:
        """Bump the counter stored at ``key`` without extending its window."""
        entry = self._live(key)
        if entry is None:
            self.set(key, 1)
            return 1
        entry.value += 1
        return entry.value

    def cleanup(self) -> int:
        """Drop every expired entry and return how many were removed."""
        now = self._clock()
        expired = [key for key, entry in self._entries.items() if now >= entry.expires_at]
        for key in expired:
            del self._entries[key]
        return len(expired)

    def __len__(self) -> int:
        return len(self._entries)
