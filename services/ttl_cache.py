# services/ttl_cache.py
from __future__ import annotations

import time
from dataclasses import dataclass
from typing import Callable, Optional

from schemas import CacheStatus, NormalizedUpdate


@dataclass(frozen=True)
class CacheEntry:
    data: Optional[NormalizedUpdate] = None
    captured_at: Optional[float] = None
    source_name: Optional[str] = None


EMPTY_ENTRY = CacheEntry()


class TTLCache:
    """
    Single-slot cache for the last normalized update.

    The entry is replaced wholesale (one attribute assignment), so readers
    never observe data without its capture time.
    """

    def __init__(self, ttl_seconds: float = 300, clock: Callable[[], float] = time.time):
        self.ttl_seconds = ttl_seconds
        self._clock = clock
        self._entry: CacheEntry = EMPTY_ENTRY

    def _age(self, entry: CacheEntry) -> Optional[float]:
        if entry.captured_at is None:
            return None
        return self._clock() - entry.captured_at

    def _is_fresh(self, entry: CacheEntry) -> bool:
        if entry.data is None or entry.captured_at is None:
            return False
        return self._age(entry) < self.ttl_seconds

    def is_valid(self) -> bool:
        return self._is_fresh(self._entry)

    def get(self) -> NormalizedUpdate:
        entry = self._entry
        if not self._is_fresh(entry):
            raise LookupError("Cache entry is missing or expired")
        return entry.data

    def store(self, update: NormalizedUpdate, source_name: str) -> None:
        self._entry = CacheEntry(data=update, captured_at=self._clock(), source_name=source_name)

    def clear(self) -> None:
        self._entry = EMPTY_ENTRY

    def describe(self) -> CacheStatus:
        entry = self._entry
        return CacheStatus(
            valid=self._is_fresh(entry),
            source=entry.source_name,
            age=self._age(entry),
        )
