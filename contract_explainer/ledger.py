"""Bounded, append-only conversation ledger.

The ledger keeps records in insertion order and never holds more than
``max_entries`` of them: once the bound is exceeded the oldest records are
evicted first. It backs both the exchange history and the chat turn store.
"""

from __future__ import annotations

import logging
import threading
from collections import deque
from collections.abc import Callable
from dataclasses import dataclass, field
from typing import Generic, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")


@dataclass(slots=True)
class ConversationLedger(Generic[T]):
    """A sliding window over the most recent records.

    ``max_entries=None`` keeps every record. All operations hold a lock, so a
    single ledger may be shared between request handlers running on
    different threads.
    """

    max_entries: int | None = 20
    _records: deque[T] = field(init=False, repr=False)
    _lock: threading.Lock = field(init=False, repr=False)

    def __post_init__(self) -> None:
        if self.max_entries is not None and self.max_entries < 1:
            raise ValueError("max_entries must be at least 1 or None")
        self._records = deque(maxlen=self.max_entries)
        self._lock = threading.Lock()

    def append(self, record: T) -> None:
        """Append a record, evicting the oldest one when over the bound.

        Args:
            record: The record to add at the tail.
        """

        with self._lock:
            evicted = self._push(record)
        self._log_eviction(evicted)

    def append_with(self, build: Callable[[T | None], T]) -> T:
        """Build a record from the newest one and append it atomically.

        ``build`` receives the current tail (None when empty) and runs under
        the ledger lock, so it must not call back into the ledger.

        Returns:
            The appended record.
        """

        with self._lock:
            record = build(self._records[-1] if self._records else None)
            evicted = self._push(record)
        self._log_eviction(evicted)
        return record

    def snapshot(self) -> tuple[T, ...]:
        """Return an immutable copy of every retained record, oldest first."""

        with self._lock:
            return tuple(self._records)

    def recent(self, limit: int) -> tuple[T, ...]:
        """Return the last ``min(limit, len)`` records in chronological order.

        Args:
            limit: Maximum number of records to return.

        Raises:
            ValueError: If ``limit`` is negative.
        """

        if limit < 0:
            raise ValueError("limit must be non-negative")
        with self._lock:
            if limit == 0:
                return ()
            start = max(len(self._records) - limit, 0)
            return tuple(self._records)[start:]

    def clear(self) -> None:
        """Drop every record."""

        with self._lock:
            self._records.clear()

    def __len__(self) -> int:
        with self._lock:
            return len(self._records)

    def _push(self, record: T) -> int:
        before = len(self._records)
        self._records.append(record)
        return before + 1 - len(self._records)

    def _log_eviction(self, evicted: int) -> None:
        if evicted:
            logger.debug(
                "ledger.evicted",
                extra={"evicted": evicted, "max_entries": self.max_entries},
            )
